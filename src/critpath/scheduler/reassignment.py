"""Dependency reassignment when deleting a milestone that others depend on.

Deleting milestone D while other milestones depend on it would leave dangling
references. The protocol classifies the situation by D's own dependencies:

- no dependents: delete immediately, nothing to decide
- exactly one dependency: suggest re-pointing every dependent to it
- no dependencies: suggest dropping the dependency (dependents become roots)
- several dependencies: the caller must pick one of them, or none

Nothing is applied until the caller supplies a ReassignmentDecision.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from enum import Enum

from critpath.exceptions import ValidationError
from critpath.models import Milestone


class ReassignmentState(str, Enum):
    """Classification of a pending deletion."""

    NO_DEPENDENTS = "no_dependents"
    AUTO_REASSIGNABLE = "auto_reassignable"
    REQUIRES_USER_CHOICE = "requires_user_choice"


class SuggestedAction(str, Enum):
    """Action proposed to the caller for the dependents."""

    NONE = "none"
    REASSIGN_TO_DEPENDENCY = "reassign_to_dependency"
    REMOVE_DEPENDENCY = "remove_dependency"


def _default_str_list() -> list[str]:
    return []


@dataclass
class ReassignmentPlan:
    """What deleting a milestone entails for the milestones that depend on it."""

    milestone_id: str
    state: ReassignmentState
    dependent_ids: list[str] = field(default_factory=_default_str_list)
    candidate_ids: list[str] = field(default_factory=_default_str_list)
    suggested_action: SuggestedAction = SuggestedAction.NONE
    suggested_replacement: str | None = None

    @property
    def requires_decision(self) -> bool:
        return self.state != ReassignmentState.NO_DEPENDENTS

    def describe(self) -> str:
        """Human-readable summary of the plan."""
        if self.state == ReassignmentState.NO_DEPENDENTS:
            return f"'{self.milestone_id}' has no dependents and can be deleted"
        dependents = ", ".join(self.dependent_ids)
        if self.suggested_action == SuggestedAction.REASSIGN_TO_DEPENDENCY:
            return (
                f"'{self.milestone_id}' is required by {dependents}; suggested: depend on "
                f"'{self.suggested_replacement}' instead"
            )
        if self.suggested_action == SuggestedAction.REMOVE_DEPENDENCY:
            return (
                f"'{self.milestone_id}' is required by {dependents}; suggested: remove the "
                "dependency"
            )
        return (
            f"'{self.milestone_id}' is required by {dependents}; choose a replacement from "
            f"{', '.join(self.candidate_ids)} or none"
        )


@dataclass(frozen=True)
class ReassignmentDecision:
    """The caller's resolution of a plan: the replacement dependency, or None."""

    replacement_id: str | None = None

    @classmethod
    def accept(cls, plan: ReassignmentPlan) -> ReassignmentDecision:
        """Accept the plan's suggestion.

        Raises:
            ValidationError: If the plan has no suggestion (user choice required)
        """
        if plan.state == ReassignmentState.REQUIRES_USER_CHOICE:
            raise ValidationError(
                f"Deleting '{plan.milestone_id}' requires choosing a replacement from "
                f"{', '.join(plan.candidate_ids)} (or none)"
            )
        return cls(replacement_id=plan.suggested_replacement)

    @classmethod
    def replace_with(cls, replacement_id: str) -> ReassignmentDecision:
        return cls(replacement_id=replacement_id)

    @classmethod
    def no_replacement(cls) -> ReassignmentDecision:
        return cls(replacement_id=None)


def plan_reassignment(milestone: Milestone, dependents: Sequence[Milestone]) -> ReassignmentPlan:
    """Classify the deletion of a milestone given the milestones that depend on it."""
    dependent_ids = sorted(dep.id for dep in dependents if dep.id != milestone.id)
    candidates = list(milestone.dependencies)

    if not dependent_ids:
        return ReassignmentPlan(milestone_id=milestone.id, state=ReassignmentState.NO_DEPENDENTS)

    if len(candidates) == 1:
        return ReassignmentPlan(
            milestone_id=milestone.id,
            state=ReassignmentState.AUTO_REASSIGNABLE,
            dependent_ids=dependent_ids,
            candidate_ids=candidates,
            suggested_action=SuggestedAction.REASSIGN_TO_DEPENDENCY,
            suggested_replacement=candidates[0],
        )

    if not candidates:
        return ReassignmentPlan(
            milestone_id=milestone.id,
            state=ReassignmentState.AUTO_REASSIGNABLE,
            dependent_ids=dependent_ids,
            suggested_action=SuggestedAction.REMOVE_DEPENDENCY,
        )

    return ReassignmentPlan(
        milestone_id=milestone.id,
        state=ReassignmentState.REQUIRES_USER_CHOICE,
        dependent_ids=dependent_ids,
        candidate_ids=candidates,
    )


def validate_decision(plan: ReassignmentPlan, decision: ReassignmentDecision) -> None:
    """Check that a decision is admissible for the plan.

    Raises:
        ValidationError: If the replacement is not one of the plan's candidates
    """
    replacement = decision.replacement_id
    if replacement is None:
        return
    if replacement not in plan.candidate_ids:
        allowed = ", ".join(plan.candidate_ids) or "none"
        raise ValidationError(
            f"'{replacement}' is not a valid replacement for '{plan.milestone_id}' "
            f"(allowed: {allowed})"
        )


def apply_reassignment(
    plan: ReassignmentPlan,
    decision: ReassignmentDecision,
    dependents: Sequence[Milestone],
) -> list[Milestone]:
    """Return updated copies of the dependents with the deleted milestone replaced.

    The deleted milestone's ID is removed from each dependent's dependencies;
    the replacement is appended unless already present.
    """
    validate_decision(plan, decision)

    updated: list[Milestone] = []
    for dependent in dependents:
        if plan.milestone_id not in dependent.dependencies:
            continue
        new_deps = [dep_id for dep_id in dependent.dependencies if dep_id != plan.milestone_id]
        replacement = decision.replacement_id
        if replacement is not None and replacement not in new_deps and replacement != dependent.id:
            new_deps.append(replacement)

        changed = dependent.copy()
        changed.dependencies = new_deps
        updated.append(changed)
    return updated
