"""High-level milestone service: validated mutations followed by recalculation."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import date
from typing import Any

from critpath.exceptions import (
    DependencyConflictError,
    MilestoneNotFoundError,
    MissingReferenceError,
    ValidationError,
)
from critpath.logger import get_logger
from critpath.models import (
    COMPUTED_FIELDS,
    EDITABLE_FIELDS,
    OFFSET_BUSINESS,
    VALID_OFFSET_TYPES,
    Milestone,
    normalize_dependency_ids,
)

from .config import SchedulerConfig
from .core import CPMResult
from .protocols import MilestoneStore
from .reassignment import (
    ReassignmentDecision,
    ReassignmentPlan,
    apply_reassignment,
    plan_reassignment,
)
from .recalculation import ProjectLocks, RecalculationService
from .topology import check_acyclic

logger = get_logger()


def _default_str_list() -> list[str]:
    return []


@dataclass
class DeletionResult:
    """Outcome of a committed deletion."""

    deleted_id: str
    plan: ReassignmentPlan | None  # None when nothing depended on the milestone
    reassigned_ids: list[str] = field(default_factory=_default_str_list)
    result: CPMResult = field(default_factory=CPMResult)


def _validate_timing(milestone: Milestone) -> None:
    if milestone.duration is not None and milestone.duration < 0:
        raise ValidationError(f"Milestone '{milestone.id}' has a negative duration")
    if (
        milestone.start_date is not None
        and milestone.end_date is not None
        and milestone.end_date < milestone.start_date
    ):
        raise ValidationError(f"Milestone '{milestone.id}' ends before it starts")
    if milestone.start_date_offset_type not in VALID_OFFSET_TYPES:
        raise ValidationError(
            f"Milestone '{milestone.id}' has invalid offset type "
            f"'{milestone.start_date_offset_type}'"
        )
    if milestone.start_date_offset_type == OFFSET_BUSINESS and milestone.start_date_offset < 0:
        raise ValidationError(
            f"Milestone '{milestone.id}' cannot use a negative business-day offset"
        )


def _sort_key(milestone: Milestone) -> tuple[int, int, date]:
    order = milestone.order if milestone.order is not None else 0
    if milestone.earliest_start is None:
        return (order, 1, date.min)
    return (order, 0, milestone.earliest_start)


class MilestoneService:
    """Create, update, delete and read milestones of a project.

    Each mutation runs as one critical section under the project's lock:
    load, validate against the proposed graph, commit, then recalculate and
    stamp the whole project.
    """

    def __init__(
        self,
        store: MilestoneStore,
        config: SchedulerConfig | None = None,
        *,
        current_date: date | None = None,
        locks: ProjectLocks | None = None,
    ):
        self.store = store
        self.config = config or SchedulerConfig()
        self.locks = locks or ProjectLocks()
        self.recalculator = RecalculationService(
            store, self.config, current_date=current_date, locks=self.locks
        )

    # Reads

    def list_milestones(self, project_id: str) -> list[Milestone]:
        """All milestones of a project, ordered by (order, earliest start)."""
        return sorted(self.store.load_project_nodes(project_id), key=_sort_key)

    def get_milestone(self, project_id: str, milestone_id: str) -> Milestone:
        """Fetch one milestone.

        Raises:
            MilestoneNotFoundError: If no such milestone exists in the project
        """
        return self._find(self.store.load_project_nodes(project_id), project_id, milestone_id)

    # Mutations

    def create_milestone(self, project_id: str, milestone: Milestone) -> Milestone:
        """Validate and commit a new milestone, then recalculate the project.

        Raises:
            ValidationError: If the milestone belongs to another project or its ID is taken
            MissingReferenceError: If a dependency is not in the project
            CircularDependencyError: If the dependencies would create a cycle
        """
        with self.locks.hold(project_id):
            existing = self.store.load_project_nodes(project_id)

            new = milestone.copy()
            new.clear_schedule()
            if new.project_id != project_id:
                raise ValidationError(
                    f"Milestone '{new.id}' belongs to project '{new.project_id}', "
                    f"not '{project_id}'"
                )
            if not new.id:
                new.id = uuid.uuid4().hex
            if any(m.id == new.id for m in existing):
                raise ValidationError(f"Milestone '{new.id}' already exists in '{project_id}'")
            if new.order is None:
                orders = [m.order for m in existing if m.order is not None]
                new.order = max(orders) + 1 if orders else 0

            _validate_timing(new)
            proposed = [*existing, new]
            self._validate_dependencies(new, proposed)
            check_acyclic(proposed)

            self.store.save_node(new)
            logger.changes("Created milestone %s in project %s", new.id, project_id)

            result = self.recalculator.recalculate(project_id)
            return result.get(new.id) or new

    def update_milestone(
        self, project_id: str, milestone_id: str, /, **changes: Any
    ) -> Milestone:
        """Apply field changes to a milestone, then recalculate the project.

        Raises:
            MilestoneNotFoundError: If the milestone does not exist
            ValidationError: If a change targets an unknown, immutable or computed field
            MissingReferenceError: If a new dependency is not in the project
            CircularDependencyError: If new dependencies would create a cycle
        """
        self._check_changes(changes)

        with self.locks.hold(project_id):
            existing = self.store.load_project_nodes(project_id)
            current = self._find(existing, project_id, milestone_id)

            updated = current.copy()
            for name, value in changes.items():
                if name == "dependencies":
                    value = normalize_dependency_ids(value)
                setattr(updated, name, value)

            _validate_timing(updated)
            proposed = [updated if m.id == milestone_id else m for m in existing]
            self._validate_dependencies(updated, proposed)
            check_acyclic(proposed)

            self.store.save_node(updated)
            logger.changes(
                "Updated milestone %s (%s)", milestone_id, ", ".join(sorted(changes)) or "no fields"
            )

            result = self.recalculator.recalculate(project_id)
            return result.get(milestone_id) or updated

    def plan_deletion(self, project_id: str, milestone_id: str) -> ReassignmentPlan:
        """Describe what deleting a milestone would require, without changing anything."""
        with self.locks.hold(project_id):
            milestone = self._find(self.store.load_project_nodes(project_id), project_id, milestone_id)
            dependents = self.store.find_dependents(project_id, milestone_id)
            return plan_reassignment(milestone, dependents)

    def delete_milestone(
        self,
        project_id: str,
        milestone_id: str,
        decision: ReassignmentDecision | None = None,
    ) -> DeletionResult:
        """Delete a milestone, re-pointing its dependents according to the decision.

        Raises:
            MilestoneNotFoundError: If the milestone does not exist
            DependencyConflictError: If dependents exist and no decision was supplied
            ValidationError: If the decision names an inadmissible replacement
        """
        with self.locks.hold(project_id):
            existing = self.store.load_project_nodes(project_id)
            target = self._find(existing, project_id, milestone_id)
            dependents = self.store.find_dependents(project_id, milestone_id)

            if not dependents:
                self.store.delete_node(project_id, milestone_id)
                logger.changes("Deleted milestone %s", milestone_id)
                result = self.recalculator.recalculate(project_id)
                return DeletionResult(deleted_id=milestone_id, plan=None, result=result)

            plan = plan_reassignment(target, dependents)
            if decision is None:
                raise DependencyConflictError(
                    f"Other milestones depend on '{milestone_id}': {plan.describe()}", plan
                )

            updated = apply_reassignment(plan, decision, dependents)
            updated_by_id = {m.id: m for m in updated}
            proposed = [
                updated_by_id.get(m.id, m) for m in existing if m.id != milestone_id
            ]
            check_acyclic(proposed)

            for dependent in updated:
                self.store.save_node(dependent)
            self.store.delete_node(project_id, milestone_id)
            logger.changes(
                "Deleted milestone %s; %d dependents now depend on %s",
                milestone_id,
                len(updated),
                decision.replacement_id or "nothing in its place",
            )

            result = self.recalculator.recalculate(project_id)
            return DeletionResult(
                deleted_id=milestone_id,
                plan=plan,
                reassigned_ids=[m.id for m in updated],
                result=result,
            )

    def recalculate(self, project_id: str) -> CPMResult:
        """Explicitly recompute and stamp the project's schedule."""
        return self.recalculator.recalculate(project_id)

    # Helpers

    def _find(self, nodes: list[Milestone], project_id: str, milestone_id: str) -> Milestone:
        for node in nodes:
            if node.id == milestone_id:
                return node
        raise MilestoneNotFoundError(
            f"No milestone found with id '{milestone_id}' in project '{project_id}'"
        )

    def _check_changes(self, changes: dict[str, Any]) -> None:
        for name in changes:
            if name in COMPUTED_FIELDS:
                raise ValidationError(f"'{name}' is computed by the scheduler and cannot be edited")
            if name in ("id", "project_id"):
                raise ValidationError(f"'{name}' cannot be changed")
            if name not in EDITABLE_FIELDS:
                raise ValidationError(f"Unknown milestone field '{name}'")

    def _validate_dependencies(self, milestone: Milestone, proposed: list[Milestone]) -> None:
        """Every dependency must name another milestone of the same project."""
        known = {m.id for m in proposed}
        for dep_id in milestone.dependencies:
            if dep_id not in known:
                raise MissingReferenceError(
                    f"Dependency '{dep_id}' of milestone '{milestone.id}' not found in "
                    f"project '{milestone.project_id}'"
                )
