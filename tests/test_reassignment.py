"""Tests for the dependency reassignment protocol."""

import pytest

from critpath.exceptions import ValidationError
from critpath.scheduler import (
    ReassignmentDecision,
    ReassignmentState,
    SuggestedAction,
    apply_reassignment,
    plan_reassignment,
    validate_decision,
)
from tests.conftest import ms


class TestPlanReassignment:
    """Test classification of pending deletions."""

    def test_no_dependents(self) -> None:
        plan = plan_reassignment(ms("d", 1, ["a"]), [])
        assert plan.state == ReassignmentState.NO_DEPENDENTS
        assert not plan.requires_decision
        assert plan.suggested_action == SuggestedAction.NONE

    def test_single_dependency_suggests_reassignment(self) -> None:
        plan = plan_reassignment(ms("d", 1, ["a"]), [ms("y", 1, ["d"]), ms("x", 1, ["d"])])
        assert plan.state == ReassignmentState.AUTO_REASSIGNABLE
        assert plan.suggested_action == SuggestedAction.REASSIGN_TO_DEPENDENCY
        assert plan.suggested_replacement == "a"
        assert plan.dependent_ids == ["x", "y"]
        assert "depend on 'a' instead" in plan.describe()

    def test_no_dependencies_suggests_removal(self) -> None:
        plan = plan_reassignment(ms("d", 1), [ms("x", 1, ["d"])])
        assert plan.state == ReassignmentState.AUTO_REASSIGNABLE
        assert plan.suggested_action == SuggestedAction.REMOVE_DEPENDENCY
        assert plan.suggested_replacement is None
        assert "remove the dependency" in plan.describe()

    def test_several_dependencies_require_choice(self) -> None:
        plan = plan_reassignment(ms("d", 1, ["a", "b"]), [ms("x", 1, ["d"])])
        assert plan.state == ReassignmentState.REQUIRES_USER_CHOICE
        assert plan.requires_decision
        assert plan.candidate_ids == ["a", "b"]
        assert plan.suggested_replacement is None


class TestDecisions:
    """Test decision construction and validation."""

    def test_accept_suggestion(self) -> None:
        plan = plan_reassignment(ms("d", 1, ["a"]), [ms("x", 1, ["d"])])
        assert ReassignmentDecision.accept(plan).replacement_id == "a"

    def test_accept_removal(self) -> None:
        plan = plan_reassignment(ms("d", 1), [ms("x", 1, ["d"])])
        assert ReassignmentDecision.accept(plan).replacement_id is None

    def test_accept_without_suggestion_fails(self) -> None:
        plan = plan_reassignment(ms("d", 1, ["a", "b"]), [ms("x", 1, ["d"])])
        with pytest.raises(ValidationError, match="requires choosing"):
            ReassignmentDecision.accept(plan)

    def test_replacement_must_be_candidate(self) -> None:
        plan = plan_reassignment(ms("d", 1, ["a", "b"]), [ms("x", 1, ["d"])])
        validate_decision(plan, ReassignmentDecision.replace_with("b"))
        validate_decision(plan, ReassignmentDecision.no_replacement())
        with pytest.raises(ValidationError, match="not a valid replacement"):
            validate_decision(plan, ReassignmentDecision.replace_with("zzz"))


class TestApplyReassignment:
    """Test re-pointing dependents."""

    def test_replaces_deleted_dependency(self) -> None:
        dependents = [ms("x", 1, ["d", "q"]), ms("y", 1, ["d"])]
        plan = plan_reassignment(ms("d", 1, ["a"]), dependents)
        updated = apply_reassignment(plan, ReassignmentDecision.accept(plan), dependents)
        assert {m.id: m.dependencies for m in updated} == {"x": ["q", "a"], "y": ["a"]}
        # Originals are untouched
        assert dependents[0].dependencies == ["d", "q"]

    def test_no_duplicate_replacement(self) -> None:
        dependents = [ms("x", 1, ["a", "d"])]
        plan = plan_reassignment(ms("d", 1, ["a"]), dependents)
        updated = apply_reassignment(plan, ReassignmentDecision.replace_with("a"), dependents)
        assert updated[0].dependencies == ["a"]

    def test_no_replacement_drops_dependency(self) -> None:
        dependents = [ms("x", 1, ["d", "q"])]
        plan = plan_reassignment(ms("d", 1, ["a", "b"]), dependents)
        updated = apply_reassignment(plan, ReassignmentDecision.no_replacement(), dependents)
        assert updated[0].dependencies == ["q"]

    def test_invalid_decision_rejected(self) -> None:
        dependents = [ms("x", 1, ["d"])]
        plan = plan_reassignment(ms("d", 1, ["a"]), dependents)
        with pytest.raises(ValidationError):
            apply_reassignment(plan, ReassignmentDecision.replace_with("x"), dependents)
