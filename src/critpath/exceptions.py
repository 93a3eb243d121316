"""Custom exceptions for critpath."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .scheduler.reassignment import ReassignmentPlan


class CritpathError(Exception):
    """Base exception for all critpath errors."""

    pass


class ValidationError(CritpathError):
    """Raised when validation fails."""

    pass


class CircularDependencyError(ValidationError):
    """Raised when a circular dependency is detected."""

    def __init__(self, message: str, cycle: list[str] | None = None):
        super().__init__(message)
        self.cycle = cycle or []


class MissingReferenceError(ValidationError):
    """Raised when a referenced ID does not exist."""

    pass


class InvalidTimingError(ValidationError):
    """Raised when a milestone cannot be anchored and fallback is disabled."""

    pass


class DependencyConflictError(CritpathError):
    """Raised when a deletion is blocked by dependents awaiting a reassignment decision."""

    def __init__(self, message: str, plan: ReassignmentPlan):
        super().__init__(message)
        self.plan = plan


class NotFoundError(CritpathError):
    """Raised when a requested record does not exist."""

    pass


class ProjectNotFoundError(NotFoundError):
    """Raised when a project ID is unknown to the store."""

    pass


class MilestoneNotFoundError(NotFoundError):
    """Raised when a milestone ID is unknown within its project."""

    pass


class ParseError(CritpathError):
    """Raised when YAML parsing fails."""

    pass
