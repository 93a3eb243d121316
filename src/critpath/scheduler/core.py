"""Core dataclasses for the scheduling system."""

from dataclasses import dataclass, field
from datetime import date

from critpath.models import Milestone


def _default_milestone_list() -> list[Milestone]:
    return []


def _default_str_list() -> list[str]:
    return []


@dataclass
class CPMResult:
    """Complete result of a critical path calculation."""

    milestones: list[Milestone] = field(default_factory=_default_milestone_list)
    project_end: date | None = None
    critical_path: list[str] = field(default_factory=_default_str_list)
    warnings: list[str] = field(default_factory=_default_str_list)

    def get(self, milestone_id: str) -> Milestone | None:
        """Look up a computed milestone by ID."""
        for milestone in self.milestones:
            if milestone.id == milestone_id:
                return milestone
        return None

    @property
    def critical_ids(self) -> set[str]:
        return {milestone.id for milestone in self.milestones if milestone.is_critical}
