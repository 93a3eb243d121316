"""Data models for critpath."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field, fields, replace
from datetime import date
from typing import Any

OFFSET_CALENDAR = "calendar"
OFFSET_BUSINESS = "business"
VALID_OFFSET_TYPES = {OFFSET_CALENDAR, OFFSET_BUSINESS}

# Fields owned by the CPM engine; overwritten on every recalculation
COMPUTED_FIELDS = (
    "earliest_start",
    "earliest_finish",
    "latest_start",
    "latest_finish",
    "slack",
    "is_critical",
)


def _default_str_list() -> list[str]:
    return []


def _dependency_id(ref: Any) -> str:
    """Resolve a single dependency reference to its identifier string."""
    if isinstance(ref, Milestone):
        return ref.id
    if isinstance(ref, Mapping):
        for key in ("id", "_id"):
            if key in ref and ref[key] is not None:
                return str(ref[key])  # type: ignore[index]
        raise ValueError(f"Dependency mapping has no 'id' or '_id': {ref!r}")
    return str(ref)


def normalize_dependency_ids(refs: Iterable[Any] | None) -> list[str]:
    """Normalize dependency references to a list of identifier strings.

    Accepts raw identifiers, Milestone objects, or mappings carrying an
    ``id``/``_id`` key (partially expanded records). Duplicates are dropped,
    first occurrence wins.
    """
    if refs is None:
        return []
    if isinstance(refs, (str, Milestone, Mapping)):
        refs = [refs]

    result: list[str] = []
    seen: set[str] = set()
    for ref in refs:
        dep_id = _dependency_id(ref)
        if dep_id not in seen:
            seen.add(dep_id)
            result.append(dep_id)
    return result


@dataclass
class Project:
    """External project record; supplies the default anchor date."""

    id: str
    name: str = ""
    start_date: date | None = None


@dataclass
class Milestone:
    """A schedulable node in a project's dependency graph."""

    id: str
    project_id: str
    name: str
    description: str = ""
    start_date: date | None = None
    end_date: date | None = None
    duration: int | None = None
    dependencies: list[str] = field(default_factory=_default_str_list)
    order: int | None = None
    status: str = "pending"

    # Optional start adjustments for milestones with dependencies
    start_date_offset: int = 0
    start_date_offset_type: str = OFFSET_CALENDAR
    custom_start_date: date | None = None

    # Computed by the CPM engine
    earliest_start: date | None = None
    earliest_finish: date | None = None
    latest_start: date | None = None
    latest_finish: date | None = None
    slack: int | None = None
    is_critical: bool = False

    def __post_init__(self) -> None:
        self.dependencies = normalize_dependency_ids(self.dependencies)

    @property
    def has_fixed_window(self) -> bool:
        """True when both start and end dates are fixed."""
        return self.start_date is not None and self.end_date is not None

    @property
    def is_scheduled(self) -> bool:
        """True once a recalculation has populated the computed window."""
        return self.earliest_start is not None

    def clear_schedule(self) -> None:
        """Reset all computed fields."""
        self.earliest_start = None
        self.earliest_finish = None
        self.latest_start = None
        self.latest_finish = None
        self.slack = None
        self.is_critical = False

    def copy(self) -> Milestone:
        """Return an independent copy (dependency list included)."""
        return replace(self, dependencies=list(self.dependencies))

    def schedule_fields(self) -> dict[str, Any]:
        """Return the computed fields as a dictionary."""
        return {name: getattr(self, name) for name in COMPUTED_FIELDS}


EDITABLE_FIELDS = frozenset(
    f.name for f in fields(Milestone) if f.name not in COMPUTED_FIELDS
) - {"id", "project_id"}


def _default_project_dict() -> dict[str, Project]:
    return {}


def _default_milestone_dict() -> dict[str, list[Milestone]]:
    return {}


@dataclass
class ProjectFile:
    """Contents of a YAML project file: projects and their milestones."""

    version: int = 1
    projects: dict[str, Project] = field(default_factory=_default_project_dict)
    milestones: dict[str, list[Milestone]] = field(default_factory=_default_milestone_dict)

    def get_project(self, project_id: str) -> Project | None:
        return self.projects.get(project_id)

    def milestones_for(self, project_id: str) -> list[Milestone]:
        return self.milestones.get(project_id, [])
