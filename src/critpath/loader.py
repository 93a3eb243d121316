"""Project file loading with validation."""

from __future__ import annotations

from pathlib import Path

from .exceptions import ValidationError
from .models import ProjectFile
from .parser import ProjectFileParser
from .scheduler.topology import check_acyclic, validate_references


def load_project_file(path: Path | str) -> ProjectFile:
    """Load a project file and validate every project's dependency graph.

    Raises:
        ParseError: If the file is missing or not valid YAML
        ValidationError: If the structure is invalid
        MissingReferenceError: If a dependency names an unknown milestone
        CircularDependencyError: If a project's dependencies contain a cycle
    """
    project_file = ProjectFileParser().parse_file(path)
    validate_project_file(project_file)
    return project_file


def validate_project_file(project_file: ProjectFile) -> None:
    """Validate reference integrity and acyclicity per project."""
    for project_id in project_file.projects:
        milestones = project_file.milestones_for(project_id)
        validate_references(milestones)
        check_acyclic(milestones)


def resolve_project_id(project_file: ProjectFile, project_id: str | None) -> str:
    """Pick the project to operate on.

    An explicit ID must exist; without one the file must hold exactly one project.
    """
    if project_id is not None:
        if project_id not in project_file.projects:
            raise ValidationError(f"Project '{project_id}' not found in project file")
        return project_id

    if len(project_file.projects) != 1:
        available = ", ".join(project_file.projects) or "none"
        raise ValidationError(
            f"Project file contains {len(project_file.projects)} projects ({available}); "
            "specify one with --project"
        )
    return next(iter(project_file.projects))
