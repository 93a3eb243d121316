"""YAML reading and writing for critpath project files."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError as PydanticValidationError

from .exceptions import ParseError, ValidationError
from .models import Milestone, Project, ProjectFile
from .schemas import MilestoneSchema, ProjectFileSchema

PROJECT_FILE_VERSION = 1


class ProjectFileParser:
    """Parser for project YAML files.

    Only handles YAML parsing and record creation. For reference and cycle
    validation use load_project_file() from critpath.loader.
    """

    def parse_file(self, file_path: Path | str) -> ProjectFile:
        """Parse a YAML file into a ProjectFile."""
        path = Path(file_path)
        if not path.exists():
            raise ParseError(f"File not found: {file_path}")

        try:
            with path.open(encoding="utf-8") as f:
                data: Any = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ParseError(f"Failed to parse YAML: {e}") from e

        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ParseError("YAML must contain a dictionary at the root level")

        return self.parse_data(data)  # type: ignore[arg-type]

    def parse_data(self, data: dict[str, Any]) -> ProjectFile:
        """Convert loaded YAML data into a ProjectFile."""
        try:
            schema = ProjectFileSchema(**data)
        except PydanticValidationError as e:
            raise ValidationError(f"Invalid project file structure: {e}") from e

        if schema.version != PROJECT_FILE_VERSION:
            raise ValidationError(
                f"Unsupported project file version {schema.version}, "
                f"expected {PROJECT_FILE_VERSION}"
            )

        result = ProjectFile(version=schema.version)
        for project_id, project_data in schema.projects.items():
            result.projects[project_id] = Project(
                id=project_id,
                name=project_data.name,
                start_date=project_data.start_date,
            )
            result.milestones[project_id] = [
                self._build_milestone(project_id, milestone_id, milestone_data)
                for milestone_id, milestone_data in project_data.milestones.items()
            ]
        return result

    def _build_milestone(
        self, project_id: str, milestone_id: str, data: MilestoneSchema
    ) -> Milestone:
        milestone = Milestone(
            id=milestone_id,
            project_id=project_id,
            name=data.name,
            description=data.description,
            start_date=data.start_date,
            end_date=data.end_date,
            duration=data.duration,
            dependencies=data.dependencies,
            order=data.order,
            status=data.status,
            start_date_offset=data.start_date_offset,
            start_date_offset_type=data.start_date_offset_type,
            custom_start_date=data.custom_start_date,
        )
        if data.schedule is not None:
            milestone.earliest_start = data.schedule.earliest_start
            milestone.earliest_finish = data.schedule.earliest_finish
            milestone.latest_start = data.schedule.latest_start
            milestone.latest_finish = data.schedule.latest_finish
            milestone.slack = data.schedule.slack
            milestone.is_critical = data.schedule.is_critical
        return milestone


def _iso(value: Any) -> Any:
    return value.isoformat() if value is not None else None


def milestone_to_dict(milestone: Milestone) -> dict[str, Any]:
    """Serialize a milestone, omitting fields left at their defaults."""
    data: dict[str, Any] = {"name": milestone.name}
    if milestone.description:
        data["description"] = milestone.description
    if milestone.start_date is not None:
        data["start_date"] = milestone.start_date.isoformat()
    if milestone.end_date is not None:
        data["end_date"] = milestone.end_date.isoformat()
    if milestone.duration is not None:
        data["duration"] = milestone.duration
    data["dependencies"] = list(milestone.dependencies)
    if milestone.order is not None:
        data["order"] = milestone.order
    data["status"] = milestone.status
    if milestone.start_date_offset:
        data["start_date_offset"] = milestone.start_date_offset
    if milestone.start_date_offset_type != "calendar":
        data["start_date_offset_type"] = milestone.start_date_offset_type
    if milestone.custom_start_date is not None:
        data["custom_start_date"] = milestone.custom_start_date.isoformat()

    if milestone.is_scheduled:
        data["schedule"] = {
            "earliest_start": _iso(milestone.earliest_start),
            "earliest_finish": _iso(milestone.earliest_finish),
            "latest_start": _iso(milestone.latest_start),
            "latest_finish": _iso(milestone.latest_finish),
            "slack": milestone.slack,
            "is_critical": milestone.is_critical,
        }
    return data


def project_file_to_dict(project_file: ProjectFile) -> dict[str, Any]:
    """Serialize a ProjectFile into plain YAML-safe data."""
    projects: dict[str, Any] = {}
    for project_id, project in project_file.projects.items():
        project_data: dict[str, Any] = {}
        if project.name:
            project_data["name"] = project.name
        if project.start_date is not None:
            project_data["start_date"] = project.start_date.isoformat()
        project_data["milestones"] = {
            m.id: milestone_to_dict(m) for m in project_file.milestones_for(project_id)
        }
        projects[project_id] = project_data

    return {"version": project_file.version, "projects": projects}


def write_project_file(path: Path, project_file: ProjectFile) -> None:
    """Write a ProjectFile to disk as YAML."""
    with path.open("w", encoding="utf-8") as f:
        yaml.safe_dump(
            project_file_to_dict(project_file), f, default_flow_style=False, sort_keys=False
        )
