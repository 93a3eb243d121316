"""Pydantic schemas for YAML project file validation."""

from __future__ import annotations

from datetime import date
from typing import Any, Literal

from pydantic import BaseModel, Field, field_validator, model_validator


class ScheduleSchema(BaseModel):
    """Computed fields as written back by a recalculation."""

    earliest_start: date | None = None
    earliest_finish: date | None = None
    latest_start: date | None = None
    latest_finish: date | None = None
    slack: int | None = None
    is_critical: bool = False


class MilestoneSchema(BaseModel):
    """Schema for a single milestone entry."""

    name: str
    description: str = ""
    start_date: date | None = None
    end_date: date | None = None
    duration: int | None = Field(default=None, ge=0)
    dependencies: list[str] = Field(default_factory=list)
    order: int | None = None
    status: str = "pending"
    start_date_offset: int = 0
    start_date_offset_type: Literal["calendar", "business"] = "calendar"
    custom_start_date: date | None = None
    schedule: ScheduleSchema | None = None

    @field_validator("dependencies", mode="before")
    @classmethod
    def ensure_list(cls, v: Any) -> list[str]:
        """Ensure value is a list of strings."""
        if v is None:
            return []
        if isinstance(v, list):
            return [str(item) for item in v]  # type: ignore[misc]
        return [str(v)]

    @model_validator(mode="after")
    def check_window(self) -> MilestoneSchema:
        """Fixed windows must not end before they start."""
        if self.start_date and self.end_date and self.end_date < self.start_date:
            raise ValueError(
                f"end_date {self.end_date} is before start_date {self.start_date}"
            )
        if self.start_date_offset_type == "business" and self.start_date_offset < 0:
            raise ValueError("business-day start_date_offset must not be negative")
        return self


class ProjectSchema(BaseModel):
    """Schema for a project and its milestones."""

    name: str = ""
    start_date: date | None = None
    milestones: dict[str, MilestoneSchema] = Field(default_factory=dict)

    @field_validator("milestones", mode="before")
    @classmethod
    def empty_milestones(cls, v: Any) -> Any:
        """Treat an empty YAML mapping (null) as no milestones."""
        if v is None:
            return {}
        if isinstance(v, dict):
            return {str(key): value for key, value in v.items()}  # type: ignore[misc]
        return v


class ProjectFileSchema(BaseModel):
    """Schema for the entire project file."""

    version: int = 1
    projects: dict[str, ProjectSchema] = Field(default_factory=dict)

    @field_validator("projects", mode="before")
    @classmethod
    def empty_projects(cls, v: Any) -> Any:
        return {} if v is None else v
