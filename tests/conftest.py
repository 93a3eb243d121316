"""Pytest configuration and fixtures for critpath tests."""

from __future__ import annotations

from collections.abc import Iterator
from datetime import date
from typing import Any

import pytest

from critpath import context
from critpath.logger import reset_logger
from critpath.models import Milestone, Project
from critpath.scheduler import MilestoneService
from critpath.store import InMemoryMilestoneStore

PROJECT_ID = "p1"
PROJECT_START = date(2025, 1, 6)  # A Monday


def ms(
    milestone_id: str,
    duration: int | None = 0,
    deps: list[Any] | None = None,
    *,
    project_id: str = PROJECT_ID,
    **kwargs: Any,
) -> Milestone:
    """Create a Milestone with terse defaults.

    Example:
        ms("build", 5, ["design"])
    """
    return Milestone(
        id=milestone_id,
        project_id=project_id,
        name=kwargs.pop("name", milestone_id.title()),
        duration=duration,
        dependencies=deps or [],
        **kwargs,
    )


def three_chain_network() -> list[Milestone]:
    """Three parallel chains (31, 18 and 13 days) between a common start and end."""
    return [
        ms("start", 0),
        ms("a1", 10, ["start"]),
        ms("a2", 12, ["a1"]),
        ms("a3", 9, ["a2"]),
        ms("b1", 5, ["start"]),
        ms("b2", 7, ["b1"]),
        ms("b3", 6, ["b2"]),
        ms("c1", 3, ["start"]),
        ms("c2", 4, ["c1"]),
        ms("c3", 6, ["c2"]),
        ms("end", 0, ["a3", "b3", "c3"]),
    ]


@pytest.fixture(autouse=True)
def clean_global_state() -> Iterator[None]:
    """Reset logger and global context between tests."""
    reset_logger()
    context.set_config_path(None)
    yield
    reset_logger()
    context.set_config_path(None)


@pytest.fixture
def store() -> InMemoryMilestoneStore:
    """Empty in-memory store holding project p1."""
    return InMemoryMilestoneStore(projects=[Project(id=PROJECT_ID, start_date=PROJECT_START)])


@pytest.fixture
def service(store: InMemoryMilestoneStore) -> MilestoneService:
    return MilestoneService(store, current_date=date(2025, 3, 3))
