"""In-process milestone store."""

from __future__ import annotations

import threading
from collections.abc import Iterable, Sequence
from dataclasses import replace
from datetime import date

from critpath.exceptions import MilestoneNotFoundError, ProjectNotFoundError
from critpath.models import Milestone, Project


class InMemoryMilestoneStore:
    """Dictionary-backed store.

    Records are copied on the way in and out, so callers always work on
    snapshots and never alias stored state.
    """

    def __init__(
        self,
        projects: Iterable[Project] = (),
        milestones: Iterable[Milestone] = (),
    ):
        self._lock = threading.Lock()
        self._projects: dict[str, Project] = {}
        self._milestones: dict[tuple[str, str], Milestone] = {}  # keyed by (project_id, id)
        for project in projects:
            self.add_project(project)
        for milestone in milestones:
            self.save_node(milestone)

    def add_project(self, project: Project) -> None:
        with self._lock:
            self._projects[project.id] = replace(project)

    def load_project(self, project_id: str) -> Project:
        with self._lock:
            return replace(self._require_project(project_id))

    def load_project_nodes(self, project_id: str) -> list[Milestone]:
        with self._lock:
            self._require_project(project_id)
            return [m.copy() for m in self._milestones.values() if m.project_id == project_id]

    def load_project_anchor_date(self, project_id: str) -> date | None:
        with self._lock:
            return self._require_project(project_id).start_date

    def save_node(self, node: Milestone) -> Milestone:
        with self._lock:
            self._require_project(node.project_id)
            self._milestones[(node.project_id, node.id)] = node.copy()
            return node.copy()

    def save_nodes(self, nodes: Sequence[Milestone]) -> None:
        for node in nodes:
            self.save_node(node)

    def delete_node(self, project_id: str, node_id: str) -> None:
        with self._lock:
            key = (project_id, node_id)
            if key not in self._milestones:
                raise MilestoneNotFoundError(
                    f"No milestone found with id '{node_id}' in project '{project_id}'"
                )
            del self._milestones[key]

    def find_dependents(self, project_id: str, node_id: str) -> list[Milestone]:
        with self._lock:
            self._require_project(project_id)
            return [
                m.copy()
                for m in self._milestones.values()
                if m.project_id == project_id and node_id in m.dependencies
            ]

    def _require_project(self, project_id: str) -> Project:
        project = self._projects.get(project_id)
        if project is None:
            raise ProjectNotFoundError(f"No project found with id '{project_id}'")
        return project
