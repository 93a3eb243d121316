"""Milestone store persisted to a YAML project file.

Every operation reads the file and every write rewrites it in full, so the
file on disk is always the single source of truth.
"""

from __future__ import annotations

import threading
from collections.abc import Sequence
from datetime import date
from pathlib import Path

from critpath.exceptions import MilestoneNotFoundError, ProjectNotFoundError
from critpath.models import Milestone, Project, ProjectFile
from critpath.parser import ProjectFileParser, write_project_file


class YamlFileStore:
    """Store backed by a project file (see critpath.parser for the format)."""

    def __init__(self, path: Path | str):
        self.path = Path(path)
        self._lock = threading.RLock()

    def read(self) -> ProjectFile:
        """Load the whole file; a missing file reads as empty."""
        with self._lock:
            if not self.path.exists():
                return ProjectFile()
            return ProjectFileParser().parse_file(self.path)

    def write(self, project_file: ProjectFile) -> None:
        with self._lock:
            write_project_file(self.path, project_file)

    def add_project(self, project: Project) -> None:
        with self._lock:
            project_file = self.read()
            project_file.projects[project.id] = project
            project_file.milestones.setdefault(project.id, [])
            self.write(project_file)

    def load_project(self, project_id: str) -> Project:
        return self._require_project(self.read(), project_id)

    def load_project_nodes(self, project_id: str) -> list[Milestone]:
        project_file = self.read()
        self._require_project(project_file, project_id)
        return project_file.milestones_for(project_id)

    def load_project_anchor_date(self, project_id: str) -> date | None:
        return self._require_project(self.read(), project_id).start_date

    def save_node(self, node: Milestone) -> Milestone:
        self.save_nodes([node])
        return node.copy()

    def save_nodes(self, nodes: Sequence[Milestone]) -> None:
        with self._lock:
            project_file = self.read()
            for node in nodes:
                self._require_project(project_file, node.project_id)
                milestones = project_file.milestones.setdefault(node.project_id, [])
                for index, existing in enumerate(milestones):
                    if existing.id == node.id:
                        milestones[index] = node.copy()
                        break
                else:
                    milestones.append(node.copy())
            self.write(project_file)

    def delete_node(self, project_id: str, node_id: str) -> None:
        with self._lock:
            project_file = self.read()
            self._require_project(project_file, project_id)
            milestones = project_file.milestones_for(project_id)
            remaining = [m for m in milestones if m.id != node_id]
            if len(remaining) == len(milestones):
                raise MilestoneNotFoundError(
                    f"No milestone found with id '{node_id}' in project '{project_id}'"
                )
            project_file.milestones[project_id] = remaining
            self.write(project_file)

    def find_dependents(self, project_id: str, node_id: str) -> list[Milestone]:
        return [m for m in self.load_project_nodes(project_id) if node_id in m.dependencies]

    def _require_project(self, project_file: ProjectFile, project_id: str) -> Project:
        project = project_file.get_project(project_id)
        if project is None:
            raise ProjectNotFoundError(f"No project '{project_id}' in {self.path}")
        return project
