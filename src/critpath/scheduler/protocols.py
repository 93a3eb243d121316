"""Protocol definitions for the scheduling system."""

from collections.abc import Sequence
from datetime import date
from typing import Protocol

from critpath.models import Milestone


class MilestoneStore(Protocol):
    """Persistence contract consumed by recalculation and the milestone service.

    Implementations persist plain Milestone records. Errors raised by an
    implementation propagate to the caller unchanged.
    """

    def load_project_nodes(self, project_id: str) -> list[Milestone]:
        """Load every milestone belonging to a project."""
        ...

    def load_project_anchor_date(self, project_id: str) -> date | None:
        """Load the project's start date, used to anchor root milestones."""
        ...

    def save_node(self, node: Milestone) -> Milestone:
        """Insert or overwrite a single milestone and return the stored record."""
        ...

    def save_nodes(self, nodes: Sequence[Milestone]) -> None:
        """Overwrite several milestones (used to stamp computed fields)."""
        ...

    def delete_node(self, project_id: str, node_id: str) -> None:
        """Remove a milestone by ID from its project."""
        ...

    def find_dependents(self, project_id: str, node_id: str) -> list[Milestone]:
        """Milestones in the project whose dependencies include node_id."""
        ...
