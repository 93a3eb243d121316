"""Cascading recalculation: recompute and stamp a whole project's schedule.

Every mutation of a project's milestone graph ends with a full
recalculation. Partial, incremental recomputation is not attempted.
"""

from __future__ import annotations

import threading
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import date

from critpath.logger import get_logger

from .config import SchedulerConfig
from .core import CPMResult
from .cpm import calculate_critical_path
from .protocols import MilestoneStore
from .topology import check_acyclic

logger = get_logger()


class _LockEntry:
    def __init__(self) -> None:
        self.lock = threading.RLock()
        self.holders = 0


class ProjectLocks:
    """Registry of per-project re-entrant locks.

    Work on the same project is serialized; different projects get
    independent locks and never block each other. A project's entry lives
    only while some thread holds or waits for its lock.
    """

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._locks: dict[str, _LockEntry] = {}

    def active_projects(self) -> list[str]:
        """IDs of projects whose lock is currently held or awaited."""
        with self._guard:
            return sorted(self._locks)

    @contextmanager
    def hold(self, project_id: str) -> Iterator[None]:
        """Hold the project's lock for the duration of the block."""
        with self._guard:
            entry = self._locks.get(project_id)
            if entry is None:
                entry = _LockEntry()
                self._locks[project_id] = entry
            entry.holders += 1
        try:
            with entry.lock:
                yield
        finally:
            with self._guard:
                entry.holders -= 1
                if entry.holders == 0:
                    del self._locks[project_id]


class RecalculationService:
    """Reload a project from the store, run the CPM engine and write results back."""

    def __init__(
        self,
        store: MilestoneStore,
        config: SchedulerConfig | None = None,
        *,
        current_date: date | None = None,
        locks: ProjectLocks | None = None,
    ):
        """Initialize the recalculation service.

        Args:
            store: Persistence backend
            config: Scheduler configuration
            current_date: Fallback anchor date (defaults to today at call time)
            locks: Shared lock registry, so that a service layer and this
                   recalculator serialize on the same per-project locks
        """
        self.store = store
        self.config = config or SchedulerConfig()
        self.current_date = current_date
        self.locks = locks or ProjectLocks()

    def recalculate(self, project_id: str) -> CPMResult:
        """Recompute every milestone of a project and stamp the computed fields.

        Raises:
            CircularDependencyError: If the stored graph contains a cycle
        """
        with self.locks.hold(project_id):
            nodes = self.store.load_project_nodes(project_id)
            if not nodes:
                logger.checks("Project %s has no milestones; nothing to recalculate", project_id)
                return CPMResult()

            check_acyclic(nodes)
            anchor = self.store.load_project_anchor_date(project_id)
            result = calculate_critical_path(
                nodes, anchor, config=self.config, current_date=self.current_date
            )
            self.store.save_nodes(result.milestones)
            logger.changes(
                "Recalculated %d milestones for project %s (%d critical)",
                len(result.milestones),
                project_id,
                len(result.critical_path),
            )
            return result
