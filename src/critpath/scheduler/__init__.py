"""Scheduler package - critical path scheduling over milestone graphs.

This package provides:
- Topological ordering and cycle detection over milestone dependencies
- The CPM engine (forward/backward pass, slack, criticality)
- Cascading recalculation with per-project serialization
- The dependency reassignment protocol for deletions
- MilestoneService, which ties validated mutations to recalculation

Main entry points:
- calculate_critical_path: Pure computation over a list of milestones
- MilestoneService: Store-backed create/update/delete/recalculate
"""

from .config import AnchorFallback, SchedulerConfig, SinkAnchor
from .core import CPMResult
from .cpm import calculate_critical_path, get_critical_path_sequence
from .protocols import MilestoneStore
from .reassignment import (
    ReassignmentDecision,
    ReassignmentPlan,
    ReassignmentState,
    SuggestedAction,
    apply_reassignment,
    plan_reassignment,
    validate_decision,
)
from .recalculation import ProjectLocks, RecalculationService
from .service import DeletionResult, MilestoneService
from .topology import (
    TopologicalOrder,
    build_successor_map,
    check_acyclic,
    detect_circular_dependencies,
    find_cycle,
    topological_sort,
    validate_references,
)

__all__ = [
    # Configuration
    "SchedulerConfig",
    "AnchorFallback",
    "SinkAnchor",
    # Results
    "CPMResult",
    "TopologicalOrder",
    "DeletionResult",
    # Graph algorithms
    "topological_sort",
    "find_cycle",
    "detect_circular_dependencies",
    "check_acyclic",
    "validate_references",
    "build_successor_map",
    # CPM engine
    "calculate_critical_path",
    "get_critical_path_sequence",
    # Orchestration
    "MilestoneStore",
    "ProjectLocks",
    "RecalculationService",
    "MilestoneService",
    # Reassignment protocol
    "ReassignmentState",
    "SuggestedAction",
    "ReassignmentPlan",
    "ReassignmentDecision",
    "plan_reassignment",
    "validate_decision",
    "apply_reassignment",
]
