"""Dependency graph traversal: topological ordering and cycle detection.

Edges point from a milestone to the milestones it depends on. Dependencies
that reference identifiers outside the given node list are ignored here;
reference integrity is checked by validate_references().
"""

from __future__ import annotations

from collections.abc import Iterator, Sequence
from dataclasses import dataclass, field

from critpath.exceptions import CircularDependencyError, MissingReferenceError
from critpath.logger import get_logger
from critpath.models import Milestone

logger = get_logger()


def _default_milestone_list() -> list[Milestone]:
    return []


def _default_str_list() -> list[str]:
    return []


@dataclass
class TopologicalOrder:
    """Result of a topological sort.

    When a cycle is found the order is partial: milestones on the cycle are
    still emitted, but at least one of them precedes one of its dependencies.
    Use require_complete() where a full ordering is needed.
    """

    order: list[Milestone] = field(default_factory=_default_milestone_list)
    cycle: list[str] = field(default_factory=_default_str_list)

    @property
    def cycle_detected(self) -> bool:
        return bool(self.cycle)

    @property
    def ids(self) -> list[str]:
        return [milestone.id for milestone in self.order]

    def require_complete(self) -> list[Milestone]:
        """Return the order, or raise if the sort ran into a cycle."""
        if self.cycle:
            raise CircularDependencyError(
                f"Circular dependency detected: {format_cycle(self.cycle)}", self.cycle
            )
        return self.order


def format_cycle(cycle: Sequence[str]) -> str:
    return " -> ".join(cycle)


def index_by_id(nodes: Sequence[Milestone]) -> dict[str, Milestone]:
    return {node.id: node for node in nodes}


def topological_sort(nodes: Sequence[Milestone]) -> TopologicalOrder:
    """Order milestones so that every milestone follows its dependencies.

    Depth-first traversal with temporary/visited marking, iterating roots in
    input order. Reaching a milestone that is still temporarily marked means
    a cycle; that branch is skipped and the cycle recorded on the result
    instead of raising.
    """
    by_id = index_by_id(nodes)
    visited: set[str] = set()
    temporary: set[str] = set()
    order: list[Milestone] = []
    cycle: list[str] = []

    for root in nodes:
        if root.id in visited:
            continue

        temporary.add(root.id)
        stack: list[tuple[str, Iterator[str]]] = [(root.id, iter(by_id[root.id].dependencies))]
        while stack:
            node_id, pending = stack[-1]
            for dep_id in pending:
                if dep_id not in by_id or dep_id in visited:
                    continue
                if dep_id in temporary:
                    if not cycle:
                        path = [entry[0] for entry in stack]
                        cycle = [*path[path.index(dep_id) :], dep_id]
                        logger.warning("Circular dependency detected: %s", format_cycle(cycle))
                    continue
                temporary.add(dep_id)
                stack.append((dep_id, iter(by_id[dep_id].dependencies)))
                break
            else:
                stack.pop()
                temporary.discard(node_id)
                visited.add(node_id)
                order.append(by_id[node_id])

    return TopologicalOrder(order=order, cycle=cycle)


def find_cycle(nodes: Sequence[Milestone]) -> list[str] | None:
    """Find one dependency cycle, returned as a closed path of identifiers.

    Uses its own depth-first search with a recursion-stack set, stopping at
    the first edge that leads back onto the stack.
    """
    by_id = index_by_id(nodes)
    visited: set[str] = set()
    on_stack: set[str] = set()

    for root in nodes:
        if root.id in visited:
            continue

        visited.add(root.id)
        on_stack.add(root.id)
        stack: list[tuple[str, Iterator[str]]] = [(root.id, iter(by_id[root.id].dependencies))]
        while stack:
            node_id, pending = stack[-1]
            for dep_id in pending:
                if dep_id in on_stack:
                    path = [entry[0] for entry in stack]
                    return [*path[path.index(dep_id) :], dep_id]
                if dep_id in visited or dep_id not in by_id:
                    continue
                visited.add(dep_id)
                on_stack.add(dep_id)
                stack.append((dep_id, iter(by_id[dep_id].dependencies)))
                break
            else:
                stack.pop()
                on_stack.discard(node_id)

    return None


def detect_circular_dependencies(nodes: Sequence[Milestone]) -> bool:
    """Return True if the dependency edges among the nodes contain a cycle."""
    return find_cycle(nodes) is not None


def check_acyclic(nodes: Sequence[Milestone]) -> None:
    """Raise CircularDependencyError if the nodes contain a cycle."""
    cycle = find_cycle(nodes)
    if cycle is not None:
        raise CircularDependencyError(
            f"The specified dependencies would create a circular dependency: "
            f"{format_cycle(cycle)}",
            cycle,
        )


def validate_references(nodes: Sequence[Milestone]) -> None:
    """Ensure every dependency names a milestone in the same project.

    Raises:
        MissingReferenceError: If a dependency is unknown or belongs to another project
    """
    by_id = index_by_id(nodes)
    for node in nodes:
        for dep_id in node.dependencies:
            dep = by_id.get(dep_id)
            if dep is None:
                raise MissingReferenceError(
                    f"Milestone '{node.id}' depends on unknown milestone '{dep_id}'"
                )
            if dep.project_id != node.project_id:
                raise MissingReferenceError(
                    f"Milestone '{node.id}' depends on '{dep_id}' from another project "
                    f"('{dep.project_id}')"
                )


def build_successor_map(nodes: Sequence[Milestone]) -> dict[str, list[str]]:
    """Map each milestone ID to the IDs of milestones that depend on it."""
    successors: dict[str, list[str]] = {node.id: [] for node in nodes}
    for node in nodes:
        for dep_id in node.dependencies:
            if dep_id in successors:
                successors[dep_id].append(node.id)
    for ids in successors.values():
        ids.sort()
    return successors
