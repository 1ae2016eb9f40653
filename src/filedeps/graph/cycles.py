"""Dependency cycle detection over the file dependency graph.

Two detectors are provided:

- ``find_cycles_through`` walks forward from a single file and enumerates
  cycles passing through it.
- ``find_all_cycles`` runs Tarjan's strongly connected components algorithm
  over the whole graph and scores each multi-file component.

Both traversals keep an explicit stack instead of recursing, so deep import
chains cannot exhaust the interpreter's recursion limit.
"""

import logging
from collections.abc import Callable, Iterable, Iterator

from .models import CycleInfo, CycleSeverity, SeverityPolicy
from .storage import DependencyGraph

logger = logging.getLogger(__name__)


def canonical_form(cycle: list[str]) -> tuple[str, ...]:
    """Rotate a cycle so it starts at its lexicographically smallest member.

    Args:
        cycle: Cycle members without the closing repeat

    Returns:
        Rotated members as a tuple (usable as a dict key)
    """
    if not cycle:
        return ()
    start = cycle.index(min(cycle))
    return tuple(cycle[start:] + cycle[:start])


def deduplicate_cycles(cycles: Iterable[list[str]]) -> list[list[str]]:
    """Collapse cycles that are rotations of each other.

    The first-seen ordering of each cycle is kept.
    """
    seen: set[tuple[str, ...]] = set()
    unique: list[list[str]] = []

    for cycle in cycles:
        key = canonical_form(cycle)
        if key not in seen:
            seen.add(key)
            unique.append(cycle)

    return unique


def find_cycles_through(graph: DependencyGraph, target: str) -> list[list[str]]:
    """Find dependency cycles that pass through a file.

    Depth-first search from ``target`` along forward edges. A cycle is
    recorded when the walk reaches a file already on the current path; only
    cycles containing ``target`` are kept. Fully explored files are never
    expanded again.

    Args:
        graph: Dependency graph to search
        target: File the cycles must include

    Returns:
        Deduplicated cycles, each starting where it was first entered and
        without the closing repeat (e.g. ``[A, B, C]`` for A -> B -> C -> A)
    """
    if target not in graph:
        return []

    cycles: list[list[str]] = []
    visited: set[str] = {target}
    path: list[str] = [target]
    position: dict[str, int] = {target: 0}
    stack: list[Iterator[str]] = [iter(graph.successors(target))]

    while stack:
        dependency = next(stack[-1], None)

        if dependency is None:
            stack.pop()
            del position[path.pop()]
            continue

        if dependency in position:
            cycle = path[position[dependency]:]
            if target in cycle:
                cycles.append(cycle)
            continue

        if dependency in visited:
            continue

        visited.add(dependency)
        position[dependency] = len(path)
        path.append(dependency)
        stack.append(iter(graph.successors(dependency)))

    unique = deduplicate_cycles(cycles)
    logger.debug(f"Found {len(unique)} cycles through {target}")
    return unique


def strongly_connected_components(
    nodes: Iterable[str],
    successors: Callable[[str], Iterable[str]],
) -> list[list[str]]:
    """Tarjan's strongly connected components algorithm.

    Args:
        nodes: Start nodes, in the order roots should be tried
        successors: Function returning a node's successors

    Returns:
        Components in the order they are completed, each listing its
        members in discovery order
    """
    counter = 0
    indices: dict[str, int] = {}
    low_links: dict[str, int] = {}
    stack: list[str] = []
    on_stack: set[str] = set()
    components: list[list[str]] = []

    def visit(node: str) -> None:
        nonlocal counter
        indices[node] = low_links[node] = counter
        counter += 1
        stack.append(node)
        on_stack.add(node)

    for root in nodes:
        if root in indices:
            continue

        visit(root)
        work: list[tuple[str, Iterator[str]]] = [(root, iter(successors(root)))]

        while work:
            node, children = work[-1]

            for child in children:
                if child not in indices:
                    visit(child)
                    work.append((child, iter(successors(child))))
                    break
                if child in on_stack:
                    low_links[node] = min(low_links[node], indices[child])
            else:
                work.pop()
                if work:
                    parent = work[-1][0]
                    low_links[parent] = min(low_links[parent], low_links[node])

                # Root of a component: pop it off the stack
                if low_links[node] == indices[node]:
                    component: list[str] = []
                    while True:
                        member = stack.pop()
                        on_stack.discard(member)
                        component.append(member)
                        if member == node:
                            break
                    component.reverse()
                    components.append(component)

    return components


def count_dependents(graph: DependencyGraph, members: Iterable[str]) -> int:
    """Count files outside a cycle that import any of its members."""
    member_set = set(members)
    dependents: set[str] = set()

    for member in member_set:
        for importer in graph.incoming(member):
            if importer not in member_set:
                dependents.add(importer)

    return len(dependents)


def find_all_cycles(
    graph: DependencyGraph, policy: SeverityPolicy | None = None
) -> list[CycleInfo]:
    """Find every dependency cycle in the project, most critical first.

    Every strongly connected component with more than one file is a cycle.
    A file importing itself is not reported.

    Args:
        graph: Dependency graph to analyze
        policy: Severity scoring policy (defaults if not given)

    Returns:
        CycleInfo records sorted by descending score; ties keep discovery order
    """
    policy = policy or SeverityPolicy()
    total_files = len(graph)

    components = strongly_connected_components(graph.indexed_files, graph.successors)

    cycles: list[CycleInfo] = []
    for files in components:
        if len(files) < 2:
            continue

        dependent_count = count_dependents(graph, files)
        score = policy.score(len(files), dependent_count, total_files)
        cycles.append(
            CycleInfo(
                files=files,
                severity=policy.classify(score),
                score=score,
                dependent_count=dependent_count,
            )
        )

    cycles.sort(key=lambda c: c.score, reverse=True)
    logger.info(f"Found {len(cycles)} dependency cycles across {total_files} files")
    return cycles


def group_by_severity(cycles: Iterable[CycleInfo]) -> dict[CycleSeverity, list[CycleInfo]]:
    """Partition cycles by severity, keeping their order within each group.

    Every severity level is present in the result, possibly with no cycles.
    """
    groups: dict[CycleSeverity, list[CycleInfo]] = {severity: [] for severity in CycleSeverity}
    for cycle in cycles:
        groups[cycle.severity].append(cycle)
    return groups
