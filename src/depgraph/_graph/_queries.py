"""Transitive dependency queries built on node adjacency.

All traversals use an explicit stack or queue, so deep graphs do not hit
the recursion limit and cyclic graphs either terminate or raise
:class:`NotADagError`.
"""

from __future__ import annotations

from collections import deque
from typing import TYPE_CHECKING

from ._algorithms import NotADagError, TopologicalSort

if TYPE_CHECKING:
    from collections.abc import Iterator

    from ._model import Node
    from ._registry import DependencyGraph


def _step(graph: DependencyGraph, node: Node, *, forward: bool) -> list[Node]:
    """Direct neighbours: dependencies when ``forward``, dependents otherwise."""
    if forward:
        return [graph.node(edge.destination) for edge in graph.outgoing(node)]
    return [graph.node(edge.source) for edge in graph.incoming(node)]


def depends_on(graph: DependencyGraph, node: Node, other: Node) -> bool:
    """Check if ``other`` is reachable from ``node`` along dependency edges."""
    visited: set[int] = set()
    stack = [node]
    while stack:
        current = stack.pop()
        for dependency in _step(graph, current, forward=True):
            if dependency is other:
                return True
            if dependency.id not in visited:
                visited.add(dependency.id)
                stack.append(dependency)
    return False


def _unique_closure(graph: DependencyGraph, node: Node, *, forward: bool) -> list[Node]:
    result: list[Node] = []
    seen: set[int] = set()
    stack = list(reversed(_step(graph, node, forward=forward)))
    while stack:
        current = stack.pop()
        if current.id in seen:
            continue
        seen.add(current.id)
        result.append(current)
        stack.extend(reversed(_step(graph, current, forward=forward)))
    return result


def _full_closure(graph: DependencyGraph, node: Node, *, forward: bool) -> list[Node]:
    # Pre-order with repeats. path and stack always have the same length.
    result: list[Node] = []
    path = [node]
    on_path = {node.id}
    stack: list[Iterator[Node]] = [iter(_step(graph, node, forward=forward))]
    while stack:
        current = next(stack[-1], None)
        if current is None:
            stack.pop()
            on_path.discard(path.pop().id)
            continue
        if current.id in on_path:
            start = next(i for i, on_stack in enumerate(path) if on_stack is current)
            cycle = path[start:]
            raise NotADagError(cycle if forward else cycle[::-1])
        result.append(current)
        path.append(current)
        on_path.add(current.id)
        stack.append(iter(_step(graph, current, forward=forward)))
    return result


def _closure(graph: DependencyGraph, node: Node, *, unique: bool, transitive: bool, forward: bool) -> list[Node]:
    if not transitive:
        direct = _step(graph, node, forward=forward)
        return list({n.id: n for n in direct}.values()) if unique else direct
    if unique:
        return _unique_closure(graph, node, forward=forward)
    return _full_closure(graph, node, forward=forward)


def get_dependencies(
    graph: DependencyGraph,
    node: Node,
    *,
    unique: bool = False,
    transitive: bool = False,
) -> list[Node]:
    """Get the nodes that ``node`` depends on.

    Args:
        graph: The graph owning ``node``.
        node: The node to query.
        unique: Drop repeated nodes, keeping the first occurrence.
        transitive: Follow each dependency's own dependencies as well,
            listing every dependency directly before its own closure.

    Returns:
        List of dependency nodes. Without ``unique``, a node reachable
        along several paths appears once per path.

    Raises:
        NotADagError: If ``transitive`` is set without ``unique`` and a cycle
            is reachable from ``node``.

    """
    return _closure(graph, node, unique=unique, transitive=transitive, forward=True)


def get_dependents(
    graph: DependencyGraph,
    node: Node,
    *,
    unique: bool = False,
    transitive: bool = False,
) -> list[Node]:
    """Get the nodes that depend on ``node``.

    Mirror image of :func:`get_dependencies`, following edges backwards.
    """
    return _closure(graph, node, unique=unique, transitive=transitive, forward=False)


def dependency_count(graph: DependencyGraph, node: Node) -> int:
    """Count transitive dependencies of ``node``, once per path."""
    return len(_full_closure(graph, node, forward=True))


def is_dependency(graph: DependencyGraph, node: Node) -> bool:
    """Check if any node depends on ``node``."""
    return bool(graph.incoming(node))


def distance_to(graph: DependencyGraph, node: Node, other: Node) -> int:
    """Get the fewest edges needed to reach ``other`` from ``node``.

    Returns:
        Hop count of the shortest dependency path, or -1 if ``other`` is not
        reachable. For ``node is other`` this is the length of the shortest
        cycle through the node.

    """
    visited: set[int] = set()
    queue: deque[tuple[Node, int]] = deque()
    for dependency in _step(graph, node, forward=True):
        if dependency.id not in visited:
            visited.add(dependency.id)
            queue.append((dependency, 1))

    while queue:
        current, distance = queue.popleft()
        if current is other:
            return distance
        for dependency in _step(graph, current, forward=True):
            if dependency.id not in visited:
                visited.add(dependency.id)
                queue.append((dependency, distance + 1))
    return -1


def find_cycle(graph: DependencyGraph) -> list[Node] | None:
    """Find one dependency cycle in the graph.

    Returns:
        The nodes of the cycle, each depending on the next and the last on
        the first, or None if the graph is acyclic.

    """
    try:
        TopologicalSort(graph).sort(graph)
    except NotADagError as e:
        return e.cycle
    return None


def has_cyclic_dependencies(graph: DependencyGraph) -> bool:
    """Check if the graph contains a dependency cycle."""
    return find_cycle(graph) is not None
