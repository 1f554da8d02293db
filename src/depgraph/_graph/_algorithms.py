"""Topological sorting for dependency graph operations."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from typing import TYPE_CHECKING

from ._model import Edge, Node, TopologicalMark

if TYPE_CHECKING:
    from collections.abc import Iterator

    from ._registry import DependencyGraph

logger = logging.getLogger(__name__)

type EdgeCriteria = Callable[[Node, Edge], bool]


class NotADagError(ValueError):
    """Raised when a traversal that requires an acyclic graph meets a cycle."""

    def __init__(self, cycle: list[Node]) -> None:
        self.cycle = cycle
        if cycle:
            path = " -> ".join(str(node.data) for node in [*cycle, cycle[0]])
            super().__init__(f"Graph is not a DAG: {path}")
        else:
            super().__init__("Graph is not a DAG")


def follows_dependencies(node: Node, edge: Edge) -> bool:
    """Accept only the edges where ``node`` is the dependent."""
    return edge.is_outgoing_from(node.id)


class TopologicalSort:
    """Depth-first topological sorter with a pluggable edge filter.

    Marks live in a dictionary created for each call to :meth:`sort`, so the
    graph itself carries no sort state.

    Example:
        >>> graph = DependencyGraph()
        >>> app, lib = graph.new_node("app"), graph.new_node("lib")
        >>> edge = graph.depend_on(app, lib)
        >>> [node.data for node in TopologicalSort(graph).sort(graph)]
        ['lib', 'app']

    """

    def __init__(self, graph: DependencyGraph, edge_criteria: EdgeCriteria | None = None) -> None:
        self._graph = graph
        self._edge_criteria = edge_criteria or follows_dependencies

    def sort(self, nodes: Iterable[Node], *, scoped: bool = False) -> list[Node]:
        """Sort nodes so that the far endpoint of every followed edge comes first.

        With the default edge filter this means dependencies come before
        their dependents.

        Args:
            nodes: Nodes to sort. Roots are picked in this order.
            scoped: If True, edges leading outside ``nodes`` are ignored and
                the result contains exactly ``nodes``. Otherwise nodes reached
                through edges are included as well.

        Returns:
            List of nodes in topological order.

        Raises:
            NotADagError: If a cycle is reached during the traversal.

        """
        members = list(dict.fromkeys(nodes))
        marks = dict.fromkeys((node.id for node in members), TopologicalMark.UNMARKED)
        scope = frozenset(marks) if scoped else None
        logger.debug(f"Sorting {len(members)} nodes (scoped={scoped})")

        order: list[Node] = []
        for root in members:
            if marks[root.id] is TopologicalMark.UNMARKED:
                self._visit(root, marks, scope, order)
        return order

    def _visit(
        self,
        root: Node,
        marks: dict[int, TopologicalMark],
        scope: frozenset[int] | None,
        order: list[Node],
    ) -> None:
        marks[root.id] = TopologicalMark.IN_PROGRESS
        path = [root]
        stack: list[Iterator[Edge]] = [iter(self._graph.edges_of(root))]

        while stack:
            node = path[-1]
            edge = next(stack[-1], None)
            if edge is None:
                stack.pop()
                path.pop()
                marks[node.id] = TopologicalMark.DONE
                order.append(node)
                continue

            if not self._edge_criteria(node, edge):
                continue
            far_id = edge.other(node.id)
            if scope is not None and far_id not in scope:
                continue

            mark = marks.get(far_id, TopologicalMark.UNMARKED)
            if mark is TopologicalMark.IN_PROGRESS:
                start = next(i for i, on_path in enumerate(path) if on_path.id == far_id)
                raise NotADagError(path[start:])
            if mark is TopologicalMark.UNMARKED:
                far = self._graph.node(far_id)
                marks[far_id] = TopologicalMark.IN_PROGRESS
                path.append(far)
                stack.append(iter(self._graph.edges_of(far)))


def sort_topological(graph: DependencyGraph, nodes: Iterable[Node]) -> list[Node]:
    """Sort the given nodes with the default edge filter (dependencies first).

    Raises:
        NotADagError: If the nodes contain a cycle.

    """
    return TopologicalSort(graph).sort(nodes)
