"""Single-hop edge visitor for composing custom traversals."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING

from ._model import Edge, Node

if TYPE_CHECKING:
    from ._registry import DependencyGraph

type FollowEdge = Callable[[Node, Edge], bool]
type WalkCallback = Callable[[Node, Edge], None]


@dataclass(slots=True)
class Walker:
    """Visit the incident edges of one node.

    ``follow_edge`` decides which edges count; ``callback`` is called with
    ``(node, edge)`` for each accepted edge. A walk covers exactly one level.
    Deeper traversals re-invoke :meth:`walk` from inside the callback.

    Attributes:
        graph: The graph the walked nodes belong to.
        follow_edge: Edge filter.
        callback: Called once per accepted edge.

    """

    graph: DependencyGraph
    follow_edge: FollowEdge
    callback: WalkCallback

    def walk(self, node: Node) -> None:
        """Run the callback for every accepted edge of ``node``."""
        # Snapshot so the callback may add or remove edges. Edges removed
        # mid-walk are skipped; edges added mid-walk are not visited.
        for edge in self.graph.edges_of(node):
            if edge.id not in node.edge_ids:
                continue
            if self.follow_edge(node, edge):
                self.callback(node, edge)


def depth_first_walker(graph: DependencyGraph, callback: WalkCallback) -> Walker:
    """Create a walker that follows the edges leaving a node."""

    def follow(node: Node, edge: Edge) -> bool:
        return edge.is_outgoing_from(node.id)

    return Walker(graph, follow, callback)


def same_region_walker(graph: DependencyGraph, callback: WalkCallback) -> Walker:
    """Create a walker that follows leaving edges whose destination shares the node's region."""

    def follow(node: Node, edge: Edge) -> bool:
        if not edge.is_outgoing_from(node.id):
            return False
        return graph.node(edge.destination).region == node.region

    return Walker(graph, follow, callback)
