"""Mutable dependency graph registry."""

from __future__ import annotations

import logging
from types import MappingProxyType
from typing import TYPE_CHECKING, Any

from . import _queries
from ._algorithms import TopologicalSort
from ._events import DuplicateEdge, EdgeCreated, NodeCreated, SelfLoopRejected
from ._model import Edge, Node

if TYPE_CHECKING:
    from collections.abc import Callable, Hashable, Iterable, Iterator, Mapping

    from ._events import GraphEvent, GraphListener

logger = logging.getLogger(__name__)


class DependencyGraph[T]:
    """A directed graph of "depends on" relationships between payloads.

    Nodes are created on demand for payloads and identified by a key, which
    is the payload itself unless a ``key`` function is given. An edge from
    ``a`` to ``b`` means "a depends on b". At most one edge exists per
    ordered pair and nodes never depend on themselves.

    Nodes and edges are stored in arenas indexed by id. Node ids are
    sequential and stable; edge ids are stable and never reused after
    removal.

    The graph is not thread-safe. Callers must serialize mutation.

    Example:
        >>> graph = DependencyGraph()
        >>> app, lib = graph.new_node("app"), graph.new_node("lib")
        >>> edge = graph.depend_on(app, lib)
        >>> graph.depends_on(app, lib)
        True

    """

    def __init__(
        self,
        *,
        key: Callable[[T], Hashable] | None = None,
        listeners: Iterable[GraphListener] = (),
    ) -> None:
        self._key = key
        self._listeners: list[GraphListener] = list(listeners)
        self._nodes: list[Node[T]] = []
        self._index: dict[Hashable, Node[T]] = {}
        self._edges: list[Edge | None] = []
        self._edge_count = 0
        self._regions: dict[Hashable, list[Node[T]]] = {}

    # ------------------------------------------------------------------ #
    # Listeners
    # ------------------------------------------------------------------ #

    def add_listener(self, listener: GraphListener) -> None:
        """Register a callable that receives every lifecycle event."""
        self._listeners.append(listener)

    def remove_listener(self, listener: GraphListener) -> None:
        """Unregister a listener.

        Raises:
            ValueError: If the listener is not registered.

        """
        self._listeners.remove(listener)

    def _emit(self, event: GraphEvent) -> None:
        logger.debug(f"Graph event: {type(event).__name__}")
        for listener in tuple(self._listeners):
            listener(event)

    # ------------------------------------------------------------------ #
    # Nodes
    # ------------------------------------------------------------------ #

    def _key_of(self, data: T) -> Hashable:
        return data if self._key is None else self._key(data)

    def new_node(self, data: T) -> Node[T]:
        """Get the node for ``data``, creating it if needed.

        A new node gets the next sequential id and fires ``NodeCreated``.
        """
        key = self._key_of(data)
        node = self._index.get(key)
        if node is None:
            node = Node(id=len(self._nodes), data=data, key=key)
            self._nodes.append(node)
            self._index[key] = node
            self._emit(NodeCreated(node))
        return node

    def find(self, data: T) -> Node[T] | None:
        """Get the node for ``data``, or None if there is none."""
        return self._index.get(self._key_of(data))

    def find_by_id(self, node_id: int) -> Node[T] | None:
        """Get the node with the given id, or None if there is none."""
        if 0 <= node_id < len(self._nodes):
            return self._nodes[node_id]
        return None

    def node(self, node_id: int) -> Node[T]:
        """Get the node with the given id.

        Raises:
            KeyError: If no node has that id.

        """
        node = self.find_by_id(node_id)
        if node is None:
            msg = f"No node with id {node_id}"
            raise KeyError(msg)
        return node

    def _check_member(self, node: Node) -> None:
        if self.find_by_id(node.id) is not node:
            msg = f"{node} does not belong to this graph"
            raise ValueError(msg)

    @property
    def nodes(self) -> Mapping[Hashable, Node[T]]:
        """Read-only mapping from key to node, in creation order."""
        return MappingProxyType(self._index)

    def size(self) -> int:
        """Return the number of nodes in the graph."""
        return len(self._nodes)

    def __len__(self) -> int:
        """Return the number of nodes in the graph."""
        return len(self._nodes)

    def __contains__(self, data: T) -> bool:
        """Check if a node exists for the given payload."""
        return self.find(data) is not None

    def __iter__(self) -> Iterator[Node[T]]:
        """Iterate over nodes in id order."""
        return iter(tuple(self._nodes))

    # ------------------------------------------------------------------ #
    # Edges
    # ------------------------------------------------------------------ #

    def depend_on(self, dependent: Node[T], dependency: Node[T], *, data: Any = None) -> Edge | None:
        """Make ``dependent`` depend on ``dependency``.

        Args:
            dependent: The node that needs the other one.
            dependency: The node being depended on.
            data: Payload stored on a newly created edge.

        Returns:
            None for a self-dependency (fires ``SelfLoopRejected``), the
            existing edge if the dependency is already direct (fires
            ``DuplicateEdge``), otherwise the new edge (fires ``EdgeCreated``).

        """
        self._check_member(dependent)
        self._check_member(dependency)

        if dependent is dependency:
            self._emit(SelfLoopRejected(dependent))
            return None

        existing = self.edge_between(dependent, dependency)
        if existing is not None:
            self._emit(DuplicateEdge(existing))
            return existing

        return self._create_edge(dependent, dependency, data)

    def depend_on_unless_reachable(
        self,
        dependent: Node[T],
        dependency: Node[T],
        *,
        data: Any = None,
    ) -> Edge | None:
        """Add a dependency only if it is not already implied by existing edges.

        Returns:
            The new edge; or, when ``dependency`` is already reachable, the
            direct edge between the two if there is one, else None.

        """
        self._check_member(dependent)
        self._check_member(dependency)

        if dependent is dependency:
            return None
        if self.depends_on(dependent, dependency):
            return self.edge_between(dependent, dependency)
        return self._create_edge(dependent, dependency, data)

    def _create_edge(self, dependent: Node[T], dependency: Node[T], data: Any) -> Edge:
        edge = Edge(id=len(self._edges), source=dependent.id, destination=dependency.id, data=data)
        self._emit(EdgeCreated(edge))

        self._edges.append(edge)
        self._edge_count += 1
        dependent.edge_ids.append(edge.id)
        dependency.edge_ids.append(edge.id)
        return edge

    def remove_edge(self, edge: Edge) -> None:
        """Detach an edge from both of its endpoints.

        Removing an edge that is no longer in the graph does nothing.
        """
        if not 0 <= edge.id < len(self._edges) or self._edges[edge.id] is not edge:
            return
        self._detach(self.node(edge.source), edge.id)
        self._detach(self.node(edge.destination), edge.id)
        self._edges[edge.id] = None
        self._edge_count -= 1
        logger.debug(f"Removed edge {edge.id} ({edge.source} -> {edge.destination})")

    @staticmethod
    def _detach(node: Node, edge_id: int) -> None:
        # One side only; callers must detach both ends.
        node.edge_ids[:] = [i for i in node.edge_ids if i != edge_id]

    def remove_dependency(self, dependent: Node[T], dependency: Node[T]) -> None:
        """Remove the edge making ``dependent`` depend on ``dependency``, if any.

        Raises:
            ValueError: If either node belongs to another graph.

        """
        edge = self.edge_between(dependent, dependency)
        if edge is not None:
            self.remove_edge(edge)

    def edge(self, edge_id: int) -> Edge:
        """Get a live edge by id.

        Raises:
            KeyError: If the id is unknown or the edge was removed.

        """
        edge = self._edges[edge_id] if 0 <= edge_id < len(self._edges) else None
        if edge is None:
            msg = f"No edge with id {edge_id}"
            raise KeyError(msg)
        return edge

    def edges(self) -> list[Edge]:
        """Get all live edges in creation order."""
        return [edge for edge in self._edges if edge is not None]

    def edge_count(self) -> int:
        """Return the number of live edges."""
        return self._edge_count

    def edges_of(self, node: Node[T]) -> list[Edge]:
        """Get all edges touching ``node``, inbound and outbound.

        Raises:
            ValueError: If ``node`` belongs to another graph.

        """
        self._check_member(node)
        return [self.edge(edge_id) for edge_id in node.edge_ids]

    def outgoing(self, node: Node[T]) -> list[Edge]:
        """Get the edges to the direct dependencies of ``node``."""
        return [edge for edge in self.edges_of(node) if edge.source == node.id]

    def incoming(self, node: Node[T]) -> list[Edge]:
        """Get the edges from the direct dependents of ``node``."""
        return [edge for edge in self.edges_of(node) if edge.destination == node.id]

    def edge_between(self, dependent: Node[T], dependency: Node[T]) -> Edge | None:
        """Get the direct edge from ``dependent`` to ``dependency``, if any."""
        self._check_member(dependency)
        for edge in self.outgoing(dependent):
            if edge.destination == dependency.id:
                return edge
        return None

    def source_of(self, edge: Edge) -> Node[T]:
        """Get the dependent end of an edge."""
        return self.node(edge.source)

    def destination_of(self, edge: Edge) -> Node[T]:
        """Get the dependency end of an edge."""
        return self.node(edge.destination)

    # ------------------------------------------------------------------ #
    # Regions
    # ------------------------------------------------------------------ #

    def put_into_region(self, node: Node[T], region: Hashable) -> Node[T]:
        """Assign ``node`` to ``region`` and append it to the region's members.

        Repeated calls append the node again. Returns the node for chaining.

        Raises:
            ValueError: If ``region`` is None, which stands for "no region".

        """
        self._check_member(node)
        if region is None:
            msg = "None cannot be used as a region"
            raise ValueError(msg)
        node.region = region
        self._regions.setdefault(region, []).append(node)
        return node

    @property
    def regions(self) -> Mapping[Hashable, tuple[Node[T], ...]]:
        """Mapping from region to its members, in the order they joined."""
        return MappingProxyType({region: tuple(members) for region, members in self._regions.items()})

    def region_members(self, region: Hashable) -> tuple[Node[T], ...]:
        """Get the members of a region. Unknown regions have no members."""
        return tuple(self._regions.get(region, ()))

    # ------------------------------------------------------------------ #
    # Queries
    # ------------------------------------------------------------------ #

    def depends_on(self, node: Node[T], other: Node[T]) -> bool:
        """Check if ``node`` depends on ``other``, directly or transitively."""
        self._check_member(other)
        return _queries.depends_on(self, node, other)

    def get_dependencies(self, node: Node[T], *, unique: bool = False, transitive: bool = False) -> list[Node[T]]:
        """Get the dependencies of ``node``. See :func:`depgraph.get_dependencies`."""
        return _queries.get_dependencies(self, node, unique=unique, transitive=transitive)

    def get_dependents(self, node: Node[T], *, unique: bool = False, transitive: bool = False) -> list[Node[T]]:
        """Get the dependents of ``node``. See :func:`depgraph.get_dependents`."""
        return _queries.get_dependents(self, node, unique=unique, transitive=transitive)

    def dependency_count(self, node: Node[T]) -> int:
        """Count transitive dependencies of ``node``, once per path."""
        return _queries.dependency_count(self, node)

    def is_dependency(self, node: Node[T]) -> bool:
        """Check if any node depends on ``node``."""
        return _queries.is_dependency(self, node)

    def distance_to(self, node: Node[T], other: Node[T]) -> int:
        """Get the shortest hop count from ``node`` to ``other``, or -1."""
        self._check_member(other)
        return _queries.distance_to(self, node, other)

    def has_cyclic_dependencies(self) -> bool:
        """Check if the graph contains a dependency cycle."""
        return _queries.has_cyclic_dependencies(self)

    def find_cycle(self) -> list[Node[T]] | None:
        """Find one dependency cycle, or None if the graph is acyclic."""
        return _queries.find_cycle(self)

    def topological_sort(self, region: Hashable | None = None) -> list[Node[T]]:
        """Return nodes with every dependency before its dependents.

        Args:
            region: If given, sort only that region's members and ignore
                edges that leave the region.

        Raises:
            NotADagError: If the sorted nodes contain a cycle.

        """
        if region is None:
            return TopologicalSort(self).sort(self._nodes)
        return TopologicalSort(self).sort(self.region_members(region), scoped=True)
