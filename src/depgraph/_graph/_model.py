"""Node and edge records for the dependency graph.

Nodes and edges never hold references to each other. Both live in arenas
owned by the graph and point at one another by integer id.
"""

from collections.abc import Hashable
from dataclasses import dataclass, field
from enum import StrEnum, auto
from typing import Any


class TopologicalMark(StrEnum):
    """Per-sort visitation state of a node."""

    UNMARKED = auto()
    IN_PROGRESS = auto()  # On the active DFS path
    DONE = auto()


@dataclass(slots=True, eq=False)
class Node[T]:
    """A node in a dependency graph.

    Attributes:
        id: Sequential id assigned at creation. Equal to the number of nodes
            in the graph at that moment and never reassigned.
        data: The payload the node was created for.
        key: The registry key derived from the payload.
        edge_ids: Ids of all incident edges, inbound and outbound mixed.
        region: Region the node was last put into, if any.
        metadata: Free slot for the caller.

    """

    id: int
    data: T
    key: Hashable
    edge_ids: list[int] = field(default_factory=list)
    region: Hashable | None = None
    metadata: Any = None

    def __str__(self) -> str:
        return f"Node-{self.id}"


@dataclass(slots=True, eq=False)
class Edge:
    """A directed edge: ``source`` depends on ``destination``.

    Attributes:
        id: Arena index of the edge.
        source: Id of the dependent node.
        destination: Id of the dependency node.
        data: Free payload for the caller.
        cross_region: Caller-maintained flag. Not computed by the graph.

    """

    id: int
    source: int
    destination: int
    data: Any = None
    cross_region: bool = False

    def is_outgoing_from(self, node_id: int) -> bool:
        """Check if the edge leaves the given node (the node is the dependent)."""
        return self.source == node_id

    def other(self, node_id: int) -> int:
        """Return the id of the endpoint opposite to ``node_id``."""
        if node_id == self.source:
            return self.destination
        if node_id == self.destination:
            return self.source
        msg = f"Node {node_id} is not an endpoint of edge {self.id}"
        raise ValueError(msg)
