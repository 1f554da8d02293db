"""Lifecycle events emitted by the graph registry."""

from collections.abc import Callable
from dataclasses import dataclass

from ._model import Edge, Node


@dataclass(frozen=True, slots=True)
class NodeCreated:
    """A node was created for a previously unseen key."""

    node: Node


@dataclass(frozen=True, slots=True)
class EdgeCreated:
    """A new dependency edge was created. Fired before it is attached."""

    edge: Edge


@dataclass(frozen=True, slots=True)
class SelfLoopRejected:
    """A node was asked to depend on itself. No edge was created."""

    node: Node


@dataclass(frozen=True, slots=True)
class DuplicateEdge:
    """The requested dependency already existed. Carries the existing edge."""

    edge: Edge


type GraphEvent = NodeCreated | EdgeCreated | SelfLoopRejected | DuplicateEdge

type GraphListener = Callable[[GraphEvent], None]
