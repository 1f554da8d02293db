"""Graph module providing the dependency graph engine.

This module contains:
- DependencyGraph[T]: A mutable registry of nodes, edges and regions
- TopologicalSort: Depth-first sorter with a pluggable edge filter
- Dependency queries: reachability, closures, distances and cycle checks
- Walker: Single-hop edge visitor for custom traversals
"""

from ._algorithms import EdgeCriteria, NotADagError, TopologicalSort, follows_dependencies, sort_topological
from ._events import DuplicateEdge, EdgeCreated, GraphEvent, GraphListener, NodeCreated, SelfLoopRejected
from ._model import Edge, Node, TopologicalMark
from ._queries import (
    dependency_count,
    depends_on,
    distance_to,
    find_cycle,
    get_dependencies,
    get_dependents,
    has_cyclic_dependencies,
    is_dependency,
)
from ._registry import DependencyGraph
from ._walk import Walker, depth_first_walker, same_region_walker

__all__ = [
    "DependencyGraph",
    "DuplicateEdge",
    "Edge",
    "EdgeCreated",
    "EdgeCriteria",
    "GraphEvent",
    "GraphListener",
    "Node",
    "NodeCreated",
    "NotADagError",
    "SelfLoopRejected",
    "TopologicalMark",
    "TopologicalSort",
    "Walker",
    "dependency_count",
    "depends_on",
    "depth_first_walker",
    "distance_to",
    "find_cycle",
    "follows_dependencies",
    "get_dependencies",
    "get_dependents",
    "has_cyclic_dependencies",
    "is_dependency",
    "same_region_walker",
    "sort_topological",
]
