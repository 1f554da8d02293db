"""In-memory dependency graph engine."""

__all__ = [
    "DependencyGraph",
    "DuplicateEdge",
    "Edge",
    "EdgeCreated",
    "EdgeCriteria",
    "GraphEvent",
    "GraphFileError",
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
    "export_graph_to_toml",
    "find_cycle",
    "follows_dependencies",
    "get_dependencies",
    "get_dependents",
    "graph_from_dict",
    "graph_to_dict",
    "has_cyclic_dependencies",
    "is_dependency",
    "load_graph_from_toml",
    "same_region_walker",
    "sort_topological",
]

from ._graph import (
    DependencyGraph,
    DuplicateEdge,
    Edge,
    EdgeCreated,
    EdgeCriteria,
    GraphEvent,
    GraphListener,
    Node,
    NodeCreated,
    NotADagError,
    SelfLoopRejected,
    TopologicalMark,
    TopologicalSort,
    Walker,
    dependency_count,
    depends_on,
    depth_first_walker,
    distance_to,
    find_cycle,
    follows_dependencies,
    get_dependencies,
    get_dependents,
    has_cyclic_dependencies,
    is_dependency,
    same_region_walker,
    sort_topological,
)
from ._io import GraphFileError, export_graph_to_toml, graph_from_dict, graph_to_dict, load_graph_from_toml
