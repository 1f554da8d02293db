"""Graph query functions for CLI commands.

This module provides pure functions for querying a loaded dependency graph.
These are the functional core - no I/O, no Rich rendering.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from depgraph._graph import (
    DependencyGraph,
    Edge,
    Node,
    NotADagError,
    Walker,
    depth_first_walker,
    same_region_walker,
)


@dataclass(frozen=True, slots=True)
class RegionSummary:
    """Summary of a region's contents."""

    name: str
    member_count: int
    sorted_count: int | None  # None when the region is cyclic


@dataclass(frozen=True, slots=True)
class GraphSummary:
    """Summary of a whole graph."""

    node_count: int
    edge_count: int
    regions: list[RegionSummary]
    cycle: list[str] | None


@dataclass(frozen=True, slots=True)
class NodeDetail:
    """Detailed information about a node."""

    name: str
    id: int
    region: str | None
    direct_dependencies: list[str]
    direct_dependents: list[str]
    transitive_dependency_count: int
    transitive_dependent_count: int
    metadata: dict[str, Any]


@dataclass(slots=True)
class TreeNode:
    """A node in a dependency tree for rendering."""

    name: str
    children: list[TreeNode]


def _names(nodes: list[Node]) -> list[str]:
    return [str(node.data) for node in nodes]


def resolve_node(graph: DependencyGraph[str], name: str) -> Node[str]:
    """Look up a node by name.

    Raises:
        KeyError: If the graph has no node with that name.

    """
    node = graph.find(name)
    if node is None:
        msg = f"Node not found: {name}"
        raise KeyError(msg)
    return node


def get_graph_summary(graph: DependencyGraph[str]) -> GraphSummary:
    """Summarize node, edge and region counts, and look for a cycle.

    Args:
        graph: The graph to analyze.

    Returns:
        GraphSummary with one RegionSummary per region.

    """
    regions: list[RegionSummary] = []
    for region, members in graph.regions.items():
        try:
            sorted_count: int | None = len(graph.topological_sort(region))
        except NotADagError:
            sorted_count = None
        regions.append(
            RegionSummary(
                name=str(region),
                member_count=len(set(members)),
                sorted_count=sorted_count,
            ),
        )

    cycle = graph.find_cycle()
    return GraphSummary(
        node_count=graph.size(),
        edge_count=graph.edge_count(),
        regions=regions,
        cycle=_names(cycle) if cycle is not None else None,
    )


def get_order(graph: DependencyGraph[str], region: str | None = None) -> list[str]:
    """Get node names in topological order, optionally for one region.

    Raises:
        NotADagError: If the sorted nodes contain a cycle.
        KeyError: If ``region`` is not a region of the graph.

    """
    if region is not None and region not in graph.regions:
        msg = f"Region not found: {region}"
        raise KeyError(msg)
    return _names(graph.topological_sort(region))


def list_related(
    graph: DependencyGraph[str],
    name: str,
    *,
    dependents: bool = False,
    transitive: bool = False,
    unique: bool = True,
) -> list[str]:
    """List the dependencies (or dependents) of a node by name.

    Raises:
        KeyError: If the node is not found.
        NotADagError: If a non-unique transitive listing meets a cycle.

    """
    node = resolve_node(graph, name)
    if dependents:
        return _names(graph.get_dependents(node, unique=unique, transitive=transitive))
    return _names(graph.get_dependencies(node, unique=unique, transitive=transitive))


def get_node_detail(graph: DependencyGraph[str], name: str) -> NodeDetail:
    """Get detailed information about a specific node.

    Raises:
        KeyError: If the node is not found.

    """
    node = resolve_node(graph, name)
    metadata = node.metadata if isinstance(node.metadata, dict) else {}

    return NodeDetail(
        name=name,
        id=node.id,
        region=str(node.region) if node.region is not None else None,
        direct_dependencies=sorted(_names(graph.get_dependencies(node))),
        direct_dependents=sorted(_names(graph.get_dependents(node))),
        transitive_dependency_count=len(graph.get_dependencies(node, unique=True, transitive=True)),
        transitive_dependent_count=len(graph.get_dependents(node, unique=True, transitive=True)),
        metadata=dict(metadata),
    )


def get_distance(graph: DependencyGraph[str], source: str, target: str) -> int:
    """Get the shortest dependency hop count between two nodes, or -1.

    Raises:
        KeyError: If either node is not found.

    """
    return graph.distance_to(resolve_node(graph, source), resolve_node(graph, target))


def get_dependency_tree(
    graph: DependencyGraph[str],
    name: str,
    *,
    invert: bool = False,
    same_region: bool = False,
    max_depth: int | None = None,
) -> TreeNode:
    """Build a dependency tree for visualization.

    Each node is expanded once; later occurrences are left out.

    Args:
        graph: The graph containing the node.
        name: The root node of the tree.
        invert: If False, show what the node depends on.
                If True, show what depends on the node.
        same_region: Only follow dependencies inside the node's region.
            Ignored together with ``invert``.
        max_depth: Maximum depth to traverse (None for unlimited).

    Returns:
        TreeNode representing the dependency tree.

    Raises:
        KeyError: If the node is not found.

    """
    root = resolve_node(graph, name)
    visited: set[int] = {root.id}

    def expand(node: Node[str], tree: TreeNode, depth: int) -> None:
        if max_depth is not None and depth >= max_depth:
            return

        def visit(current: Node[str], edge: Edge) -> None:
            child = graph.node(edge.other(current.id))
            if child.id in visited:
                return
            visited.add(child.id)
            child_tree = TreeNode(name=str(child.data), children=[])
            tree.children.append(child_tree)
            expand(child, child_tree, depth + 1)

        walker = _make_walker(graph, visit, invert=invert, same_region=same_region)
        walker.walk(node)

    root_tree = TreeNode(name=name, children=[])
    expand(root, root_tree, 0)
    return root_tree


def _make_walker(
    graph: DependencyGraph[str],
    visit: Callable[[Node[str], Edge], None],
    *,
    invert: bool,
    same_region: bool,
) -> Walker:
    if invert:
        return Walker(graph, lambda node, edge: edge.destination == node.id, visit)
    if same_region:
        return same_region_walker(graph, visit)
    return depth_first_walker(graph, visit)
