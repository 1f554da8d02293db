"""Loading and exporting dependency graphs as TOML.

A graph file lists nodes by name. Each node may declare the names it
depends on, a region, and free-form metadata:

    [nodes.app]
    depends_on = ["lib", "util"]
    region = "core"

    [nodes.lib]
    metadata = { version = "1.2" }

Dependencies that are not listed as nodes are created on demand.
"""

import logging
import tomllib
from pathlib import Path
from typing import Any

import tomli_w
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from ._graph import DependencyGraph

logger = logging.getLogger(__name__)


class GraphFileError(Exception):
    """Error in a graph description file."""


class NodeEntry(BaseModel):
    """A node as written in a graph file."""

    model_config = ConfigDict(extra="forbid")

    depends_on: list[str] = Field(default_factory=list)
    region: str | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)


class GraphFile(BaseModel):
    """Top-level layout of a graph file."""

    model_config = ConfigDict(extra="forbid")

    nodes: dict[str, NodeEntry] = Field(default_factory=dict)


def graph_from_dict(contents: dict[str, Any]) -> DependencyGraph[str]:
    """Build a graph from parsed graph file contents.

    Nodes are created in file order first, then edges in declaration order,
    so node ids follow the file.

    Args:
        contents: Parsed TOML (or equivalent) dictionary.

    Returns:
        A new graph whose payloads are node names.

    Raises:
        GraphFileError: If the contents do not match the graph file layout.

    """
    try:
        graph_file = GraphFile.model_validate(contents)
    except ValidationError as e:
        msg = f"Invalid graph description: {e}"
        raise GraphFileError(msg) from e

    graph: DependencyGraph[str] = DependencyGraph()
    for name, entry in graph_file.nodes.items():
        node = graph.new_node(name)
        if entry.region is not None:
            graph.put_into_region(node, entry.region)
        if entry.metadata:
            node.metadata = entry.metadata

    for name, entry in graph_file.nodes.items():
        node = graph.new_node(name)
        for dependency_name in entry.depends_on:
            if dependency_name == name:
                logger.warning(f"Ignoring self-dependency of '{name}'")
                continue
            graph.depend_on(node, graph.new_node(dependency_name))

    logger.debug(f"Built graph with {graph.size()} nodes and {graph.edge_count()} edges")
    return graph


def graph_to_dict(graph: DependencyGraph[Any]) -> dict[str, Any]:
    """Convert a graph to the graph file layout.

    Payloads and regions are written with ``str()``. Metadata is written only
    when it is a non-empty dictionary.

    Raises:
        GraphFileError: If two payloads are written with the same name.

    """
    nodes: dict[str, dict[str, Any]] = {}
    for node in graph:
        entry: dict[str, Any] = {}
        dependencies = [str(dependency.data) for dependency in graph.get_dependencies(node)]
        if dependencies:
            entry["depends_on"] = dependencies
        if node.region is not None:
            entry["region"] = str(node.region)
        if isinstance(node.metadata, dict) and node.metadata:
            entry["metadata"] = node.metadata
        name = str(node.data)
        if name in nodes:
            msg = f"Duplicate node name in graph file: {name}"
            raise GraphFileError(msg)
        nodes[name] = entry
    return {"nodes": nodes}


def load_graph_from_toml(input_path: Path | str) -> DependencyGraph[str]:
    """Load a graph from a TOML graph file.

    Raises:
        GraphFileError: If the file is not valid TOML or not a valid graph file.

    """
    input_path = Path(input_path)
    with input_path.open("rb") as f:
        try:
            contents = tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            msg = f"Invalid TOML in {input_path}: {e}"
            raise GraphFileError(msg) from e

    graph = graph_from_dict(contents)
    logger.debug(f"Loaded graph from {input_path}")
    return graph


def export_graph_to_toml(graph: DependencyGraph[Any], output_path: Path | str) -> None:
    """Write a graph to a TOML graph file.

    Raises:
        GraphFileError: If two payloads are written with the same name.
            Nothing is written in that case.

    """
    output_path = Path(output_path)
    contents = graph_to_dict(graph)
    with output_path.open("wb") as f:
        tomli_w.dump(contents, f)

    logger.debug(f"Exported graph to {output_path}")
