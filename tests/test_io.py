"""Tests for TOML graph files in depgraph._io."""

import tomllib
from pathlib import Path

import pytest

from depgraph import (
    DependencyGraph,
    GraphFileError,
    export_graph_to_toml,
    graph_from_dict,
    graph_to_dict,
    load_graph_from_toml,
)
from depgraph._io import GraphFile, NodeEntry

SAMPLE = """
[nodes.app]
depends_on = ["lib", "util"]
region = "core"

[nodes.lib]
depends_on = ["util"]
region = "core"
metadata = { version = "1.2" }

[nodes.util]
"""


class TestGraphFileModel:
    def test_defaults(self) -> None:
        entry = NodeEntry()
        assert entry.depends_on == []
        assert entry.region is None
        assert entry.metadata == {}

    def test_empty_file(self) -> None:
        assert GraphFile.model_validate({}).nodes == {}


class TestGraphFromDict:
    def test_nodes_in_file_order(self) -> None:
        graph = graph_from_dict({"nodes": {"b": {}, "a": {"depends_on": ["b"]}}})
        assert [node.data for node in graph] == ["b", "a"]

    def test_edges(self) -> None:
        graph = graph_from_dict({"nodes": {"a": {"depends_on": ["b", "c"]}, "b": {"depends_on": ["c"]}}})
        a = graph.find("a")
        assert a is not None
        assert [node.data for node in graph.get_dependencies(a)] == ["b", "c"]
        assert graph.edge_count() == 3

    def test_undeclared_dependency_is_created(self) -> None:
        graph = graph_from_dict({"nodes": {"a": {"depends_on": ["external"]}}})
        assert "external" in graph

    def test_regions_and_metadata(self) -> None:
        graph = graph_from_dict({"nodes": {"a": {"region": "core", "metadata": {"owner": "team"}}}})
        a = graph.find("a")
        assert a is not None
        assert a.region == "core"
        assert a.metadata == {"owner": "team"}
        assert graph.region_members("core") == (a,)

    def test_self_dependency_is_ignored(self) -> None:
        graph = graph_from_dict({"nodes": {"a": {"depends_on": ["a"]}}})
        assert graph.edge_count() == 0

    def test_duplicate_dependency_is_collapsed(self) -> None:
        graph = graph_from_dict({"nodes": {"a": {"depends_on": ["b", "b"]}}})
        assert graph.edge_count() == 1

    def test_invalid_layout_raises(self) -> None:
        with pytest.raises(GraphFileError, match="Invalid graph description"):
            graph_from_dict({"nodes": {"a": {"depends_on": "b"}}})

    def test_unknown_keys_raise(self) -> None:
        with pytest.raises(GraphFileError):
            graph_from_dict({"nodes": {"a": {"requires": ["b"]}}})


class TestGraphToDict:
    def test_round_trip(self) -> None:
        contents = {
            "nodes": {
                "app": {"depends_on": ["lib"], "region": "core"},
                "lib": {"metadata": {"version": "1.2"}},
            },
        }
        assert graph_to_dict(graph_from_dict(contents)) == contents

    def test_undeclared_nodes_are_written(self) -> None:
        graph = graph_from_dict({"nodes": {"1": {"depends_on": ["2"]}}})
        assert graph_to_dict(graph) == {"nodes": {"1": {"depends_on": ["2"]}, "2": {}}}

    def test_payloads_are_stringified(self) -> None:
        graph = DependencyGraph()
        graph.depend_on(graph.new_node(1), graph.new_node(2))
        assert graph_to_dict(graph) == {"nodes": {"1": {"depends_on": ["2"]}, "2": {}}}

    def test_colliding_names_raise(self) -> None:
        graph = DependencyGraph()
        graph.new_node(1)
        graph.new_node("1")
        with pytest.raises(GraphFileError, match="Duplicate node name in graph file: 1"):
            graph_to_dict(graph)


class TestTomlFiles:
    def test_load(self, tmp_path: Path) -> None:
        path = tmp_path / "deps.toml"
        path.write_text(SAMPLE)

        graph = load_graph_from_toml(path)

        assert [node.data for node in graph.topological_sort()] == ["util", "lib", "app"]
        assert len(graph.region_members("core")) == 2

    def test_load_invalid_toml(self, tmp_path: Path) -> None:
        path = tmp_path / "deps.toml"
        path.write_text("[nodes.app\n")
        with pytest.raises(GraphFileError, match="Invalid TOML"):
            load_graph_from_toml(path)

    def test_export(self, tmp_path: Path) -> None:
        source = tmp_path / "deps.toml"
        source.write_text(SAMPLE)
        target = tmp_path / "out.toml"

        export_graph_to_toml(load_graph_from_toml(source), target)

        with target.open("rb") as f:
            written = tomllib.load(f)
        assert written["nodes"]["app"] == {"depends_on": ["lib", "util"], "region": "core"}
        assert written["nodes"]["lib"]["metadata"] == {"version": "1.2"}
        assert written["nodes"]["util"] == {}

    def test_export_colliding_names_writes_nothing(self, tmp_path: Path) -> None:
        graph = DependencyGraph()
        graph.new_node(1)
        graph.new_node("1")
        target = tmp_path / "out.toml"

        with pytest.raises(GraphFileError):
            export_graph_to_toml(graph, target)
        assert not target.exists()
