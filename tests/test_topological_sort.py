"""Tests for the topological sorter."""

import pytest

from depgraph import (
    DependencyGraph,
    Edge,
    Node,
    NotADagError,
    TopologicalSort,
    follows_dependencies,
    sort_topological,
)


def build(edges: list[tuple[int, int]]) -> tuple[DependencyGraph[int], dict[int, Node[int]]]:
    """Build a graph where (a, b) means "a depends on b"."""
    graph: DependencyGraph[int] = DependencyGraph()
    for a, b in edges:
        graph.depend_on(graph.new_node(a), graph.new_node(b))
    return graph, {node.data: node for node in graph}


def assert_dependencies_first(graph: DependencyGraph[int], order: list[Node[int]]) -> None:
    """No node may appear before one of its dependencies that is also in the order."""
    positions = {node.id: i for i, node in enumerate(order)}
    for i, node in enumerate(order):
        for dependency in graph.get_dependencies(node):
            if dependency.id in positions:
                assert positions[dependency.id] < i, f"{dependency.data} sorted after {node.data}"


class TestTopologicalSort:
    """Tests for sorting whole graphs."""

    def test_empty_graph(self) -> None:
        assert DependencyGraph().topological_sort() == []

    def test_single_node(self) -> None:
        graph = DependencyGraph()
        a = graph.new_node("a")
        assert graph.topological_sort() == [a]

    def test_linear_chain(self) -> None:
        graph, n = build([(1, 2), (2, 3)])
        assert graph.topological_sort() == [n[3], n[2], n[1]]

    def test_diamond(self) -> None:
        graph, n = build([(1, 2), (1, 3), (2, 4), (3, 4)])
        order = graph.topological_sort()
        assert order[0] is n[4]
        assert order[-1] is n[1]
        assert_dependencies_first(graph, order)

    def test_branching(self) -> None:
        graph, _ = build([(1, 2), (1, 3), (2, 5), (3, 4), (3, 6), (4, 7), (6, 7)])
        order = graph.topological_sort()
        assert len(order) == 7
        assert_dependencies_first(graph, order)

    def test_branching_with_crossing_edge(self) -> None:
        graph, _ = build([(1, 2), (1, 3), (2, 5), (3, 4), (3, 6), (4, 7), (5, 4), (6, 7)])
        assert_dependencies_first(graph, graph.topological_sort())

    def test_contains_every_node_once(self) -> None:
        graph, _ = build([(1, 2), (1, 3), (2, 4), (3, 4)])
        graph.new_node(99)
        order = graph.topological_sort()
        assert sorted(node.data for node in order) == [1, 2, 3, 4, 99]

    def test_works_with_strings(self) -> None:
        graph: DependencyGraph[str] = DependencyGraph()
        app, lib = graph.new_node("app"), graph.new_node("lib")
        graph.depend_on(app, lib)
        assert [node.data for node in graph.topological_sort()] == ["lib", "app"]

    def test_cycle_detection(self) -> None:
        graph, _ = build([(1, 2), (2, 3), (3, 1)])
        with pytest.raises(NotADagError, match="not a DAG"):
            graph.topological_sort()

    def test_cycle_error_is_value_error(self) -> None:
        graph, _ = build([(1, 2), (2, 1)])
        with pytest.raises(ValueError, match="not a DAG"):
            graph.topological_sort()

    def test_cycle_error_carries_cycle(self) -> None:
        graph, n = build([(1, 2), (2, 3), (3, 4), (4, 2)])
        with pytest.raises(NotADagError) as exc_info:
            graph.topological_sort()
        assert exc_info.value.cycle == [n[2], n[3], n[4]]

    def test_deep_chain_does_not_recurse(self) -> None:
        graph, n = build([(i, i + 1) for i in range(1, 5001)])
        order = graph.topological_sort()
        assert order[0] is n[5001]
        assert order[-1] is n[1]

    def test_sorts_agree_with_cycle_check(self) -> None:
        for edges in (
            [(1, 2), (2, 3)],
            [(1, 2), (2, 3), (3, 1)],
            [(1, 2), (1, 3), (2, 4), (3, 4)],
            [(1, 2), (2, 3), (3, 4), (4, 2)],
        ):
            graph, _ = build(edges)
            try:
                graph.topological_sort()
            except NotADagError:
                sorted_ok = False
            else:
                sorted_ok = True
            assert sorted_ok is not graph.has_cyclic_dependencies()

    def test_repeated_sorts_are_independent(self) -> None:
        graph, _ = build([(1, 2), (2, 3)])
        assert graph.topological_sort() == graph.topological_sort()


class TestSortGivenNodes:
    """Tests for sorting an explicit list of nodes."""

    def test_shuffled_input(self) -> None:
        graph: DependencyGraph[int] = DependencyGraph()
        n = {i: graph.new_node(i) for i in range(10)}
        for a, b in [(9, 8), (7, 6), (6, 5), (5, 4), (4, 1), (3, 0), (5, 3), (5, 2), (8, 6)]:
            graph.depend_on(n[a], n[b])

        nodes = [n[i] for i in (1, 3, 5, 2, 8, 7, 0, 4, 9, 6)]
        order = sort_topological(graph, nodes)
        assert len(order) == 10
        assert_dependencies_first(graph, order)

    def test_unscoped_subset_pulls_in_dependencies(self) -> None:
        graph, n = build([(1, 2), (2, 3)])
        assert TopologicalSort(graph).sort([n[1]]) == [n[3], n[2], n[1]]

    def test_scoped_subset_ignores_outside_edges(self) -> None:
        graph, n = build([(1, 2), (2, 3)])
        assert TopologicalSort(graph).sort([n[1], n[3]], scoped=True) == [n[1], n[3]]

    def test_duplicate_input_nodes(self) -> None:
        graph, n = build([(1, 2)])
        assert TopologicalSort(graph).sort([n[1], n[1], n[2]]) == [n[2], n[1]]


class TestRegionSort:
    """Tests for sorting a single region."""

    @pytest.fixture
    def regional(self) -> tuple[DependencyGraph[int], dict[int, Node[int]]]:
        graph: DependencyGraph[int] = DependencyGraph()
        n = {i: graph.new_node(i) for i in range(1, 9)}
        for i in range(1, 5):
            graph.put_into_region(n[i], 1)
        for i in range(5, 9):
            graph.put_into_region(n[i], 2)
        for a, b in [(1, 2), (2, 4), (2, 3), (4, 3), (5, 1), (6, 5), (7, 6), (8, 7)]:
            graph.depend_on(n[a], n[b])
        return graph, n

    def test_region_contains_exactly_its_members(
        self,
        regional: tuple[DependencyGraph[int], dict[int, Node[int]]],
    ) -> None:
        graph, _ = regional
        order = graph.topological_sort(1)
        assert len(order) == 4
        assert {node.data for node in order} == {1, 2, 3, 4}
        assert_dependencies_first(graph, order)

    def test_cross_region_edge_is_not_followed(
        self,
        regional: tuple[DependencyGraph[int], dict[int, Node[int]]],
    ) -> None:
        graph, n = regional
        order = graph.topological_sort(2)
        assert order == [n[5], n[6], n[7], n[8]]

    def test_cross_region_cycle_does_not_break_region_sort(
        self,
        regional: tuple[DependencyGraph[int], dict[int, Node[int]]],
    ) -> None:
        graph, n = regional
        graph.depend_on(n[3], n[8])
        assert graph.has_cyclic_dependencies()
        assert len(graph.topological_sort(1)) == 4
        assert len(graph.topological_sort(2)) == 4

    def test_repeated_membership_sorted_once(self) -> None:
        graph: DependencyGraph[str] = DependencyGraph()
        a, b = graph.new_node("a"), graph.new_node("b")
        graph.put_into_region(a, "r")
        graph.put_into_region(a, "r")
        graph.put_into_region(b, "r")
        graph.depend_on(a, b)
        assert graph.topological_sort("r") == [b, a]

    def test_unknown_region_is_empty(self) -> None:
        graph, _ = build([(1, 2)])
        assert graph.topological_sort("missing") == []


class TestCustomEdgeCriteria:
    """Tests for sorting with a custom edge filter."""

    def test_reverse_order_by_following_dependents(self) -> None:
        graph, n = build([(1, 2), (2, 3)])

        def follows_dependents(node: Node, edge: Edge) -> bool:
            return edge.destination == node.id

        order = TopologicalSort(graph, follows_dependents).sort(graph)
        assert order == [n[1], n[2], n[3]]

    def test_filter_by_edge_data(self) -> None:
        graph: DependencyGraph[str] = DependencyGraph()
        app, lib, tool = (graph.new_node(name) for name in ("app", "lib", "tool"))
        graph.depend_on(app, lib, data="runtime")
        graph.depend_on(lib, app, data="test")
        graph.depend_on(app, tool, data="runtime")

        def runtime_only(node: Node, edge: Edge) -> bool:
            return follows_dependencies(node, edge) and edge.data == "runtime"

        with pytest.raises(NotADagError):
            graph.topological_sort()
        order = TopologicalSort(graph, runtime_only).sort(graph)
        assert order.index(lib) < order.index(app)
        assert order.index(tool) < order.index(app)
