"""Tests for the dependency graph."""

from __future__ import annotations

import itertools

import pytest

from cratesmith.errors import CycleError
from cratesmith.workspace import DependencyGraph


def make_graph(edges: dict[str, list[str]]) -> DependencyGraph:
    nodes = set(edges)
    for deps in edges.values():
        nodes.update(deps)
    return DependencyGraph(sorted(nodes), edges)


def has_path(edges: dict[str, list[str]], start: str, end: str) -> bool:
    stack = list(edges.get(start, []))
    seen: set[str] = set()
    while stack:
        node = stack.pop()
        if node == end:
            return True
        if node not in seen:
            seen.add(node)
            stack.extend(edges.get(node, []))
    return False


DIAMOND = {
    "app": ["net", "usb"],
    "net": ["core"],
    "usb": ["core", "hal"],
    "hal": ["core"],
    "core": [],
    "lonely": [],
}


class TestConstruction:
    """Tests for building graphs."""

    def test_unknown_edges_dropped(self) -> None:
        """Edges to crates that do not exist are ignored."""
        graph = DependencyGraph(["a"], {"a": ["missing"]})
        assert graph.dependencies("a") == []

    def test_self_and_duplicate_edges_dropped(self) -> None:
        """Self-dependencies and repeated edges collapse."""
        graph = DependencyGraph(["a", "b"], {"a": ["a", "b", "b"]})
        assert graph.dependencies("a") == ["b"]
        assert list(graph.edges()) == [("a", "b")]

    def test_neighbours_sorted(self) -> None:
        """Direct neighbours are reported in name order."""
        graph = make_graph(DIAMOND)
        assert graph.dependencies("app") == ["net", "usb"]
        assert graph.dependents("core") == ["hal", "net", "usb"]

    def test_len_and_contains(self) -> None:
        """Graph exposes its node set."""
        graph = make_graph(DIAMOND)
        assert len(graph) == 6
        assert "lonely" in graph
        assert "other" not in graph


class TestClosures:
    """Tests for ancestors and descendants."""

    def test_ancestors_breadth_first(self) -> None:
        """Transitive dependencies come out nearest first."""
        graph = make_graph(DIAMOND)
        assert graph.ancestors("app") == ["net", "usb", "core", "hal"]

    def test_descendants_exclude_seed(self) -> None:
        """A crate is not its own dependent."""
        graph = make_graph(DIAMOND)
        assert set(graph.descendants("core")) == {"net", "usb", "hal", "app"}
        assert "core" not in graph.descendants("core")

    def test_isolated_crate(self) -> None:
        """A crate without edges has empty closures."""
        graph = make_graph(DIAMOND)
        assert graph.ancestors("lonely") == []
        assert graph.descendants("lonely") == []

    def test_closures_match_paths(self) -> None:
        """Closures contain exactly the crates reachable by a path."""
        graph = make_graph(DIAMOND)
        for a, b in itertools.permutations(graph.nodes, 2):
            assert (b in graph.ancestors(a)) == has_path(DIAMOND, a, b)
            assert (b in graph.descendants(a)) == has_path(DIAMOND, b, a)

    def test_closures_are_inverse(self) -> None:
        """B is an ancestor of A exactly when A is a descendant of B."""
        graph = make_graph(DIAMOND)
        for a, b in itertools.permutations(graph.nodes, 2):
            assert (b in graph.ancestors(a)) == (a in graph.descendants(b))

    def test_walk_includes_seeds(self) -> None:
        """Walks start with the seeds themselves."""
        graph = make_graph(DIAMOND)
        assert graph.walk_dependencies(["net"]) == ["net", "core"]
        assert graph.walk_dependents(["hal"]) == ["hal", "usb", "app"]

    def test_closure_in_cycle_excludes_seed(self) -> None:
        """BFS terminates on cycles and still excludes the seed."""
        graph = make_graph({"a": ["b"], "b": ["a"]})
        assert graph.ancestors("a") == ["b"]
        assert graph.descendants("a") == ["b"]

    def test_unknown_seed_raises(self) -> None:
        """Querying a crate outside the graph is a programming error."""
        graph = make_graph(DIAMOND)
        with pytest.raises(KeyError):
            graph.ancestors("missing")


class TestTopologicalOrder:
    """Tests for topological ordering."""

    def test_dependencies_first(self) -> None:
        """Every dependency precedes its dependent."""
        graph = make_graph(DIAMOND)
        order = graph.topological_order()
        assert sorted(order) == sorted(graph.nodes)
        for dependent, dependency in graph.edges():
            assert order.index(dependency) < order.index(dependent)

    def test_deterministic_tie_break(self) -> None:
        """Independent crates are ordered by name."""
        graph = make_graph(DIAMOND)
        assert graph.topological_order() == ["core", "hal", "lonely", "net", "usb", "app"]

    def test_two_node_cycle_rejected(self) -> None:
        """A -> B -> A fails instead of returning a partial order."""
        graph = make_graph({"a": ["b"], "b": ["a"], "c": []})
        with pytest.raises(CycleError):
            graph.topological_order()

    def test_long_cycle_rejected(self) -> None:
        """Cycles through several crates are detected."""
        graph = make_graph({"a": ["b"], "b": ["c"], "c": ["a"]})
        with pytest.raises(CycleError):
            graph.topological_order()
