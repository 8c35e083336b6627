# tests/unit/core/test_traversal.py
"""Tests for backward reachability over workflow edges."""

from guildflow.core.dag import build_incoming_edges_map, find_predecessors
from tests.fixtures.factories import make_edge


class TestFindPredecessors:
    def test_no_incoming_edges(self) -> None:
        assert find_predecessors("A", [make_edge("A", "B")]) == set()

    def test_linear_chain(self) -> None:
        edges = [make_edge("A", "B"), make_edge("B", "C"), make_edge("C", "D")]

        assert find_predecessors("D", edges) == {"A", "B", "C"}
        assert find_predecessors("B", edges) == {"A"}

    def test_diamond_counts_each_node_once(self) -> None:
        edges = [make_edge("A", "B"), make_edge("A", "C"), make_edge("B", "D"), make_edge("C", "D")]

        assert find_predecessors("D", edges) == {"A", "B", "C"}

    def test_cycle_terminates_and_includes_target(self) -> None:
        edges = [make_edge("A", "B"), make_edge("B", "C"), make_edge("C", "A")]

        assert find_predecessors("A", edges) == {"A", "B", "C"}

    def test_self_loop_includes_target(self) -> None:
        assert find_predecessors("A", [make_edge("A", "A")]) == {"A"}

    def test_handles_are_ignored(self) -> None:
        edges = [make_edge("Branch", "X", source_handle="source-cond-c1"), make_edge("Root", "Branch")]

        assert find_predecessors("X", edges) == {"Branch", "Root"}

    def test_unknown_target(self) -> None:
        assert find_predecessors("Nowhere", [make_edge("A", "B")]) == set()


def test_incoming_map_keeps_edge_order() -> None:
    edges = [make_edge("B", "D"), make_edge("A", "D"), make_edge("A", "B")]

    assert build_incoming_edges_map(edges) == {"D": ["B", "A"], "B": ["A"]}
