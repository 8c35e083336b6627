# tests/property/core/test_traversal_properties.py
"""Property-based tests for backward graph traversal.

find_predecessors() must agree with networkx ancestor computation on any
graph, cyclic ones included, and must terminate however the edges loop.

Key Invariants:
- Result equals the ancestor set of the target
- The target itself appears only when it lies on a cycle
- Nodes with no incoming edges have no predecessors
"""

from __future__ import annotations

import networkx as nx
from hypothesis import given
from hypothesis import strategies as st

from guildflow.contracts import FlowEdge
from guildflow.core.dag import find_predecessors
from tests.property.settings import STANDARD_SETTINGS

NODE_IDS = [f"n{i}" for i in range(8)]

edge_pairs = st.lists(st.tuples(st.sampled_from(NODE_IDS), st.sampled_from(NODE_IDS)), max_size=30)


def _edges(pairs: list[tuple[str, str]]) -> list[FlowEdge]:
    return [FlowEdge(id=f"e{i}", source=source, target=target) for i, (source, target) in enumerate(pairs)]


def _on_cycle(graph: nx.DiGraph, node: str) -> bool:
    return any(source == node or nx.has_path(graph, node, source) for source in graph.predecessors(node))


@given(pairs=edge_pairs, target=st.sampled_from(NODE_IDS))
@STANDARD_SETTINGS
def test_matches_networkx_ancestors(pairs: list[tuple[str, str]], target: str) -> None:
    graph = nx.DiGraph()
    graph.add_nodes_from(NODE_IDS)
    graph.add_edges_from(pairs)

    expected = set(nx.ancestors(graph, target))
    if _on_cycle(graph, target):
        expected.add(target)

    assert find_predecessors(target, _edges(pairs)) == expected


@given(pairs=edge_pairs)
@STANDARD_SETTINGS
def test_sources_have_no_predecessors(pairs: list[tuple[str, str]]) -> None:
    targets = {target for _, target in pairs}

    for node in NODE_IDS:
        if node not in targets:
            assert find_predecessors(node, _edges(pairs)) == set()


@given(pairs=edge_pairs, target=st.sampled_from(NODE_IDS))
@STANDARD_SETTINGS
def test_duplicate_edges_do_not_change_result(pairs: list[tuple[str, str]], target: str) -> None:
    assert find_predecessors(target, _edges(pairs + pairs)) == find_predecessors(target, _edges(pairs))
