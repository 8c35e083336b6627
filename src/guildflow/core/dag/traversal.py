# src/guildflow/core/dag/traversal.py
"""Backward reachability over workflow edges.

Edges may form cycles; every walk here uses a visited set so it terminates
on any edge list. Handles are ignored: a node depends on every node with a
path into it, whichever port the path leaves from.
"""

from __future__ import annotations

from collections import deque
from collections.abc import Iterable

from guildflow.contracts.graph import FlowEdge


def build_incoming_edges_map(edges: Iterable[FlowEdge]) -> dict[str, list[str]]:
    """Map each target node id to the source ids of its incoming edges, in edge order."""
    incoming: dict[str, list[str]] = {}
    for edge in edges:
        incoming.setdefault(edge.target, []).append(edge.source)
    return incoming


def find_predecessors(target_id: str, edges: Iterable[FlowEdge]) -> set[str]:
    """All node ids from which target_id is reachable along forward edges.

    Breadth-first walk backward from target_id. The target is marked visited
    up front, so it only appears in the result when some edge actually leads
    back into it (a real cycle, including a self-loop).

    Args:
        target_id: Node whose predecessors are wanted
        edges: Edge list of the graph

    Returns:
        Set of predecessor node ids; empty when target_id has no incoming edges
    """
    incoming = build_incoming_edges_map(edges)
    predecessors: set[str] = set()
    visited: set[str] = {target_id}
    queue: deque[str] = deque([target_id])

    while queue:
        current = queue.popleft()
        for source in incoming.get(current, ()):
            predecessors.add(source)
            if source not in visited:
                visited.add(source)
                queue.append(source)

    return predecessors

