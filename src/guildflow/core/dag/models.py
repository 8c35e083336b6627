# src/guildflow/core/dag/models.py
"""Types, constants, and exceptions for workflow graph operations.

Leaf module - only contracts imports (prevents import cycles).
"""

from __future__ import annotations

from dataclasses import dataclass

from guildflow.contracts.graph import FlowEdge, FlowNode, Viewport

SOURCE_HANDLE = "source-1"
"""Single output handle of a linear node"""

TARGET_HANDLE = "target-1"
"""Single input handle of every node"""

DUPLICATE_OFFSET = 50.0
"""Distance (both axes) between a node and its duplicate"""

BLUEPRINT_VERTICAL_SPACING = 200.0
"""Vertical distance between consecutive nodes generated from a blueprint"""


class GraphValidationError(ValueError):
    """Raised when a graph operation would break structural invariants."""

    pass


@dataclass(frozen=True, slots=True)
class GraphValidationWarning:
    """Non-fatal finding about a workflow graph.

    Warnings never block execution. They point the operator at structure
    that is valid but probably unintended (cycles, edges on removed ports).
    """

    code: str
    message: str
    node_ids: tuple[str, ...]


@dataclass(frozen=True, slots=True)
class GraphState:
    """Immutable snapshot of the graph store.

    Every mutation of the store replaces the whole snapshot; observers
    never see a partially applied change.
    """

    nodes: tuple[FlowNode, ...] = ()
    edges: tuple[FlowEdge, ...] = ()
    viewport: Viewport = Viewport()
    initialized: bool = False

    def node_ids(self) -> frozenset[str]:
        return frozenset(node.id for node in self.nodes)

    def find_node(self, node_id: str) -> FlowNode | None:
        for node in self.nodes:
            if node.id == node_id:
                return node
        return None
