# src/guildflow/core/dag/graph.py
"""WorkflowGraph - structural view of a workflow for validation and inspection.

Edges of a workflow are a data-dependency structure, not an execution
schedule, and cycles are legal. Validation therefore only rejects what
breaks referential integrity (dangling edges, duplicate ids); cycles and
edges leaving ports that no longer exist are reported as warnings.
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable

import networkx as nx
from networkx import MultiDiGraph

from guildflow.contracts.enums import NodeKind
from guildflow.contracts.graph import FlowEdge, FlowNode
from guildflow.contracts.node_data import DEFAULT_HANDLE_ID, ConditionalBranchData, condition_handle_id
from guildflow.core.dag.models import GraphValidationError, GraphValidationWarning

_ANNOTATION_KINDS = frozenset({NodeKind.COMMENT, NodeKind.LABELED_GROUP})


class WorkflowGraph:
    """Workflow graph backed by a NetworkX MultiDiGraph.

    MultiDiGraph because two nodes may be linked more than once through
    different ports (e.g. two conditions of one branch leading to the same node).
    Edge keys are the edge ids.
    """

    def __init__(self) -> None:
        self._graph: MultiDiGraph[str] = nx.MultiDiGraph()
        self._nodes: dict[str, FlowNode] = {}
        self._edges: list[FlowEdge] = []

    @classmethod
    def from_elements(cls, nodes: Iterable[FlowNode], edges: Iterable[FlowEdge]) -> WorkflowGraph:
        """Build a graph from nodes and edges.

        Edges are added even if their endpoints are missing, so validate()
        can report them.
        """
        graph = cls()
        for node in nodes:
            graph.add_node(node)
        for edge in edges:
            graph.add_edge(edge)
        return graph

    @property
    def node_count(self) -> int:
        return len(self._nodes)

    @property
    def edge_count(self) -> int:
        return len(self._edges)

    def has_node(self, node_id: str) -> bool:
        return node_id in self._nodes

    def get_nx_graph(self) -> MultiDiGraph[str]:
        """Return a frozen copy of the underlying NetworkX graph."""
        return nx.freeze(self._graph.copy())  # type: ignore[no-any-return]

    def add_node(self, node: FlowNode) -> None:
        if node.id in self._nodes:
            raise GraphValidationError(f"Duplicate node id: {node.id!r}")
        self._nodes[node.id] = node
        self._graph.add_node(node.id, kind=node.type)

    def add_edge(self, edge: FlowEdge) -> None:
        self._edges.append(edge)
        self._graph.add_edge(
            edge.source,
            edge.target,
            key=edge.id,
            source_handle=edge.source_handle,
            target_handle=edge.target_handle,
        )

    def is_acyclic(self) -> bool:
        return nx.is_directed_acyclic_graph(self._graph)

    def find_cycles(self) -> list[tuple[str, ...]]:
        """Node groups that lie on a cycle, one group per strongly connected component.

        Self-loops count as a cycle of one node.
        """
        cycles: list[tuple[str, ...]] = []
        for component in nx.strongly_connected_components(self._graph):
            if len(component) > 1:
                cycles.append(tuple(sorted(component)))
            else:
                (only,) = component
                if self._graph.has_edge(only, only):
                    cycles.append((only,))
        return sorted(cycles)

    def validate(self) -> list[GraphValidationWarning]:
        """Validate workflow structure.

        Errors (raised):
        1. Edge ids are unique
        2. Every edge endpoint references an existing node

        Warnings (returned):
        - CYCLE: nodes on a cycle (legal, but each node sees the others as predecessors)
        - STALE_HANDLE: edge leaves a ConditionalBranch port that no longer exists
        - ANNOTATION_EDGE: edge touches a Comment or LabeledGroup node

        Raises:
            GraphValidationError: If referential integrity is broken
        """
        duplicate_edges = sorted(edge_id for edge_id, count in Counter(e.id for e in self._edges).items() if count > 1)
        if duplicate_edges:
            raise GraphValidationError(f"Duplicate edge ids: {', '.join(duplicate_edges)}")

        dangling = [edge for edge in self._edges if edge.source not in self._nodes or edge.target not in self._nodes]
        if dangling:
            described = ", ".join(f"{edge.id} ({edge.source} -> {edge.target})" for edge in dangling)
            raise GraphValidationError(f"Edges reference missing nodes: {described}")

        warnings: list[GraphValidationWarning] = []

        for cycle in self.find_cycles():
            warnings.append(
                GraphValidationWarning(
                    code="CYCLE",
                    message=f"Nodes form a cycle: {' <-> '.join(cycle)}",
                    node_ids=cycle,
                )
            )

        for edge in self._edges:
            source = self._nodes[edge.source]
            if isinstance(source.data, ConditionalBranchData) and edge.source_handle is not None:
                if edge.source_handle not in valid_branch_handles(source.data):
                    warnings.append(
                        GraphValidationWarning(
                            code="STALE_HANDLE",
                            message=f"Edge {edge.id} leaves missing port {edge.source_handle!r} of {source.id}",
                            node_ids=(source.id, edge.target),
                        )
                    )
            if source.type in _ANNOTATION_KINDS or self._nodes[edge.target].type in _ANNOTATION_KINDS:
                warnings.append(
                    GraphValidationWarning(
                        code="ANNOTATION_EDGE",
                        message=f"Edge {edge.id} connects an annotation node",
                        node_ids=(edge.source, edge.target),
                    )
                )

        return warnings


def valid_branch_handles(data: ConditionalBranchData) -> frozenset[str]:
    """Output handles a ConditionalBranch currently exposes."""
    handles = {condition_handle_id(condition.id) for condition in data.conditions}
    if data.has_default_branch:
        handles.add(DEFAULT_HANDLE_ID)
    return frozenset(handles)
