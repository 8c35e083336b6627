# src/guildflow/core/dag/store.py
"""GraphStore - the single mutable container for a workflow graph.

All state lives in one immutable GraphState snapshot. Every mutation builds
a new snapshot, swaps it in, and then notifies subscribers, so observers
only ever see whole states. There is no other mutable graph state.

Structural invariants enforced on every commit:
- edges only reference existing nodes (deleting a node deletes its edges)
- node and edge ids are unique
- executedAt, once set on a node, never changes until reset()
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping, Sequence
from typing import Any

import structlog

from guildflow.contracts.enums import NodeKind
from guildflow.contracts.graph import (
    Connection,
    EdgeAddChange,
    EdgeChange,
    EdgeRemoveChange,
    EdgeReplaceChange,
    EdgeSelectChange,
    FlowEdge,
    FlowNode,
    NodeAddChange,
    NodeChange,
    NodeDimensionsChange,
    NodePositionChange,
    NodeRemoveChange,
    NodeReplaceChange,
    NodeSelectChange,
    Position,
    Viewport,
    WorkflowDocument,
)
from guildflow.contracts.node_data import ConditionalBranchData, NodePayload
from guildflow.core.dag.blueprint import expand_blueprint
from guildflow.core.dag.defaults import default_payload
from guildflow.core.dag.graph import valid_branch_handles
from guildflow.core.dag.models import DUPLICATE_OFFSET, GraphState, GraphValidationError
from guildflow.core.identifiers import generate_next_id

logger = structlog.get_logger(__name__)

type Listener = Callable[[GraphState], None]


class GraphStore:
    """Reactive, single-writer container for nodes, edges, and the viewport.

    Example:
        store = GraphStore()
        unsubscribe = store.subscribe(lambda state: render(state))
        role = store.add_node(NodeKind.CREATE_ROLE, Position(x=0, y=0))
        store.update_node_data(role.id, {"roles": ["GM", "Player"]})
    """

    def __init__(self, state: GraphState | None = None) -> None:
        self._state = state if state is not None else GraphState()
        self._listeners: list[Listener] = []
        if state is not None:
            _check_integrity(state.nodes, state.edges)

    @classmethod
    def from_document(cls, document: WorkflowDocument) -> GraphStore:
        store = cls()
        store.initialize(document.nodes, document.edges, document.viewport)
        return store

    def to_document(self) -> WorkflowDocument:
        return WorkflowDocument(
            nodes=list(self._state.nodes),
            edges=list(self._state.edges),
            viewport=self._state.viewport,
        )

    # === Reading ===

    @property
    def state(self) -> GraphState:
        return self._state

    @property
    def nodes(self) -> tuple[FlowNode, ...]:
        return self._state.nodes

    @property
    def edges(self) -> tuple[FlowEdge, ...]:
        return self._state.edges

    @property
    def viewport(self) -> Viewport:
        return self._state.viewport

    def get_node(self, node_id: str) -> FlowNode:
        """Return the node with the given id.

        Raises:
            GraphValidationError: If no such node exists
        """
        node = self._state.find_node(node_id)
        if node is None:
            raise GraphValidationError(f"Unknown node: {node_id!r}")
        return node

    # === Subscription ===

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a listener called with every new state. Returns an unsubscribe callable."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _commit(self, state: GraphState) -> None:
        _check_integrity(state.nodes, state.edges)
        _check_executed_at_monotonic(self._state.nodes, state.nodes)
        self._state = state
        for listener in list(self._listeners):
            listener(state)

    def _replace(
        self,
        *,
        nodes: Iterable[FlowNode] | None = None,
        edges: Iterable[FlowEdge] | None = None,
        viewport: Viewport | None = None,
    ) -> None:
        current = self._state
        self._commit(
            GraphState(
                nodes=tuple(nodes) if nodes is not None else current.nodes,
                edges=tuple(edges) if edges is not None else current.edges,
                viewport=viewport if viewport is not None else current.viewport,
                initialized=current.initialized,
            )
        )

    # === Incremental changes ===

    def apply_node_changes(self, changes: Sequence[NodeChange]) -> None:
        """Apply editor node changes as one state replacement.

        Changes naming an unknown node id are skipped. Removing a node also
        removes every edge touching it.
        """
        nodes = list(self._state.nodes)
        removed: set[str] = set()

        for change in changes:
            match change:
                case NodeAddChange(item=item, index=index):
                    if index is None:
                        nodes.append(item)
                    else:
                        nodes.insert(index, item)
                case NodeRemoveChange(id=node_id):
                    nodes = [node for node in nodes if node.id != node_id]
                    removed.add(node_id)
                case NodeReplaceChange(id=node_id, item=item):
                    nodes = [item if node.id == node_id else node for node in nodes]
                case NodePositionChange(id=node_id, position=position, dragging=dragging):
                    nodes = [_moved(node, position, dragging) if node.id == node_id else node for node in nodes]
                case NodeSelectChange(id=node_id, selected=selected):
                    nodes = [node.model_copy(update={"selected": selected}) if node.id == node_id else node for node in nodes]
                case NodeDimensionsChange(id=node_id, width=width, height=height):
                    nodes = [
                        node.model_copy(update={"width": width, "height": height}) if node.id == node_id else node
                        for node in nodes
                    ]

        edges = self._state.edges
        if removed:
            edges = tuple(edge for edge in edges if edge.source not in removed and edge.target not in removed)
        self._replace(nodes=nodes, edges=edges)

    def apply_edge_changes(self, changes: Sequence[EdgeChange]) -> None:
        """Apply editor edge changes as one state replacement."""
        edges = list(self._state.edges)

        for change in changes:
            match change:
                case EdgeAddChange(item=item, index=index):
                    if index is None:
                        edges.append(item)
                    else:
                        edges.insert(index, item)
                case EdgeRemoveChange(id=edge_id):
                    edges = [edge for edge in edges if edge.id != edge_id]
                case EdgeReplaceChange(id=edge_id, item=item):
                    edges = [item if edge.id == edge_id else edge for edge in edges]
                case EdgeSelectChange(id=edge_id, selected=selected):
                    edges = [edge.model_copy(update={"selected": selected}) if edge.id == edge_id else edge for edge in edges]

        self._replace(edges=edges)

    def connect(self, connection: Connection) -> FlowEdge | None:
        """Add an edge for a connection.

        Returns:
            The new edge, or None if an edge with the same endpoints and
            handles already exists

        Raises:
            GraphValidationError: If either endpoint does not exist
        """
        for node_id in (connection.source, connection.target):
            self.get_node(node_id)
        if any(edge.same_route(connection) for edge in self._state.edges):
            return None

        edge = FlowEdge(
            id=connection.edge_id(),
            source=connection.source,
            target=connection.target,
            source_handle=connection.source_handle,
            target_handle=connection.target_handle,
        )
        self._replace(edges=(*self._state.edges, edge))
        return edge

    def delete_edges(self, edge_ids: Iterable[str]) -> None:
        doomed = set(edge_ids)
        self._replace(edges=(edge for edge in self._state.edges if edge.id not in doomed))

    # === Node data ===

    def update_node_data(self, node_id: str, changes: Mapping[str, Any]) -> FlowNode:
        """Shallow-merge changes into a node's payload and re-validate it.

        Keys may be given as field names (``role_names``) or as their
        document aliases (``roleNames``).

        Raises:
            GraphValidationError: If the node does not exist or executedAt would change
            pydantic.ValidationError: If the merged payload is invalid
        """
        node = self.get_node(node_id)
        payload_type = type(node.data)
        patch = {_alias_for(payload_type, key): value for key, value in changes.items()}
        merged = payload_type.model_validate({**node.data.model_dump(by_alias=True), **patch})
        return self.replace_node_data(node_id, merged)

    def replace_node_data(self, node_id: str, data: NodePayload) -> FlowNode:
        """Swap a node's payload for a new one of the same kind.

        When a ConditionalBranch loses a condition or its default branch,
        edges leaving the removed ports are deleted with it.
        """
        node = self.get_node(node_id)
        if type(data) is not type(node.data):
            raise GraphValidationError(f"Node {node_id!r} of type {node.type} cannot hold {type(data).__name__}")

        updated = node.model_copy(update={"data": data})
        edges: Iterable[FlowEdge] = self._state.edges
        if isinstance(node.data, ConditionalBranchData) and isinstance(data, ConditionalBranchData):
            dropped_handles = valid_branch_handles(node.data) - valid_branch_handles(data)
            if dropped_handles:
                edges = [edge for edge in edges if not (edge.source == node_id and edge.source_handle in dropped_handles)]
                logger.debug("Removed edges of dropped branch ports", node_id=node_id, handles=sorted(dropped_handles))

        self._replace(nodes=(updated if n.id == node_id else n for n in self._state.nodes), edges=edges)
        return updated

    # === Editor operations ===

    def add_node(self, kind: NodeKind, position: Position) -> FlowNode:
        """Create a node with the kind's default payload and the next sequential id."""
        node = FlowNode(
            id=generate_next_id((n.id for n in self._state.nodes), kind.value),
            type=kind,
            position=position,
            data=default_payload(kind),
        )
        self._replace(nodes=(*self._state.nodes, node))
        return node

    def duplicate_node(self, node_id: str) -> FlowNode | None:
        """Copy a node (payload included) next to the original. Unknown ids are a no-op."""
        node = self._state.find_node(node_id)
        if node is None:
            return None
        copy = node.model_copy(
            update={
                "id": generate_next_id((n.id for n in self._state.nodes), node.type.value),
                "position": node.position.offset(DUPLICATE_OFFSET, DUPLICATE_OFFSET),
                "data": node.data.model_copy(deep=True),
                "selected": False,
                "dragging": False,
            }
        )
        self._replace(nodes=(*self._state.nodes, copy))
        return copy

    def delete_node(self, node_id: str) -> None:
        """Remove a node and every edge touching it."""
        self._replace(
            nodes=(n for n in self._state.nodes if n.id != node_id),
            edges=(e for e in self._state.edges if node_id not in (e.source, e.target)),
        )

    def expand_blueprint(self, node_id: str) -> None:
        self._commit(expand_blueprint(self._state, node_id))

    def set_viewport(self, viewport: Viewport) -> None:
        self._replace(viewport=viewport)

    def initialize(
        self,
        nodes: Iterable[FlowNode],
        edges: Iterable[FlowEdge],
        viewport: Viewport | None = None,
    ) -> None:
        """Load a complete graph, replacing whatever the store held."""
        state = GraphState(
            nodes=tuple(nodes),
            edges=tuple(edges),
            viewport=viewport if viewport is not None else Viewport(),
            initialized=True,
        )
        _check_integrity(state.nodes, state.edges)
        # A freshly loaded graph is not bound by the previous graph's executedAt values.
        self._state = state
        for listener in list(self._listeners):
            listener(state)

    def reset(self) -> None:
        """Drop everything. The only operation that clears executedAt."""
        self._state = GraphState()
        for listener in list(self._listeners):
            listener(self._state)


def _moved(node: FlowNode, position: Position | None, dragging: bool | None) -> FlowNode:
    update: dict[str, Any] = {}
    if position is not None:
        update["position"] = position
    if dragging is not None:
        update["dragging"] = dragging
    return node.model_copy(update=update)


def _alias_for(payload_type: type[NodePayload], key: str) -> str:
    field = payload_type.model_fields.get(key)
    if field is not None and field.alias:
        return field.alias
    return key


def _check_integrity(nodes: Sequence[FlowNode], edges: Sequence[FlowEdge]) -> None:
    node_ids: set[str] = set()
    for node in nodes:
        if node.id in node_ids:
            raise GraphValidationError(f"Duplicate node id: {node.id!r}")
        node_ids.add(node.id)

    edge_ids: set[str] = set()
    for edge in edges:
        if edge.id in edge_ids:
            raise GraphValidationError(f"Duplicate edge id: {edge.id!r}")
        edge_ids.add(edge.id)
        if edge.source not in node_ids or edge.target not in node_ids:
            raise GraphValidationError(f"Edge {edge.id!r} references a missing node ({edge.source} -> {edge.target})")


def _check_executed_at_monotonic(before: Sequence[FlowNode], after: Sequence[FlowNode]) -> None:
    previous = {node.id: node.data.executed_at for node in before if node.data.executed_at is not None}
    for node in after:
        executed_at = previous.get(node.id)
        if executed_at is not None and node.data.executed_at != executed_at:
            raise GraphValidationError(f"executedAt of node {node.id!r} is already set and cannot change")
