"""Workflow graph contracts: nodes, edges, viewport, and change operations.

FlowNode is a closed sum over NodeKind: the ``type`` tag selects exactly one
payload model from PAYLOAD_TYPES, and a node whose payload does not match its
tag cannot be constructed. Unknown keys on nodes and edges (editor styling,
measured sizes) are preserved so documents round-trip losslessly.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, ClassVar, Self

from pydantic import ConfigDict, Field, model_validator

from guildflow.contracts.enums import EdgeChangeType, NodeChangeType, NodeKind
from guildflow.contracts.node_data import PAYLOAD_TYPES, NodeData, WireModel

__all__ = [
    "Connection",
    "EdgeAddChange",
    "EdgeChange",
    "EdgeRemoveChange",
    "EdgeReplaceChange",
    "EdgeSelectChange",
    "FlowEdge",
    "FlowNode",
    "NodeAddChange",
    "NodeChange",
    "NodeDimensionsChange",
    "NodePositionChange",
    "NodeRemoveChange",
    "NodeReplaceChange",
    "NodeSelectChange",
    "Position",
    "Viewport",
    "WorkflowDocument",
]


class Position(WireModel):
    x: float = 0.0
    y: float = 0.0

    def offset(self, dx: float, dy: float) -> Position:
        return Position(x=self.x + dx, y=self.y + dy)


class Viewport(WireModel):
    x: float = 0.0
    y: float = 0.0
    zoom: float = Field(default=1.0, gt=0)


class FlowNode(WireModel):
    """One action or decision unit in the workflow graph."""

    model_config = ConfigDict(extra="allow")

    id: str = Field(min_length=1)
    type: NodeKind
    position: Position = Field(default_factory=Position)
    data: NodeData
    selected: bool = False
    dragging: bool = False
    width: float | None = None
    height: float | None = None

    @model_validator(mode="before")
    @classmethod
    def _parse_payload_for_kind(cls, raw: Any) -> Any:
        if not isinstance(raw, dict) or "type" not in raw:
            return raw
        kind = NodeKind(raw["type"])
        payload_type = PAYLOAD_TYPES[kind]
        data = raw.get("data", {})
        if not isinstance(data, payload_type):
            data = payload_type.model_validate(data if data is not None else {})
        return {**raw, "type": kind, "data": data}

    @model_validator(mode="after")
    def _payload_matches_kind(self) -> Self:
        expected = PAYLOAD_TYPES[self.type]
        if type(self.data) is not expected:
            raise ValueError(f"Node {self.id!r} of type {self.type} carries {type(self.data).__name__}, expected {expected.__name__}")
        return self

    @property
    def is_executed(self) -> bool:
        return self.data.executed_at is not None


class FlowEdge(WireModel):
    """Directed link between two nodes, optionally tagged with port handles."""

    model_config = ConfigDict(extra="allow")

    id: str = Field(min_length=1)
    source: str
    target: str
    source_handle: str | None = None
    target_handle: str | None = None
    selected: bool = False

    def same_route(self, other: FlowEdge | Connection) -> bool:
        return (
            self.source == other.source
            and self.target == other.target
            and self.source_handle == other.source_handle
            and self.target_handle == other.target_handle
        )


class WorkflowDocument(WireModel):
    """Persisted form of a workflow: nodes, edges, and the editor viewport."""

    nodes: list[FlowNode] = Field(default_factory=list)
    edges: list[FlowEdge] = Field(default_factory=list)
    viewport: Viewport = Field(default_factory=Viewport)


@dataclass(frozen=True, slots=True)
class Connection:
    """A request to connect two node ports, as produced by the editor."""

    source: str
    target: str
    source_handle: str | None = None
    target_handle: str | None = None

    def edge_id(self) -> str:
        return f"xy-edge__{self.source}{self.source_handle or ''}-{self.target}{self.target_handle or ''}"


# === Incremental change operations ===


@dataclass(frozen=True, slots=True)
class NodeAddChange:
    kind: ClassVar[NodeChangeType] = NodeChangeType.ADD
    item: FlowNode
    index: int | None = None


@dataclass(frozen=True, slots=True)
class NodeRemoveChange:
    kind: ClassVar[NodeChangeType] = NodeChangeType.REMOVE
    id: str


@dataclass(frozen=True, slots=True)
class NodeReplaceChange:
    kind: ClassVar[NodeChangeType] = NodeChangeType.REPLACE
    id: str
    item: FlowNode


@dataclass(frozen=True, slots=True)
class NodePositionChange:
    kind: ClassVar[NodeChangeType] = NodeChangeType.POSITION
    id: str
    position: Position | None = None
    dragging: bool | None = None


@dataclass(frozen=True, slots=True)
class NodeSelectChange:
    kind: ClassVar[NodeChangeType] = NodeChangeType.SELECT
    id: str
    selected: bool


@dataclass(frozen=True, slots=True)
class NodeDimensionsChange:
    kind: ClassVar[NodeChangeType] = NodeChangeType.DIMENSIONS
    id: str
    width: float
    height: float


@dataclass(frozen=True, slots=True)
class EdgeAddChange:
    kind: ClassVar[EdgeChangeType] = EdgeChangeType.ADD
    item: FlowEdge
    index: int | None = None


@dataclass(frozen=True, slots=True)
class EdgeRemoveChange:
    kind: ClassVar[EdgeChangeType] = EdgeChangeType.REMOVE
    id: str


@dataclass(frozen=True, slots=True)
class EdgeReplaceChange:
    kind: ClassVar[EdgeChangeType] = EdgeChangeType.REPLACE
    id: str
    item: FlowEdge


@dataclass(frozen=True, slots=True)
class EdgeSelectChange:
    kind: ClassVar[EdgeChangeType] = EdgeChangeType.SELECT
    id: str
    selected: bool


type NodeChange = (
    NodeAddChange | NodeRemoveChange | NodeReplaceChange | NodePositionChange | NodeSelectChange | NodeDimensionsChange
)
type EdgeChange = EdgeAddChange | EdgeRemoveChange | EdgeReplaceChange | EdgeSelectChange
