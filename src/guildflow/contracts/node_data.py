"""Per-kind node payload contracts.

Each node kind carries exactly one payload shape. Payloads are frozen
pydantic models serialized with camelCase aliases, matching the stored
workflow document. Minimum list lengths (at least one condition, at least
two branch options) are enforced at construction, so an empty list is
never a representable state.

Every payload carries ``executed_at``; once set the node is terminal.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from guildflow.contracts.dynamic_value import DynamicValue, LiteralValue
from guildflow.contracts.enums import ChannelType, CombinationMode, ConditionOperator, NodeKind

MAX_MESSAGE_LENGTH = 2000
MAX_ATTACHMENTS_PER_MESSAGE = 4
MAX_BLUEPRINT_VOICE_CHANNELS = 10


class WireModel(BaseModel):
    """Base for everything stored inside the workflow document."""

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        alias_generator=to_camel,
        populate_by_name=True,
    )


class NodePayload(WireModel):
    """Fields shared by every node payload."""

    executed_at: datetime | None = None

    @property
    def is_executed(self) -> bool:
        return self.executed_at is not None


# === Guild resource payloads ===


class CreateRoleData(NodePayload):
    roles: list[str] = Field(default_factory=lambda: [""])


class DeleteRoleData(NodePayload):
    """Delete every role recorded for the session, or the named ones."""

    delete_all: bool = False
    role_names: list[str] = Field(default_factory=lambda: [""])


class CreateCategoryData(NodePayload):
    category_name: DynamicValue = Field(default_factory=LiteralValue)

    @field_validator("category_name", mode="before")
    @classmethod
    def _coerce_plain_name(cls, value: Any) -> Any:
        # Generated templates store a bare string; treat it as a literal.
        if isinstance(value, str):
            return {"type": "literal", "value": value}
        return value


class DeleteCategoryData(NodePayload):
    pass


class RolePermission(WireModel):
    role_name: str
    can_write: bool = False


class ChannelSpec(WireModel):
    name: str = ""
    type: ChannelType = ChannelType.TEXT
    role_permissions: list[RolePermission] = Field(default_factory=list)


class CreateChannelData(NodePayload):
    channels: list[ChannelSpec] = Field(default_factory=list)


class DeleteChannelData(NodePayload):
    channel_names: list[str] = Field(default_factory=lambda: [""])


class ChangeChannelPermissionData(NodePayload):
    """Absolute permission overwrite for one channel.

    Roles absent from role_permissions lose their explicit overwrite.
    """

    channel_name: str = ""
    role_permissions: list[RolePermission] = Field(default_factory=list)


class AddRoleToRoleMembersData(NodePayload):
    """Give add_role_name to every member currently holding member_role_name."""

    member_role_name: str = ""
    add_role_name: str = ""


class Attachment(WireModel):
    file_name: str
    file_path: str
    file_size: int = Field(ge=0)


class MessageBlock(WireModel):
    content: str = Field(default="", max_length=MAX_MESSAGE_LENGTH)
    attachments: list[Attachment] = Field(default_factory=list, max_length=MAX_ATTACHMENTS_PER_MESSAGE)

    @property
    def is_empty(self) -> bool:
        return not self.content.strip() and not self.attachments


class SendMessageData(NodePayload):
    channel_names: list[str] = Field(default_factory=lambda: [""], min_length=1)
    messages: list[MessageBlock] = Field(default_factory=lambda: [MessageBlock()], min_length=1)


# === Session state payloads ===


class SetGameFlagData(NodePayload):
    flag_key: str = ""
    flag_value: str = ""

    @field_validator("flag_key", "flag_value")
    @classmethod
    def _strip(cls, value: str) -> str:
        return value.strip()


class Condition(WireModel):
    id: str
    flag_key: str = ""
    operator: ConditionOperator = ConditionOperator.EQUALS
    value: str = ""


class ConditionalBranchData(NodePayload):
    """First-match branch over the session flags.

    evaluated_condition_id holds the matched condition id, or "default"
    when nothing matched. It is set together with executed_at.
    """

    title: str = Field(default="条件分岐", min_length=1)
    conditions: list[Condition] = Field(min_length=1)
    has_default_branch: bool = True
    evaluated_condition_id: str | None = None


class BranchOption(WireModel):
    id: str
    label: str = ""


class SelectBranchData(NodePayload):
    """Operator-chosen branch. selected_value pins the chosen option label."""

    title: str = Field(default="選択肢を選ぶ", min_length=1)
    options: list[BranchOption] = Field(min_length=2)
    flag_name: str = ""
    selected_value: str | None = None


class ShuffleAssignData(NodePayload):
    """Round-robin assignment of shuffled items onto shuffled targets."""

    title: str = "シャッフル割り当て"
    items: list[str] = Field(default_factory=lambda: [""], min_length=1)
    targets: list[str] = Field(default_factory=lambda: [""], min_length=1)
    result_flag_prefix: str = ""
    assigned_results: dict[str, list[str]] | None = None


class CombinationConfig(WireModel):
    """Pairing policy of a RecordCombination node. Fixed per node instance."""

    mode: CombinationMode = CombinationMode.SAME_SET
    allow_self_pairing: bool = False
    allow_duplicates: bool = False
    distinguish_order: bool = True
    allow_multiple_assignments: bool = False


class OptionItem(WireModel):
    id: str
    label: str = ""


class OptionSet(WireModel):
    label: str = ""
    items: list[OptionItem] = Field(default_factory=list)


class RecordedPair(WireModel):
    id: str
    source_id: str
    target_id: str
    recorded_at: datetime
    memo: str | None = None


class RecordCombinationData(NodePayload):
    title: str = "組み合わせを記録"
    config: CombinationConfig = Field(default_factory=CombinationConfig)
    source_options: OptionSet = Field(default_factory=lambda: OptionSet(label="選択肢A"))
    target_options: OptionSet | None = None
    recorded_pairs: list[RecordedPair] = Field(default_factory=list)


class KanbanColumn(WireModel):
    id: str
    label: str = ""


class KanbanCard(WireModel):
    id: str
    label: str = ""


class InitialPlacement(WireModel):
    card_id: str
    column_id: str


class CardPlacement(WireModel):
    card_id: str
    column_id: str
    moved_at: datetime


class KanbanData(NodePayload):
    title: str = "カンバン"
    columns: list[KanbanColumn] = Field(default_factory=list)
    cards: list[KanbanCard] = Field(default_factory=list)
    initial_placements: list[InitialPlacement] = Field(default_factory=list)
    card_placements: list[CardPlacement] = Field(default_factory=list)


# === Editor-only payloads ===


class BlueprintParameters(WireModel):
    character_names: list[str] = Field(default_factory=lambda: [""])
    voice_channel_count: int = Field(default=0, ge=0, le=MAX_BLUEPRINT_VOICE_CHANNELS)
    category_name: str = ""
    shared_text_channels: list[str] = Field(default_factory=list)


class BlueprintData(NodePayload):
    parameters: BlueprintParameters = Field(default_factory=BlueprintParameters)


class CommentData(NodePayload):
    comment: str = ""


class LabeledGroupData(NodePayload):
    label: str = ""


type NodeData = (
    CreateRoleData
    | DeleteRoleData
    | CreateCategoryData
    | DeleteCategoryData
    | CreateChannelData
    | DeleteChannelData
    | ChangeChannelPermissionData
    | AddRoleToRoleMembersData
    | SendMessageData
    | SetGameFlagData
    | ConditionalBranchData
    | SelectBranchData
    | ShuffleAssignData
    | RecordCombinationData
    | KanbanData
    | BlueprintData
    | CommentData
    | LabeledGroupData
)

DEFAULT_HANDLE_ID = "source-default"
"""Output handle taken by a ConditionalBranch when no condition matched"""

DEFAULT_BRANCH_MARKER: Literal["default"] = "default"
"""evaluated_condition_id recorded when no condition matched"""


def condition_handle_id(condition_id: str) -> str:
    """Output handle id of one ConditionalBranch condition."""
    return f"source-cond-{condition_id}"


PAYLOAD_TYPES: dict[NodeKind, type[NodePayload]] = {
    NodeKind.CREATE_ROLE: CreateRoleData,
    NodeKind.DELETE_ROLE: DeleteRoleData,
    NodeKind.CREATE_CATEGORY: CreateCategoryData,
    NodeKind.DELETE_CATEGORY: DeleteCategoryData,
    NodeKind.CREATE_CHANNEL: CreateChannelData,
    NodeKind.DELETE_CHANNEL: DeleteChannelData,
    NodeKind.CHANGE_CHANNEL_PERMISSION: ChangeChannelPermissionData,
    NodeKind.ADD_ROLE_TO_ROLE_MEMBERS: AddRoleToRoleMembersData,
    NodeKind.SEND_MESSAGE: SendMessageData,
    NodeKind.SET_GAME_FLAG: SetGameFlagData,
    NodeKind.CONDITIONAL_BRANCH: ConditionalBranchData,
    NodeKind.SELECT_BRANCH: SelectBranchData,
    NodeKind.SHUFFLE_ASSIGN: ShuffleAssignData,
    NodeKind.RECORD_COMBINATION: RecordCombinationData,
    NodeKind.KANBAN: KanbanData,
    NodeKind.BLUEPRINT: BlueprintData,
    NodeKind.COMMENT: CommentData,
    NodeKind.LABELED_GROUP: LabeledGroupData,
}
"""Payload model of each node kind. Exhaustive over NodeKind."""
