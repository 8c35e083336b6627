"""Shared contracts for cross-boundary data types.

Node payloads, graph documents, resource entries, records, results, errors,
and collaborator protocols are all defined here.

This package is a LEAF MODULE with no outbound dependencies to core/engine.
Settings classes are NOT re-exported here - import them from
guildflow.core.config.

Import patterns:
    from guildflow.contracts import NodeKind, FlowNode, NodeExecutionResult
    from guildflow.core.config import GuildflowSettings
"""

from guildflow.contracts.dynamic_value import (
    ChannelRefValue,
    DynamicValue,
    DynamicValueContext,
    GameFlagValue,
    LiteralValue,
    RoleRefValue,
    SessionNameValue,
)
from guildflow.contracts.enums import (
    ChannelType,
    CombinationMode,
    ConditionOperator,
    DynamicValueType,
    EdgeChangeType,
    NodeChangeType,
    NodeKind,
    ResourceKind,
)
from guildflow.contracts.errors import (
    ActionClientError,
    AttachmentReadError,
    GuildflowError,
    ItemFailure,
    NodeAlreadyExecutedError,
    NodeNotExecutableError,
    NodeValidationError,
    SessionNotFoundError,
    UnresolvedResourceError,
)
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
from guildflow.contracts.node_data import (
    DEFAULT_BRANCH_MARKER,
    DEFAULT_HANDLE_ID,
    PAYLOAD_TYPES,
    AddRoleToRoleMembersData,
    Attachment,
    BlueprintData,
    BlueprintParameters,
    BranchOption,
    CardPlacement,
    ChangeChannelPermissionData,
    ChannelSpec,
    CombinationConfig,
    CommentData,
    Condition,
    ConditionalBranchData,
    CreateCategoryData,
    CreateChannelData,
    CreateRoleData,
    DeleteCategoryData,
    DeleteChannelData,
    DeleteRoleData,
    InitialPlacement,
    KanbanCard,
    KanbanColumn,
    KanbanData,
    LabeledGroupData,
    MessageBlock,
    NodeData,
    NodePayload,
    OptionItem,
    OptionSet,
    RecordCombinationData,
    RecordedPair,
    RolePermission,
    SelectBranchData,
    SendMessageData,
    SetGameFlagData,
    ShuffleAssignData,
    condition_handle_id,
)
from guildflow.contracts.protocols import ActionClient, AttachmentStore, ResourceStore, SessionStore
from guildflow.contracts.records import (
    CategoryRecord,
    ChannelRecord,
    CreatedChannel,
    CreatedRole,
    GuildMember,
    OutgoingFile,
    RoleRecord,
    SessionRecord,
)
from guildflow.contracts.resources import (
    EMPTY_RESOURCES,
    ChannelResource,
    FlagResource,
    ProgressUpdate,
    RoleResource,
    SelectOption,
    TemplateResources,
)
from guildflow.contracts.results import NodeExecutionResult
from guildflow.contracts.types import (
    CategoryID,
    ChannelID,
    EdgeID,
    GameFlags,
    GuildID,
    HandleID,
    MemberID,
    NodeID,
    RoleID,
    SessionID,
)

__all__ = [
    "DEFAULT_BRANCH_MARKER",
    "DEFAULT_HANDLE_ID",
    "EMPTY_RESOURCES",
    "PAYLOAD_TYPES",
    "ActionClient",
    "ActionClientError",
    "AddRoleToRoleMembersData",
    "Attachment",
    "AttachmentReadError",
    "AttachmentStore",
    "BlueprintData",
    "BlueprintParameters",
    "BranchOption",
    "CardPlacement",
    "CategoryID",
    "CategoryRecord",
    "ChangeChannelPermissionData",
    "ChannelID",
    "ChannelRecord",
    "ChannelRefValue",
    "ChannelResource",
    "ChannelSpec",
    "ChannelType",
    "CombinationConfig",
    "CombinationMode",
    "CommentData",
    "Condition",
    "ConditionOperator",
    "ConditionalBranchData",
    "Connection",
    "CreateCategoryData",
    "CreateChannelData",
    "CreateRoleData",
    "CreatedChannel",
    "CreatedRole",
    "DeleteCategoryData",
    "DeleteChannelData",
    "DeleteRoleData",
    "DynamicValue",
    "DynamicValueContext",
    "DynamicValueType",
    "EdgeAddChange",
    "EdgeChange",
    "EdgeChangeType",
    "EdgeID",
    "EdgeRemoveChange",
    "EdgeReplaceChange",
    "EdgeSelectChange",
    "FlagResource",
    "FlowEdge",
    "FlowNode",
    "GameFlagValue",
    "GameFlags",
    "GuildID",
    "GuildMember",
    "GuildflowError",
    "HandleID",
    "InitialPlacement",
    "ItemFailure",
    "KanbanCard",
    "KanbanColumn",
    "KanbanData",
    "LabeledGroupData",
    "LiteralValue",
    "MemberID",
    "MessageBlock",
    "NodeAddChange",
    "NodeAlreadyExecutedError",
    "NodeChange",
    "NodeChangeType",
    "NodeData",
    "NodeDimensionsChange",
    "NodeExecutionResult",
    "NodeID",
    "NodeKind",
    "NodeNotExecutableError",
    "NodePayload",
    "NodePositionChange",
    "NodeRemoveChange",
    "NodeReplaceChange",
    "NodeSelectChange",
    "NodeValidationError",
    "OptionItem",
    "OptionSet",
    "OutgoingFile",
    "Position",
    "ProgressUpdate",
    "RecordCombinationData",
    "RecordedPair",
    "ResourceKind",
    "ResourceStore",
    "RoleID",
    "RolePermission",
    "RoleRecord",
    "RoleRefValue",
    "RoleResource",
    "SelectBranchData",
    "SelectOption",
    "SendMessageData",
    "SessionID",
    "SessionNameValue",
    "SessionNotFoundError",
    "SessionRecord",
    "SessionStore",
    "SetGameFlagData",
    "ShuffleAssignData",
    "TemplateResources",
    "UnresolvedResourceError",
    "Viewport",
    "WorkflowDocument",
    "condition_handle_id",
]
