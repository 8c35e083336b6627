"""All kinds, operators, and modes used across subsystem boundaries.

Values are the exact strings used in the persisted workflow document,
so renaming a member is a breaking change for stored templates.
"""

from enum import StrEnum


class NodeKind(StrEnum):
    """Closed set of workflow node kinds.

    Stored in the workflow document (nodes[].type).
    """

    CREATE_ROLE = "CreateRole"
    DELETE_ROLE = "DeleteRole"
    CREATE_CATEGORY = "CreateCategory"
    DELETE_CATEGORY = "DeleteCategory"
    CREATE_CHANNEL = "CreateChannel"
    DELETE_CHANNEL = "DeleteChannel"
    CHANGE_CHANNEL_PERMISSION = "ChangeChannelPermission"
    ADD_ROLE_TO_ROLE_MEMBERS = "AddRoleToRoleMembers"
    SEND_MESSAGE = "SendMessage"
    SET_GAME_FLAG = "SetGameFlag"
    CONDITIONAL_BRANCH = "ConditionalBranch"
    SELECT_BRANCH = "SelectBranch"
    SHUFFLE_ASSIGN = "ShuffleAssign"
    RECORD_COMBINATION = "RecordCombination"
    KANBAN = "Kanban"
    BLUEPRINT = "Blueprint"
    COMMENT = "Comment"
    LABELED_GROUP = "LabeledGroup"


class ConditionOperator(StrEnum):
    """Predicate operator for a branch condition."""

    EQUALS = "equals"
    NOT_EQUALS = "notEquals"
    CONTAINS = "contains"
    EXISTS = "exists"
    NOT_EXISTS = "notExists"


class ChannelType(StrEnum):
    """Kind of guild channel a node creates."""

    TEXT = "text"
    VOICE = "voice"


class CombinationMode(StrEnum):
    """Whether pair sources and targets come from one option list or two."""

    SAME_SET = "same-set"
    DIFFERENT_SET = "different-set"


class DynamicValueType(StrEnum):
    """Discriminator of the dynamic value tagged union."""

    LITERAL = "literal"
    SESSION_NAME = "session.name"
    ROLE_REF = "roleRef"
    CHANNEL_REF = "channelRef"
    GAME_FLAG = "gameFlag"


class ResourceKind(StrEnum):
    """Kind of named session resource.

    Used in fail-fast resolution errors to say what could not be found.
    """

    ROLE = "role"
    CATEGORY = "category"
    CHANNEL = "channel"
    FLAG = "flag"


class NodeChangeType(StrEnum):
    """Incremental node change operations accepted by the graph store."""

    ADD = "add"
    REMOVE = "remove"
    REPLACE = "replace"
    POSITION = "position"
    SELECT = "select"
    DIMENSIONS = "dimensions"


class EdgeChangeType(StrEnum):
    """Incremental edge change operations accepted by the graph store."""

    ADD = "add"
    REMOVE = "remove"
    REPLACE = "replace"
    SELECT = "select"
