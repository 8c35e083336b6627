# src/guildflow/engine/executors/__init__.py
"""Node executors and the execute_node() dispatcher.

Executors by node kind:
- roles: CreateRole, DeleteRole, AddRoleToRoleMembers
- channels: CreateCategory, DeleteCategory, CreateChannel, DeleteChannel, ChangeChannelPermission
- messages: SendMessage
- flags: SetGameFlag, ConditionalBranch, SelectBranch, ShuffleAssign

RecordCombination and Kanban are logs: executing one appends an entry but
never makes the node terminal. Blueprint, Comment, and LabeledGroup have
no execution routine.
"""

from __future__ import annotations

from typing import assert_never

import structlog

from guildflow.contracts.enums import NodeKind
from guildflow.contracts.errors import NodeAlreadyExecutedError, NodeNotExecutableError, NodeValidationError
from guildflow.contracts.node_data import (
    AddRoleToRoleMembersData,
    BlueprintData,
    ChangeChannelPermissionData,
    CommentData,
    ConditionalBranchData,
    CreateCategoryData,
    CreateChannelData,
    CreateRoleData,
    DeleteCategoryData,
    DeleteChannelData,
    DeleteRoleData,
    KanbanData,
    LabeledGroupData,
    RecordCombinationData,
    SelectBranchData,
    SendMessageData,
    SetGameFlagData,
    ShuffleAssignData,
)
from guildflow.contracts.results import NodeExecutionResult
from guildflow.core.dag.store import GraphStore
from guildflow.core.resources import resources_before
from guildflow.engine.combinations import record_pair
from guildflow.engine.executors.channels import (
    change_channel_permissions,
    create_category,
    create_channels,
    delete_categories,
    delete_channels,
)
from guildflow.engine.executors.flags import evaluate_branch, select_branch, set_game_flag, shuffle_assign_flags
from guildflow.engine.executors.messages import send_messages
from guildflow.engine.executors.roles import add_role_to_role_members, create_roles, delete_roles
from guildflow.engine.executors.types import ExecutionContext, OperatorInput, SessionContext
from guildflow.engine.kanban import move_card

logger = structlog.get_logger(__name__)


def _record_combination(
    node_id: str, data: RecordCombinationData, ctx: ExecutionContext, operator_input: OperatorInput
) -> NodeExecutionResult:
    try:
        updated, pair = record_pair(
            data,
            operator_input.source_id or "",
            operator_input.target_id or "",
            memo=operator_input.memo,
            now=ctx.clock,
        )
    except ValueError as exc:
        raise NodeValidationError(node_id, str(exc)) from exc
    return NodeExecutionResult(
        node_id=node_id, kind=NodeKind.RECORD_COMBINATION, data=updated, total=1, success_count=1, records=(pair,)
    )


def _move_kanban_card(
    node_id: str, data: KanbanData, ctx: ExecutionContext, operator_input: OperatorInput
) -> NodeExecutionResult:
    if not operator_input.card_id or not operator_input.column_id:
        raise NodeValidationError(node_id, "Both a card and a column are required")
    try:
        updated = move_card(data, operator_input.card_id, operator_input.column_id, now=ctx.clock())
    except ValueError as exc:
        raise NodeValidationError(node_id, str(exc)) from exc
    return NodeExecutionResult(node_id=node_id, kind=NodeKind.KANBAN, data=updated, total=1, success_count=1)


async def execute_node(
    store: GraphStore,
    node_id: str,
    ctx: ExecutionContext,
    operator_input: OperatorInput | None = None,
) -> NodeExecutionResult:
    """Execute one node against the session and write its new payload back to the store.

    The resource catalog of the node (what its predecessors declare) is
    computed first; resolution errors use it to tell a name that is merely
    not created yet from a name nothing declares.

    Raises:
        GraphValidationError: If node_id is not in the store
        NodeAlreadyExecutedError: If the node already carries executedAt
        NodeNotExecutableError: For Blueprint, Comment, and LabeledGroup nodes
        NodeValidationError: If inputs are invalid or names are unresolved (nothing was sent)
    """
    node = store.get_node(node_id)
    if node.is_executed:
        raise NodeAlreadyExecutedError(node_id)

    inputs = operator_input if operator_input is not None else OperatorInput()
    catalog = resources_before(node_id, store.nodes, store.edges)
    log = logger.bind(node_id=node_id, kind=str(node.type), session_id=ctx.session.session_id)
    log.debug("Executing node", declared_roles=len(catalog.roles), declared_channels=len(catalog.channels))

    data = node.data
    match data:
        case CreateRoleData():
            result = await create_roles(node_id, data, ctx)
        case DeleteRoleData():
            result = await delete_roles(node_id, data, ctx, catalog)
        case AddRoleToRoleMembersData():
            result = await add_role_to_role_members(node_id, data, ctx, catalog)
        case CreateCategoryData():
            result = await create_category(node_id, data, ctx)
        case DeleteCategoryData():
            result = await delete_categories(node_id, data, ctx)
        case CreateChannelData():
            result = await create_channels(node_id, data, ctx, catalog)
        case DeleteChannelData():
            result = await delete_channels(node_id, data, ctx, catalog)
        case ChangeChannelPermissionData():
            result = await change_channel_permissions(node_id, data, ctx, catalog)
        case SendMessageData():
            result = await send_messages(node_id, data, ctx, catalog)
        case SetGameFlagData():
            result = set_game_flag(node_id, data, ctx)
        case ConditionalBranchData():
            result = evaluate_branch(node_id, data, ctx)
        case SelectBranchData():
            result = select_branch(node_id, data, ctx, inputs.selection)
        case ShuffleAssignData():
            result = shuffle_assign_flags(node_id, data, ctx)
        case RecordCombinationData():
            result = _record_combination(node_id, data, ctx, inputs)
        case KanbanData():
            result = _move_kanban_card(node_id, data, ctx, inputs)
        case BlueprintData() | CommentData() | LabeledGroupData():
            raise NodeNotExecutableError(node_id, node.type)
        case _:
            assert_never(data)

    if result.data != node.data:
        store.replace_node_data(node_id, result.data)

    log.info(
        "Node executed" if result.executed else "Node execution incomplete",
        total=result.total,
        succeeded=result.success_count,
        failed=result.failure_count,
    )
    return result


__all__ = [
    "ExecutionContext",
    "OperatorInput",
    "SessionContext",
    "execute_node",
]
