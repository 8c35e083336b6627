# src/guildflow/engine/executors/flags.py
"""Session-state executors: SetGameFlag, ConditionalBranch, SelectBranch, ShuffleAssign.

None of these call the platform. They read and write the session's flag
map through the session store.
"""

from __future__ import annotations

import structlog

from guildflow.contracts.enums import NodeKind
from guildflow.contracts.errors import NodeValidationError
from guildflow.contracts.node_data import (
    DEFAULT_BRANCH_MARKER,
    DEFAULT_HANDLE_ID,
    ConditionalBranchData,
    SelectBranchData,
    SetGameFlagData,
    ShuffleAssignData,
    condition_handle_id,
)
from guildflow.contracts.results import NodeExecutionResult
from guildflow.engine.conditions import evaluate_conditions
from guildflow.engine.executors.base import non_blank, stamp_executed
from guildflow.engine.executors.types import ExecutionContext
from guildflow.engine.shuffle import assignment_flags, shuffle_assign

logger = structlog.get_logger(__name__)


def set_game_flag(node_id: str, data: SetGameFlagData, ctx: ExecutionContext) -> NodeExecutionResult:
    if not data.flag_key:
        raise NodeValidationError(node_id, "Flag key is required")
    written = {data.flag_key: data.flag_value}
    ctx.sessions.update_flags(ctx.session.session_id, written)
    logger.info("Game flag set", node_id=node_id, flag_key=data.flag_key)
    return NodeExecutionResult(
        node_id=node_id,
        kind=NodeKind.SET_GAME_FLAG,
        data=stamp_executed(data, ctx),
        total=1,
        success_count=1,
        flags_written=written,
    )


def evaluate_branch(node_id: str, data: ConditionalBranchData, ctx: ExecutionContext) -> NodeExecutionResult:
    """Take the first matching condition's port, else the default port if configured.

    evaluatedConditionId records "default" whenever nothing matched, even
    without a default port; no port is active then.
    """
    flags = ctx.sessions.get_flags(ctx.session.session_id)
    matched = evaluate_conditions(data.conditions, flags)
    if matched is not None:
        active: tuple[str, ...] = (condition_handle_id(matched),)
    elif data.has_default_branch:
        active = (DEFAULT_HANDLE_ID,)
    else:
        active = ()
    logger.info("Branch evaluated", node_id=node_id, matched=matched or DEFAULT_BRANCH_MARKER, active=active)
    return NodeExecutionResult(
        node_id=node_id,
        kind=NodeKind.CONDITIONAL_BRANCH,
        data=stamp_executed(data, ctx, evaluated_condition_id=matched or DEFAULT_BRANCH_MARKER),
        total=1,
        success_count=1,
        active_handles=active,
    )


def select_branch(
    node_id: str, data: SelectBranchData, ctx: ExecutionContext, selection: str | None
) -> NodeExecutionResult:
    """Pin the operator's choice and write it to the node's flag.

    The selection is an option label; without one the node cannot run.
    """
    label = selection if selection is not None else data.selected_value
    if not label:
        raise NodeValidationError(node_id, "Choose an option before executing")
    if label not in {option.label for option in data.options}:
        raise NodeValidationError(node_id, f"Unknown option: {label!r}")
    flag_name = data.flag_name.strip()
    if not flag_name:
        raise NodeValidationError(node_id, "Flag name is required")

    written = {flag_name: label}
    ctx.sessions.update_flags(ctx.session.session_id, written)
    return NodeExecutionResult(
        node_id=node_id,
        kind=NodeKind.SELECT_BRANCH,
        data=stamp_executed(data, ctx, selected_value=label),
        total=1,
        success_count=1,
        flags_written=written,
    )


def shuffle_assign_flags(node_id: str, data: ShuffleAssignData, ctx: ExecutionContext) -> NodeExecutionResult:
    """Deal items onto targets and write one `<prefix>_<target>` flag per non-empty target."""
    items = non_blank(data.items)
    targets = non_blank(data.targets)
    if not items or not targets:
        raise NodeValidationError(node_id, "Both items and targets need at least one entry")
    prefix = data.result_flag_prefix.strip()
    if not prefix:
        raise NodeValidationError(node_id, "Result flag prefix is required")

    assigned = shuffle_assign(items, targets, ctx.rng)
    written = assignment_flags(prefix, assigned)
    ctx.sessions.update_flags(ctx.session.session_id, written)
    logger.info("Items assigned", node_id=node_id, targets=len(assigned), items=len(items))
    return NodeExecutionResult(
        node_id=node_id,
        kind=NodeKind.SHUFFLE_ASSIGN,
        data=stamp_executed(data, ctx, assigned_results=assigned),
        total=len(items),
        success_count=len(items),
        flags_written=written,
    )
