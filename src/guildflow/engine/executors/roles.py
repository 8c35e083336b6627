# src/guildflow/engine/executors/roles.py
"""Role executors: CreateRole, DeleteRole, AddRoleToRoleMembers."""

from __future__ import annotations

import structlog

from guildflow.contracts.enums import NodeKind, ResourceKind
from guildflow.contracts.errors import ActionClientError, NodeValidationError
from guildflow.contracts.node_data import AddRoleToRoleMembersData, CreateRoleData, DeleteRoleData
from guildflow.contracts.records import GuildMember, RoleRecord
from guildflow.contracts.resources import TemplateResources
from guildflow.contracts.results import NodeExecutionResult
from guildflow.engine.dynamic_values import first_by_name
from guildflow.engine.executors.base import ItemBatch, non_blank, resolve_names
from guildflow.engine.executors.types import ExecutionContext

logger = structlog.get_logger(__name__)


async def create_roles(node_id: str, data: CreateRoleData, ctx: ExecutionContext) -> NodeExecutionResult:
    """Create every listed role, one call per name, in list order.

    Repeated names are created repeatedly. Roles created before a failure
    stay created and recorded.
    """
    names = non_blank(data.roles)
    if not names:
        raise NodeValidationError(node_id, "No role names to create")

    session = ctx.session
    batch = ItemBatch(node_id, NodeKind.CREATE_ROLE, ctx, total=len(names))
    for name in names:
        batch.start(name)
        try:
            created = await ctx.client.create_role(session.guild_id, name)
        except ActionClientError as exc:
            batch.failed(name, exc)
            continue
        record = RoleRecord(id=created.id, guild_id=session.guild_id, session_id=session.session_id, name=created.name)
        ctx.resources.add_role(record)
        batch.succeeded(name, record)
    return batch.result(data)


async def delete_roles(
    node_id: str, data: DeleteRoleData, ctx: ExecutionContext, catalog: TemplateResources
) -> NodeExecutionResult:
    """Delete every recorded role of the session, or the named ones.

    Named deletion resolves all names before the first call and aborts if
    any is unrecorded.
    """
    recorded = ctx.resources.list_roles(ctx.session.session_id)
    if data.delete_all:
        targets = recorded
    else:
        names = non_blank(data.role_names)
        if not names:
            raise NodeValidationError(node_id, "No role names to delete")
        role_ids = resolve_names(node_id, ResourceKind.ROLE, names, first_by_name((r.name, r.id) for r in recorded), catalog)
        by_id = {role.id: role for role in recorded}
        targets = [by_id[role_id] for role_id in dict.fromkeys(role_ids)]
    if not targets:
        raise NodeValidationError(node_id, "No recorded roles to delete")

    batch = ItemBatch(node_id, NodeKind.DELETE_ROLE, ctx, total=len(targets))
    for role in targets:
        batch.start(role.name)
        try:
            await ctx.client.delete_role(ctx.session.guild_id, role.id)
        except ActionClientError as exc:
            batch.failed(role.name, exc)
            continue
        ctx.resources.delete_role(role.id)
        batch.succeeded(role.name, role)
    return batch.result(data)


async def _members_with_role(ctx: ExecutionContext, role_id: str) -> list[GuildMember]:
    """Page through the guild's members, keeping those holding role_id."""
    holders: list[GuildMember] = []
    after: str | None = None
    while True:
        page = await ctx.client.list_members(ctx.session.guild_id, limit=ctx.member_page_size, after=after)
        holders.extend(member for member in page if role_id in member.role_ids)
        if len(page) < ctx.member_page_size:
            return holders
        after = page[-1].id


async def add_role_to_role_members(
    node_id: str, data: AddRoleToRoleMembersData, ctx: ExecutionContext, catalog: TemplateResources
) -> NodeExecutionResult:
    """Give add_role_name to every member currently holding member_role_name."""
    member_role_name = data.member_role_name.strip()
    add_role_name = data.add_role_name.strip()
    if not member_role_name:
        raise NodeValidationError(node_id, "Member role name is required")
    if not add_role_name:
        raise NodeValidationError(node_id, "Role name to add is required")

    index = first_by_name((role.name, role.id) for role in ctx.resources.list_roles(ctx.session.session_id))
    member_role_id, add_role_id = resolve_names(
        node_id, ResourceKind.ROLE, [member_role_name, add_role_name], index, catalog
    )

    try:
        members = await _members_with_role(ctx, member_role_id)
    except ActionClientError as exc:
        batch = ItemBatch(node_id, NodeKind.ADD_ROLE_TO_ROLE_MEMBERS, ctx, total=1)
        batch.failed(f"members of {member_role_name}", exc)
        return batch.result(data)

    batch = ItemBatch(node_id, NodeKind.ADD_ROLE_TO_ROLE_MEMBERS, ctx, total=len(members))
    for member in members:
        batch.start(member.id)
        try:
            await ctx.client.add_role_to_member(ctx.session.guild_id, member.id, add_role_id)
        except ActionClientError as exc:
            batch.failed(member.id, exc)
            continue
        batch.succeeded(member.id, member)
    logger.info(
        "Role granted to role members",
        node_id=node_id,
        member_role=member_role_name,
        added_role=add_role_name,
        added=batch.success_count,
    )
    return batch.result(data)
