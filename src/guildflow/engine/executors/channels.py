# src/guildflow/engine/executors/channels.py
"""Category and channel executors.

CreateCategory, DeleteCategory, CreateChannel, DeleteChannel, and
ChangeChannelPermission. Deletions and permission changes resolve every
name before the first remote call; creations run item by item.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping

from guildflow.contracts.enums import NodeKind, ResourceKind
from guildflow.contracts.errors import ActionClientError, NodeValidationError
from guildflow.contracts.node_data import (
    ChangeChannelPermissionData,
    CreateCategoryData,
    CreateChannelData,
    DeleteCategoryData,
    DeleteChannelData,
    RolePermission,
)
from guildflow.contracts.records import CategoryRecord, ChannelRecord
from guildflow.contracts.resources import TemplateResources
from guildflow.contracts.results import NodeExecutionResult
from guildflow.engine.dynamic_values import build_dynamic_context, first_by_name, resolve_dynamic_value
from guildflow.engine.executors.base import ItemBatch, non_blank, resolve_names, stamp_executed
from guildflow.engine.executors.types import ExecutionContext


def _split_permissions(permissions: Iterable[RolePermission], role_index: Mapping[str, str]) -> tuple[list[str], list[str]]:
    """Writer and reader role ids. Blank role names are skipped; the rest must be resolvable."""
    writers: list[str] = []
    readers: list[str] = []
    for permission in permissions:
        name = permission.role_name.strip()
        if not name:
            continue
        (writers if permission.can_write else readers).append(role_index[name])
    return writers, readers


def _role_index(ctx: ExecutionContext) -> dict[str, str]:
    return first_by_name((role.name, role.id) for role in ctx.resources.list_roles(ctx.session.session_id))


def _permission_role_names(permissions: Iterable[RolePermission]) -> list[str]:
    return list(dict.fromkeys(non_blank(permission.role_name for permission in permissions)))


async def create_category(node_id: str, data: CreateCategoryData, ctx: ExecutionContext) -> NodeExecutionResult:
    """Create the category named by the node's dynamic value."""
    session = ctx.session
    dynamic_context = build_dynamic_context(
        session.session_name,
        roles=ctx.resources.list_roles(session.session_id),
        channels=ctx.resources.list_channels(session.session_id),
        game_flags=ctx.sessions.get_flags(session.session_id),
    )
    name = resolve_dynamic_value(data.category_name, dynamic_context).strip()
    if not name:
        raise NodeValidationError(node_id, "Category name resolves to an empty string")

    batch = ItemBatch(node_id, NodeKind.CREATE_CATEGORY, ctx, total=1)
    batch.start(name)
    try:
        created = await ctx.client.create_category(session.guild_id, name)
    except ActionClientError as exc:
        batch.failed(name, exc)
        return batch.result(data)
    record = CategoryRecord(id=created.id, session_id=session.session_id, name=created.name)
    ctx.resources.add_category(record)
    batch.succeeded(name, record)
    return batch.result(data)


async def delete_categories(node_id: str, data: DeleteCategoryData, ctx: ExecutionContext) -> NodeExecutionResult:
    """Delete every recorded channel of the session, then every recorded category.

    With no category recorded there is nothing to tear down and the node
    is marked executed right away.
    """
    session_id = ctx.session.session_id
    categories = ctx.resources.list_categories(session_id)
    if not categories:
        return NodeExecutionResult(node_id=node_id, kind=NodeKind.DELETE_CATEGORY, data=stamp_executed(data, ctx))

    channels = ctx.resources.list_channels(session_id)
    batch = ItemBatch(node_id, NodeKind.DELETE_CATEGORY, ctx, total=len(channels) + len(categories))
    for channel in channels:
        batch.start(channel.name)
        try:
            await ctx.client.delete_channel(ctx.session.guild_id, channel.id)
        except ActionClientError as exc:
            batch.failed(channel.name, exc)
            continue
        ctx.resources.delete_channel(channel.id)
        batch.succeeded(channel.name, channel)

    for category in categories:
        batch.start(category.name)
        try:
            await ctx.client.delete_channel(ctx.session.guild_id, category.id)
        except ActionClientError as exc:
            batch.failed(category.name, exc)
            continue
        ctx.resources.delete_category(category.id)
        batch.succeeded(category.name, category)
    return batch.result(data)


async def create_channels(
    node_id: str, data: CreateChannelData, ctx: ExecutionContext, catalog: TemplateResources
) -> NodeExecutionResult:
    """Create each listed channel under the session's first recorded category."""
    session = ctx.session
    categories = ctx.resources.list_categories(session.session_id)
    if not categories:
        raise NodeValidationError(node_id, "No category recorded for this session; create a category first")
    parent = categories[0]

    specs = [spec for spec in data.channels if spec.name.strip()]
    if not specs:
        raise NodeValidationError(node_id, "No channels to create")

    role_index = _role_index(ctx)
    wanted_roles = list(dict.fromkeys(name for spec in specs for name in _permission_role_names(spec.role_permissions)))
    resolve_names(node_id, ResourceKind.ROLE, wanted_roles, role_index, catalog)

    batch = ItemBatch(node_id, NodeKind.CREATE_CHANNEL, ctx, total=len(specs))
    for spec in specs:
        name = spec.name.strip()
        writers, readers = _split_permissions(spec.role_permissions, role_index)
        batch.start(name)
        try:
            created = await ctx.client.create_channel(
                session.guild_id,
                parent.id,
                name,
                spec.type,
                writers,
                readers,
            )
        except ActionClientError as exc:
            batch.failed(name, exc)
            continue
        record = ChannelRecord(
            id=created.id,
            session_id=session.session_id,
            name=created.name,
            type=spec.type,
            writer_role_ids=tuple(writers),
            reader_role_ids=tuple(readers),
        )
        ctx.resources.add_channel(record)
        batch.succeeded(name, record)
    return batch.result(data)


async def delete_channels(
    node_id: str, data: DeleteChannelData, ctx: ExecutionContext, catalog: TemplateResources
) -> NodeExecutionResult:
    names = list(dict.fromkeys(non_blank(data.channel_names)))
    if not names:
        raise NodeValidationError(node_id, "No channel names to delete")

    recorded = ctx.resources.list_channels(ctx.session.session_id)
    channel_ids = resolve_names(
        node_id, ResourceKind.CHANNEL, names, first_by_name((c.name, c.id) for c in recorded), catalog
    )

    batch = ItemBatch(node_id, NodeKind.DELETE_CHANNEL, ctx, total=len(names))
    for name, channel_id in zip(names, channel_ids, strict=True):
        batch.start(name)
        try:
            await ctx.client.delete_channel(ctx.session.guild_id, channel_id)
        except ActionClientError as exc:
            batch.failed(name, exc)
            continue
        ctx.resources.delete_channel(channel_id)
        batch.succeeded(name, channel_id)
    return batch.result(data)


async def change_channel_permissions(
    node_id: str, data: ChangeChannelPermissionData, ctx: ExecutionContext, catalog: TemplateResources
) -> NodeExecutionResult:
    """Replace a channel's role overwrites.

    The overwrite is absolute: roles not listed lose their explicit
    permissions on the channel.
    """
    channel_name = data.channel_name.strip()
    if not channel_name:
        raise NodeValidationError(node_id, "Channel name is required")

    session_id = ctx.session.session_id
    channel_index = first_by_name((c.name, c.id) for c in ctx.resources.list_channels(session_id))
    (channel_id,) = resolve_names(node_id, ResourceKind.CHANNEL, [channel_name], channel_index, catalog)
    role_index = _role_index(ctx)
    resolve_names(node_id, ResourceKind.ROLE, _permission_role_names(data.role_permissions), role_index, catalog)
    writers, readers = _split_permissions(data.role_permissions, role_index)

    batch = ItemBatch(node_id, NodeKind.CHANGE_CHANNEL_PERMISSION, ctx, total=1)
    batch.start(channel_name)
    try:
        await ctx.client.change_channel_permissions(channel_id, writers, readers)
    except ActionClientError as exc:
        batch.failed(channel_name, exc)
        return batch.result(data)
    ctx.resources.update_channel_permissions(channel_id, writers, readers)
    batch.succeeded(channel_name, channel_id)
    return batch.result(data)
