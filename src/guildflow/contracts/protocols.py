"""Protocols for the collaborators node execution depends on.

Implementations live in guildflow.clients (platform REST), guildflow.core.registry
(local resource and session storage), and guildflow.core.attachments.
Tests substitute in-memory fakes.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Protocol, runtime_checkable

from guildflow.contracts.enums import ChannelType
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


@runtime_checkable
class ActionClient(Protocol):
    """One asynchronous method per platform operation.

    Every method may raise ActionClientError; callers treat that as
    "this item failed".
    """

    async def create_role(self, guild_id: str, name: str) -> CreatedRole: ...

    async def delete_role(self, guild_id: str, role_id: str) -> None: ...

    async def create_category(self, guild_id: str, name: str) -> CreatedChannel: ...

    async def create_channel(
        self,
        guild_id: str,
        parent_category_id: str,
        name: str,
        channel_type: ChannelType,
        writer_role_ids: Sequence[str],
        reader_role_ids: Sequence[str],
    ) -> CreatedChannel: ...

    async def delete_channel(self, guild_id: str, channel_id: str) -> None: ...

    async def change_channel_permissions(
        self,
        channel_id: str,
        writer_role_ids: Sequence[str],
        reader_role_ids: Sequence[str],
    ) -> None: ...

    async def send_message(self, channel_id: str, content: str, files: Sequence[OutgoingFile] = ()) -> str: ...

    async def list_members(self, guild_id: str, *, limit: int = 1000, after: str | None = None) -> list[GuildMember]: ...

    async def add_role_to_member(self, guild_id: str, member_id: str, role_id: str) -> None: ...


class ResourceStore(Protocol):
    """Recorded role/category/channel id<->name mappings, keyed by session."""

    def add_role(self, record: RoleRecord) -> None: ...

    def delete_role(self, role_id: str) -> None: ...

    def list_roles(self, session_id: str) -> list[RoleRecord]: ...

    def add_category(self, record: CategoryRecord) -> None: ...

    def delete_category(self, category_id: str) -> None: ...

    def list_categories(self, session_id: str) -> list[CategoryRecord]: ...

    def add_channel(self, record: ChannelRecord) -> None: ...

    def delete_channel(self, channel_id: str) -> None: ...

    def list_channels(self, session_id: str) -> list[ChannelRecord]: ...

    def update_channel_permissions(
        self,
        channel_id: str,
        writer_role_ids: Sequence[str],
        reader_role_ids: Sequence[str],
    ) -> None: ...


class SessionStore(Protocol):
    """Session records and their persisted game-flag maps."""

    def create_session(self, name: str, guild_id: str) -> SessionRecord: ...

    def get_session(self, session_id: str) -> SessionRecord: ...

    def find_session(self, name: str, guild_id: str | None = None) -> SessionRecord | None: ...

    def get_flags(self, session_id: str) -> dict[str, str]: ...

    def set_flags(self, session_id: str, flags: Mapping[str, str]) -> None: ...

    def update_flags(self, session_id: str, updates: Mapping[str, str]) -> dict[str, str]: ...


class AttachmentStore(Protocol):
    """Read access to files attached to message blocks."""

    def read(self, file_path: str) -> bytes: ...
