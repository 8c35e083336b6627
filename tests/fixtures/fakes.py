# tests/fixtures/fakes.py
"""In-memory fakes for the collaborators node executors depend on.

FakeActionClient implements the ActionClient protocol without any network.
It hands out sequential platform ids, records every call in order, and can
be told to fail specific items so partial-failure paths are reachable.
"""

from __future__ import annotations

import itertools
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any

from guildflow.contracts import ActionClientError, ChannelType, CreatedChannel, CreatedRole, GuildMember, OutgoingFile


@dataclass(frozen=True)
class ClientCall:
    operation: str
    args: tuple[Any, ...]


@dataclass
class FakeActionClient:
    """ActionClient double.

    Attributes:
        fail_on: operation name -> keys that fail. The key is the name for
            creations, and the target id for everything else (role id,
            channel id, member id).
        members: Guild members served by list_members, in id order
        calls: Every call made, in order
    """

    fail_on: dict[str, set[str]] = field(default_factory=dict)
    members: list[GuildMember] = field(default_factory=list)
    fail_list_members: bool = False
    calls: list[ClientCall] = field(default_factory=list)
    _ids: itertools.count[int] = field(default_factory=lambda: itertools.count(1001))

    def _next_id(self) -> str:
        return str(next(self._ids))

    def _call(self, operation: str, key: str, *args: Any) -> None:
        self.calls.append(ClientCall(operation, args))
        if key in self.fail_on.get(operation, set()):
            raise ActionClientError(operation, f"{key} rejected", status_code=403)

    def operations(self) -> list[str]:
        return [call.operation for call in self.calls]

    def calls_to(self, operation: str) -> list[tuple[Any, ...]]:
        return [call.args for call in self.calls if call.operation == operation]

    async def create_role(self, guild_id: str, name: str) -> CreatedRole:
        self._call("create_role", name, guild_id, name)
        return CreatedRole(id=self._next_id(), name=name)

    async def delete_role(self, guild_id: str, role_id: str) -> None:
        self._call("delete_role", role_id, guild_id, role_id)

    async def create_category(self, guild_id: str, name: str) -> CreatedChannel:
        self._call("create_category", name, guild_id, name)
        return CreatedChannel(id=self._next_id(), name=name)

    async def create_channel(
        self,
        guild_id: str,
        parent_category_id: str,
        name: str,
        channel_type: ChannelType,
        writer_role_ids: Sequence[str],
        reader_role_ids: Sequence[str],
    ) -> CreatedChannel:
        self._call(
            "create_channel",
            name,
            guild_id,
            parent_category_id,
            name,
            channel_type,
            tuple(writer_role_ids),
            tuple(reader_role_ids),
        )
        return CreatedChannel(id=self._next_id(), name=name)

    async def delete_channel(self, guild_id: str, channel_id: str) -> None:
        self._call("delete_channel", channel_id, guild_id, channel_id)

    async def change_channel_permissions(
        self,
        channel_id: str,
        writer_role_ids: Sequence[str],
        reader_role_ids: Sequence[str],
    ) -> None:
        self._call("change_channel_permissions", channel_id, channel_id, tuple(writer_role_ids), tuple(reader_role_ids))

    async def send_message(self, channel_id: str, content: str, files: Sequence[OutgoingFile] = ()) -> str:
        self._call("send_message", channel_id, channel_id, content, tuple(files))
        return self._next_id()

    async def list_members(self, guild_id: str, *, limit: int = 1000, after: str | None = None) -> list[GuildMember]:
        self.calls.append(ClientCall("list_members", (guild_id, limit, after)))
        if self.fail_list_members:
            raise ActionClientError("list_members", "Missing Access", status_code=403)
        start = 0
        if after is not None:
            start = next(i for i, member in enumerate(self.members) if member.id == after) + 1
        return self.members[start : start + limit]

    async def add_role_to_member(self, guild_id: str, member_id: str, role_id: str) -> None:
        self._call("add_role_to_member", member_id, guild_id, member_id, role_id)


class MemoryAttachmentStore:
    """AttachmentStore over a dict of path -> bytes. Unknown paths raise FileNotFoundError."""

    def __init__(self, files: dict[str, bytes] | None = None) -> None:
        self.files = dict(files or {})

    def read(self, file_path: str) -> bytes:
        try:
            return self.files[file_path]
        except KeyError:
            raise FileNotFoundError(file_path) from None
