"""Records of platform resources created for a session.

These map the names used in templates to the ids the platform assigned.
They are written after a successful create and removed after a successful
delete; nothing else mutates them.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from guildflow.contracts.enums import ChannelType


@dataclass(frozen=True, slots=True)
class SessionRecord:
    id: str
    name: str
    guild_id: str
    created_at: datetime
    last_used_at: datetime | None = None


@dataclass(frozen=True, slots=True)
class RoleRecord:
    id: str
    guild_id: str
    session_id: str
    name: str


@dataclass(frozen=True, slots=True)
class CategoryRecord:
    id: str
    session_id: str
    name: str


@dataclass(frozen=True, slots=True)
class ChannelRecord:
    id: str
    session_id: str
    name: str
    type: ChannelType
    writer_role_ids: tuple[str, ...] = field(default=())
    reader_role_ids: tuple[str, ...] = field(default=())


@dataclass(frozen=True, slots=True)
class CreatedRole:
    """Role as returned by the action client."""

    id: str
    name: str


@dataclass(frozen=True, slots=True)
class CreatedChannel:
    """Channel or category as returned by the action client."""

    id: str
    name: str


@dataclass(frozen=True, slots=True)
class GuildMember:
    id: str
    role_ids: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class OutgoingFile:
    """Attachment bytes ready to upload."""

    file_name: str
    content: bytes
