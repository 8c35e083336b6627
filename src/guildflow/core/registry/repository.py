# src/guildflow/core/registry/repository.py
"""Repositories for recorded session resources and session flags.

Row loaders handle the seam between SQLAlchemy rows (strings, JSON text)
and record dataclasses (enums, tuples). The stores implement the
ResourceStore and SessionStore protocols on top of a RegistryDB.
"""

from __future__ import annotations

import json
import uuid
from collections.abc import Callable, Mapping, Sequence
from datetime import UTC, datetime
from typing import Any

import structlog
from sqlalchemy import Table, delete, func, insert, select, update
from sqlalchemy.engine import Connection
from sqlalchemy.engine import Row as SARow

from guildflow.contracts.enums import ChannelType
from guildflow.contracts.errors import SessionNotFoundError
from guildflow.contracts.records import CategoryRecord, ChannelRecord, RoleRecord, SessionRecord
from guildflow.core.registry.database import RegistryDB
from guildflow.core.registry.schema import categories_table, channels_table, roles_table, sessions_table

logger = structlog.get_logger(__name__)


def _utc_now() -> datetime:
    return datetime.now(UTC)


def _next_ordinal(conn: Connection, table: Table, session_id: str) -> int:
    """Next recording position within a session. Writers are serialized by the transaction."""
    current = conn.execute(select(func.max(table.c.ordinal)).where(table.c.session_id == session_id)).scalar()
    return 0 if current is None else current + 1


def load_session(row: SARow[Any]) -> SessionRecord:
    return SessionRecord(
        id=row.session_id,
        name=row.name,
        guild_id=row.guild_id,
        created_at=row.created_at,
        last_used_at=row.last_used_at,
    )


def load_role(row: SARow[Any]) -> RoleRecord:
    return RoleRecord(id=row.role_id, guild_id=row.guild_id, session_id=row.session_id, name=row.name)


def load_category(row: SARow[Any]) -> CategoryRecord:
    return CategoryRecord(id=row.category_id, session_id=row.session_id, name=row.name)


def load_channel(row: SARow[Any]) -> ChannelRecord:
    """Load a channel row. Crashes on an unknown channel type (our data, not user input)."""
    return ChannelRecord(
        id=row.channel_id,
        session_id=row.session_id,
        name=row.name,
        type=ChannelType(row.channel_type),
        writer_role_ids=tuple(json.loads(row.writer_role_ids_json)),
        reader_role_ids=tuple(json.loads(row.reader_role_ids_json)),
    )


def parse_flags(raw: str | None) -> dict[str, str]:
    """Decode a stored flag map. Anything that is not a JSON object of strings reads as empty."""
    if not raw:
        return {}
    try:
        decoded = json.loads(raw)
    except json.JSONDecodeError:
        logger.warning("Discarding unreadable game flags", raw_length=len(raw))
        return {}
    if not isinstance(decoded, dict):
        return {}
    return {str(key): str(value) for key, value in decoded.items()}


class SqlResourceStore:
    """ResourceStore backed by the registry database."""

    def __init__(self, db: RegistryDB) -> None:
        self._db = db

    # === Roles ===

    def add_role(self, record: RoleRecord) -> None:
        with self._db.connection() as conn:
            conn.execute(
                insert(roles_table).values(
                    role_id=record.id,
                    guild_id=record.guild_id,
                    session_id=record.session_id,
                    name=record.name,
                    ordinal=_next_ordinal(conn, roles_table, record.session_id),
                )
            )

    def delete_role(self, role_id: str) -> None:
        with self._db.connection() as conn:
            conn.execute(delete(roles_table).where(roles_table.c.role_id == role_id))

    def list_roles(self, session_id: str) -> list[RoleRecord]:
        query = select(roles_table).where(roles_table.c.session_id == session_id).order_by(roles_table.c.ordinal)
        with self._db.connection() as conn:
            return [load_role(row) for row in conn.execute(query)]

    # === Categories ===

    def add_category(self, record: CategoryRecord) -> None:
        with self._db.connection() as conn:
            conn.execute(
                insert(categories_table).values(
                    category_id=record.id,
                    session_id=record.session_id,
                    name=record.name,
                    ordinal=_next_ordinal(conn, categories_table, record.session_id),
                )
            )

    def delete_category(self, category_id: str) -> None:
        with self._db.connection() as conn:
            conn.execute(delete(categories_table).where(categories_table.c.category_id == category_id))

    def list_categories(self, session_id: str) -> list[CategoryRecord]:
        query = (
            select(categories_table)
            .where(categories_table.c.session_id == session_id)
            .order_by(categories_table.c.ordinal)
        )
        with self._db.connection() as conn:
            return [load_category(row) for row in conn.execute(query)]

    # === Channels ===

    def add_channel(self, record: ChannelRecord) -> None:
        with self._db.connection() as conn:
            conn.execute(
                insert(channels_table).values(
                    channel_id=record.id,
                    session_id=record.session_id,
                    name=record.name,
                    channel_type=record.type.value,
                    writer_role_ids_json=json.dumps(list(record.writer_role_ids)),
                    reader_role_ids_json=json.dumps(list(record.reader_role_ids)),
                    ordinal=_next_ordinal(conn, channels_table, record.session_id),
                )
            )

    def delete_channel(self, channel_id: str) -> None:
        with self._db.connection() as conn:
            conn.execute(delete(channels_table).where(channels_table.c.channel_id == channel_id))

    def list_channels(self, session_id: str) -> list[ChannelRecord]:
        query = (
            select(channels_table).where(channels_table.c.session_id == session_id).order_by(channels_table.c.ordinal)
        )
        with self._db.connection() as conn:
            return [load_channel(row) for row in conn.execute(query)]

    def update_channel_permissions(
        self,
        channel_id: str,
        writer_role_ids: Sequence[str],
        reader_role_ids: Sequence[str],
    ) -> None:
        """Overwrite the recorded writer and reader role lists of a channel."""
        with self._db.connection() as conn:
            conn.execute(
                update(channels_table)
                .where(channels_table.c.channel_id == channel_id)
                .values(
                    writer_role_ids_json=json.dumps(list(writer_role_ids)),
                    reader_role_ids_json=json.dumps(list(reader_role_ids)),
                )
            )


class SqlSessionStore:
    """SessionStore backed by the registry database."""

    def __init__(self, db: RegistryDB, *, clock: Callable[[], datetime] = _utc_now) -> None:
        self._db = db
        self._clock = clock

    def create_session(self, name: str, guild_id: str) -> SessionRecord:
        record = SessionRecord(id=uuid.uuid4().hex, name=name, guild_id=guild_id, created_at=self._clock())
        with self._db.connection() as conn:
            conn.execute(
                insert(sessions_table).values(
                    session_id=record.id,
                    name=record.name,
                    guild_id=record.guild_id,
                    game_flags_json="{}",
                    created_at=record.created_at,
                )
            )
        logger.info("Session created", session_id=record.id, session_name=name, guild_id=guild_id)
        return record

    def get_session(self, session_id: str) -> SessionRecord:
        query = select(sessions_table).where(sessions_table.c.session_id == session_id)
        with self._db.connection() as conn:
            row = conn.execute(query).first()
        if row is None:
            raise SessionNotFoundError(f"Session not found: {session_id}")
        return load_session(row)

    def find_session(self, name: str, guild_id: str | None = None) -> SessionRecord | None:
        """Most recently created session with this name (and guild, if given)."""
        query = select(sessions_table).where(sessions_table.c.name == name)
        if guild_id is not None:
            query = query.where(sessions_table.c.guild_id == guild_id)
        query = query.order_by(sessions_table.c.created_at.desc())
        with self._db.connection() as conn:
            row = conn.execute(query).first()
        return load_session(row) if row is not None else None

    def touch(self, session_id: str) -> None:
        with self._db.connection() as conn:
            conn.execute(
                update(sessions_table).where(sessions_table.c.session_id == session_id).values(last_used_at=self._clock())
            )

    def get_flags(self, session_id: str) -> dict[str, str]:
        query = select(sessions_table.c.game_flags_json).where(sessions_table.c.session_id == session_id)
        with self._db.connection() as conn:
            row = conn.execute(query).first()
        if row is None:
            raise SessionNotFoundError(f"Session not found: {session_id}")
        return parse_flags(row.game_flags_json)

    def set_flags(self, session_id: str, flags: Mapping[str, str]) -> None:
        with self._db.connection() as conn:
            result = conn.execute(
                update(sessions_table)
                .where(sessions_table.c.session_id == session_id)
                .values(game_flags_json=json.dumps(dict(flags), ensure_ascii=False))
            )
        if result.rowcount == 0:
            raise SessionNotFoundError(f"Session not found: {session_id}")

    def update_flags(self, session_id: str, updates: Mapping[str, str]) -> dict[str, str]:
        """Merge updates into the stored flags and persist. Returns the merged map."""
        merged = {**self.get_flags(session_id), **updates}
        self.set_flags(session_id, merged)
        return merged
