# src/guildflow/core/registry/schema.py
"""SQLAlchemy table definitions for the local resource store.

Uses SQLAlchemy Core (not ORM) for explicit control over queries.
Platform ids are snowflakes stored as strings. Resource tables carry a
per-session ordinal so listings come back in recording order.
"""

from sqlalchemy import (
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    MetaData,
    String,
    Table,
    Text,
)

# Shared metadata for all tables
metadata = MetaData()

SNOWFLAKE_LENGTH = 32

# === Sessions ===

sessions_table = Table(
    "sessions",
    metadata,
    Column("session_id", String(64), primary_key=True),
    Column("name", String(256), nullable=False),
    Column("guild_id", String(SNOWFLAKE_LENGTH), nullable=False),
    # JSON object of flag key -> value; the only cross-node mutable state
    Column("game_flags_json", Text, nullable=False, default="{}"),
    Column("created_at", DateTime(timezone=True), nullable=False),
    Column("last_used_at", DateTime(timezone=True)),
)

Index("ix_sessions_name_guild", sessions_table.c.name, sessions_table.c.guild_id)

# === Recorded platform resources ===

roles_table = Table(
    "roles",
    metadata,
    Column("role_id", String(SNOWFLAKE_LENGTH), primary_key=True),
    Column("guild_id", String(SNOWFLAKE_LENGTH), nullable=False),
    Column("session_id", String(64), ForeignKey("sessions.session_id", ondelete="CASCADE"), nullable=False),
    Column("name", String(256), nullable=False),
    Column("ordinal", Integer, nullable=False),
)

Index("ix_roles_session", roles_table.c.session_id)

categories_table = Table(
    "categories",
    metadata,
    Column("category_id", String(SNOWFLAKE_LENGTH), primary_key=True),
    Column("session_id", String(64), ForeignKey("sessions.session_id", ondelete="CASCADE"), nullable=False),
    Column("name", String(256), nullable=False),
    Column("ordinal", Integer, nullable=False),
)

Index("ix_categories_session", categories_table.c.session_id)

channels_table = Table(
    "channels",
    metadata,
    Column("channel_id", String(SNOWFLAKE_LENGTH), primary_key=True),
    Column("session_id", String(64), ForeignKey("sessions.session_id", ondelete="CASCADE"), nullable=False),
    Column("name", String(256), nullable=False),
    Column("channel_type", String(16), nullable=False),
    Column("writer_role_ids_json", Text, nullable=False, default="[]"),
    Column("reader_role_ids_json", Text, nullable=False, default="[]"),
    Column("ordinal", Integer, nullable=False),
)

Index("ix_channels_session", channels_table.c.session_id)
