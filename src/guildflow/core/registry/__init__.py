# src/guildflow/core/registry/__init__.py
"""Local resource store: sessions, their flags, and recorded platform resources.

Example:
    db = RegistryDB.from_url("sqlite:///./state/guildflow.db")
    sessions = SqlSessionStore(db)
    resources = SqlResourceStore(db)
"""

from guildflow.core.registry.database import RegistryDB
from guildflow.core.registry.repository import SqlResourceStore, SqlSessionStore, parse_flags
from guildflow.core.registry.schema import metadata

__all__ = [
    "RegistryDB",
    "SqlResourceStore",
    "SqlSessionStore",
    "metadata",
    "parse_flags",
]
