# src/guildflow/clients/__init__.py
"""Platform action clients."""

from guildflow.clients.discord import (
    CHANNEL_PERMISSIONS,
    READER_PERMISSIONS,
    WRITER_PERMISSIONS,
    DiscordActionClient,
    Permission,
)

__all__ = [
    "CHANNEL_PERMISSIONS",
    "READER_PERMISSIONS",
    "WRITER_PERMISSIONS",
    "DiscordActionClient",
    "Permission",
]
