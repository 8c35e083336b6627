# src/guildflow/engine/dynamic_values.py
"""Dynamic value resolution.

resolve_dynamic_value() is total: it never raises. Role and channel
references that are not in the context resolve to the referenced name
itself, so a template can mention resources that do not exist yet. The
resource-existence check of the executing node is what eventually fails.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

import structlog
from pydantic import ValidationError

from guildflow.contracts.dynamic_value import (
    ChannelRefValue,
    DynamicValue,
    DynamicValueContext,
    GameFlagValue,
    LiteralValue,
    RoleRefValue,
    SessionNameValue,
    dynamic_value_adapter,
)
from guildflow.contracts.records import ChannelRecord, RoleRecord

logger = structlog.get_logger(__name__)


def resolve_dynamic_value(value: DynamicValue | Mapping[str, Any], context: DynamicValueContext) -> str:
    """Resolve a dynamic value (or its raw document form) to a string.

    Unknown or malformed raw values resolve to "".
    """
    if isinstance(value, Mapping):
        try:
            value = dynamic_value_adapter.validate_python(value)
        except ValidationError:
            logger.debug("Unresolvable dynamic value", value_type=value.get("type"))
            return ""

    match value:
        case LiteralValue(value=literal):
            return literal
        case SessionNameValue():
            return context.session_name or ""
        case RoleRefValue(role_name=name):
            return context.roles.get(name, name)
        case ChannelRefValue(channel_name=name):
            return context.channels.get(name, name)
        case GameFlagValue(flag_key=key):
            return context.game_flags.get(key, "")
        case _:
            return ""


def build_dynamic_context(
    session_name: str | None,
    roles: Iterable[RoleRecord] = (),
    channels: Iterable[ChannelRecord] = (),
    game_flags: Mapping[str, str] | None = None,
) -> DynamicValueContext:
    """Context from a session's recorded resources. The first record of a name wins."""
    return DynamicValueContext(
        session_name=session_name,
        roles=first_by_name((role.name, role.id) for role in roles),
        channels=first_by_name((channel.name, channel.id) for channel in channels),
        game_flags=dict(game_flags or {}),
    )


def first_by_name(pairs: Iterable[tuple[str, str]]) -> dict[str, str]:
    """Name -> id map keeping the first id seen for each name."""
    index: dict[str, str] = {}
    for name, record_id in pairs:
        index.setdefault(name, record_id)
    return index
