"""Dynamic value contracts.

A dynamic value is an indirect reference that a node resolves to a concrete
string at execution time: a literal, the session name, a role or channel
reference, or a game flag. The value never owns session state; resolution
needs a DynamicValueContext supplied by the caller.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter
from pydantic.alias_generators import to_camel

__all__ = [
    "ChannelRefValue",
    "DynamicValue",
    "DynamicValueContext",
    "GameFlagValue",
    "LiteralValue",
    "RoleRefValue",
    "SessionNameValue",
    "dynamic_value_adapter",
]


class _DynamicValueBase(BaseModel):
    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        alias_generator=to_camel,
        populate_by_name=True,
    )


class LiteralValue(_DynamicValueBase):
    """A fixed string stored in the template."""

    type: Literal["literal"] = "literal"
    value: str = ""


class SessionNameValue(_DynamicValueBase):
    """The name of the session the workflow is replayed in."""

    type: Literal["session.name"] = "session.name"


class RoleRefValue(_DynamicValueBase):
    """A role referenced by name, resolved to its platform id."""

    type: Literal["roleRef"] = "roleRef"
    role_name: str


class ChannelRefValue(_DynamicValueBase):
    """A channel referenced by name, resolved to its platform id."""

    type: Literal["channelRef"] = "channelRef"
    channel_name: str


class GameFlagValue(_DynamicValueBase):
    """The current value of a session game flag."""

    type: Literal["gameFlag"] = "gameFlag"
    flag_key: str


DynamicValue = Annotated[
    LiteralValue | SessionNameValue | RoleRefValue | ChannelRefValue | GameFlagValue,
    Field(discriminator="type"),
]

dynamic_value_adapter: TypeAdapter[DynamicValue] = TypeAdapter(DynamicValue)


@dataclass(frozen=True, slots=True)
class DynamicValueContext:
    """Everything a dynamic value may resolve against.

    Attributes:
        session_name: Name of the current session, None at authoring time
        roles: Role name -> platform role id
        channels: Channel name -> platform channel id
        game_flags: Current session flag map
    """

    session_name: str | None = None
    roles: Mapping[str, str] = field(default_factory=dict)
    channels: Mapping[str, str] = field(default_factory=dict)
    game_flags: Mapping[str, str] = field(default_factory=dict)
