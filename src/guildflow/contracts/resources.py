"""Resource catalog contracts.

A resource entry names something a node produces (a role, a channel, or a
game flag) together with the id of the producing node. Entries are kept per
producer; de-duplication by name is a presentation concern.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from guildflow.contracts.enums import ChannelType


@dataclass(frozen=True, slots=True)
class RoleResource:
    name: str
    source_node_id: str


@dataclass(frozen=True, slots=True)
class ChannelResource:
    name: str
    type: ChannelType
    source_node_id: str


@dataclass(frozen=True, slots=True)
class FlagResource:
    key: str
    source_node_id: str


@dataclass(frozen=True, slots=True)
class TemplateResources:
    """Roles, channels, and flags visible at some point of the graph.

    Merging concatenates. The same name may appear once per producing node.
    """

    roles: tuple[RoleResource, ...] = ()
    channels: tuple[ChannelResource, ...] = ()
    game_flags: tuple[FlagResource, ...] = ()

    def merge(self, other: TemplateResources) -> TemplateResources:
        return TemplateResources(
            roles=self.roles + other.roles,
            channels=self.channels + other.channels,
            game_flags=self.game_flags + other.game_flags,
        )

    @property
    def is_empty(self) -> bool:
        return not (self.roles or self.channels or self.game_flags)

    def role_names(self) -> frozenset[str]:
        return frozenset(role.name for role in self.roles)

    def channel_names(self) -> frozenset[str]:
        return frozenset(channel.name for channel in self.channels)

    def flag_keys(self) -> frozenset[str]:
        return frozenset(flag.key for flag in self.game_flags)


EMPTY_RESOURCES = TemplateResources()


@dataclass(frozen=True, slots=True)
class SelectOption:
    """One entry of a selection list, possibly disabled with a reason."""

    id: str
    label: str
    disabled: bool = False
    reason: str | None = None


@dataclass(frozen=True, slots=True)
class ProgressUpdate:
    """Progress of a multi-item node execution."""

    node_id: str
    current: int
    total: int
    item: str | None = field(default=None)
