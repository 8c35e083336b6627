# src/guildflow/core/resources.py
"""Resource extraction and the resource catalog.

extract_resources() says what a single node would produce. resources_before()
composes it with the predecessor walk to answer "which roles, channels, and
flags exist before node X". The catalog keeps one entry per producing node;
unique_by_name() is for presentation only.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Sequence

from guildflow.contracts.graph import FlowEdge, FlowNode
from guildflow.contracts.node_data import CreateChannelData, CreateRoleData, SetGameFlagData
from guildflow.contracts.resources import (
    EMPTY_RESOURCES,
    ChannelResource,
    FlagResource,
    RoleResource,
    SelectOption,
    TemplateResources,
)
from guildflow.core.dag.traversal import find_predecessors


def extract_resources(node: FlowNode) -> TemplateResources:
    """Resources a node produces when executed. Blank names are never included."""
    data = node.data
    if isinstance(data, CreateRoleData):
        return TemplateResources(
            roles=tuple(RoleResource(name=name.strip(), source_node_id=node.id) for name in data.roles if name.strip())
        )
    if isinstance(data, CreateChannelData):
        return TemplateResources(
            channels=tuple(
                ChannelResource(name=channel.name.strip(), type=channel.type, source_node_id=node.id)
                for channel in data.channels
                if channel.name.strip()
            )
        )
    if isinstance(data, SetGameFlagData) and data.flag_key.strip():
        return TemplateResources(game_flags=(FlagResource(key=data.flag_key.strip(), source_node_id=node.id),))
    return EMPTY_RESOURCES


def resources_before(target_id: str, nodes: Sequence[FlowNode], edges: Iterable[FlowEdge]) -> TemplateResources:
    """Resources produced by every predecessor of target_id.

    The target's own resources are excluded unless the target lies on a
    cycle back to itself. Each producing node contributes once, however
    many paths lead from it to the target. Nodes are visited in graph order.
    """
    predecessors = find_predecessors(target_id, edges)
    catalog = EMPTY_RESOURCES
    for node in nodes:
        if node.id in predecessors:
            catalog = catalog.merge(extract_resources(node))
    return catalog


def all_resources(nodes: Iterable[FlowNode]) -> TemplateResources:
    """Resources produced anywhere in the graph."""
    catalog = EMPTY_RESOURCES
    for node in nodes:
        catalog = catalog.merge(extract_resources(node))
    return catalog


def unique_by_name[T](entries: Iterable[T], key: Callable[[T], str]) -> list[T]:
    """Drop entries whose name was already seen. First occurrence wins."""
    seen: set[str] = set()
    unique: list[T] = []
    for entry in entries:
        name = key(entry)
        if name not in seen:
            seen.add(name)
            unique.append(entry)
    return unique


def role_options(catalog: TemplateResources) -> list[SelectOption]:
    return [SelectOption(id=r.name, label=r.name) for r in unique_by_name(catalog.roles, lambda r: r.name)]


def channel_options(catalog: TemplateResources) -> list[SelectOption]:
    return [
        SelectOption(id=c.name, label=f"{c.name} ({c.type})") for c in unique_by_name(catalog.channels, lambda c: c.name)
    ]


def flag_options(catalog: TemplateResources) -> list[SelectOption]:
    return [SelectOption(id=f.key, label=f.key) for f in unique_by_name(catalog.game_flags, lambda f: f.key)]
