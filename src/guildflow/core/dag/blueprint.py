# src/guildflow/core/dag/blueprint.py
"""Blueprint expansion - replaces a Blueprint node with a provisioning chain.

A blueprint describes a typical game setup (characters, shared channels,
voice channels, a category) and expands into a linear chain of ordinary
nodes, top to bottom:

    CreateRole -> CreateCategory -> CreateChannel -> AddRoleToRoleMembers
        -> DeleteCategory -> DeleteRole

CreateCategory is skipped without a category name and CreateChannel is
skipped when no channel would be created. The teardown nodes at the end
are executed by the operator once the game is over.
"""

from __future__ import annotations

from guildflow.contracts.dynamic_value import LiteralValue
from guildflow.contracts.enums import ChannelType, NodeKind
from guildflow.contracts.graph import FlowEdge, FlowNode, Position
from guildflow.contracts.node_data import (
    AddRoleToRoleMembersData,
    BlueprintData,
    ChannelSpec,
    CreateCategoryData,
    CreateChannelData,
    CreateRoleData,
    DeleteCategoryData,
    DeleteRoleData,
    NodePayload,
    RolePermission,
)
from guildflow.core.dag.models import (
    BLUEPRINT_VERTICAL_SPACING,
    SOURCE_HANDLE,
    TARGET_HANDLE,
    GraphState,
    GraphValidationError,
)
from guildflow.core.identifiers import generate_next_id

PLAYER_ROLE = "PL"
SPECTATOR_ROLE = "観戦"
COMMON_ROLES: tuple[str, ...] = (PLAYER_ROLE, SPECTATOR_ROLE)


def blueprint_channels(data: BlueprintData) -> list[ChannelSpec]:
    """Channels a blueprint creates, in creation order.

    - shared text channels: writable by every common role
    - one text channel per character: the character writes, spectators read
    - VC-1..n voice channels: usable by every common role
    """
    params = data.parameters
    common_write = [RolePermission(role_name=name, can_write=True) for name in COMMON_ROLES]
    channels = [
        ChannelSpec(name=name.strip(), type=ChannelType.TEXT, role_permissions=common_write)
        for name in params.shared_text_channels
        if name.strip()
    ]
    for character in (name.strip() for name in params.character_names):
        if not character:
            continue
        channels.append(
            ChannelSpec(
                name=character,
                type=ChannelType.TEXT,
                role_permissions=[
                    RolePermission(role_name=character, can_write=True),
                    RolePermission(role_name=SPECTATOR_ROLE, can_write=False),
                ],
            )
        )
    for index in range(1, params.voice_channel_count + 1):
        channels.append(ChannelSpec(name=f"VC-{index}", type=ChannelType.VOICE, role_permissions=common_write))
    return channels


def expand_blueprint(state: GraphState, node_id: str) -> GraphState:
    """Return a new state with the blueprint node replaced by its chain.

    Edges touching the blueprint node are dropped with it. Generated nodes
    are stacked below the blueprint's position.

    Raises:
        GraphValidationError: If node_id is missing or not a Blueprint node
    """
    blueprint = state.find_node(node_id)
    if blueprint is None:
        raise GraphValidationError(f"Unknown node: {node_id!r}")
    if not isinstance(blueprint.data, BlueprintData):
        raise GraphValidationError(f"Node {node_id!r} is {blueprint.type}, not {NodeKind.BLUEPRINT}")

    params = blueprint.data.parameters
    characters = [name.strip() for name in params.character_names if name.strip()]
    category_name = params.category_name.strip()
    channels = blueprint_channels(blueprint.data)

    steps: list[tuple[NodeKind, NodePayload]] = [
        (NodeKind.CREATE_ROLE, CreateRoleData(roles=[*COMMON_ROLES, *characters])),
    ]
    if category_name:
        steps.append((NodeKind.CREATE_CATEGORY, CreateCategoryData(category_name=LiteralValue(value=category_name))))
    if channels:
        steps.append((NodeKind.CREATE_CHANNEL, CreateChannelData(channels=channels)))
    steps.extend(
        [
            (
                NodeKind.ADD_ROLE_TO_ROLE_MEMBERS,
                AddRoleToRoleMembersData(member_role_name=PLAYER_ROLE, add_role_name=SPECTATOR_ROLE),
            ),
            (NodeKind.DELETE_CATEGORY, DeleteCategoryData()),
            (NodeKind.DELETE_ROLE, DeleteRoleData(delete_all=True, role_names=[])),
        ]
    )

    remaining = [node for node in state.nodes if node.id != node_id]
    taken_ids = [node.id for node in remaining]
    generated_nodes: list[FlowNode] = []
    generated_edges: list[FlowEdge] = []
    previous_id: str | None = None

    for offset, (kind, payload) in enumerate(steps):
        new_id = generate_next_id(taken_ids, kind.value)
        taken_ids.append(new_id)
        generated_nodes.append(
            FlowNode(
                id=new_id,
                type=kind,
                position=Position(x=blueprint.position.x, y=blueprint.position.y + offset * BLUEPRINT_VERTICAL_SPACING),
                data=payload,
            )
        )
        if previous_id is not None:
            generated_edges.append(
                FlowEdge(
                    id=f"{previous_id}-{new_id}",
                    source=previous_id,
                    target=new_id,
                    source_handle=SOURCE_HANDLE,
                    target_handle=TARGET_HANDLE,
                )
            )
        previous_id = new_id

    kept_edges = [edge for edge in state.edges if node_id not in (edge.source, edge.target)]
    return GraphState(
        nodes=(*remaining, *generated_nodes),
        edges=(*kept_edges, *generated_edges),
        viewport=state.viewport,
        initialized=state.initialized,
    )
