# src/guildflow/core/dag/defaults.py
"""Default payloads for nodes created in the editor."""

from __future__ import annotations

from guildflow.contracts.enums import NodeKind
from guildflow.contracts.node_data import (
    PAYLOAD_TYPES,
    BranchOption,
    Condition,
    ConditionalBranchData,
    NodePayload,
    SelectBranchData,
)
from guildflow.core.identifiers import short_id


def default_payload(kind: NodeKind) -> NodePayload:
    """Fresh payload for a new node of the given kind.

    Kinds whose payload requires a minimum list length get the smallest
    valid list; everything else uses the payload model's own defaults.
    """
    match kind:
        case NodeKind.CONDITIONAL_BRANCH:
            return ConditionalBranchData(conditions=[Condition(id=short_id())])
        case NodeKind.SELECT_BRANCH:
            return SelectBranchData(
                options=[
                    BranchOption(id=short_id(), label="選択肢1"),
                    BranchOption(id=short_id(), label="選択肢2"),
                ]
            )
        case _:
            return PAYLOAD_TYPES[kind]()
