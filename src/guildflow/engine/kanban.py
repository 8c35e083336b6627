# src/guildflow/engine/kanban.py
"""Card placement on Kanban nodes.

Each card has at most one current placement. Before the first move the
board shows the initial placements; the first move copies them over so
that untouched cards keep their columns.
"""

from __future__ import annotations

from datetime import datetime

from guildflow.contracts.node_data import CardPlacement, KanbanData


def current_column(data: KanbanData, card_id: str) -> str | None:
    """Column a card is in: its last move, else its initial placement, else None."""
    for placement in data.card_placements:
        if placement.card_id == card_id:
            return placement.column_id
    for initial in data.initial_placements:
        if initial.card_id == card_id:
            return initial.column_id
    return None


def move_card(data: KanbanData, card_id: str, column_id: str, *, now: datetime) -> KanbanData:
    """Place a card in a column.

    Raises:
        ValueError: If the card or column does not exist on the board
    """
    if card_id not in {card.id for card in data.cards}:
        raise ValueError(f"Unknown card: {card_id!r}")
    if column_id not in {column.id for column in data.columns}:
        raise ValueError(f"Unknown column: {column_id!r}")

    placements = list(data.card_placements)
    if not placements:
        placements = [CardPlacement(card_id=p.card_id, column_id=p.column_id, moved_at=now) for p in data.initial_placements]

    moved = CardPlacement(card_id=card_id, column_id=column_id, moved_at=now)
    for index, placement in enumerate(placements):
        if placement.card_id == card_id:
            placements[index] = moved
            break
    else:
        placements.append(moved)
    return data.model_copy(update={"card_placements": placements})
