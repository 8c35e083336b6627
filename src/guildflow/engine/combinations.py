# src/guildflow/engine/combinations.py
"""Pair validation and recording for RecordCombination nodes.

validate_pair() decides whether a pair may be recorded;
get_filtered_target_options() applies the same policy ahead of time to a
selection list, so invalid targets are shown disabled with a reason.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass
from datetime import datetime

from guildflow.contracts.enums import CombinationMode
from guildflow.contracts.node_data import CombinationConfig, OptionItem, RecordCombinationData, RecordedPair
from guildflow.contracts.resources import SelectOption
from guildflow.core.identifiers import short_id

MISSING_SELECTION = "select both a source and a target"
SELF_PAIRING = "cannot pair with itself"
DUPLICATE_PAIR = "this pair is already recorded"
ALREADY_RECORDED = "already recorded"


@dataclass(frozen=True, slots=True)
class PairValidation:
    valid: bool
    error: str | None = None


def _is_recorded(config: CombinationConfig, pairs: Sequence[RecordedPair], source_id: str, target_id: str) -> bool:
    for pair in pairs:
        if pair.source_id == source_id and pair.target_id == target_id:
            return True
        if not config.distinguish_order and pair.source_id == target_id and pair.target_id == source_id:
            return True
    return False


def validate_pair(
    config: CombinationConfig,
    recorded_pairs: Sequence[RecordedPair],
    source_id: str,
    target_id: str,
) -> PairValidation:
    """Check a candidate pair against the node's pairing policy.

    Self-pairing is only restricted in same-set mode; in different-set mode
    equal ids belong to different option sets.
    """
    if not source_id or not target_id:
        return PairValidation(valid=False, error=MISSING_SELECTION)
    if config.mode == CombinationMode.SAME_SET and not config.allow_self_pairing and source_id == target_id:
        return PairValidation(valid=False, error=SELF_PAIRING)
    if not config.allow_duplicates and _is_recorded(config, recorded_pairs, source_id, target_id):
        return PairValidation(valid=False, error=DUPLICATE_PAIR)
    return PairValidation(valid=True)


def get_filtered_target_options(
    config: CombinationConfig,
    source_options: Sequence[OptionItem],
    target_options: Sequence[OptionItem] | None,
    recorded_pairs: Sequence[RecordedPair],
    selected_source_id: str | None,
) -> list[SelectOption]:
    """Target choices for the selected source, with invalid ones disabled.

    Same-set mode draws targets from the source options; different-set mode
    from target_options (empty when unset).
    """
    base = source_options if config.mode == CombinationMode.SAME_SET else (target_options or [])
    options: list[SelectOption] = []
    for item in base:
        reason: str | None = None
        if config.mode == CombinationMode.SAME_SET and not config.allow_self_pairing and item.id == selected_source_id:
            reason = SELF_PAIRING
        elif (
            not config.allow_duplicates
            and selected_source_id
            and _is_recorded(config, recorded_pairs, selected_source_id, item.id)
        ):
            reason = ALREADY_RECORDED
        options.append(SelectOption(id=item.id, label=item.label, disabled=reason is not None, reason=reason))
    return options


def record_pair(
    data: RecordCombinationData,
    source_id: str,
    target_id: str,
    *,
    memo: str | None = None,
    now: Callable[[], datetime],
) -> tuple[RecordCombinationData, RecordedPair]:
    """Append a validated pair to the log.

    Raises:
        ValueError: If the pair violates the node's pairing policy
    """
    validation = validate_pair(data.config, data.recorded_pairs, source_id, target_id)
    if not validation.valid:
        raise ValueError(validation.error)
    pair = RecordedPair(
        id=short_id(),
        source_id=source_id,
        target_id=target_id,
        recorded_at=now(),
        memo=(memo.strip() or None) if memo is not None else None,
    )
    return data.model_copy(update={"recorded_pairs": [*data.recorded_pairs, pair]}), pair


def remove_pair(data: RecordCombinationData, pair_id: str) -> RecordCombinationData:
    """Drop a recorded pair. Unknown ids leave the log unchanged."""
    return data.model_copy(update={"recorded_pairs": [p for p in data.recorded_pairs if p.id != pair_id]})
