# tests/unit/engine/test_combinations.py
"""Tests for pair validation, target filtering, and the pair log."""

import pytest

from guildflow.contracts import CombinationConfig, CombinationMode, OptionItem, RecordCombinationData, RecordedPair
from guildflow.engine import get_filtered_target_options, validate_pair
from guildflow.engine.combinations import (
    ALREADY_RECORDED,
    DUPLICATE_PAIR,
    MISSING_SELECTION,
    SELF_PAIRING,
    record_pair,
    remove_pair,
)
from tests.fixtures.factories import FIXED_NOW, fixed_clock

OPTIONS = [OptionItem(id="a", label="Alice"), OptionItem(id="b", label="Bob"), OptionItem(id="c", label="Carol")]


def _pair(source: str, target: str, pair_id: str = "p1") -> RecordedPair:
    return RecordedPair(id=pair_id, source_id=source, target_id=target, recorded_at=FIXED_NOW)


class TestValidatePair:
    def test_missing_selection(self) -> None:
        assert validate_pair(CombinationConfig(), [], "a", "") == validate_pair(CombinationConfig(), [], "", "b")
        assert validate_pair(CombinationConfig(), [], "", "b").error == MISSING_SELECTION

    def test_self_pairing_rejected_in_same_set(self) -> None:
        result = validate_pair(CombinationConfig(), [], "a", "a")

        assert not result.valid
        assert result.error == SELF_PAIRING

    def test_self_pairing_allowed_when_configured(self) -> None:
        assert validate_pair(CombinationConfig(allow_self_pairing=True), [], "a", "a").valid

    def test_equal_ids_allowed_across_sets(self) -> None:
        config = CombinationConfig(mode=CombinationMode.DIFFERENT_SET)

        assert validate_pair(config, [], "a", "a").valid

    def test_duplicate_rejected(self) -> None:
        result = validate_pair(CombinationConfig(), [_pair("a", "b")], "a", "b")

        assert result.error == DUPLICATE_PAIR

    def test_reverse_pair_is_distinct_when_order_matters(self) -> None:
        assert validate_pair(CombinationConfig(distinguish_order=True), [_pair("a", "b")], "b", "a").valid

    def test_reverse_pair_is_duplicate_when_order_ignored(self) -> None:
        result = validate_pair(CombinationConfig(distinguish_order=False), [_pair("a", "b")], "b", "a")

        assert result.error == DUPLICATE_PAIR

    def test_duplicates_allowed_when_configured(self) -> None:
        assert validate_pair(CombinationConfig(allow_duplicates=True), [_pair("a", "b")], "a", "b").valid


class TestFilteredTargetOptions:
    def test_same_set_disables_self_and_recorded(self) -> None:
        options = get_filtered_target_options(CombinationConfig(), OPTIONS, None, [_pair("a", "b")], "a")

        assert [(o.id, o.disabled, o.reason) for o in options] == [
            ("a", True, SELF_PAIRING),
            ("b", True, ALREADY_RECORDED),
            ("c", False, None),
        ]
        assert options[2].label == "Carol"

    def test_different_set_uses_target_options(self) -> None:
        config = CombinationConfig(mode=CombinationMode.DIFFERENT_SET)
        targets = [OptionItem(id="x", label="Knife"), OptionItem(id="a", label="Attic")]

        options = get_filtered_target_options(config, OPTIONS, targets, [], "a")

        assert [(o.id, o.disabled) for o in options] == [("x", False), ("a", False)]

    def test_different_set_without_targets_is_empty(self) -> None:
        config = CombinationConfig(mode=CombinationMode.DIFFERENT_SET)

        assert get_filtered_target_options(config, OPTIONS, None, [], "a") == []

    def test_no_selected_source_disables_nothing_recorded(self) -> None:
        options = get_filtered_target_options(CombinationConfig(), OPTIONS, None, [_pair("a", "b")], None)

        assert not any(o.disabled for o in options)

    def test_agrees_with_validate_pair(self) -> None:
        config = CombinationConfig(distinguish_order=False)
        recorded = [_pair("a", "b")]

        for source in OPTIONS:
            options = get_filtered_target_options(config, OPTIONS, None, recorded, source.id)
            for option in options:
                assert option.disabled is not validate_pair(config, recorded, source.id, option.id).valid


class TestRecordPair:
    def test_appends_with_trimmed_memo(self) -> None:
        data = RecordCombinationData(source_options={"items": OPTIONS})

        updated, pair = record_pair(data, "a", "b", memo="  alibi  ", now=fixed_clock)

        assert updated.recorded_pairs == [pair]
        assert (pair.source_id, pair.target_id, pair.memo, pair.recorded_at) == ("a", "b", "alibi", FIXED_NOW)
        assert data.recorded_pairs == []

    def test_blank_memo_is_dropped(self) -> None:
        _, pair = record_pair(RecordCombinationData(), "a", "b", memo="   ", now=fixed_clock)

        assert pair.memo is None

    def test_invalid_pair_raises(self) -> None:
        with pytest.raises(ValueError, match=SELF_PAIRING):
            record_pair(RecordCombinationData(), "a", "a", now=fixed_clock)

    def test_remove_pair(self) -> None:
        data = RecordCombinationData(recorded_pairs=[_pair("a", "b", "p1"), _pair("a", "c", "p2")])

        assert [p.id for p in remove_pair(data, "p1").recorded_pairs] == ["p2"]
        assert remove_pair(data, "unknown") == data
