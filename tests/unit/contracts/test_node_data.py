# tests/unit/contracts/test_node_data.py
"""Tests for node payload contracts: defaults, aliases, and list minimums."""

from datetime import UTC, datetime

import pytest
from pydantic import ValidationError

from guildflow.contracts import (
    PAYLOAD_TYPES,
    BranchOption,
    Condition,
    ConditionalBranchData,
    CreateCategoryData,
    CreateRoleData,
    GameFlagValue,
    LiteralValue,
    MessageBlock,
    NodeKind,
    SelectBranchData,
    SetGameFlagData,
    condition_handle_id,
)
from guildflow.contracts.node_data import MAX_MESSAGE_LENGTH, Attachment, BlueprintParameters


class TestPayloadTypes:
    def test_every_kind_has_a_payload(self) -> None:
        assert set(PAYLOAD_TYPES) == set(NodeKind)

    def test_payload_types_are_distinct(self) -> None:
        """One payload model per kind, so the model identifies the kind."""
        assert len(set(PAYLOAD_TYPES.values())) == len(PAYLOAD_TYPES)


class TestSerialization:
    def test_dump_uses_camel_case_aliases(self) -> None:
        executed = datetime(2026, 1, 1, tzinfo=UTC)
        data = SetGameFlagData(flag_key="hp", flag_value="3", executed_at=executed)

        dumped = data.model_dump(by_alias=True)

        assert dumped == {"flagKey": "hp", "flagValue": "3", "executedAt": executed}

    def test_load_accepts_aliases_and_field_names(self) -> None:
        by_alias = SetGameFlagData.model_validate({"flagKey": "hp", "flagValue": "3"})
        by_name = SetGameFlagData.model_validate({"flag_key": "hp", "flag_value": "3"})

        assert by_alias == by_name

    def test_unknown_payload_field_is_rejected(self) -> None:
        with pytest.raises(ValidationError):
            CreateRoleData.model_validate({"roles": ["GM"], "colour": "red"})

    def test_payloads_are_frozen(self) -> None:
        data = CreateRoleData(roles=["GM"])

        with pytest.raises(ValidationError):
            data.roles = ["Player"]  # type: ignore[misc]

    def test_executed_flag_follows_executed_at(self) -> None:
        assert not CreateRoleData().is_executed
        assert CreateRoleData(executed_at=datetime(2026, 1, 1, tzinfo=UTC)).is_executed


class TestDefaults:
    def test_create_role_starts_with_one_blank_row(self) -> None:
        assert CreateRoleData().roles == [""]

    def test_category_name_defaults_to_empty_literal(self) -> None:
        assert CreateCategoryData().category_name == LiteralValue(value="")

    def test_category_name_accepts_bare_string(self) -> None:
        data = CreateCategoryData.model_validate({"categoryName": "Mansion"})

        assert data.category_name == LiteralValue(value="Mansion")

    def test_category_name_accepts_tagged_dynamic_value(self) -> None:
        data = CreateCategoryData.model_validate({"categoryName": {"type": "gameFlag", "flagKey": "scenario"}})

        assert data.category_name == GameFlagValue(flag_key="scenario")

    def test_unknown_dynamic_value_type_is_rejected(self) -> None:
        with pytest.raises(ValidationError):
            CreateCategoryData.model_validate({"categoryName": {"type": "weather"}})


class TestListMinimums:
    def test_conditional_branch_needs_a_condition(self) -> None:
        with pytest.raises(ValidationError):
            ConditionalBranchData(conditions=[])

    def test_select_branch_needs_two_options(self) -> None:
        with pytest.raises(ValidationError):
            SelectBranchData(options=[BranchOption(id="a", label="A")])

    def test_select_branch_with_two_options_is_valid(self) -> None:
        data = SelectBranchData(options=[BranchOption(id="a", label="A"), BranchOption(id="b", label="B")])

        assert data.selected_value is None

    def test_message_content_is_bounded(self) -> None:
        MessageBlock(content="x" * MAX_MESSAGE_LENGTH)
        with pytest.raises(ValidationError):
            MessageBlock(content="x" * (MAX_MESSAGE_LENGTH + 1))

    def test_message_attachments_are_bounded(self) -> None:
        attachments = [Attachment(file_name=f"{i}.png", file_path=f"{i}.png", file_size=1) for i in range(5)]

        with pytest.raises(ValidationError):
            MessageBlock(attachments=attachments)

    def test_voice_channel_count_is_bounded(self) -> None:
        with pytest.raises(ValidationError):
            BlueprintParameters(voice_channel_count=11)


class TestFieldNormalization:
    def test_set_game_flag_trims_key_and_value(self) -> None:
        data = SetGameFlagData(flag_key="  hp ", flag_value=" 3 ")

        assert (data.flag_key, data.flag_value) == ("hp", "3")

    def test_message_block_emptiness(self) -> None:
        assert MessageBlock(content="   ").is_empty
        assert not MessageBlock(content="hello").is_empty
        assert not MessageBlock(attachments=[Attachment(file_name="a.png", file_path="a.png", file_size=3)]).is_empty


def test_condition_handle_id() -> None:
    condition = Condition(id="abc")

    assert condition_handle_id(condition.id) == "source-cond-abc"
