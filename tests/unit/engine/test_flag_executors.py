# tests/unit/engine/test_flag_executors.py
"""Tests for SetGameFlag, ConditionalBranch, SelectBranch, and ShuffleAssign execution."""

from collections.abc import Callable

import pytest

from guildflow.contracts import (
    DEFAULT_HANDLE_ID,
    NodeKind,
    NodeValidationError,
    SessionRecord,
    condition_handle_id,
)
from guildflow.core.dag import GraphStore
from guildflow.core.registry import SqlSessionStore
from guildflow.engine.executors import ExecutionContext, OperatorInput, execute_node
from tests.fixtures.factories import make_node, make_store
from tests.fixtures.fakes import FakeActionClient

CONDITIONS = [
    {"id": "c1", "flagKey": "culprit", "operator": "equals", "value": "maid"},
    {"id": "c2", "flagKey": "culprit", "operator": "exists"},
]
OPTIONS = [{"id": "o1", "label": "Attic"}, {"id": "o2", "label": "Cellar"}]


class TestSetGameFlag:
    @pytest.mark.asyncio
    async def test_writes_trimmed_flag(
        self,
        ctx: ExecutionContext,
        session_store: SqlSessionStore,
        session: SessionRecord,
        fake_client: FakeActionClient,
    ) -> None:
        store = make_store([make_node(NodeKind.SET_GAME_FLAG, flag_key=" culprit ", flag_value=" butler ")])

        result = await execute_node(store, "SetGameFlag-1", ctx)

        assert result.executed
        assert result.flags_written == {"culprit": "butler"}
        assert session_store.get_flags(session.id) == {"culprit": "butler"}
        assert fake_client.calls == []

    @pytest.mark.asyncio
    async def test_key_required(self, ctx: ExecutionContext) -> None:
        store = make_store([make_node(NodeKind.SET_GAME_FLAG, flag_key="  ", flag_value="x")])

        with pytest.raises(NodeValidationError, match="Flag key"):
            await execute_node(store, "SetGameFlag-1", ctx)


class TestConditionalBranch:
    @pytest.mark.asyncio
    async def test_first_matching_condition_port(
        self, ctx: ExecutionContext, session_store: SqlSessionStore, session: SessionRecord
    ) -> None:
        session_store.set_flags(session.id, {"culprit": "butler"})
        store = make_store([make_node(NodeKind.CONDITIONAL_BRANCH, conditions=CONDITIONS)])

        result = await execute_node(store, "ConditionalBranch-1", ctx)

        assert result.active_handles == (condition_handle_id("c2"),)
        assert result.data.evaluated_condition_id == "c2"
        assert result.executed

    @pytest.mark.asyncio
    async def test_no_match_takes_default_port(self, ctx: ExecutionContext) -> None:
        store = make_store([make_node(NodeKind.CONDITIONAL_BRANCH, conditions=CONDITIONS)])

        result = await execute_node(store, "ConditionalBranch-1", ctx)

        assert result.active_handles == (DEFAULT_HANDLE_ID,)
        assert result.data.evaluated_condition_id == "default"

    @pytest.mark.asyncio
    async def test_no_match_without_default_port_activates_nothing(self, ctx: ExecutionContext) -> None:
        store = make_store(
            [make_node(NodeKind.CONDITIONAL_BRANCH, conditions=CONDITIONS, has_default_branch=False)]
        )

        result = await execute_node(store, "ConditionalBranch-1", ctx)

        assert result.active_handles == ()
        assert result.data.evaluated_condition_id == "default"
        assert result.executed


class TestSelectBranch:
    @pytest.mark.asyncio
    async def test_selection_written_to_flag(
        self, ctx: ExecutionContext, session_store: SqlSessionStore, session: SessionRecord
    ) -> None:
        store = make_store([make_node(NodeKind.SELECT_BRANCH, options=OPTIONS, flag_name="room")])

        result = await execute_node(store, "SelectBranch-1", ctx, OperatorInput(selection="Cellar"))

        assert result.data.selected_value == "Cellar"
        assert session_store.get_flags(session.id) == {"room": "Cellar"}
        assert store.get_node("SelectBranch-1").data.selected_value == "Cellar"

    @pytest.mark.asyncio
    async def test_pinned_value_used_without_operator_input(self, ctx: ExecutionContext) -> None:
        store = make_store(
            [make_node(NodeKind.SELECT_BRANCH, options=OPTIONS, flag_name="room", selected_value="Attic")]
        )

        result = await execute_node(store, "SelectBranch-1", ctx)

        assert result.flags_written == {"room": "Attic"}

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        ("selection", "flag_name", "message"),
        [(None, "room", "Choose an option"), ("Garden", "room", "Unknown option"), ("Attic", " ", "Flag name")],
    )
    async def test_invalid_selection(
        self, ctx: ExecutionContext, selection: str | None, flag_name: str, message: str
    ) -> None:
        store = make_store([make_node(NodeKind.SELECT_BRANCH, options=OPTIONS, flag_name=flag_name)])

        with pytest.raises(NodeValidationError, match=message):
            await execute_node(store, "SelectBranch-1", ctx, OperatorInput(selection=selection))


class TestShuffleAssign:
    @pytest.mark.asyncio
    async def test_assignment_flags_written(
        self, ctx: ExecutionContext, session_store: SqlSessionStore, session: SessionRecord
    ) -> None:
        store = make_store(
            [
                make_node(
                    NodeKind.SHUFFLE_ASSIGN,
                    items=["wolf", "seer", "villager", ""],
                    targets=["Alice", "Bob"],
                    result_flag_prefix="role",
                )
            ]
        )

        result = await execute_node(store, "ShuffleAssign-1", ctx)

        assigned = result.data.assigned_results
        assert set(assigned) == {"Alice", "Bob"}
        assert sorted(item for items in assigned.values() for item in items) == ["seer", "villager", "wolf"]
        flags = session_store.get_flags(session.id)
        assert set(flags) == {"role_Alice", "role_Bob"}
        assert result.flags_written == flags

    @pytest.mark.asyncio
    async def test_same_seed_same_assignment(self, make_ctx: Callable[..., ExecutionContext]) -> None:
        def build() -> GraphStore:
            return make_store(
                [make_node(NodeKind.SHUFFLE_ASSIGN, items=["a", "b", "c"], targets=["x", "y"], result_flag_prefix="p")]
            )

        first = await execute_node(build(), "ShuffleAssign-1", make_ctx())
        second = await execute_node(build(), "ShuffleAssign-1", make_ctx())

        assert first.data.assigned_results == second.data.assigned_results

    @pytest.mark.asyncio
    async def test_prefix_required(self, ctx: ExecutionContext) -> None:
        store = make_store([make_node(NodeKind.SHUFFLE_ASSIGN, items=["a"], targets=["x"], result_flag_prefix="")])

        with pytest.raises(NodeValidationError, match="prefix"):
            await execute_node(store, "ShuffleAssign-1", ctx)
