# tests/unit/core/test_workflow_graph.py
"""Tests for WorkflowGraph validation: integrity errors and structural warnings."""

import pytest

from guildflow.contracts import FlowEdge, NodeKind
from guildflow.core.dag import GraphValidationError, WorkflowGraph, valid_branch_handles
from tests.fixtures.factories import chain, make_edge, make_node


def _branch(node_id: str = "ConditionalBranch-1", *, has_default: bool = True):
    return make_node(
        NodeKind.CONDITIONAL_BRANCH,
        node_id,
        conditions=[{"id": "c1", "flag_key": "route"}],
        has_default_branch=has_default,
    )


class TestValidate:
    def test_linear_workflow_has_no_warnings(self) -> None:
        nodes = [
            make_node(NodeKind.CREATE_ROLE, "CreateRole-1"),
            make_node(NodeKind.CREATE_CATEGORY, "CreateCategory-1"),
            make_node(NodeKind.CREATE_CHANNEL, "CreateChannel-1"),
        ]
        graph = WorkflowGraph.from_elements(nodes, chain(*nodes))

        assert graph.validate() == []
        assert graph.is_acyclic()
        assert (graph.node_count, graph.edge_count) == (3, 2)

    def test_dangling_edge_is_an_error(self) -> None:
        graph = WorkflowGraph.from_elements([make_node(NodeKind.CREATE_ROLE, "CreateRole-1")], [make_edge("CreateRole-1", "Gone-1")])

        with pytest.raises(GraphValidationError, match="missing nodes"):
            graph.validate()

    def test_duplicate_edge_ids_are_an_error(self) -> None:
        a = make_node(NodeKind.CREATE_ROLE, "CreateRole-1")
        b = make_node(NodeKind.DELETE_ROLE, "DeleteRole-1")
        edge = FlowEdge(id="e1", source=a.id, target=b.id)

        graph = WorkflowGraph.from_elements([a, b], [edge, edge])

        with pytest.raises(GraphValidationError, match="Duplicate edge ids: e1"):
            graph.validate()

    def test_duplicate_node_id_is_rejected_on_add(self) -> None:
        graph = WorkflowGraph()
        graph.add_node(make_node(NodeKind.COMMENT, "Comment-1"))

        with pytest.raises(GraphValidationError):
            graph.add_node(make_node(NodeKind.COMMENT, "Comment-1"))

    def test_cycle_is_a_warning(self) -> None:
        a = make_node(NodeKind.SET_GAME_FLAG, "SetGameFlag-1")
        b = make_node(NodeKind.SET_GAME_FLAG, "SetGameFlag-2")
        graph = WorkflowGraph.from_elements([a, b], [make_edge(a.id, b.id), make_edge(b.id, a.id)])

        warnings = graph.validate()

        assert [w.code for w in warnings] == ["CYCLE"]
        assert warnings[0].node_ids == ("SetGameFlag-1", "SetGameFlag-2")
        assert not graph.is_acyclic()

    def test_self_loop_is_a_cycle(self) -> None:
        a = make_node(NodeKind.SET_GAME_FLAG, "SetGameFlag-1")
        graph = WorkflowGraph.from_elements([a], [make_edge(a.id, a.id)])

        assert graph.find_cycles() == [("SetGameFlag-1",)]

    def test_edge_from_removed_branch_port_is_a_warning(self) -> None:
        branch = _branch(has_default=False)
        target = make_node(NodeKind.SEND_MESSAGE, "SendMessage-1")
        graph = WorkflowGraph.from_elements([branch, target], [make_edge(branch.id, target.id, source_handle="source-default")])

        warnings = graph.validate()

        assert [w.code for w in warnings] == ["STALE_HANDLE"]

    def test_annotation_edge_is_a_warning(self) -> None:
        comment = make_node(NodeKind.COMMENT, "Comment-1")
        role = make_node(NodeKind.CREATE_ROLE, "CreateRole-1")
        graph = WorkflowGraph.from_elements([comment, role], [make_edge(comment.id, role.id)])

        assert [w.code for w in graph.validate()] == ["ANNOTATION_EDGE"]

    def test_parallel_edges_between_same_nodes_are_kept(self) -> None:
        """Two conditions of one branch may lead to the same node."""
        branch = make_node(
            NodeKind.CONDITIONAL_BRANCH,
            "ConditionalBranch-1",
            conditions=[{"id": "c1"}, {"id": "c2"}],
        )
        target = make_node(NodeKind.SEND_MESSAGE, "SendMessage-1")
        edges = [
            make_edge(branch.id, target.id, source_handle="source-cond-c1"),
            make_edge(branch.id, target.id, source_handle="source-cond-c2"),
        ]

        graph = WorkflowGraph.from_elements([branch, target], edges)

        assert graph.get_nx_graph().number_of_edges(branch.id, target.id) == 2
        assert graph.validate() == []


def test_valid_branch_handles() -> None:
    assert valid_branch_handles(_branch().data) == {"source-cond-c1", "source-default"}  # type: ignore[arg-type]
    assert valid_branch_handles(_branch(has_default=False).data) == {"source-cond-c1"}  # type: ignore[arg-type]
