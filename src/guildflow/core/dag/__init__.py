# src/guildflow/core/dag/__init__.py
"""Workflow graph: the store, traversal, validation, and blueprint expansion."""

from guildflow.core.dag.blueprint import blueprint_channels, expand_blueprint
from guildflow.core.dag.graph import WorkflowGraph, valid_branch_handles
from guildflow.core.dag.models import (
    SOURCE_HANDLE,
    TARGET_HANDLE,
    GraphState,
    GraphValidationError,
    GraphValidationWarning,
)
from guildflow.core.dag.store import GraphStore
from guildflow.core.dag.traversal import build_incoming_edges_map, find_predecessors

__all__ = [
    "SOURCE_HANDLE",
    "TARGET_HANDLE",
    "GraphState",
    "GraphStore",
    "GraphValidationError",
    "GraphValidationWarning",
    "WorkflowGraph",
    "blueprint_channels",
    "build_incoming_edges_map",
    "expand_blueprint",
    "find_predecessors",
    "valid_branch_handles",
]
