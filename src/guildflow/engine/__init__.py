# src/guildflow/engine/__init__.py
"""Workflow engine: value resolution, branching, assignment, and node execution.

Public entry point is execute_node(); the pure helpers are exported for
callers that render selection lists or preview outcomes.
"""

from guildflow.engine.combinations import PairValidation, get_filtered_target_options, validate_pair
from guildflow.engine.conditions import evaluate_condition, evaluate_conditions
from guildflow.engine.dynamic_values import build_dynamic_context, resolve_dynamic_value
from guildflow.engine.executors import ExecutionContext, OperatorInput, SessionContext, execute_node
from guildflow.engine.shuffle import assignment_flags, fisher_yates_shuffle, shuffle_assign

__all__ = [
    "ExecutionContext",
    "OperatorInput",
    "PairValidation",
    "SessionContext",
    "assignment_flags",
    "build_dynamic_context",
    "evaluate_condition",
    "evaluate_conditions",
    "execute_node",
    "fisher_yates_shuffle",
    "get_filtered_target_options",
    "resolve_dynamic_value",
    "shuffle_assign",
    "validate_pair",
]
