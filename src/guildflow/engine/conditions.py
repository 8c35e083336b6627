# src/guildflow/engine/conditions.py
"""Condition evaluation for ConditionalBranch nodes.

Conditions are checked in list order and the first one that holds wins,
so authors can put specific conditions before broad ones.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping

from guildflow.contracts.enums import ConditionOperator
from guildflow.contracts.node_data import Condition


def evaluate_condition(condition: Condition, flags: Mapping[str, str]) -> bool:
    """Evaluate one condition. A missing flag satisfies only notEquals and notExists."""
    exists = condition.flag_key in flags
    match condition.operator:
        case ConditionOperator.EQUALS:
            return exists and flags[condition.flag_key] == condition.value
        case ConditionOperator.NOT_EQUALS:
            return not exists or flags[condition.flag_key] != condition.value
        case ConditionOperator.CONTAINS:
            return exists and condition.value in flags[condition.flag_key]
        case ConditionOperator.EXISTS:
            return exists
        case ConditionOperator.NOT_EXISTS:
            return not exists


def evaluate_conditions(conditions: Iterable[Condition], flags: Mapping[str, str]) -> str | None:
    """Id of the first condition that holds, or None."""
    for condition in conditions:
        if evaluate_condition(condition, flags):
            return condition.id
    return None
