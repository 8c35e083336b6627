"""Result contracts for node execution.

An execution routine never reports through side channels: everything the
caller needs to present (counts, per-item failures, produced records, the
branch taken) comes back in one NodeExecutionResult.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from guildflow.contracts.enums import NodeKind
from guildflow.contracts.errors import ItemFailure
from guildflow.contracts.node_data import NodePayload


@dataclass(frozen=True, slots=True)
class NodeExecutionResult:
    """Outcome of executing one node.

    Attributes:
        node_id: Executed node
        kind: Its kind
        data: Node payload after execution (executed_at set only on full success)
        total: Number of items the node attempted
        success_count: Number of items that succeeded
        failures: One entry per failed item, in attempt order
        records: Records created or removed, for presentation
        active_handles: Output handles activated (branch nodes only)
        flags_written: Game flags written by this execution
    """

    node_id: str
    kind: NodeKind
    data: NodePayload
    total: int = 0
    success_count: int = 0
    failures: tuple[ItemFailure, ...] = ()
    records: tuple[Any, ...] = ()
    active_handles: tuple[str, ...] = ()
    flags_written: dict[str, str] = field(default_factory=dict)

    @property
    def executed(self) -> bool:
        return self.data.executed_at is not None

    @property
    def failure_count(self) -> int:
        return len(self.failures)

    @property
    def partial(self) -> bool:
        """Some items succeeded and some failed."""
        return self.success_count > 0 and bool(self.failures)
