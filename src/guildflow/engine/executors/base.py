# src/guildflow/engine/executors/base.py
"""Helpers shared by the node executors.

Executors follow one shape: validate, resolve names, call the platform
item by item, record results, and stamp executedAt when every item
succeeded. ItemBatch carries the bookkeeping for the per-item part.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

import structlog

from guildflow.contracts.enums import NodeKind, ResourceKind
from guildflow.contracts.errors import ActionClientError, ItemFailure, UnresolvedResourceError
from guildflow.contracts.node_data import NodePayload
from guildflow.contracts.resources import ProgressUpdate, TemplateResources
from guildflow.contracts.results import NodeExecutionResult
from guildflow.engine.executors.types import ExecutionContext

logger = structlog.get_logger(__name__)


def non_blank(names: Iterable[str]) -> list[str]:
    """Trimmed names, blanks dropped, order kept."""
    return [name.strip() for name in names if name.strip()]


def declared_names(kind: ResourceKind, catalog: TemplateResources) -> frozenset[str]:
    match kind:
        case ResourceKind.ROLE:
            return catalog.role_names()
        case ResourceKind.CHANNEL:
            return catalog.channel_names()
        case ResourceKind.FLAG:
            return catalog.flag_keys()
        case ResourceKind.CATEGORY:
            return frozenset()


def resolve_names(
    node_id: str,
    kind: ResourceKind,
    names: Iterable[str],
    index: Mapping[str, str],
    catalog: TemplateResources,
) -> list[str]:
    """Map every name to its recorded id, or fail before any remote call.

    Raises:
        UnresolvedResourceError: Listing every name without a record
    """
    wanted = list(names)
    missing = [name for name in wanted if name not in index]
    if missing:
        declared = declared_names(kind, catalog)
        raise UnresolvedResourceError(
            node_id,
            kind,
            missing,
            declared_upstream=[name for name in missing if name in declared],
        )
    return [index[name] for name in wanted]


def stamp_executed[P: NodePayload](data: P, ctx: ExecutionContext, **updates: Any) -> P:
    """Copy of data with executedAt set, plus any result fields."""
    return data.model_copy(update={**updates, "executed_at": ctx.clock()})


class ItemBatch:
    """Counts, failures, and progress for one multi-item execution."""

    def __init__(self, node_id: str, kind: NodeKind, ctx: ExecutionContext, total: int) -> None:
        self.node_id = node_id
        self.kind = kind
        self.total = total
        self._ctx = ctx
        self._current = 0
        self.success_count = 0
        self.failures: list[ItemFailure] = []
        self.records: list[Any] = []
        self._log = logger.bind(node_id=node_id, kind=str(kind))

    def start(self, item: str) -> None:
        self._current += 1
        if self._ctx.on_progress is not None:
            self._ctx.on_progress(ProgressUpdate(node_id=self.node_id, current=self._current, total=self.total, item=item))

    def succeeded(self, item: str, record: Any = None) -> None:
        self.success_count += 1
        if record is not None:
            self.records.append(record)
        self._log.info("Item succeeded", item=item)

    def failed(self, item: str, error: ActionClientError) -> None:
        self.failures.append(error.to_failure(item))
        self._log.warning(
            "Item failed",
            item=item,
            operation=error.operation,
            status_code=error.status_code,
            error=error.detail,
        )

    @property
    def complete(self) -> bool:
        return self.success_count == self.total

    def result(self, data: NodePayload, **extra: Any) -> NodeExecutionResult:
        """Build the result. executedAt is stamped only when every item succeeded."""
        final = stamp_executed(data, self._ctx) if self.complete else data
        return NodeExecutionResult(
            node_id=self.node_id,
            kind=self.kind,
            data=final,
            total=self.total,
            success_count=self.success_count,
            failures=tuple(self.failures),
            records=tuple(self.records),
            **extra,
        )
