# src/guildflow/engine/executors/types.py
"""Shared types for executor modules."""

from __future__ import annotations

import random
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime

from guildflow.contracts.protocols import ActionClient, AttachmentStore, ResourceStore, SessionStore
from guildflow.contracts.resources import ProgressUpdate


def utc_now() -> datetime:
    return datetime.now(UTC)


@dataclass(frozen=True, slots=True)
class SessionContext:
    """The concrete session a workflow is replayed in."""

    session_id: str
    session_name: str
    guild_id: str


@dataclass(frozen=True, slots=True)
class OperatorInput:
    """Choices the operator makes at execution time.

    Only the fields relevant to the executed node kind are read:
    selection for SelectBranch, source_id/target_id/memo for
    RecordCombination, card_id/column_id for Kanban.
    """

    selection: str | None = None
    source_id: str | None = None
    target_id: str | None = None
    memo: str | None = None
    card_id: str | None = None
    column_id: str | None = None


@dataclass
class ExecutionContext:
    """Collaborators handed to every node executor.

    Attributes:
        session: Session being provisioned
        client: Platform action client
        resources: Recorded role/category/channel mappings
        sessions: Session and game-flag storage
        attachments: Attachment reader, required only by SendMessage nodes with files
        rng: Random source for ShuffleAssign
        clock: Timestamp source for executedAt and logs
        on_progress: Called before each remote item of a multi-item node
        member_page_size: Page size when listing guild members
    """

    session: SessionContext
    client: ActionClient
    resources: ResourceStore
    sessions: SessionStore
    attachments: AttachmentStore | None = None
    rng: random.Random = field(default_factory=random.Random)
    clock: Callable[[], datetime] = utc_now
    on_progress: Callable[[ProgressUpdate], None] | None = None
    member_page_size: int = 1000
