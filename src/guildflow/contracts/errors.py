"""Error contracts for node execution.

Validation errors are raised before any external call and leave the node
untouched. Per-item remote failures are not raised out of an execution;
they are collected as ItemFailure records in the NodeExecutionResult.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import NotRequired, TypedDict

from guildflow.contracts.enums import NodeKind, ResourceKind


class ItemFailure(TypedDict):
    """Schema for one failed item of a multi-item execution."""

    item: str  # Name of the role/channel/message the call was for
    error: str  # String representation of the exception
    error_type: str  # Exception class name (e.g., "ActionClientError")
    status_code: NotRequired[int]  # Platform HTTP status, when known


class GuildflowError(Exception):
    """Base class for all guildflow errors."""


class NodeValidationError(GuildflowError):
    """Node inputs are invalid; nothing was sent to the platform.

    Recoverable by editing the node and executing again.
    """

    def __init__(self, node_id: str, message: str) -> None:
        self.node_id = node_id
        self.message = message
        super().__init__(f"{node_id}: {message}")


class UnresolvedResourceError(NodeValidationError):
    """Named resources are not recorded for the session.

    Raised once per node execution listing every unresolved name, before
    any remote call. Names declared by an upstream node that simply have
    not been created yet are reported separately.
    """

    def __init__(
        self,
        node_id: str,
        kind: ResourceKind,
        names: Iterable[str],
        *,
        declared_upstream: Iterable[str] = (),
    ) -> None:
        self.kind = kind
        self.names = tuple(dict.fromkeys(names))
        self.declared_upstream = tuple(name for name in dict.fromkeys(declared_upstream) if name in self.names)
        message = f"{kind} not found in session: {', '.join(self.names)}"
        if self.declared_upstream:
            message += f" (declared upstream but not created yet: {', '.join(self.declared_upstream)})"
        super().__init__(node_id, message)


class AttachmentReadError(NodeValidationError):
    """An attachment file could not be read before sending."""

    def __init__(self, node_id: str, file_name: str, reason: str) -> None:
        self.file_name = file_name
        super().__init__(node_id, f"Failed to read attachment {file_name!r}: {reason}")


class NodeAlreadyExecutedError(GuildflowError):
    """The node already carries executedAt and is terminal."""

    def __init__(self, node_id: str) -> None:
        self.node_id = node_id
        super().__init__(f"Node {node_id!r} has already been executed")


class NodeNotExecutableError(GuildflowError):
    """The node kind has no execution routine (annotations, editor macros, logs)."""

    def __init__(self, node_id: str, kind: NodeKind) -> None:
        self.node_id = node_id
        self.kind = kind
        super().__init__(f"Node {node_id!r} of type {kind} cannot be executed")


class SessionNotFoundError(GuildflowError):
    """No session with the given id or name exists in session storage."""


class ActionClientError(GuildflowError):
    """One call to the external platform failed.

    Attributes:
        operation: Client operation name (e.g., "create_role")
        status_code: HTTP status if the platform answered, None for transport errors
        detail: Error message reported by the platform, if any
    """

    def __init__(self, operation: str, detail: str, *, status_code: int | None = None) -> None:
        self.operation = operation
        self.detail = detail
        self.status_code = status_code
        status = f" (HTTP {status_code})" if status_code is not None else ""
        super().__init__(f"{operation} failed{status}: {detail}")

    def to_failure(self, item: str) -> ItemFailure:
        failure: ItemFailure = {"item": item, "error": str(self), "error_type": type(self).__name__}
        if self.status_code is not None:
            failure["status_code"] = self.status_code
        return failure
