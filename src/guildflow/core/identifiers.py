# src/guildflow/core/identifiers.py
"""Identifier generation for editor-created nodes, conditions, and pairs.

Node ids are sequential per kind (`CreateRole-1`, `CreateRole-2`, ...) so
that templates stay readable. Sub-item ids (conditions, options, recorded
pairs) only need to be unique within their node.
"""

from __future__ import annotations

import re
import uuid
from collections.abc import Iterable


def generate_next_id(existing_ids: Iterable[str], prefix: str) -> str:
    """Return `<prefix>-<n>` with n one greater than the highest n in use.

    Ids that do not follow the `<prefix>-<digits>` pattern are ignored.
    """
    pattern = re.compile(rf"^{re.escape(prefix)}-(\d+)$")
    highest = 0
    for existing in existing_ids:
        match = pattern.match(existing)
        if match:
            highest = max(highest, int(match.group(1)))
    return f"{prefix}-{highest + 1}"


def short_id() -> str:
    """Random id for sub-items inside a node payload."""
    return uuid.uuid4().hex[:12]
