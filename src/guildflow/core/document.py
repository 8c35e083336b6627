# src/guildflow/core/document.py
"""Workflow document persistence.

Documents are camelCase JSON ({nodes, edges, viewport}) and round-trip
losslessly: dump(load(text)) re-parses to an identical graph. A YAML file
(.yaml/.yml) is accepted on load for hand-written templates.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import yaml

from guildflow.contracts.graph import WorkflowDocument


def parse_document(raw: dict[str, Any]) -> WorkflowDocument:
    """Validate a decoded document.

    Raises:
        pydantic.ValidationError: On unknown node kinds or invalid payloads
    """
    return WorkflowDocument.model_validate(raw)


def document_to_dict(document: WorkflowDocument) -> dict[str, Any]:
    return document.model_dump(mode="json", by_alias=True, exclude_none=True)


def loads_document(text: str) -> WorkflowDocument:
    return WorkflowDocument.model_validate_json(text)


def dumps_document(document: WorkflowDocument, *, indent: int | None = 2) -> str:
    return json.dumps(document_to_dict(document), ensure_ascii=False, indent=indent)


def load_document(path: Path) -> WorkflowDocument:
    """Load a workflow file (JSON, or YAML by extension)."""
    text = path.read_text(encoding="utf-8")
    if path.suffix.lower() in (".yaml", ".yml"):
        raw = yaml.safe_load(text) or {}
        if not isinstance(raw, dict):
            raise ValueError(f"{path}: workflow document must be a mapping, got {type(raw).__name__}")
        return parse_document(raw)
    return loads_document(text)


def dump_document(document: WorkflowDocument, path: Path) -> None:
    """Write a workflow file. YAML by extension, JSON otherwise."""
    if path.suffix.lower() in (".yaml", ".yml"):
        text = yaml.safe_dump(document_to_dict(document), allow_unicode=True, sort_keys=False)
    else:
        text = dumps_document(document) + "\n"
    path.write_text(text, encoding="utf-8")
