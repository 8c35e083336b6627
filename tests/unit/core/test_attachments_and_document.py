# tests/unit/core/test_attachments_and_document.py
"""Tests for the filesystem attachment store and workflow document files."""

import json
from pathlib import Path

import pytest
import yaml
from pydantic import ValidationError

from guildflow.contracts import NodeKind, WorkflowDocument
from guildflow.core.attachments import FilesystemAttachmentStore
from guildflow.core.document import dump_document, dumps_document, load_document, loads_document
from tests.fixtures.factories import make_edge, make_node


class TestFilesystemAttachmentStore:
    def test_write_then_read(self, tmp_path: Path) -> None:
        store = FilesystemAttachmentStore(tmp_path)

        store.write("maps/floor1.png", b"\x89PNG")

        assert store.read("maps/floor1.png") == b"\x89PNG"
        assert (tmp_path / "maps" / "floor1.png").exists()

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            FilesystemAttachmentStore(tmp_path).read("nope.png")

    def test_absolute_path_is_rejected(self, tmp_path: Path) -> None:
        with pytest.raises(ValueError, match="must be relative"):
            FilesystemAttachmentStore(tmp_path).read(str(tmp_path / "a.png"))

    def test_escaping_path_is_rejected(self, tmp_path: Path) -> None:
        base = tmp_path / "attachments"
        base.mkdir()
        (tmp_path / "secret.txt").write_text("x")

        with pytest.raises(ValueError, match="escapes"):
            FilesystemAttachmentStore(base).read("../secret.txt")


def _document() -> WorkflowDocument:
    roles = make_node(NodeKind.CREATE_ROLE, "CreateRole-1", roles=["GM", "探偵"])
    category = make_node(NodeKind.CREATE_CATEGORY, "CreateCategory-1", category_name={"type": "session.name"})
    return WorkflowDocument(nodes=[roles, category], edges=[make_edge(roles.id, category.id)])


class TestDocument:
    def test_json_text_round_trip(self) -> None:
        document = _document()

        assert loads_document(dumps_document(document)) == document

    def test_json_uses_camel_case_and_omits_nulls(self) -> None:
        raw = json.loads(dumps_document(_document()))

        role_node = raw["nodes"][0]
        assert "executedAt" not in role_node["data"]
        assert raw["edges"][0]["sourceHandle"] == "source-1"
        assert raw["nodes"][1]["data"]["categoryName"] == {"type": "session.name"}

    def test_json_keeps_non_ascii(self) -> None:
        assert "探偵" in dumps_document(_document())

    def test_file_round_trip_json(self, tmp_path: Path) -> None:
        path = tmp_path / "workflow.json"

        dump_document(_document(), path)

        assert load_document(path) == _document()

    def test_file_round_trip_yaml(self, tmp_path: Path) -> None:
        path = tmp_path / "workflow.yaml"

        dump_document(_document(), path)

        assert yaml.safe_load(path.read_text(encoding="utf-8"))["nodes"][0]["id"] == "CreateRole-1"
        assert load_document(path) == _document()

    def test_yaml_must_be_a_mapping(self, tmp_path: Path) -> None:
        path = tmp_path / "workflow.yml"
        path.write_text("- just\n- a list\n", encoding="utf-8")

        with pytest.raises(ValueError, match="must be a mapping"):
            load_document(path)

    def test_empty_yaml_is_an_empty_workflow(self, tmp_path: Path) -> None:
        path = tmp_path / "workflow.yaml"
        path.write_text("", encoding="utf-8")

        assert load_document(path) == WorkflowDocument()

    def test_invalid_payload_is_rejected(self) -> None:
        text = json.dumps({"nodes": [{"id": "ConditionalBranch-1", "type": "ConditionalBranch", "data": {"conditions": []}}]})

        with pytest.raises(ValidationError):
            loads_document(text)
