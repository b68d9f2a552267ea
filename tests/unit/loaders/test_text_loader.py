"""Unit tests for note loaders."""

import json
import os
import tempfile

import pytest

from memocal.loaders.text import JSONLoader, JSONLLoader, TextLoader
from memocal.registry import loaders


class TestTextLoader:
    """Tests for TextLoader class."""

    def test_load_text_file(self, temp_text_file: str):
        docs = list(TextLoader().load(temp_text_file))
        assert len(docs) == 1
        assert "遠足" in docs[0].text
        assert docs[0].meta["source"] == temp_text_file

    def test_document_id_from_filename(self, temp_text_file: str):
        docs = list(TextLoader().load(temp_text_file))
        expected_stem = os.path.splitext(os.path.basename(temp_text_file))[0]
        assert docs[0].id == expected_stem

    def test_registered(self):
        assert loaders.get("text") is TextLoader


class TestJSONLLoader:
    """Tests for JSONLLoader class."""

    @pytest.fixture
    def temp_jsonl_file(self) -> str:
        data = [
            {"id": "note1", "text": "明日 10時 会議"},
            {"body": "5/3 旅行"},
        ]
        with tempfile.NamedTemporaryFile(mode="w", suffix=".jsonl", delete=False, encoding="utf-8") as f:
            for item in data:
                f.write(json.dumps(item, ensure_ascii=False) + "\n")
            f.write("\n")
            path = f.name
        yield path
        os.unlink(path)

    def test_load_jsonl_file(self, temp_jsonl_file: str):
        docs = list(JSONLLoader().load(temp_jsonl_file))
        assert len(docs) == 2
        assert docs[0].id == "note1"
        assert docs[0].text == "明日 10時 会議"

    def test_missing_id_uses_stem_and_index(self, temp_jsonl_file: str):
        docs = list(JSONLLoader().load(temp_jsonl_file))
        stem = os.path.splitext(os.path.basename(temp_jsonl_file))[0]
        assert docs[1].id == f"{stem}-1"
        assert docs[1].text == ""

    def test_custom_text_field(self, temp_jsonl_file: str):
        docs = list(JSONLLoader(text_field="body").load(temp_jsonl_file))
        assert docs[1].text == "5/3 旅行"
        assert docs[1].meta["body"] == "5/3 旅行"


class TestJSONLoader:
    """Tests for JSONLoader class."""

    def _write(self, data) -> str:
        with tempfile.NamedTemporaryFile(mode="w", suffix=".json", delete=False, encoding="utf-8") as f:
            json.dump(data, f, ensure_ascii=False)
            return f.name

    def test_array(self):
        path = self._write([{"id": "a", "text": "明日"}, {"id": "b", "text": "5/3"}])
        try:
            docs = list(JSONLoader().load(path))
        finally:
            os.unlink(path)
        assert [d.id for d in docs] == ["a", "b"]

    def test_single_object(self):
        path = self._write({"id": "only", "text": "15, 16 遠足"})
        try:
            docs = list(JSONLoader().load(path))
        finally:
            os.unlink(path)
        assert len(docs) == 1
        assert docs[0].meta["source"] == path
