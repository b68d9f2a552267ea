import json
from pathlib import Path
from typing import Any, Dict, Iterator

from memocal.registry import loaders
from memocal.types import Document


def _note_from_record(path: str, i: int, record: Dict[str, Any], text_field: str) -> Document:
    note_id = record.get("id") or f"{Path(path).stem}-{i}"
    text = record.get(text_field) or ""
    return Document(id=str(note_id), text=text, meta={"source": path, **record})


@loaders.register("text")
class TextLoader:
    """Loads a plain text file as a single note."""

    def __init__(self, encoding: str = "utf-8") -> None:
        self.encoding = encoding

    def load(self, path: str) -> Iterator[Document]:
        text = Path(path).read_text(encoding=self.encoding)
        yield Document(id=Path(path).stem, text=text, meta={"source": path})


@loaders.register("jsonl")
class JSONLLoader:
    """Loads JSONL where each line is a note with a `text` field."""

    def __init__(self, text_field: str = "text") -> None:
        self.text_field = text_field

    def load(self, path: str) -> Iterator[Document]:
        with Path(path).open(encoding="utf-8") as f:
            for i, line in enumerate(f):
                if not line.strip():
                    continue
                yield _note_from_record(path, i, json.loads(line), self.text_field)


@loaders.register("json")
class JSONLoader:
    """Loads a JSON array (or single object) of notes."""

    def __init__(self, text_field: str = "text") -> None:
        self.text_field = text_field

    def load(self, path: str) -> Iterator[Document]:
        data = json.loads(Path(path).read_text(encoding="utf-8"))
        if isinstance(data, dict):
            data = [data]
        for i, record in enumerate(data):
            yield _note_from_record(path, i, record, self.text_field)
