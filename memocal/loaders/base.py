from typing import Iterator, Protocol

from memocal.types import Document


class DocumentLoader(Protocol):
    """Loads notes from a path."""

    def load(self, path: str) -> Iterator[Document]:
        ...
