"""Document collaborator

The preview core only needs ``get_content(document_id)``; storage, listing
and renaming belong to the host. ``InMemoryDocuments`` is the minimal
in-process implementation used by the web surface.
"""

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Protocol


class DocumentSource(Protocol):
    """Anything that can hand out a document's current content."""

    def get_content(self, document_id: str) -> str: ...


@dataclass
class Document:
    """An open ink document."""

    document_id: str
    title: str
    content: str = ""
    updated_at: datetime = field(default_factory=datetime.now)

    def to_dict(self) -> dict:
        return {
            "document_id": self.document_id,
            "title": self.title,
            "updated_at": self.updated_at.isoformat(),
        }


class InMemoryDocuments:
    """Documents kept in memory for the lifetime of the server."""

    def __init__(self):
        self._documents: dict[str, Document] = {}

    def create(self, title: str = "Untitled", content: str = "", document_id: str | None = None) -> Document:
        """Create a document and return it."""
        document = Document(
            document_id=document_id or uuid.uuid4().hex,
            title=title or "Untitled",
            content=content,
        )
        self._documents[document.document_id] = document
        return document

    def import_file(self, path: str | Path) -> Document:
        """Create a document from an ``.ink`` file, titled after its stem."""
        path = Path(path)
        return self.create(title=path.stem, content=path.read_text(encoding="utf-8"))

    def get(self, document_id: str) -> Document | None:
        return self._documents.get(document_id)

    def get_content(self, document_id: str) -> str:
        """Current content of a document.

        Raises:
            KeyError: Unknown document
        """
        return self._documents[document_id].content

    def set_content(self, document_id: str, content: str) -> Document:
        """Replace the content of a document, creating it if needed."""
        document = self._documents.get(document_id)
        if document is None:
            return self.create(content=content, document_id=document_id)
        document.content = content
        document.updated_at = datetime.now()
        return document

    def titles(self) -> list[dict]:
        """Document list, most recently edited first."""
        documents = sorted(self._documents.values(), key=lambda d: d.updated_at, reverse=True)
        return [d.to_dict() for d in documents]

    def __contains__(self, document_id: str) -> bool:
        return document_id in self._documents
