from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Optional

class DocFormat(str, Enum):
    TXT = "txt"
    PDF = "pdf"
    DOCX = "docx"

    @classmethod
    def from_path(cls, path: str | Path) -> Optional["DocFormat"]:
        """Resolve the format tag from a file suffix, or None if unsupported."""
        suffix = Path(path).suffix.lower().lstrip(".")
        try:
            return cls(suffix)
        except ValueError:
            return None

@dataclass(frozen=True)
class Document:
    doc_id: str
    size_bytes: int
    format: DocFormat
    mtime: int = 0

@dataclass(frozen=True)
class Locator:
    """Where a chunk sits inside its document.

    page: 1-based page number (PDF page markers, or 1 for unpaged text)
    paragraph: 1-based paragraph number within the document
    """
    page: int | None = None
    paragraph: int | None = None

    def to_dict(self) -> dict[str, int]:
        out: dict[str, int] = {}
        if self.page is not None:
            out["page"] = self.page
        if self.paragraph is not None:
            out["paragraph"] = self.paragraph
        return out

@dataclass(frozen=True)
class Chunk:
    doc_id: str
    ordinal: int
    locator: Locator
    text: str

    @property
    def key(self) -> tuple[str, int]:
        return (self.doc_id, self.ordinal)

@dataclass(frozen=True)
class Embedding:
    chunk: Chunk
    vector: tuple[float, ...]
    model_id: str = ""

    @property
    def dims(self) -> int:
        return len(self.vector)

@dataclass(frozen=True)
class SearchResult:
    doc_id: str
    locator: Locator
    snippet: str
    score: float
    highlighted: str
    ordinal: int = 0
    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Shape consumed by the HTTP layer."""
        return {
            "snippet": self.snippet,
            "highlighted": self.highlighted,
            "filename": self.doc_id,
            "locator": self.locator.to_dict(),
            "score": self.score,
        }

@dataclass(frozen=True)
class BuildStats:
    """Statistics from one rebuild."""

    documents_seen: int = 0
    documents_indexed: int = 0
    documents_failed: int = 0
    chunks_indexed: int = 0
    chunks_omitted: int = 0
    elapsed_seconds: float = 0.0
    failures: dict[str, str] = field(default_factory=dict)
