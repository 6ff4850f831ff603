"""Exceptions raised across the ingestion, indexing and retrieval pipeline."""
from __future__ import annotations

from pathlib import Path


class DocSiftError(Exception):
    """Base exception for docsift."""
    pass


class UnsupportedFormat(DocSiftError):
    """No extractor is registered for a document's format."""

    def __init__(self, fmt: object) -> None:
        super().__init__(f"Unsupported document format: {fmt}")
        self.fmt = fmt


class ExtractionFailed(DocSiftError):
    """A single document could not be turned into text."""

    def __init__(self, doc_id: str, reason: str) -> None:
        super().__init__(f"Extraction failed for {doc_id}: {reason}")
        self.doc_id = doc_id
        self.reason = reason


class EmbeddingProviderError(DocSiftError):
    """The embedding provider could not return a vector."""

    def __init__(self, reason: str, retryable: bool = False) -> None:
        super().__init__(reason)
        self.reason = reason
        self.retryable = retryable


class DirectoryUnreadable(DocSiftError):
    """The document source directory could not be listed."""

    def __init__(self, path: Path, reason: str) -> None:
        super().__init__(f"Cannot read document directory {path}: {reason}")
        self.path = path
        self.reason = reason


class IndexBuildError(DocSiftError):
    """An index could not be assembled from its parts."""
    pass


class IndexConfigurationError(DocSiftError):
    """Query-time settings do not match how the index was built."""
    pass
