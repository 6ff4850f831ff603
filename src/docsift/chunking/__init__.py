from __future__ import annotations

from typing import Any, Mapping

from ..models import Chunk
from .base import Chunked, Chunker, ChunkerRegistry, Granularity
from .boundary_chunker import BoundaryMarkerChunker, DocumentChunker, has_page_markers, split_pages, strip_markers
from .paragraph_chunker import ParagraphChunker
from .word_window_chunker import WordWindowChunker

def make_chunker(granularity: Granularity, fixed_words_size: int = 500) -> Chunker:
    registry = ChunkerRegistry()
    registry.register(Granularity.DOCUMENT, DocumentChunker())
    registry.register(Granularity.PAGE, BoundaryMarkerChunker())
    registry.register(Granularity.PARAGRAPH, ParagraphChunker())
    registry.register(Granularity.FIXED_WORDS, WordWindowChunker(size=fixed_words_size))
    chunker = registry.get(Granularity(granularity))
    if chunker is None:
        raise ValueError(f"No chunker registered for granularity: {granularity}")
    return chunker

def to_chunks(doc_id: str, pieces: list[Chunked]) -> list[Chunk]:
    """Number non-empty pieces 0.. in reading order."""
    out: list[Chunk] = []
    for piece in pieces:
        text = piece.text.strip()
        if not text:
            continue
        out.append(Chunk(doc_id=doc_id, ordinal=len(out), locator=piece.locator, text=text))
    return out

def chunk(
    text: str,
    granularity: Granularity,
    doc_id: str = "",
    fixed_words_size: int = 500,
    metadata: Mapping[str, Any] | None = None,
) -> list[Chunk]:
    """Split extracted text into ordered chunks. Pure and deterministic.

    `metadata` is the extractor metadata; page markers are honoured only when
    it says the extractor emitted them.
    """
    return to_chunks(doc_id, make_chunker(granularity, fixed_words_size).chunk(text, metadata))

__all__ = [
    "Chunked",
    "Chunker",
    "Granularity",
    "BoundaryMarkerChunker",
    "DocumentChunker",
    "ParagraphChunker",
    "WordWindowChunker",
    "chunk",
    "has_page_markers",
    "make_chunker",
    "split_pages",
    "strip_markers",
    "to_chunks",
]
