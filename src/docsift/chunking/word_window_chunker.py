from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

from ..models import Locator
from .base import Chunked
from .boundary_chunker import has_page_markers, split_pages

@dataclass
class WordWindowChunker:
    """Contiguous runs of `size` words with no overlap.

    A window that spans a page marker is located on the page of its first word.
    """
    size: int = 500

    def __post_init__(self) -> None:
        if self.size <= 0:
            raise ValueError(f"Invalid window size: {self.size}. Must be positive.")

    def chunk(self, extracted_text: str, extracted_metadata: Mapping[str, Any] | None = None) -> list[Chunked]:
        words: list[tuple[int | None, str]] = []
        for page, body in split_pages(extracted_text, has_page_markers(extracted_metadata)):
            words.extend((page, w) for w in body.split())

        chunks: list[Chunked] = []
        for start in range(0, len(words), self.size):
            window = words[start:start + self.size]
            chunks.append(Chunked(
                locator=Locator(page=window[0][0]),
                text=" ".join(w for _, w in window),
            ))
        return chunks
