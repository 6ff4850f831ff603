from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Mapping

from ..extractors.base import PAGE_MARKERS_META
from ..models import Locator
from .base import Chunked

_MARKER_RE = re.compile(r"\[\[\[PAGE (\d+)\]\]\]")

def has_page_markers(extracted_metadata: Mapping[str, Any] | None) -> bool:
    """True when the extractor emitted [[[PAGE n]]] boundaries (PDF)."""
    return bool(extracted_metadata and extracted_metadata.get(PAGE_MARKERS_META))

def split_pages(extracted_text: str, paged: bool = True) -> list[tuple[int | None, str]]:
    """Split text on [[[PAGE n]]] markers.

    Returns (page, body) pairs in reading order. Text that is not paged, or
    has no markers, comes back as a single (None, text) section. Anything
    before the first marker belongs to the first page.
    """
    matches = list(_MARKER_RE.finditer(extracted_text)) if paged else []
    if not matches:
        return [(None, extracted_text)]

    sections: list[tuple[int | None, str]] = []
    lead = extracted_text[:matches[0].start()]
    for i, m in enumerate(matches):
        end = matches[i + 1].start() if i + 1 < len(matches) else len(extracted_text)
        body = extracted_text[m.end():end]
        if i == 0 and lead.strip():
            body = lead + "\n" + body
        sections.append((int(m.group(1)), body))
    return sections

def strip_markers(extracted_text: str, paged: bool = True) -> str:
    return "\n\n".join(body.strip() for _, body in split_pages(extracted_text, paged) if body.strip())

@dataclass
class DocumentChunker:
    """One chunk holding the whole document."""

    def chunk(self, extracted_text: str, extracted_metadata: Mapping[str, Any] | None = None) -> list[Chunked]:
        text = strip_markers(extracted_text, has_page_markers(extracted_metadata))
        if not text.strip():
            return []
        return [Chunked(locator=Locator(), text=text.strip())]

@dataclass
class BoundaryMarkerChunker:
    """One chunk per [[[PAGE n]]] section.

    Unpaged text (plain text, DOCX) is treated as a single page 1.
    """

    def chunk(self, extracted_text: str, extracted_metadata: Mapping[str, Any] | None = None) -> list[Chunked]:
        chunks: list[Chunked] = []
        for page, body in split_pages(extracted_text, has_page_markers(extracted_metadata)):
            content = body.strip()
            if content:
                chunks.append(Chunked(locator=Locator(page=page or 1), text=content))
        return chunks
