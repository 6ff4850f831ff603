from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Mapping

from ..models import Locator
from .base import Chunked
from .boundary_chunker import has_page_markers, split_pages

# A blank line, or a run of 2+ whitespace characters right after a period.
PARAGRAPH_BREAK_RE = re.compile(r"\n[ \t\r\f\v]*\n\s*|(?<=\.)\s{2,}")

@dataclass
class ParagraphChunker:
    def chunk(self, extracted_text: str, extracted_metadata: Mapping[str, Any] | None = None) -> list[Chunked]:
        chunks: list[Chunked] = []
        paragraph = 0
        for page, body in split_pages(extracted_text, has_page_markers(extracted_metadata)):
            for part in PARAGRAPH_BREAK_RE.split(body):
                content = part.strip()
                if not content:
                    continue
                paragraph += 1
                chunks.append(Chunked(locator=Locator(page=page, paragraph=paragraph), text=content))
        return chunks
