from __future__ import annotations

from dataclasses import dataclass
from io import BytesIO
from typing import Any, Iterator

from ..models import DocFormat
from .base import Extracted

def _table_paragraphs(table: Any) -> Iterator[str]:
    """Cell paragraphs row by row; a merged cell is read once."""
    seen: set[int] = set()
    for row in table.rows:
        for cell in row.cells:
            if id(cell._tc) in seen:
                continue
            seen.add(id(cell._tc))
            for p in cell.paragraphs:
                yield p.text
            for nested in cell.tables:
                yield from _table_paragraphs(nested)

@dataclass
class DocxExtractor:
    supported_formats = (DocFormat.DOCX,)

    def extract(self, data: bytes) -> Extracted:
        """Extract Word body text in document order, separated by blank lines.

        Body paragraphs and table cell paragraphs are interleaved as they
        appear in the document.
        """
        try:
            import docx  # python-docx
            from docx.table import Table
        except Exception as e:
            raise RuntimeError("python-docx required for DOCX extraction") from e

        document = docx.Document(BytesIO(data))
        texts: list[str] = []
        tables = 0
        for block in document.iter_inner_content():
            if isinstance(block, Table):
                tables += 1
                texts.extend(_table_paragraphs(block))
            else:
                texts.append(block.text)

        paragraphs = [t.strip() for t in texts if t.strip()]
        return Extracted(
            text="\n\n".join(paragraphs),
            metadata={"paragraph_count": len(paragraphs), "table_count": tables},
        )
