from __future__ import annotations

from dataclasses import dataclass
from io import BytesIO
from typing import Any

from ..models import DocFormat
from .base import Extracted, PAGE_MARKER, PAGE_MARKERS_META

@dataclass
class PdfExtractor:
    supported_formats = (DocFormat.PDF,)

    def extract(self, data: bytes) -> Extracted:
        """Extract PDF text page by page.

        Each page is preceded by a [[[PAGE n]]] marker so chunking can assign
        page locators in reading order.
        """
        try:
            import pdfplumber  # type: ignore
        except Exception as e:
            raise RuntimeError("pdfplumber required for PDF extraction") from e

        pages: list[str] = []
        with pdfplumber.open(BytesIO(data)) as pdf:
            for i, page in enumerate(pdf.pages, start=1):
                t = page.extract_text() or ""
                pages.append(f"\n\n{PAGE_MARKER.format(i)}\n{t}")

        text = "".join(pages).strip()
        meta: dict[str, Any] = {"page_count": len(pages), PAGE_MARKERS_META: True}
        return Extracted(text=text, metadata=meta)
