from __future__ import annotations

from dataclasses import dataclass, field
from typing import Protocol, Any

from ..errors import ExtractionFailed, UnsupportedFormat
from ..models import DocFormat

PAGE_MARKER = "[[[PAGE {}]]]"
# Metadata flag set by extractors that emit PAGE_MARKER boundaries.
PAGE_MARKERS_META = "page_markers"

@dataclass(frozen=True)
class Extracted:
    text: str
    metadata: dict[str, Any] = field(default_factory=dict)

class Extractor(Protocol):
    supported_formats: tuple[DocFormat, ...]

    def extract(self, data: bytes) -> Extracted:
        ...

class ExtractorRegistry:
    def __init__(self) -> None:
        self._by_format: dict[DocFormat, Extractor] = {}

    def register(self, extractor: Extractor) -> None:
        for fmt in extractor.supported_formats:
            self._by_format[fmt] = extractor

    def get(self, fmt: DocFormat) -> Extractor | None:
        return self._by_format.get(fmt)

    def extract(self, data: bytes, fmt: DocFormat, doc_id: str = "<bytes>") -> Extracted:
        """Run the extractor registered for `fmt`.

        Raises UnsupportedFormat when nothing handles the format and
        ExtractionFailed for any error raised while reading the bytes.
        """
        extractor = self.get(fmt)
        if extractor is None:
            raise UnsupportedFormat(fmt)
        try:
            return extractor.extract(data)
        except ExtractionFailed:
            raise
        except Exception as e:
            raise ExtractionFailed(doc_id, f"{type(e).__name__}: {e}") from e
