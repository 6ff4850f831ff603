from __future__ import annotations

from ..models import DocFormat
from .base import Extracted, Extractor, ExtractorRegistry
from .docx import DocxExtractor
from .pdf import PdfExtractor
from .text import PlainTextExtractor

def default_registry() -> ExtractorRegistry:
    registry = ExtractorRegistry()
    registry.register(PlainTextExtractor())
    registry.register(PdfExtractor())
    registry.register(DocxExtractor())
    return registry

def extract(data: bytes, fmt: DocFormat) -> Extracted:
    """Extract plain text from raw bytes of the given format."""
    return default_registry().extract(data, fmt)

__all__ = [
    "Extracted",
    "Extractor",
    "ExtractorRegistry",
    "PlainTextExtractor",
    "PdfExtractor",
    "DocxExtractor",
    "default_registry",
    "extract",
]
