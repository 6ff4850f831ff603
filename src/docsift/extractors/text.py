from __future__ import annotations

from dataclasses import dataclass

from ..models import DocFormat
from .base import Extracted

@dataclass
class PlainTextExtractor:
    supported_formats = (DocFormat.TXT,)

    def extract(self, data: bytes) -> Extracted:
        # Strict decode: undecodable bytes mean a corrupt document.
        text = data.decode("utf-8")
        return Extracted(text=text, metadata={"chars": len(text)})
