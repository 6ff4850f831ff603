from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping, Protocol

from ..models import Locator

class Granularity(str, Enum):
    DOCUMENT = "document"
    PAGE = "page"
    PARAGRAPH = "paragraph"
    FIXED_WORDS = "fixed_words"

@dataclass(frozen=True)
class Chunked:
    locator: Locator
    text: str

class Chunker(Protocol):
    def chunk(self, extracted_text: str, extracted_metadata: Mapping[str, Any] | None = None) -> list[Chunked]:
        ...

class ChunkerRegistry:
    def __init__(self) -> None:
        self._by_granularity: dict[Granularity, Chunker] = {}

    def register(self, granularity: Granularity, chunker: Chunker) -> None:
        self._by_granularity[granularity] = chunker

    def get(self, granularity: Granularity) -> Chunker | None:
        return self._by_granularity.get(granularity)
