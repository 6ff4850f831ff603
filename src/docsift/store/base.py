from __future__ import annotations

import time
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import ClassVar, Mapping

from ..models import Chunk, Document

@dataclass(frozen=True)
class ScoredChunk:
    """A chunk with its query score and the terms that matched inside it."""
    chunk: Chunk
    score: float
    matched: tuple[str, ...] = ()

def _frozen_failures(failures: Mapping[str, str] | None) -> Mapping[str, str]:
    return MappingProxyType(dict(failures or {}))

@dataclass(frozen=True, eq=False)
class Index:
    """Immutable snapshot of chunks plus whatever lookup structures a strategy derives.

    A rebuild always produces a new Index; nothing mutates one after construction.
    """
    strategy: ClassVar[str] = "none"

    chunks: tuple[Chunk, ...] = ()
    documents: tuple[Document, ...] = ()
    failures: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))
    built_at: float = field(default_factory=time.time)

    def __len__(self) -> int:
        return len(self.chunks)

    @property
    def is_empty(self) -> bool:
        return not self.chunks

    def chunk_keys(self) -> frozenset[tuple[str, int]]:
        return frozenset(c.key for c in self.chunks)

    def doc_ids(self) -> list[str]:
        return [d.doc_id for d in self.documents]

    def keyword_scan(self, query: str) -> list[ScoredChunk]:
        """Last-resort containment scan.

        A chunk qualifies when it contains any whitespace-delimited query token
        (case-insensitive); its score is the share of tokens it contains.
        """
        tokens = list(dict.fromkeys(t.lower() for t in query.split()))
        if not tokens:
            return []
        hits: list[ScoredChunk] = []
        for c in self.chunks:
            lowered = c.text.lower()
            found = tuple(t for t in tokens if t in lowered)
            if found:
                hits.append(ScoredChunk(chunk=c, score=len(found) / len(tokens), matched=found))
        return hits

def sorted_chunks(chunks) -> tuple[Chunk, ...]:
    return tuple(sorted(chunks, key=lambda c: c.key))
