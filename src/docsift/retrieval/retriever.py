from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from ..config import EmptyResultPolicy, SearchConfig
from ..embeddings import ResilientEmbedder
from ..errors import EmbeddingProviderError, IndexConfigurationError
from ..models import Locator, SearchResult
from ..store.base import Index, ScoredChunk
from ..store.index_store import IndexStore
from ..store.lexical_index import LexicalIndex
from ..store.vector_index import VectorIndex
from .snippets import find_offset, highlight, make_snippet, query_keywords

if TYPE_CHECKING:
    from ..indexer.indexer import Indexer

logger = logging.getLogger(__name__)

PLACEHOLDER_MESSAGE = "No relevant information found in documents."

@dataclass
class Retriever:
    """Ranks chunks of the current index snapshot for a free-text query."""
    cfg: SearchConfig
    store: IndexStore
    embedder: ResilientEmbedder | None = None

    @classmethod
    def for_indexer(cls, indexer: "Indexer") -> "Retriever":
        return cls(cfg=indexer.cfg, store=indexer.store, embedder=indexer.embedder)

    def search(self, query: str | None, k: int | None = None) -> list[SearchResult]:
        if query is None or not query.strip():
            return []
        k = self.cfg.top_k if k is None else k
        if k <= 0:
            return []

        # One snapshot for the whole query, even if a rebuild publishes meanwhile.
        index = self.store.get()
        if index.is_empty:
            return self._no_results()

        hits = self._score(index, query)
        fallback = False
        if not hits:
            hits = index.keyword_scan(query)
            fallback = True
        if not hits:
            return self._no_results()

        hits.sort(key=lambda h: (-h.score, h.chunk.doc_id, h.chunk.ordinal))
        keywords = query_keywords(query)
        return [self._to_result(h, keywords, fallback) for h in hits[:k]]

    def search_payload(self, query: str | None, k: int | None = None) -> dict[str, Any]:
        """Query interface consumed by the HTTP layer."""
        return {"results": [r.to_dict() for r in self.search(query, k)]}

    def _score(self, index: Index, query: str) -> list[ScoredChunk]:
        if isinstance(index, LexicalIndex):
            return index.score(query, min_score=self.cfg.lexical_min_score)
        if isinstance(index, VectorIndex):
            if self.embedder is None:
                raise IndexConfigurationError("Vector index requires an embedder for queries")
            try:
                qv = self.embedder.embed_query(query)
            except EmbeddingProviderError as e:
                logger.warning(f"Query embedding failed ({e.reason}); using keyword scan")
                return []
            return index.score(qv, self.embedder.model_id, min_score=self.cfg.vector_min_score)
        raise IndexConfigurationError(f"Unknown index type: {type(index).__name__}")

    def _to_result(self, hit: ScoredChunk, keywords: list[str], fallback: bool) -> SearchResult:
        chunk = hit.chunk
        offset = find_offset(chunk.text, list(hit.matched) + keywords)
        snippet = make_snippet(chunk.text, offset, self.cfg.snippet_chars)
        metadata: dict[str, Any] = {"ordinal": chunk.ordinal}
        if fallback:
            metadata["fallback"] = True
        return SearchResult(
            doc_id=chunk.doc_id,
            locator=chunk.locator,
            snippet=snippet,
            score=hit.score,
            highlighted=highlight(snippet, keywords, self.cfg.highlight_open, self.cfg.highlight_close),
            ordinal=chunk.ordinal,
            metadata=metadata,
        )

    def _no_results(self) -> list[SearchResult]:
        if self.cfg.empty_result_policy == EmptyResultPolicy.PLACEHOLDER_MESSAGE:
            return [SearchResult(
                doc_id="",
                locator=Locator(),
                snippet=PLACEHOLDER_MESSAGE,
                score=0.0,
                highlighted=PLACEHOLDER_MESSAGE,
                metadata={"placeholder": True},
            )]
        return []
