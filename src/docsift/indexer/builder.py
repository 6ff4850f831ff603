from __future__ import annotations

import logging
import time
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from pathlib import Path

from ..chunking import make_chunker, to_chunks
from ..config import SearchConfig, Strategy
from ..embeddings import ResilientEmbedder, make_embedder
from ..errors import ExtractionFailed, IndexConfigurationError, UnsupportedFormat
from ..extractors import ExtractorRegistry, default_registry
from ..models import BuildStats, Chunk, Document, Embedding
from ..store.base import Index
from ..store.lexical_index import LexicalIndex
from ..store.vector_index import VectorIndex
from .reconciler import Reconciler

logger = logging.getLogger(__name__)

@dataclass
class IndexBuilder:
    """Turns the current contents of the source directory into a new Index.

    Phase 1: parallel extraction and chunking (ThreadPoolExecutor)
    Phase 2: vector strategy only, embedding with bounded concurrency
    Phase 3: assemble the immutable index

    Per-document and per-chunk failures are logged and skipped. Only
    DirectoryUnreadable escapes, and nothing is published by the builder.
    """
    cfg: SearchConfig
    embedder: ResilientEmbedder | None = None
    extractors: ExtractorRegistry = field(default_factory=default_registry)

    def __post_init__(self) -> None:
        self.chunker = make_chunker(self.cfg.granularity, self.cfg.fixed_words_size)
        if self.cfg.strategy == Strategy.VECTOR and self.embedder is None:
            self.embedder = make_embedder(self.cfg)

    def _require_embedder(self) -> ResilientEmbedder:
        if self.embedder is None:
            raise IndexConfigurationError("Vector strategy requires an embedder")
        return self.embedder

    def empty_index(self) -> Index:
        if self.cfg.strategy == Strategy.VECTOR:
            return VectorIndex.empty(self._require_embedder().model_id)
        return LexicalIndex.empty()

    def build(self) -> tuple[Index, BuildStats]:
        start = time.time()
        rec = Reconciler(self.cfg.docs_root, self.cfg.ignore)
        found = rec.scan_documents()
        logger.info(f"Found {len(found)} documents in {self.cfg.docs_root}")

        # Phase 1
        documents: list[Document] = []
        chunks: list[Chunk] = []
        failures: dict[str, str] = {}
        with ThreadPoolExecutor(max_workers=self.cfg.extraction_workers) as executor:
            futures = {
                executor.submit(self._extract_and_chunk_one, path, doc): doc
                for path, doc in found
            }
            for future in as_completed(futures):
                doc = futures[future]
                try:
                    doc_chunks = future.result()
                except (UnsupportedFormat, ExtractionFailed, OSError) as e:
                    reason = e.reason if isinstance(e, ExtractionFailed) else str(e)
                    logger.warning(f"Skipping {doc.doc_id}: {reason}")
                    failures[doc.doc_id] = reason
                    continue
                except Exception as e:
                    logger.error(f"Worker crashed for {doc.doc_id}: {type(e).__name__}: {e}")
                    failures[doc.doc_id] = f"{type(e).__name__}: {e}"
                    continue
                documents.append(doc)
                chunks.extend(doc_chunks)

        logger.info(f"Phase 1 complete: {len(documents)} documents extracted, {len(failures)} failed")

        # Phase 2 + 3
        omitted = 0
        if self.cfg.strategy == Strategy.VECTOR:
            embeddings, omitted = self._embed(chunks)
            index: Index = VectorIndex.from_embeddings(self._require_embedder().model_id, embeddings, documents, failures)
        else:
            index = LexicalIndex.from_chunks(chunks, documents, failures)

        stats = BuildStats(
            documents_seen=len(found),
            documents_indexed=len(documents),
            documents_failed=len(failures),
            chunks_indexed=len(index),
            chunks_omitted=omitted,
            elapsed_seconds=time.time() - start,
            failures=dict(failures),
        )
        logger.info(
            f"Built {index.strategy} index: {stats.documents_indexed} documents, "
            f"{stats.chunks_indexed} chunks in {stats.elapsed_seconds:.2f}s"
        )
        return index, stats

    def _extract_and_chunk_one(self, path: Path, doc: Document) -> list[Chunk]:
        """Read, extract and chunk a single document (thread-safe, no shared writes)."""
        if doc.size_bytes > self.cfg.max_file_bytes:
            raise ExtractionFailed(doc.doc_id, f"file too large ({doc.size_bytes} bytes)")
        data = path.read_bytes()
        extracted = self.extractors.extract(data, doc.format, doc.doc_id)
        return to_chunks(doc.doc_id, self.chunker.chunk(extracted.text, extracted.metadata))

    def _embed(self, chunks: list[Chunk]) -> tuple[list[Embedding], int]:
        """Embed every chunk; chunks whose embedding gave up are omitted."""
        embedder = self._require_embedder()
        if not chunks:
            return [], 0
        vectors = embedder.embed_many([c.text for c in chunks])
        embeddings: list[Embedding] = []
        omitted = 0
        for c, vec in zip(chunks, vectors):
            if vec is None:
                logger.warning(f"No embedding for {c.doc_id}#{c.ordinal}; omitting chunk from vector index")
                omitted += 1
                continue
            embeddings.append(Embedding(
                chunk=c,
                vector=tuple(float(x) for x in vec),
                model_id=embedder.model_id,
            ))
        logger.info(f"Phase 2 complete: {len(embeddings)} embeddings, {omitted} chunks omitted")
        return embeddings, omitted
