from __future__ import annotations

from dataclasses import dataclass, field
from typing import ClassVar, Iterable, Mapping, Sequence

import numpy as np

from ..errors import IndexBuildError, IndexConfigurationError
from ..models import Document, Embedding
from .base import Index, ScoredChunk, _frozen_failures

def cosine_similarity(a: Sequence[float] | np.ndarray, b: Sequence[float] | np.ndarray) -> float:
    """dot(a, b) / (|a| |b|), clipped to [-1, 1].

    Returns -1.0 (the minimum score) when either vector has zero magnitude.
    """
    va = np.asarray(a, dtype=np.float64).ravel()
    vb = np.asarray(b, dtype=np.float64).ravel()
    if va.shape != vb.shape:
        raise ValueError(f"Dimension mismatch: {va.shape[0]} != {vb.shape[0]}")
    denom = float(np.linalg.norm(va) * np.linalg.norm(vb))
    if denom == 0.0:
        return -1.0
    return float(np.clip(np.dot(va, vb) / denom, -1.0, 1.0))

def _readonly(arr: np.ndarray) -> np.ndarray:
    arr.setflags(write=False)
    return arr

@dataclass(frozen=True, eq=False)
class VectorIndex(Index):
    strategy: ClassVar[str] = "vector"

    model_id: str = ""
    dims: int = 0
    matrix: np.ndarray = field(default_factory=lambda: _readonly(np.zeros((0, 0), dtype=np.float32)))
    norms: np.ndarray = field(default_factory=lambda: _readonly(np.zeros((0,), dtype=np.float32)))

    @classmethod
    def empty(cls, model_id: str = "") -> "VectorIndex":
        return cls(model_id=model_id)

    @classmethod
    def from_embeddings(
        cls,
        model_id: str,
        embeddings: Iterable[Embedding],
        documents: Iterable[Document] = (),
        failures: Mapping[str, str] | None = None,
    ) -> "VectorIndex":
        """Assemble an index from (chunk, vector) pairs.

        Raises IndexBuildError when embeddings disagree on dimension or model.
        """
        ordered = sorted(embeddings, key=lambda e: e.chunk.key)
        dims = 0
        for e in ordered:
            if e.model_id != model_id:
                raise IndexBuildError(
                    f"Embedding for {e.chunk.doc_id}#{e.chunk.ordinal} came from model "
                    f"{e.model_id!r}, expected {model_id!r}"
                )
            if e.dims == 0:
                raise IndexBuildError(f"Empty embedding for {e.chunk.doc_id}#{e.chunk.ordinal}")
            if dims == 0:
                dims = e.dims
            elif e.dims != dims:
                raise IndexBuildError(
                    f"Mixed embedding dimensions: {e.dims} for {e.chunk.doc_id}#{e.chunk.ordinal}, expected {dims}"
                )

        if ordered:
            matrix = np.array([e.vector for e in ordered], dtype=np.float32)
        else:
            matrix = np.zeros((0, 0), dtype=np.float32)
        norms = np.linalg.norm(matrix, axis=1) if ordered else np.zeros((0,), dtype=np.float32)

        return cls(
            chunks=tuple(e.chunk for e in ordered),
            documents=tuple(sorted(documents, key=lambda d: d.doc_id)),
            failures=_frozen_failures(failures),
            model_id=model_id,
            dims=dims,
            matrix=_readonly(matrix),
            norms=_readonly(np.asarray(norms, dtype=np.float32)),
        )

    def check_query_vector(self, query_vec: np.ndarray, model_id: str) -> np.ndarray:
        q = np.asarray(query_vec, dtype=np.float32).ravel()
        if model_id != self.model_id:
            raise IndexConfigurationError(
                f"Query embedder {model_id!r} does not match index model {self.model_id!r}"
            )
        if q.shape[0] != self.dims:
            raise IndexConfigurationError(
                f"Query embedding has {q.shape[0]} dimensions, index has {self.dims}"
            )
        return q

    def score(self, query_vec: np.ndarray, model_id: str, min_score: float = 0.0) -> list[ScoredChunk]:
        """Cosine similarity of the query against every chunk vector."""
        if not self.chunks:
            return []
        q = self.check_query_vector(query_vec, model_id)
        q_norm = float(np.linalg.norm(q))

        denom = self.norms.astype(np.float64) * q_norm
        dots = self.matrix.astype(np.float64) @ q.astype(np.float64)
        with np.errstate(divide="ignore", invalid="ignore"):
            sims = np.where(denom > 0.0, dots / np.where(denom > 0.0, denom, 1.0), -1.0)
        sims = np.clip(sims, -1.0, 1.0)

        hits: list[ScoredChunk] = []
        for chunk, s in zip(self.chunks, sims):
            if float(s) >= min_score:
                hits.append(ScoredChunk(chunk=chunk, score=float(s)))
        return hits
