"""Shared fixtures and fake embedding providers."""
from __future__ import annotations

import hashlib
import re
import threading
from pathlib import Path
from typing import Sequence

import numpy as np
import pytest

from docsift.config import SearchConfig
from docsift.embeddings.resilience import ResilientEmbedder


class HashingEmbedder:
    """Deterministic bag-of-words embedder: each word bumps one hashed dimension."""

    def __init__(self, dims: int = 64, model_id: str = "fake-bow") -> None:
        self.dims = dims
        self.model_id = model_id
        self.calls = 0
        self._lock = threading.Lock()

    def _vec(self, text: str) -> np.ndarray:
        v = np.zeros(self.dims, dtype=np.float32)
        for word in re.findall(r"\w+", text.lower()):
            h = int(hashlib.md5(word.encode("utf-8")).hexdigest(), 16)
            v[h % self.dims] += 1.0
        return v

    def embed_texts(self, texts: Sequence[str]) -> np.ndarray:
        with self._lock:
            self.calls += len(texts)
        return np.array([self._vec(t) for t in texts], dtype=np.float32)

    def embed_query(self, query: str) -> np.ndarray:
        with self._lock:
            self.calls += 1
        return self._vec(query)


class HttpError(Exception):
    """Stand-in for urllib's HTTPError: carries a status code."""

    def __init__(self, code: int, message: str = "") -> None:
        super().__init__(message or f"HTTP Error {code}")
        self.code = code
        self.headers: dict[str, str] = {}


class FailingForEmbedder(HashingEmbedder):
    """Fails every call whose text contains `marker` with the given error."""

    def __init__(self, marker: str, error: Exception, **kw) -> None:
        super().__init__(**kw)
        self.marker = marker
        self.error = error

    def embed_texts(self, texts: Sequence[str]) -> np.ndarray:
        if any(self.marker in t for t in texts):
            with self._lock:
                self.calls += len(texts)
            raise self.error
        return super().embed_texts(texts)


def resilient(inner, max_attempts: int = 3) -> ResilientEmbedder:
    """Wrap an embedder with retries but no real sleeping."""
    return ResilientEmbedder(inner=inner, max_attempts=max_attempts, backoff_base_ms=1, concurrency=4, sleep=lambda s: None)


@pytest.fixture
def docs_dir(tmp_path: Path) -> Path:
    d = tmp_path / "docs"
    d.mkdir()
    return d


@pytest.fixture
def make_config(docs_dir: Path):
    def _make(**overrides) -> SearchConfig:
        base = dict(docs_root=docs_dir, extraction_workers=2, debounce_ms=100)
        base.update(overrides)
        return SearchConfig(**base)
    return _make
