from __future__ import annotations

from typing import TYPE_CHECKING

from .base import Embedder
from .ollama import OllamaEmbedder
from .resilience import ErrorCategory, ResilientEmbedder, classify_error

if TYPE_CHECKING:
    from ..config import SearchConfig

def make_embedder(cfg: "SearchConfig") -> ResilientEmbedder:
    """Build the configured provider wrapped in retry/concurrency limits."""
    if cfg.embedding_provider == "ollama":
        inner: Embedder = OllamaEmbedder(
            model_id=cfg.embedding_model,
            endpoint=cfg.embedding_endpoint,
            timeout_s=cfg.embedding_timeout_s,
        )
    elif cfg.embedding_provider == "sentence_transformers":
        from .sentence_transformers import SentenceTransformersEmbedder
        inner = SentenceTransformersEmbedder(
            model_id=cfg.embedding_model,
            device=cfg.embedding_device,
        )
    else:
        raise ValueError(f"Unknown embedding provider: {cfg.embedding_provider}")

    return ResilientEmbedder(
        inner=inner,
        max_attempts=cfg.embedding_max_retries,
        backoff_base_ms=cfg.embedding_backoff_base_ms,
        max_backoff_s=cfg.embedding_max_backoff_s,
        concurrency=cfg.embedding_concurrency,
    )

__all__ = [
    "Embedder",
    "ErrorCategory",
    "OllamaEmbedder",
    "ResilientEmbedder",
    "classify_error",
    "make_embedder",
]
