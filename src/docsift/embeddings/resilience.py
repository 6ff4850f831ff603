"""Retry and bounded-concurrency wrapper for embedding provider calls.

Provider failures are classified as retryable (timeouts, connection errors,
rate limits, 5xx) or fatal (bad input, auth failure, malformed response).
Retryable failures back off exponentially up to a small attempt cap.
"""
from __future__ import annotations

import logging
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Sequence, TypeVar

import numpy as np

from ..errors import EmbeddingProviderError
from .base import Embedder

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ErrorCategory(Enum):
    """Classification of provider errors for retry behavior."""

    TRANSIENT = "transient"  # Retry with backoff
    RATE_LIMITED = "rate_limited"  # Retry, honour Retry-After
    PERMANENT = "permanent"  # Give up on this text
    AUTH_FAILURE = "auth_failure"  # Give up, credentials are wrong

    @property
    def retryable(self) -> bool:
        return self in (ErrorCategory.TRANSIENT, ErrorCategory.RATE_LIMITED)


def _extract_status_code(error: Exception) -> int | None:
    """Extract an HTTP status code from urllib/httpx style exceptions."""
    for attr in ("code", "status_code", "status"):
        code = getattr(error, attr, None)
        if isinstance(code, int):
            return code

    response = getattr(error, "response", None)
    if response is not None:
        code = getattr(response, "status_code", None)
        if isinstance(code, int):
            return code

    return None


def _extract_retry_after(error: Exception) -> float | None:
    """Extract a Retry-After header value from the error if present."""
    headers = getattr(error, "headers", None)
    if headers is None:
        response = getattr(error, "response", None)
        headers = getattr(response, "headers", None)
    if headers is None:
        return None
    try:
        retry_after = headers.get("Retry-After")
    except AttributeError:
        return None
    if retry_after:
        try:
            return float(retry_after)
        except (TypeError, ValueError):
            return None
    return None


def classify_error(error: Exception) -> ErrorCategory:
    """Classify a provider exception into a retry category."""
    if isinstance(error, EmbeddingProviderError):
        return ErrorCategory.TRANSIENT if error.retryable else ErrorCategory.PERMANENT

    status = _extract_status_code(error)
    if status:
        if status == 429:
            return ErrorCategory.RATE_LIMITED
        if status in (401, 403):
            return ErrorCategory.AUTH_FAILURE
        if status in (400, 404, 413, 422):
            return ErrorCategory.PERMANENT
        if status in (408, 500, 502, 503, 504):
            return ErrorCategory.TRANSIENT

    error_type = type(error).__name__
    error_msg = str(error).lower()

    connection_types = ("Connection", "Timeout", "Socket", "Transport", "Network", "URLError")
    if any(x in error_type for x in connection_types):
        return ErrorCategory.TRANSIENT

    connection_msgs = ("connection", "timeout", "timed out", "reset", "refused", "unreachable")
    if any(x in error_msg for x in connection_msgs):
        return ErrorCategory.TRANSIENT

    if isinstance(error, (ValueError, TypeError)) or "json" in error_type.lower():
        return ErrorCategory.PERMANENT

    # Unknown errors: safer to retry
    return ErrorCategory.TRANSIENT


@dataclass
class ResilientEmbedder:
    """Wraps an Embedder with retries, backoff and an in-flight call limit.

    Usage:
        embedder = ResilientEmbedder(OllamaEmbedder("nomic-embed-text"), max_attempts=3)
        vectors = embedder.embed_many(texts)  # None where a text gave up
    """

    inner: Embedder
    max_attempts: int = 3
    backoff_base_ms: int = 500
    max_backoff_s: float = 30.0
    concurrency: int = 4
    sleep: Callable[[float], None] = time.sleep

    _slots: threading.BoundedSemaphore = field(init=False, repr=False)

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError(f"Invalid max_attempts: {self.max_attempts}. Must be at least 1.")
        if self.max_backoff_s < 0:
            raise ValueError(f"Invalid max_backoff_s: {self.max_backoff_s}. Must not be negative.")
        self._slots = threading.BoundedSemaphore(max(1, self.concurrency))

    @property
    def model_id(self) -> str:
        return self.inner.model_id

    @property
    def backoff_base_s(self) -> float:
        return self.backoff_base_ms / 1000.0

    def embed_text(self, text: str) -> np.ndarray:
        return self._call(lambda: np.asarray(self.inner.embed_texts([text]), dtype=np.float32)[0], "chunk")

    def embed_query(self, query: str) -> np.ndarray:
        return self._call(lambda: np.asarray(self.inner.embed_query(query), dtype=np.float32), "query")

    def embed_many(self, texts: Sequence[str]) -> list[np.ndarray | None]:
        """Embed each text, returning None in place of texts that gave up.

        Every call finishes before this returns.
        """
        if not texts:
            return []

        def one(text: str) -> np.ndarray | None:
            try:
                return self.embed_text(text)
            except EmbeddingProviderError:
                return None

        with ThreadPoolExecutor(max_workers=max(1, self.concurrency)) as executor:
            return list(executor.map(one, texts))

    def _call(self, fn: Callable[[], T], what: str) -> T:
        """Run fn with retries; raise EmbeddingProviderError once it gives up."""
        last_error: Exception | None = None
        category = ErrorCategory.TRANSIENT
        for attempt in range(self.max_attempts):
            try:
                with self._slots:
                    result = fn()
                if attempt > 0:
                    logger.debug(f"[{self.model_id}] {what} succeeded on attempt {attempt + 1}")
                return result
            except Exception as e:
                last_error = e
                category = classify_error(e)
                if not category.retryable:
                    logger.debug(f"[{self.model_id}] {what} failed permanently: {type(e).__name__}: {e}")
                    break
                if attempt + 1 < self.max_attempts:
                    wait = self._get_backoff(e, category, attempt)
                    logger.debug(
                        f"[{self.model_id}] Retry {attempt + 1}/{self.max_attempts - 1} for {what}: "
                        f"{type(e).__name__} (waiting {wait:.2f}s)"
                    )
                    self.sleep(wait)

        reason = f"{type(last_error).__name__}: {last_error}" if last_error else "unknown error"
        raise EmbeddingProviderError(reason, retryable=category.retryable) from last_error

    def _get_backoff(self, error: Exception, category: ErrorCategory, attempt: int) -> float:
        """Backoff time, respecting Retry-After on rate limits, never above max_backoff_s."""
        if category == ErrorCategory.RATE_LIMITED:
            retry_after = _extract_retry_after(error)
            if retry_after:
                return min(retry_after, self.max_backoff_s)
        return min(self.backoff_base_s * (2 ** attempt), self.max_backoff_s)
