from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Sequence

import numpy as np

from ..errors import EmbeddingProviderError

logger = logging.getLogger(__name__)

@dataclass
class SentenceTransformersEmbedder:
    """In-process embeddings; install with the `local` extra.

    Vectors are L2-normalised, so the same model embeds chunks and queries
    symmetrically.
    """
    model_id: str
    device: str = "cpu"
    batch_size: int = 32
    dims: int = field(init=False, default=0)

    def __post_init__(self) -> None:
        try:
            from sentence_transformers import SentenceTransformer  # type: ignore
        except ImportError as e:
            raise EmbeddingProviderError(
                "sentence-transformers is not installed (pip install 'docsift[local]')"
            ) from e
        try:
            self._model: Any = SentenceTransformer(self.model_id, device=self.device)
        except (OSError, ValueError) as e:
            raise EmbeddingProviderError(f"Cannot load model {self.model_id!r}: {e}") from e
        self.dims = int(self._encode(["dimension"], batch_size=1).shape[1])
        logger.info(f"Loaded {self.model_id} on {self.device} ({self.dims} dims)")

    def _encode(self, texts: list[str], batch_size: int) -> np.ndarray:
        return self._model.encode(texts, batch_size=batch_size, convert_to_numpy=True, normalize_embeddings=True)

    def embed_texts(self, texts: Sequence[str]) -> np.ndarray:
        return self._encode(list(texts), self.batch_size)

    def embed_query(self, query: str) -> np.ndarray:
        return self._encode([query], 1)[0]
