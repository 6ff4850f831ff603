from __future__ import annotations

from typing import Protocol, Sequence
import numpy as np

class Embedder(Protocol):
    """A provider that turns text into fixed-length vectors.

    `model_id` names the model; every vector it returns for one index must
    share one dimension. Providers raise freely; ResilientEmbedder decides
    what is worth retrying.
    """
    model_id: str

    def embed_texts(self, texts: Sequence[str]) -> np.ndarray:
        """Return a (len(texts), dims) array."""
        ...

    def embed_query(self, query: str) -> np.ndarray:
        """Return a (dims,) array for a search query."""
        ...
