from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence
import numpy as np
import json
import urllib.request

from ..errors import EmbeddingProviderError

@dataclass
class OllamaEmbedder:
    """Adapter for an Ollama-compatible embeddings endpoint.

    Transport errors (URLError, HTTPError, timeouts) propagate unchanged so the
    resilience layer can classify them; a malformed payload is a fatal
    EmbeddingProviderError.
    """
    model_id: str
    endpoint: str = "http://127.0.0.1:11434/api/embeddings"
    timeout_s: float = 30.0
    dims: int = 0

    def _call(self, prompt: str) -> list[float]:
        payload = {"model": self.model_id, "prompt": prompt}
        data = json.dumps(payload).encode("utf-8")
        req = urllib.request.Request(self.endpoint, data=data, headers={"Content-Type": "application/json"})
        with urllib.request.urlopen(req, timeout=self.timeout_s) as resp:
            raw = resp.read().decode("utf-8")
        try:
            out = json.loads(raw)
        except json.JSONDecodeError as e:
            raise EmbeddingProviderError(f"Invalid JSON from embedding endpoint: {e}", retryable=False) from e
        vec = out.get("embedding") if isinstance(out, dict) else None
        if not isinstance(vec, list) or not vec:
            raise EmbeddingProviderError(f"Unexpected embedding response: {str(out)[:200]}", retryable=False)
        return [float(x) for x in vec]

    def embed_texts(self, texts: Sequence[str]) -> np.ndarray:
        vectors = [self._call(t) for t in texts]
        arr = np.array(vectors, dtype=np.float32)
        if self.dims == 0 and arr.ndim == 2:
            self.dims = int(arr.shape[1])
        return arr

    def embed_query(self, query: str) -> np.ndarray:
        arr = np.array(self._call(query), dtype=np.float32)
        if self.dims == 0:
            self.dims = int(arr.shape[0])
        return arr
