from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
import os
import tomllib

from .chunking.base import Granularity

def _expand(p: str) -> str:
    return os.path.expandvars(os.path.expanduser(p))

class Strategy(str, Enum):
    LEXICAL = "lexical"
    VECTOR = "vector"

class EmptyResultPolicy(str, Enum):
    EMPTY_LIST = "empty_list"
    PLACEHOLDER_MESSAGE = "placeholder_message"

DEFAULT_IGNORE = [".git/**", "**/.DS_Store", "**/~$*"]

def _choice(enum_cls, value, name: str):
    try:
        return enum_cls(value)
    except ValueError:
        valid = tuple(e.value for e in enum_cls)
        raise ValueError(f"Invalid {name}: {value}. Must be one of {valid}.") from None

def _bounded_int(value, name: str, low: int, high: int) -> int:
    n = int(value)
    if n < low or n > high:
        raise ValueError(f"Invalid {name}: {n}. Must be between {low} and {high}.")
    return n

@dataclass(frozen=True)
class SearchConfig:
    """Configuration for one document source and its index."""

    docs_root: Path

    ignore: list[str] = field(default_factory=lambda: list(DEFAULT_IGNORE))
    max_file_bytes: int = 50_000_000

    def __post_init__(self):
        """Convert string paths to Path objects and expand ~ and environment variables."""
        if isinstance(self.docs_root, str):
            object.__setattr__(self, 'docs_root', Path(_expand(self.docs_root)))
        for name, enum_cls in (("granularity", Granularity), ("strategy", Strategy),
                               ("empty_result_policy", EmptyResultPolicy)):
            value = getattr(self, name)
            if not isinstance(value, enum_cls):
                object.__setattr__(self, name, _choice(enum_cls, value, name))

    # Chunking
    granularity: Granularity = Granularity.PARAGRAPH
    fixed_words_size: int = 500

    # Index
    strategy: Strategy = Strategy.LEXICAL
    extraction_workers: int = 4

    # Embeddings (vector strategy only)
    embedding_provider: str = "ollama"  # ollama|sentence_transformers
    embedding_model: str = "nomic-embed-text"
    embedding_endpoint: str = "http://127.0.0.1:11434/api/embeddings"
    embedding_timeout_s: float = 30.0
    embedding_max_retries: int = 3
    embedding_backoff_base_ms: int = 500
    embedding_max_backoff_s: float = 30.0
    embedding_concurrency: int = 4
    embedding_device: str = "cpu"  # cpu|cuda|mps

    # Retrieval
    top_k: int = 5
    snippet_chars: int = 300
    lexical_min_score: float = 0.3
    vector_min_score: float = 0.0
    empty_result_policy: EmptyResultPolicy = EmptyResultPolicy.EMPTY_LIST
    highlight_open: str = "**"
    highlight_close: str = "**"

    # Watch
    debounce_ms: int = 300

    @staticmethod
    def from_toml(path: str | Path) -> "SearchConfig":
        data = tomllib.loads(Path(path).read_text(encoding="utf-8"))
        source = data.get("source", {})
        chunking = data.get("chunking", {})
        index = data.get("index", {})
        emb = data.get("embeddings", {})
        ret = data.get("retrieval", {})
        watch = data.get("watch", {})

        if "root" not in source:
            raise ValueError("Missing [source] root in config")
        docs_root = Path(_expand(source["root"])).resolve()

        granularity = _choice(Granularity, chunking.get("granularity", "paragraph"), "granularity")
        fixed_words_size = _bounded_int(chunking.get("fixed_words_size", 500), "fixed_words_size", 1, 100_000)

        strategy = _choice(Strategy, index.get("strategy", "lexical"), "strategy")
        extraction_workers = _bounded_int(index.get("extraction_workers", 4), "extraction_workers", 1, 64)

        provider = emb.get("provider", "ollama")
        valid_providers = ("ollama", "sentence_transformers")
        if provider not in valid_providers:
            raise ValueError(f"Invalid embedding provider: {provider}. Must be one of {valid_providers}.")

        device = emb.get("device", "cpu")
        valid_devices = ("cpu", "cuda", "mps")
        if device not in valid_devices:
            raise ValueError(f"Invalid device: {device}. Must be one of {valid_devices}.")

        timeout_s = float(emb.get("timeout_s", 30.0))
        if timeout_s <= 0:
            raise ValueError(f"Invalid timeout_s: {timeout_s}. Must be positive.")

        max_backoff_s = float(emb.get("max_backoff_s", 30.0))
        if max_backoff_s <= 0:
            raise ValueError(f"Invalid max_backoff_s: {max_backoff_s}. Must be positive.")

        top_k = _bounded_int(ret.get("top_k", 5), "top_k", 1, 1000)
        snippet_chars = _bounded_int(ret.get("snippet_chars", 300), "snippet_chars", 20, 10_000)
        empty_policy = _choice(EmptyResultPolicy, ret.get("empty_result_policy", "empty_list"), "empty_result_policy")

        highlight_open = str(ret.get("highlight_open", "**"))
        highlight_close = str(ret.get("highlight_close", "**"))
        if not highlight_open or not highlight_close:
            raise ValueError("highlight_open and highlight_close must be non-empty")

        return SearchConfig(
            docs_root=docs_root,
            ignore=list(source.get("ignore", DEFAULT_IGNORE)),
            max_file_bytes=_bounded_int(source.get("max_file_bytes", 50_000_000), "max_file_bytes", 1, 2**40),
            granularity=granularity,
            fixed_words_size=fixed_words_size,
            strategy=strategy,
            extraction_workers=extraction_workers,
            embedding_provider=provider,
            embedding_model=emb.get("model", "nomic-embed-text"),
            embedding_endpoint=emb.get("endpoint", "http://127.0.0.1:11434/api/embeddings"),
            embedding_timeout_s=timeout_s,
            embedding_max_retries=_bounded_int(emb.get("max_retries", 3), "max_retries", 1, 10),
            embedding_backoff_base_ms=_bounded_int(emb.get("backoff_base_ms", 500), "backoff_base_ms", 0, 60_000),
            embedding_max_backoff_s=max_backoff_s,
            embedding_concurrency=_bounded_int(emb.get("concurrency", 4), "concurrency", 1, 64),
            embedding_device=device,
            top_k=top_k,
            snippet_chars=snippet_chars,
            lexical_min_score=float(ret.get("lexical_min_score", 0.3)),
            vector_min_score=float(ret.get("vector_min_score", 0.0)),
            empty_result_policy=empty_policy,
            highlight_open=highlight_open,
            highlight_close=highlight_close,
            debounce_ms=_bounded_int(watch.get("debounce_ms", 300), "debounce_ms", 0, 60_000),
        )
