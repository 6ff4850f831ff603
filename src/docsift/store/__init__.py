from .base import Index, ScoredChunk
from .index_store import IndexStore
from .lexical_index import LexicalIndex
from .vector_index import VectorIndex, cosine_similarity

__all__ = ["Index", "IndexStore", "LexicalIndex", "ScoredChunk", "VectorIndex", "cosine_similarity"]
