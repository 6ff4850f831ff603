"""docsift: watch a folder of documents and search it.

Extracts text from TXT, PDF and DOCX files, chunks it, builds an immutable
lexical or vector index, keeps it fresh with debounced rebuilds, and answers
ranked queries with highlighted snippets.

Public API:
- SearchConfig
- Indexer
- Retriever
"""

from .config import SearchConfig
from .indexer.indexer import Indexer
from .retrieval.retriever import Retriever

__all__ = ["SearchConfig", "Indexer", "Retriever"]
