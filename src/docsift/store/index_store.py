from __future__ import annotations

import logging
import threading

from .base import Index
from .lexical_index import LexicalIndex

logger = logging.getLogger(__name__)

class IndexStore:
    """Holds the one reference to the current index snapshot.

    Readers call get() without locking and always receive a complete Index.
    The single writer calls publish(), which swaps the reference in one
    assignment; the old snapshot stays valid for readers still holding it.
    """

    def __init__(self, initial: Index | None = None) -> None:
        self._current: Index = initial if initial is not None else LexicalIndex.empty()
        self._write_lock = threading.Lock()
        self._generation = 0
        self.ready = threading.Event()

    def get(self) -> Index:
        return self._current

    @property
    def generation(self) -> int:
        """Number of successful publishes so far."""
        return self._generation

    def publish(self, index: Index) -> int:
        if not isinstance(index, Index):
            raise TypeError(f"Expected an Index, got {type(index).__name__}")
        with self._write_lock:
            self._current = index
            self._generation += 1
            generation = self._generation
        self.ready.set()
        logger.debug(f"Published index generation {generation} ({len(index)} chunks)")
        return generation
