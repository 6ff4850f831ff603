from __future__ import annotations

import logging
import threading
from dataclasses import dataclass

from ..config import SearchConfig
from ..embeddings import ResilientEmbedder
from ..errors import DirectoryUnreadable
from ..models import BuildStats
from ..store.index_store import IndexStore
from .builder import IndexBuilder
from .change_detector import ChangeDetector
from .scheduler import RebuildScheduler

logger = logging.getLogger(__name__)

@dataclass
class Indexer:
    """Owns the index lifecycle: initial build, watching, and atomic publishing.

    The indexer is the only writer of `store`; queries read `store.get()`.
    """
    cfg: SearchConfig
    embedder: ResilientEmbedder | None = None

    def __post_init__(self) -> None:
        self.builder = IndexBuilder(self.cfg, embedder=self.embedder)
        self.embedder = self.builder.embedder
        self.store = IndexStore(self.builder.empty_index())
        self.scheduler = RebuildScheduler(self.rebuild, debounce_ms=self.cfg.debounce_ms)
        self.detector: ChangeDetector | None = None
        self.last_stats: BuildStats | None = None
        self.ready = self.store.ready
        self._build_lock = threading.Lock()

    def scan(self) -> BuildStats:
        """Build a fresh index and publish it. Raises DirectoryUnreadable."""
        with self._build_lock:
            index, stats = self.builder.build()
            self.store.publish(index)
            self.last_stats = stats
        return stats

    def rebuild(self) -> BuildStats | None:
        """Scheduler entry point: like scan(), but an unreadable directory keeps the old index."""
        try:
            return self.scan()
        except DirectoryUnreadable as e:
            logger.warning(f"{e}; keeping previous index (generation {self.store.generation})")
            return None

    def start(self, watch: bool = True) -> BuildStats:
        """Run the initial build synchronously; with watch=True, keep the index fresh.

        The watcher is running before the initial build lists the directory,
        so a change made while that build runs schedules a follow-up rebuild.
        The rebuild waits on the build lock until the initial build is
        published. `ready` is set by the first publish.
        """
        if watch:
            self.scheduler.start()
            self.detector = ChangeDetector(
                root=self.cfg.docs_root,
                on_change=self.scheduler.notify,
                ignore=self.cfg.ignore,
            )
            try:
                self.detector.start()
            except OSError as e:
                self.stop()
                raise DirectoryUnreadable(self.cfg.docs_root, str(e)) from e
        try:
            return self.scan()
        except DirectoryUnreadable:
            self.stop()
            raise

    def stop(self) -> None:
        if self.detector is not None:
            self.detector.stop()
            self.detector = None
        self.scheduler.stop()
