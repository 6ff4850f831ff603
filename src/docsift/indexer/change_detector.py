from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable

from ..paths import relpath
from .reconciler import Reconciler

logger = logging.getLogger(__name__)


@dataclass
class ChangeDetector:
    """Filesystem change detector using watchdog.

    Forwards create/modify/delete/move events for supported, non-ignored
    documents to `on_change`. Debouncing is the scheduler's job.
    """
    root: Path
    on_change: Callable[[], None]
    ignore: list[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        self._observer = None
        # Resolve symlinks to match watchdog's resolved paths (e.g., /tmp -> /private/tmp on macOS)
        self._root = Path(self.root).resolve()
        self._rec = Reconciler(self._root, self.ignore)

    def _relevant(self, src_path: str) -> bool:
        try:
            rel = relpath(self._root, Path(src_path))
        except ValueError:
            return False
        return self._rec.is_candidate(rel)

    def handle(self, src_path: str, dest_path: str | None = None, is_directory: bool = False) -> bool:
        """Route one filesystem event; returns True when it triggered a change."""
        if is_directory:
            # A removed or renamed folder takes its documents with it.
            relevant = True
        else:
            relevant = self._relevant(src_path) or (dest_path is not None and self._relevant(dest_path))
        if relevant:
            logger.debug(f"Change detected: {src_path}" + (f" -> {dest_path}" if dest_path else ""))
            self.on_change()
        return relevant

    def start(self) -> None:
        try:
            from watchdog.observers import Observer  # type: ignore
            from watchdog.events import FileSystemEventHandler  # type: ignore
        except Exception as e:
            raise RuntimeError("watchdog required for watch mode") from e

        outer = self

        class Handler(FileSystemEventHandler):
            def on_created(self, event):  # noqa
                if not event.is_directory:
                    outer.handle(event.src_path)

            def on_modified(self, event):  # noqa
                if not event.is_directory:
                    outer.handle(event.src_path)

            def on_deleted(self, event):  # noqa
                outer.handle(event.src_path, is_directory=event.is_directory)

            def on_moved(self, event):  # noqa
                outer.handle(event.src_path, event.dest_path, is_directory=event.is_directory)

        observer = Observer()
        observer.schedule(Handler(), str(self._root), recursive=True)
        observer.start()
        self._observer = observer
        logger.info(f"Watching {self._root} for changes")

    def stop(self) -> None:
        if self._observer is not None:
            self._observer.stop()
            self._observer.join()
            self._observer = None
