"""Debounced, single-flight rebuild scheduling.

States and transitions (driven by one message queue, handled on one thread):

    IDLE             + change       -> IDLE, debounce deadline re-armed
    IDLE             + deadline     -> BUILDING (build thread started)
    BUILDING         + change       -> BUILDING_PENDING
    BUILDING_PENDING + change       -> BUILDING_PENDING
    BUILDING         + build done   -> IDLE
    BUILDING_PENDING + build done   -> BUILDING (exactly one follow-up build)
"""
from __future__ import annotations

import logging
import queue
import threading
import time
from enum import Enum
from typing import Callable

logger = logging.getLogger(__name__)


class SchedulerState(Enum):
    IDLE = "idle"
    BUILDING = "building"
    BUILDING_PENDING = "building_pending"


class _Msg(Enum):
    CHANGED = "changed"
    BUILD_DONE = "build_done"
    STOP = "stop"


class RebuildScheduler:
    """Coalesces bursts of change notifications into single rebuilds.

    Usage:
        scheduler = RebuildScheduler(indexer.rebuild, debounce_ms=300)
        scheduler.start()
        scheduler.notify()   # from any thread, e.g. a watchdog handler
    """

    def __init__(self, rebuild: Callable[[], object], debounce_ms: int = 300) -> None:
        self._rebuild = rebuild
        self.debounce_s = debounce_ms / 1000.0
        self.state = SchedulerState.IDLE
        self.builds_started = 0
        self._events: "queue.Queue[_Msg]" = queue.Queue()
        self._deadline: float | None = None
        self._lock = threading.Lock()
        self._idle = threading.Event()
        self._idle.set()
        self._thread: threading.Thread | None = None
        self._build_thread: threading.Thread | None = None

    def start(self) -> None:
        if self._thread is not None:
            return
        self._thread = threading.Thread(target=self._run, name="docsift-scheduler", daemon=True)
        self._thread.start()

    def stop(self, timeout: float | None = 5.0) -> None:
        """Stop the loop. A build already running is allowed to finish."""
        if self._thread is None:
            return
        self._events.put(_Msg.STOP)
        self._thread.join(timeout=timeout)
        self._thread = None
        if self._build_thread is not None:
            self._build_thread.join(timeout=timeout)

    def notify(self) -> None:
        """Record that the source directory changed."""
        with self._lock:
            self._idle.clear()
            self._events.put(_Msg.CHANGED)

    def wait_idle(self, timeout: float | None = None) -> bool:
        """Block until no build is running, pending or waiting out the debounce."""
        return self._idle.wait(timeout)

    def _run(self) -> None:
        while True:
            timeout = None
            if self._deadline is not None:
                timeout = max(0.0, self._deadline - time.monotonic())
            try:
                msg = self._events.get(timeout=timeout)
            except queue.Empty:
                msg = None

            if msg is _Msg.STOP:
                return
            if msg is _Msg.CHANGED:
                self._on_change()
            elif msg is _Msg.BUILD_DONE:
                self._on_build_done()
            elif self._deadline is not None and time.monotonic() >= self._deadline:
                self._deadline = None
                if self.state is SchedulerState.IDLE:
                    self._start_build()
            self._maybe_idle()

    def _on_change(self) -> None:
        if self.state is SchedulerState.IDLE:
            self._deadline = time.monotonic() + self.debounce_s
        elif self.state is SchedulerState.BUILDING:
            logger.debug("Change during rebuild; scheduling one follow-up rebuild")
            self.state = SchedulerState.BUILDING_PENDING

    def _on_build_done(self) -> None:
        if self.state is SchedulerState.BUILDING_PENDING:
            self._start_build()
        else:
            self.state = SchedulerState.IDLE

    def _start_build(self) -> None:
        self.state = SchedulerState.BUILDING
        self.builds_started += 1
        self._build_thread = threading.Thread(target=self._build, name="docsift-rebuild", daemon=True)
        self._build_thread.start()

    def _build(self) -> None:
        try:
            self._rebuild()
        except Exception:
            logger.exception("Rebuild failed; keeping the previous index")
        finally:
            self._events.put(_Msg.BUILD_DONE)

    def _maybe_idle(self) -> None:
        with self._lock:
            if (self.state is SchedulerState.IDLE
                    and self._deadline is None
                    and self._events.empty()):
                self._idle.set()
