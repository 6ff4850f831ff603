"""Tests for debounced single-flight rebuild scheduling."""
from __future__ import annotations

import threading
import time

import pytest

from docsift.indexer.scheduler import RebuildScheduler, SchedulerState


class CountingRebuild:
    def __init__(self, gate: threading.Event | None = None, fail_first: bool = False) -> None:
        self.calls = 0
        self.started = threading.Event()
        self.gate = gate
        self.fail_first = fail_first
        self._lock = threading.Lock()

    def __call__(self) -> None:
        with self._lock:
            self.calls += 1
            n = self.calls
        self.started.set()
        if self.gate is not None:
            self.gate.wait(timeout=5)
        if self.fail_first and n == 1:
            raise RuntimeError("disk on fire")


@pytest.fixture
def running():
    schedulers: list[RebuildScheduler] = []

    def _make(rebuild, debounce_ms: int) -> RebuildScheduler:
        s = RebuildScheduler(rebuild, debounce_ms=debounce_ms)
        s.start()
        schedulers.append(s)
        return s

    yield _make
    for s in schedulers:
        s.stop()


class TestDebounce:
    def test_burst_coalesces_into_one_rebuild(self, running):
        rebuild = CountingRebuild()
        sched = running(rebuild, debounce_ms=300)
        for _ in range(10):
            sched.notify()
            time.sleep(0.01)
        assert sched.wait_idle(timeout=5)
        assert rebuild.calls == 1
        assert sched.builds_started == 1
        assert sched.state is SchedulerState.IDLE

    def test_nothing_before_deadline(self, running):
        rebuild = CountingRebuild()
        sched = running(rebuild, debounce_ms=500)
        sched.notify()
        time.sleep(0.1)
        assert rebuild.calls == 0
        assert sched.wait_idle(timeout=5)
        assert rebuild.calls == 1

    def test_separate_bursts_build_separately(self, running):
        rebuild = CountingRebuild()
        sched = running(rebuild, debounce_ms=50)
        sched.notify()
        assert sched.wait_idle(timeout=5)
        sched.notify()
        assert sched.wait_idle(timeout=5)
        assert rebuild.calls == 2

    def test_idle_without_changes(self, running):
        sched = running(CountingRebuild(), debounce_ms=50)
        assert sched.wait_idle(timeout=0.1)


class TestSingleFlight:
    def test_changes_during_build_cause_exactly_one_follow_up(self, running):
        gate = threading.Event()
        rebuild = CountingRebuild(gate=gate)
        sched = running(rebuild, debounce_ms=50)

        sched.notify()
        assert rebuild.started.wait(timeout=5)
        for _ in range(5):
            sched.notify()
        time.sleep(0.1)
        assert rebuild.calls == 1
        assert sched.state is SchedulerState.BUILDING_PENDING

        gate.set()
        assert sched.wait_idle(timeout=5)
        assert rebuild.calls == 2

    def test_failed_rebuild_does_not_stop_scheduler(self, running):
        rebuild = CountingRebuild(fail_first=True)
        sched = running(rebuild, debounce_ms=50)
        sched.notify()
        assert sched.wait_idle(timeout=5)
        sched.notify()
        assert sched.wait_idle(timeout=5)
        assert rebuild.calls == 2
        assert sched.state is SchedulerState.IDLE


class TestLifecycle:
    def test_stop_is_idempotent(self):
        sched = RebuildScheduler(CountingRebuild(), debounce_ms=50)
        sched.stop()
        sched.start()
        sched.stop()
        sched.stop()
