"""Tests for atomic index publishing."""
from __future__ import annotations

import threading

import pytest

from docsift.models import Chunk, Locator
from docsift.store.index_store import IndexStore
from docsift.store.lexical_index import LexicalIndex


def _index_of(generation: int) -> LexicalIndex:
    tag = f"gen-{generation}"
    return LexicalIndex.from_chunks(
        Chunk(doc_id=tag, ordinal=i, locator=Locator(), text=f"{tag} chunk {i}")
        for i in range(generation + 1)
    )


class TestPublish:
    def test_starts_empty(self):
        store = IndexStore()
        assert store.get().is_empty
        assert store.generation == 0
        assert not store.ready.is_set()

    def test_publish_swaps_and_counts(self):
        store = IndexStore()
        first, second = _index_of(1), _index_of(2)
        assert store.publish(first) == 1
        assert store.get() is first
        assert store.publish(second) == 2
        assert store.get() is second
        assert store.ready.is_set()

    def test_old_snapshot_survives_publish(self):
        store = IndexStore(_index_of(1))
        held = store.get()
        store.publish(_index_of(5))
        assert len(held) == 2
        assert held.score("gen-1 chunk") != []

    def test_rejects_non_index(self):
        with pytest.raises(TypeError):
            IndexStore().publish(["not", "an", "index"])


class TestConcurrentReaders:
    def test_readers_only_see_whole_snapshots(self):
        store = IndexStore(_index_of(0))
        stop = threading.Event()
        problems: list[str] = []

        def reader():
            while not stop.is_set():
                idx = store.get()
                tags = {c.doc_id for c in idx.chunks}
                if len(tags) != 1:
                    problems.append(f"mixed snapshot: {tags}")
                    return
                expected = int(next(iter(tags)).split("-")[1]) + 1
                if len(idx) != expected:
                    problems.append(f"partial snapshot: {len(idx)} != {expected}")
                    return

        readers = [threading.Thread(target=reader) for _ in range(4)]
        for t in readers:
            t.start()
        for g in range(1, 60):
            store.publish(_index_of(g))
        stop.set()
        for t in readers:
            t.join(timeout=5)

        assert problems == []
        assert store.generation == 59
