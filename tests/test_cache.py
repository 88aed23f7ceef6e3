"""Tests for the LRU result cache."""

from __future__ import annotations

import pytest

from tinyhtml.cache import CacheStats, LRUCache


class FakeClock:
    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


class TestBasics:
    def test_set_and_get(self) -> None:
        cache = LRUCache()
        cache.set("a", 1)
        assert cache.get("a") == 1
        assert "a" in cache
        assert len(cache) == 1

    def test_missing_returns_default(self) -> None:
        cache = LRUCache()
        assert cache.get("nope") is None
        assert cache.get("nope", 0) == 0

    def test_overwrite(self) -> None:
        cache = LRUCache()
        cache.set("a", 1)
        cache.set("a", 2)
        assert cache.get("a") == 2
        assert len(cache) == 1

    def test_delete(self) -> None:
        cache = LRUCache()
        cache.set("a", 1)
        assert cache.delete("a") is True
        assert cache.delete("a") is False
        assert "a" not in cache

    def test_clear(self) -> None:
        cache = LRUCache()
        cache.set("a", 1)
        cache.set("b", 2)
        cache.clear()
        assert len(cache) == 0

    def test_capacity_must_be_positive(self) -> None:
        with pytest.raises(ValueError, match="capacity"):
            LRUCache(capacity=0)


class TestEviction:
    def test_least_recently_used_evicted(self) -> None:
        cache = LRUCache(capacity=2)
        cache.set("a", 1)
        cache.set("b", 2)
        cache.set("c", 3)
        assert "a" not in cache
        assert "b" in cache
        assert "c" in cache

    def test_get_refreshes_recency(self) -> None:
        cache = LRUCache(capacity=2)
        cache.set("a", 1)
        cache.set("b", 2)
        cache.get("a")
        cache.set("c", 3)
        assert "a" in cache
        assert "b" not in cache

    def test_overwrite_does_not_evict(self) -> None:
        cache = LRUCache(capacity=2)
        cache.set("a", 1)
        cache.set("b", 2)
        cache.set("a", 10)
        assert len(cache) == 2
        assert cache.get("b") == 2


class TestExpiry:
    def test_ttl(self, clock: FakeClock) -> None:
        cache = LRUCache(ttl=10, clock=clock)
        cache.set("a", 1)
        clock.now = 10
        assert cache.get("a") == 1
        clock.now = 10.5
        assert cache.get("a") is None
        assert len(cache) == 0

    def test_contains_respects_ttl(self, clock: FakeClock) -> None:
        cache = LRUCache(ttl=1, clock=clock)
        cache.set("a", 1)
        clock.now = 2
        assert "a" not in cache

    def test_cleanup(self, clock: FakeClock) -> None:
        cache = LRUCache(ttl=5, clock=clock)
        cache.set("old", 1)
        clock.now = 4
        cache.set("new", 2)
        clock.now = 6
        assert cache.cleanup() == 1
        assert "new" in cache
        assert "old" not in cache


class TestMtime:
    def test_unchanged_source_valid(self) -> None:
        cache = LRUCache()
        cache.set("f", "<p></p>", mtime=100.0)
        assert cache.is_valid("f", 100.0)

    def test_newer_source_invalidates(self) -> None:
        cache = LRUCache()
        cache.set("f", "<p></p>", mtime=100.0)
        assert not cache.is_valid("f", 101.0)
        assert "f" not in cache

    def test_unknown_key_invalid(self) -> None:
        assert not LRUCache().is_valid("f", 1.0)

    def test_expired_invalid(self, clock: FakeClock) -> None:
        cache = LRUCache(ttl=1, clock=clock)
        cache.set("f", "x", mtime=1.0)
        clock.now = 5
        assert not cache.is_valid("f", 1.0)

    def test_no_mtime_ignores_source_changes(self) -> None:
        cache = LRUCache()
        cache.set("f", "x")
        assert cache.is_valid("f", 999.0)


class TestStats:
    def test_hits_and_misses(self) -> None:
        cache = LRUCache(capacity=5)
        cache.set("a", 1)
        cache.get("a")
        cache.get("a")
        cache.get("b")
        stats = cache.stats()
        assert stats == CacheStats(size=1, capacity=5, hits=2, misses=1)
        assert stats.hit_ratio == pytest.approx(2 / 3)

    def test_empty_ratio(self) -> None:
        assert LRUCache().stats().hit_ratio == 0.0
