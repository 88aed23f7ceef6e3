"""Least-recently-used result cache with a time-to-live and mtime checks."""

from __future__ import annotations

import time
from collections import OrderedDict
from collections.abc import Callable, Hashable
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True, slots=True)
class CacheStats:
    size: int
    capacity: int
    hits: int
    misses: int

    @property
    def hit_ratio(self) -> float:
        total = self.hits + self.misses
        return self.hits / total if total else 0.0


@dataclass(slots=True)
class _Entry:
    value: Any
    stored_at: float
    mtime: float | None


class LRUCache:
    """Bounded mapping that evicts the least recently used entry first.

    Entries older than *ttl* seconds are treated as absent. An entry stored
    with an mtime is also stale once the source it came from is newer.
    """

    def __init__(
        self,
        capacity: int = 100,
        ttl: float = 300.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if capacity < 1:
            raise ValueError(f"capacity must be at least 1, got {capacity}")
        self._capacity = capacity
        self._ttl = ttl
        self._clock = clock
        self._entries: OrderedDict[Hashable, _Entry] = OrderedDict()
        self._hits = 0
        self._misses = 0

    def _expired(self, entry: _Entry) -> bool:
        return self._clock() - entry.stored_at > self._ttl

    def get(self, key: Hashable, default: Any = None) -> Any:
        entry = self._entries.get(key)
        if entry is None or self._expired(entry):
            if entry is not None:
                del self._entries[key]
            self._misses += 1
            return default
        self._entries.move_to_end(key)
        self._hits += 1
        return entry.value

    def set(self, key: Hashable, value: Any, mtime: float | None = None) -> None:
        if key in self._entries:
            self._entries.move_to_end(key)
        elif len(self._entries) >= self._capacity:
            self._entries.popitem(last=False)
        self._entries[key] = _Entry(value, self._clock(), mtime)

    def delete(self, key: Hashable) -> bool:
        return self._entries.pop(key, None) is not None

    def is_valid(self, key: Hashable, current_mtime: float) -> bool:
        """Return True if *key* is cached, fresh, and not older than *current_mtime*."""
        entry = self._entries.get(key)
        if entry is None:
            return False
        if self._expired(entry) or (entry.mtime is not None and entry.mtime < current_mtime):
            del self._entries[key]
            return False
        return True

    def cleanup(self) -> int:
        """Drop expired entries and return how many were removed."""
        expired = [key for key, entry in self._entries.items() if self._expired(entry)]
        for key in expired:
            del self._entries[key]
        return len(expired)

    def clear(self) -> None:
        self._entries.clear()

    def stats(self) -> CacheStats:
        return CacheStats(len(self._entries), self._capacity, self._hits, self._misses)

    def __contains__(self, key: Hashable) -> bool:
        entry = self._entries.get(key)
        if entry is None:
            return False
        if self._expired(entry):
            del self._entries[key]
            return False
        return True

    def __len__(self) -> int:
        return len(self._entries)
