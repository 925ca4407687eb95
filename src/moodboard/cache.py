"""Capacity-bounded LRU cache of per-identity protocol server instances.

Entries are evicted least-recently-used first once ``capacity`` is reached.
Recency is refreshed by ``get`` and by overwriting ``set``; ``has`` is a pure
membership check. Ties on the access timestamp go to the entry inserted first.

All mutation happens under one lock that is held only for the map update.
Instance construction in ``get_or_create`` runs outside the lock, so two
callers racing on a cold key may both build an instance; the first to publish
wins and the other instance is discarded.
"""

from __future__ import annotations

import itertools
import logging
import threading
import time
from collections.abc import Callable, Hashable, Iterator
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

from moodboard.errors import ConfigError

logger = logging.getLogger("moodboard.cache")

K = TypeVar("K", bound=Hashable)
V = TypeVar("V")


@dataclass
class CacheEntry(Generic[V]):
    """Cached instance plus the bookkeeping used for eviction."""

    instance: V
    last_accessed: float
    sequence: int


class BoundedInstanceCache(Generic[K, V]):
    """Keyed store with a hard size bound and least-recently-used eviction.

    Args:
        capacity: Maximum number of entries. Must be a positive integer.
        clock: Zero-argument callable returning the current time. Defaults to
            ``time.monotonic``; tests inject a fake clock to control recency.

    Raises:
        ConfigError: If ``capacity`` is not a positive integer.
    """

    def __init__(
        self,
        capacity: int,
        *,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if isinstance(capacity, bool) or not isinstance(capacity, int) or capacity <= 0:
            raise ConfigError(f"cache capacity must be a positive integer, got {capacity!r}")
        self._capacity = capacity
        self._clock = clock
        self._entries: dict[K, CacheEntry[V]] = {}
        self._lock = threading.Lock()
        self._sequence = itertools.count()
        self._hits = 0
        self._misses = 0
        self._evictions = 0

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def size(self) -> int:
        """Current number of entries."""
        return len(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def get(self, key: K) -> V | None:
        """Return the cached instance for ``key`` and mark it as used."""
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                self._misses += 1
                return None
            entry.last_accessed = self._clock()
            self._hits += 1
            return entry.instance

    def set(self, key: K, instance: V) -> None:
        """Insert or overwrite ``key``, evicting one entry if a new key needs room."""
        with self._lock:
            evicted = self._store(key, instance)
        if evicted is not None:
            self._log_eviction(evicted)

    def has(self, key: K) -> bool:
        """Membership check that does not refresh recency."""
        return key in self._entries

    def get_or_create(self, key: K, factory: Callable[[], V]) -> V:
        """Return the cached instance for ``key``, building it on a miss.

        ``factory`` runs without the lock held. The built instance is published
        only if no other caller published one for ``key`` in the meantime;
        otherwise it is dropped and the already-cached instance is returned.
        """
        cached = self.get(key)
        if cached is not None:
            return cached

        created = factory()

        evicted: K | None = None
        with self._lock:
            existing = self._entries.get(key)
            if existing is not None:
                existing.last_accessed = self._clock()
                winner = existing.instance
            else:
                evicted = self._store(key, created)
                winner = created
        if evicted is not None:
            self._log_eviction(evicted)
        if winner is not created:
            logger.debug("Discarded duplicate instance built for %s", key)
        return winner

    def keys(self) -> list[K]:
        """Snapshot of keys ordered from least to most recently used."""
        with self._lock:
            ordered = sorted(
                self._entries.items(),
                key=lambda item: (item[1].last_accessed, item[1].sequence),
            )
        return [key for key, _entry in ordered]

    def __iter__(self) -> Iterator[K]:
        return iter(self.keys())

    def stats(self) -> dict[str, Any]:
        """Counters for diagnostics endpoints."""
        with self._lock:
            return {
                "size": len(self._entries),
                "capacity": self._capacity,
                "hits": self._hits,
                "misses": self._misses,
                "evictions": self._evictions,
            }

    def _store(self, key: K, instance: V) -> K | None:
        # Caller holds self._lock.
        now = self._clock()
        existing = self._entries.get(key)
        if existing is not None:
            existing.instance = instance
            existing.last_accessed = now
            return None

        evicted: K | None = None
        if len(self._entries) >= self._capacity:
            evicted = self._evict_lru()
        self._entries[key] = CacheEntry(
            instance=instance,
            last_accessed=now,
            sequence=next(self._sequence),
        )
        return evicted

    def _evict_lru(self) -> K | None:
        # Caller holds self._lock.
        if not self._entries:
            return None
        oldest_key = min(
            self._entries,
            key=lambda k: (self._entries[k].last_accessed, self._entries[k].sequence),
        )
        del self._entries[oldest_key]
        self._evictions += 1
        return oldest_key

    def _log_eviction(self, key: K) -> None:
        logger.info(
            "Evicted least recently used instance for %s",
            key,
            extra={
                "event": "lru_cache_eviction",
                "evicted_key": str(key),
                "cache_size": len(self._entries),
            },
        )


__all__ = ["BoundedInstanceCache", "CacheEntry"]
