"""In-memory time-bounded store implementation."""

import logging
import time
from collections.abc import Awaitable, Callable
from typing import Generic, TypeVar

from cachetools import TTLCache  # type: ignore[import-untyped]

from reelcache.core.entities.cache_entry import CacheEntry
from reelcache.core.services.metrics import CacheMetrics

logger = logging.getLogger(__name__)

V = TypeVar("V")


class TimeBoundedStore(Generic[V]):
    """In-memory cache domain using LRU with TTL support.

    Uses cachetools for LRU eviction and TTL expiration. Every value is
    wrapped in a CacheEntry stamped with the store's clock, so an entry
    reads as absent once ``now >= expires_at`` even before it is purged.

    The store is never a source of truth: a failing read counts as a
    miss and a failing write is dropped, so dropping the whole store
    only costs freshness and performance.
    """

    def __init__(
        self,
        name: str,
        maxsize: int = 1000,
        ttl: float = 300.0,
        timer: Callable[[], float] = time.monotonic,
        metrics: CacheMetrics | None = None,
    ) -> None:
        """Initialize the store.

        Args:
            name: Domain name reported in stats and metrics.
            maxsize: Maximum number of items in the cache.
            ttl: TTL in seconds for every item.
            timer: Clock returning seconds; must never go backwards.
            metrics: Optional shared hit/miss counters.
        """
        self._name = name
        self._maxsize = maxsize
        self._ttl = ttl
        self._timer = timer
        self._metrics = metrics
        self._cache: TTLCache[str, CacheEntry[V]] = TTLCache(
            maxsize=maxsize,
            ttl=ttl,
            timer=timer,
        )

    def get(self, key: str) -> V | None:
        """Retrieve cached value by key, refreshing its recency.

        Args:
            key: The cache key to retrieve.

        Returns:
            The cached value, or None if not found or expired.
        """
        entry = self._lookup(key)
        if entry is None:
            if self._metrics is not None:
                self._metrics.record_miss(self._name)
            return None
        if self._metrics is not None:
            self._metrics.record_hit(self._name)
        return entry.value

    def entry(self, key: str) -> CacheEntry[V] | None:
        """Return the stored entry with its timestamps.

        Counts as an access for LRU ordering but not for metrics.
        """
        return self._lookup(key)

    def set(self, key: str, value: V) -> None:
        """Store value, evicting the least recently used entry if full.

        Args:
            key: The cache key.
            value: The value to store.
        """
        try:
            self._cache[key] = CacheEntry.create(value, self._timer(), self._ttl)
        except Exception:
            logger.warning(
                "Cache write failed in %s domain, entry dropped",
                self._name,
                exc_info=True,
            )

    def has(self, key: str) -> bool:
        """Check if a live entry exists. Does not touch recency."""
        return key in self._cache

    def delete(self, key: str) -> bool:
        """Delete cached value.

        Args:
            key: The cache key to delete.

        Returns:
            True if a live entry existed and was deleted, False otherwise.
        """
        live = key in self._cache
        try:
            del self._cache[key]
        except KeyError:
            pass
        return live

    def clear(self) -> None:
        """Clear all cached values."""
        self._cache.clear()

    def keys(self) -> list[str]:
        """Return a snapshot of the live keys."""
        return [key for key in list(self._cache) if key in self._cache]

    async def get_or_load(
        self,
        key: str,
        loader: Callable[[], Awaitable[V | None]],
    ) -> V | None:
        """Read through the cache.

        On a miss, awaits ``loader`` and stores its result. A None result
        means "not found" and is returned without being cached. Errors
        raised by the loader propagate and leave the cache untouched.
        """
        cached = self.get(key)
        if cached is not None:
            logger.debug("Cache hit in %s domain: %s", self._name, key)
            return cached

        value = await loader()
        if value is not None:
            self.set(key, value)
        return value

    def _lookup(self, key: str) -> CacheEntry[V] | None:
        try:
            return self._cache.get(key)
        except Exception:
            logger.warning(
                "Cache read failed in %s domain, treating as miss",
                self._name,
                exc_info=True,
            )
            return None

    @property
    def name(self) -> str:
        return self._name

    @property
    def size(self) -> int:
        """Return the number of live items in the cache."""
        return len(self._cache)

    def __len__(self) -> int:
        return self.size

    @property
    def maxsize(self) -> int:
        """Return the maximum size of the cache."""
        return self._maxsize

    @property
    def ttl(self) -> float:
        """Return the TTL of the cache in seconds."""
        return self._ttl
