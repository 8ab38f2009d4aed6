"""Cache store interface."""

from collections.abc import Awaitable, Callable
from typing import Protocol, TypeVar

from reelcache.core.entities.cache_entry import CacheEntry

V = TypeVar("V")


class IStore(Protocol[V]):
    """Contract for a single in-memory cache domain.

    Operations are synchronous; in a cooperatively scheduled process they
    are atomic with respect to each other. An expired entry must behave
    exactly like a missing one.
    """

    @property
    def name(self) -> str:
        """Domain name, used for stats and metrics."""
        ...

    def get(self, key: str) -> V | None:
        """Retrieve cached value by key.

        Args:
            key: The cache key to retrieve.

        Returns:
            The cached value, or None if not found or expired.
        """
        ...

    def entry(self, key: str) -> CacheEntry[V] | None:
        """Retrieve the stored entry with its timestamps, without metrics."""
        ...

    def set(self, key: str, value: V) -> None:
        """Store value under key with the domain's TTL.

        Args:
            key: The cache key.
            value: The value to store.
        """
        ...

    def has(self, key: str) -> bool:
        """Check if a live entry exists without touching recency."""
        ...

    def delete(self, key: str) -> bool:
        """Delete cached value.

        Returns:
            True if the key existed and was deleted, False otherwise.
        """
        ...

    def clear(self) -> None:
        """Clear all cached values."""
        ...

    @property
    def size(self) -> int:
        """Number of live entries."""
        ...

    async def get_or_load(
        self,
        key: str,
        loader: Callable[[], Awaitable[V | None]],
    ) -> V | None:
        """Return the cached value, or load, store and return it on a miss.

        A None result from the loader is returned but never cached.
        """
        ...
