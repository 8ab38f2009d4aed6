"""Cache entry entity."""

from dataclasses import dataclass
from typing import Generic, TypeVar

V = TypeVar("V")


@dataclass(frozen=True)
class CacheEntry(Generic[V]):
    """Immutable cache entry value object.

    Times are expressed in seconds on the owning store's clock, so
    ``expires_at`` is always ``inserted_at + ttl``.
    """

    value: V
    inserted_at: float
    expires_at: float

    @property
    def ttl(self) -> float:
        """Return the lifetime of this entry in seconds."""
        return self.expires_at - self.inserted_at

    def is_expired(self, now: float) -> bool:
        """Check if entry has expired.

        Args:
            now: Current time on the owning store's clock.

        Returns:
            True once ``now`` reaches ``expires_at``.
        """
        return now >= self.expires_at

    @classmethod
    def create(cls, value: V, now: float, ttl: float) -> "CacheEntry[V]":
        """Factory method to create a new cache entry.

        Args:
            value: The value to cache.
            now: Insertion time.
            ttl: Time-to-live in seconds.

        Returns:
            A new CacheEntry instance.
        """
        return cls(value=value, inserted_at=now, expires_at=now + ttl)
