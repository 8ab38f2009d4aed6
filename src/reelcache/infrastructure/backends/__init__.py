"""Cache store backends."""

from reelcache.infrastructure.backends.memory import TimeBoundedStore

__all__ = ["TimeBoundedStore"]
