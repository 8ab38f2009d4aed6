"""Infrastructure layer implementations for reelcache."""

from reelcache.infrastructure.backends import TimeBoundedStore
from reelcache.infrastructure.fabric import CacheFabric
from reelcache.infrastructure.key_builders import CatalogKeyBuilder

__all__ = [
    "TimeBoundedStore",
    "CacheFabric",
    "CatalogKeyBuilder",
]
