"""Cache key builders."""

from reelcache.infrastructure.key_builders.default import CatalogKeyBuilder

__all__ = ["CatalogKeyBuilder"]
