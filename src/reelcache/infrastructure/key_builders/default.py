"""Default catalog key builder implementation."""

from typing import Any

from reelcache.utils.hashing import hash_value


class CatalogKeyBuilder:
    """Builds catalog cache keys from request parameters.

    User keys look like ``catalog:{user_id}:{catalog_id}[:p:{hash}]`` and
    shared keys like ``public:{catalog_id}[:p:{hash}]``. Extra parameters
    are hashed so that equivalent requests map to the same key regardless
    of argument order.
    """

    def __init__(
        self,
        user_prefix: str = "catalog",
        public_prefix: str = "public",
    ) -> None:
        """Initialize the key builder.

        Args:
            user_prefix: Prefix for per-user catalog keys.
            public_prefix: Prefix for catalogs shared by all users.
        """
        self._user_prefix = user_prefix
        self._public_prefix = public_prefix

    def build(
        self,
        user_id: str,
        catalog_id: str,
        params: dict[str, Any] | None = None,
    ) -> str:
        """Build the cache key of a user's catalog.

        Args:
            user_id: Internal id of the user.
            catalog_id: Catalog identifier.
            params: Optional extra parameters changing the result set.

        Returns:
            A unique string key for caching the catalog.
        """
        if not user_id:
            raise ValueError("user_id is required for a user catalog key")
        return self._join([self._user_prefix, user_id, catalog_id], params)

    def build_public(
        self,
        catalog_id: str,
        params: dict[str, Any] | None = None,
    ) -> str:
        """Build the cache key of a catalog shared by all users."""
        return self._join([self._public_prefix, catalog_id], params)

    @staticmethod
    def _join(parts: list[str], params: dict[str, Any] | None) -> str:
        # Drop None values so optional filters don't split the key space
        effective = {k: v for k, v in (params or {}).items() if v is not None}
        if effective:
            parts.append(f"p:{hash_value(effective)}")
        return ":".join(parts)
