"""Key builder interface."""

from typing import Any, Protocol


class IKeyBuilder(Protocol):
    """Contract for building catalog cache keys.

    Keys for user-scoped catalogs must embed the user id so results of
    different users never share a key.
    """

    def build(
        self,
        user_id: str,
        catalog_id: str,
        params: dict[str, Any] | None = None,
    ) -> str:
        """Build the cache key of a user's catalog.

        Args:
            user_id: Internal id of the user.
            catalog_id: Catalog identifier (watchlist, diary, list id...).
            params: Optional extra request parameters that change the
                result set (genre filter, sort order, selected lists).

        Returns:
            A unique string key.
        """
        ...

    def build_public(
        self,
        catalog_id: str,
        params: dict[str, Any] | None = None,
    ) -> str:
        """Build the cache key of a catalog shared by all users."""
        ...
