"""Catalog pagination on top of whole-result caching."""

import logging
from collections.abc import Sequence
from typing import Any

from reelcache.core.entities.catalog import Meta, PaginatedResult
from reelcache.core.interfaces.cache_backend import IStore
from reelcache.core.interfaces.invalidator import IInvalidator

logger = logging.getLogger(__name__)


class CatalogPaginator:
    """Stores one complete result set per key and slices pages from it.

    The upstream result set is fetched once per key; every page request
    afterwards is answered from memory. ``skip`` and ``page_size`` only
    apply at read time, the stored value is never partitioned.
    """

    def __init__(
        self,
        user_store: IStore[PaginatedResult],
        shared_store: IStore[PaginatedResult],
        index: IInvalidator,
        default_page_size: int = 100,
    ) -> None:
        """Initialize the paginator.

        Args:
            user_store: Domain holding per-user catalogs.
            shared_store: Domain holding catalogs shared by all users.
            index: Invalidation index bound to ``user_store``.
            default_page_size: Page size used when none is given.
        """
        self._user_store = user_store
        self._shared_store = shared_store
        self._index = index
        self._default_page_size = default_page_size

    @property
    def default_page_size(self) -> int:
        return self._default_page_size

    def get_page(
        self,
        cache_key: str,
        skip: int = 0,
        page_size: int | None = None,
    ) -> list[Meta] | None:
        """Return a page of a cached user catalog, or None on a miss."""
        return self._read(self._user_store, cache_key, skip, page_size)

    def get_shared_page(
        self,
        cache_key: str,
        skip: int = 0,
        page_size: int | None = None,
    ) -> list[Meta] | None:
        """Return a page of a cached shared catalog, or None on a miss."""
        return self._read(self._shared_store, cache_key, skip, page_size)

    def set_full_result(
        self,
        user_id: str,
        cache_key: str,
        full_results: Sequence[Meta],
        skip: int = 0,
        page_size: int | None = None,
    ) -> list[Meta]:
        """Store a user's complete result set and return the requested page.

        The key is recorded in the invalidation index before the value is
        stored so the index never lags behind the store.
        """
        result = PaginatedResult.from_items(full_results)
        page = result.page(skip, self._size(page_size))
        self._index.record(user_id, cache_key)
        self._user_store.set(cache_key, result)
        logger.debug(
            "Stored %d catalog items for user %s under %s",
            len(result),
            user_id,
            cache_key,
        )
        return page

    def set_shared_result(
        self,
        cache_key: str,
        full_results: Sequence[Meta],
        skip: int = 0,
        page_size: int | None = None,
    ) -> list[Meta]:
        """Store a catalog shared by all users and return the requested page."""
        result = PaginatedResult.from_items(full_results)
        page = result.page(skip, self._size(page_size))
        self._shared_store.set(cache_key, result)
        return page

    def _read(
        self,
        store: IStore[Any],
        cache_key: str,
        skip: int,
        page_size: int | None,
    ) -> list[Meta] | None:
        result = store.get(cache_key)
        if result is None:
            return None
        logger.debug("Catalog cache hit: %s", cache_key)
        return result.page(skip, self._size(page_size))

    def _size(self, page_size: int | None) -> int:
        return self._default_page_size if page_size is None else page_size
