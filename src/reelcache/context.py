"""Process-scoped context holding every cache domain and credential state."""

import asyncio
import contextlib
import logging
import time
from collections.abc import Awaitable, Callable, Sequence
from datetime import datetime
from types import TracebackType
from typing import Any, TypeVar

from reelcache.core.entities.cache_config import CacheSettings
from reelcache.core.entities.catalog import (
    Film,
    FilmCriteria,
    FilmRating,
    ListSummary,
    Meta,
)
from reelcache.core.interfaces.credential_store import ICredentialStore
from reelcache.core.interfaces.key_builder import IKeyBuilder
from reelcache.core.interfaces.upstream import IFilmClient, IUpstreamAuth
from reelcache.core.services import film_service
from reelcache.core.services.catalog_pagination import CatalogPaginator
from reelcache.core.services.credential_manager import CredentialManager, utc_now
from reelcache.core.services.invalidation_index import InvalidationIndex
from reelcache.core.services.metrics import CacheMetrics
from reelcache.infrastructure.fabric import CacheFabric
from reelcache.infrastructure.key_builders.default import CatalogKeyBuilder

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ReelCacheContext:
    """Single entry point for route handlers.

    Owns the cache fabric, the invalidation index, the paginator, the
    metrics and the credential manager. Build one per process and inject
    it into handlers; tests build their own isolated instances.

    Example:
        context = ReelCacheContext(auth=token_client, credential_store=users)
        async with context:
            token = await context.get_app_token()
            page = context.get_user_catalog_cached(key, skip=0)
    """

    def __init__(
        self,
        auth: IUpstreamAuth,
        credential_store: ICredentialStore,
        settings: CacheSettings | None = None,
        timer: Callable[[], float] = time.monotonic,
        wall_clock: Callable[[], datetime] = utc_now,
        key_builder: IKeyBuilder | None = None,
    ) -> None:
        """Initialize the context.

        Args:
            auth: Upstream token endpoint.
            credential_store: Persistence of user refresh tokens.
            settings: Cache and credential settings. Uses defaults if not provided.
            timer: Monotonic clock shared by caches and credentials.
            wall_clock: UTC clock for expiries persisted to the store.
            key_builder: Catalog key builder. Uses CatalogKeyBuilder if not
                provided.
        """
        self._settings = settings or CacheSettings()
        self._timeout = self._settings.upstream_timeout.total_seconds()
        self._metrics = CacheMetrics()
        self._fabric = CacheFabric(self._settings, timer=timer, metrics=self._metrics)
        self._index = InvalidationIndex(self._fabric.user_catalogs)
        self._paginator = CatalogPaginator(
            user_store=self._fabric.user_catalogs,
            shared_store=self._fabric.catalog_pages,
            index=self._index,
            default_page_size=self._settings.catalog_page_size,
        )
        self._credentials = CredentialManager(
            auth=auth,
            credential_store=credential_store,
            delegated_cache=self._fabric.delegated_credentials,
            settings=self._settings,
            timer=timer,
            wall_clock=wall_clock,
        )
        self._key_builder = key_builder or CatalogKeyBuilder()
        self._sweeper: asyncio.Task[None] | None = None

    @property
    def settings(self) -> CacheSettings:
        return self._settings

    @property
    def fabric(self) -> CacheFabric:
        return self._fabric

    @property
    def index(self) -> InvalidationIndex:
        return self._index

    @property
    def credentials(self) -> CredentialManager:
        return self._credentials

    @property
    def key_builder(self) -> IKeyBuilder:
        return self._key_builder

    # Lifecycle

    def start(self) -> None:
        """Start the periodic invalidation index sweep.

        Must be called from a running event loop. Calling it twice is a no-op.
        """
        if self._sweeper is not None and not self._sweeper.done():
            return
        interval = self._settings.sweep_interval
        self._sweeper = asyncio.ensure_future(
            self._index.run_periodic_sweep(interval.total_seconds())
        )
        logger.debug("Index sweep started (every %ss)", interval.total_seconds())

    async def aclose(self) -> None:
        """Stop background work. Cached data is left in place."""
        if self._sweeper is None:
            return
        self._sweeper.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await self._sweeper
        self._sweeper = None

    async def __aenter__(self) -> "ReelCacheContext":
        self.start()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    # Credentials

    async def get_app_token(self) -> str:
        return await self._credentials.get_app_token()

    async def call_with_app_token(self, fn: Callable[[str], Awaitable[T]]) -> T:
        return await self._credentials.call_with_app_token(fn)

    async def get_user_token(self, user_id: str) -> str:
        return await self._credentials.get_user_token(user_id)

    async def call_with_user_token(
        self,
        user_id: str,
        fn: Callable[[str], Awaitable[T]],
    ) -> T:
        return await self._credentials.call_with_user_token(user_id, fn)

    # Cache-backed lookups

    async def resolve_film(
        self, client: IFilmClient, criteria: FilmCriteria
    ) -> Film | None:
        return await film_service.resolve_film(
            client, criteria, self._fabric.films, self._timeout
        )

    async def get_film_rating(
        self, client: IFilmClient, film_id: str, user_id: str
    ) -> FilmRating:
        return await film_service.get_film_rating(
            client, film_id, user_id, self._fabric.ratings, self._timeout
        )

    async def resolve_member_id(
        self, client: IFilmClient, username: str
    ) -> str | None:
        return await film_service.resolve_member_id(
            client, username, self._fabric.member_ids, self._timeout
        )

    async def resolve_external_list(
        self, client: IFilmClient, username: str, slug: str
    ) -> ListSummary | None:
        return await film_service.resolve_external_list(
            client,
            username,
            slug,
            self._fabric.lists,
            self._fabric.member_ids,
            self._timeout,
        )

    async def get_poster(
        self, fetch: Callable[[str], Awaitable[bytes | None]], url: str
    ) -> bytes | None:
        return await film_service.get_poster(
            fetch, url, self._fabric.posters, self._timeout
        )

    # Catalogs

    def get_user_catalog_cached(
        self,
        cache_key: str,
        skip: int = 0,
        page_size: int | None = None,
    ) -> list[Meta] | None:
        """Return a page of a user's cached catalog, or None on a miss."""
        return self._paginator.get_page(cache_key, skip, page_size)

    def set_user_catalog(
        self,
        user_id: str,
        cache_key: str,
        full_results: Sequence[Meta],
        skip: int = 0,
        page_size: int | None = None,
    ) -> list[Meta]:
        """Cache a user's full catalog and return the requested page."""
        return self._paginator.set_full_result(
            user_id, cache_key, full_results, skip, page_size
        )

    def invalidate_user_catalogs(self, user_id: str) -> int:
        """Drop every cached catalog of a user.

        Must be called whenever the user's catalog preferences change.
        """
        return self._index.invalidate(user_id)

    async def get_public_catalog(
        self,
        cache_key: str,
        fetch: Callable[[str], Awaitable[Sequence[Meta]]],
        skip: int = 0,
        page_size: int | None = None,
    ) -> list[Meta]:
        """Return a page of a catalog shared by all users.

        On a miss the full catalog is fetched once with the application
        token and cached whole.
        """
        page = self._paginator.get_shared_page(cache_key, skip, page_size)
        if page is not None:
            return page
        full_results = await self._credentials.call_with_app_token(fetch)
        return self._paginator.set_shared_result(
            cache_key, full_results, skip, page_size
        )

    # Observability

    def get_cache_stats(self) -> dict[str, dict[str, Any]]:
        """Return size and capacity of every cache domain."""
        return self._fabric.stats()

    def get_cache_metrics(self) -> dict[str, dict[str, float]]:
        """Return hit/miss counters and rates per cache domain."""
        return self._metrics.snapshot()
