"""Tests for ReelCacheContext."""

import asyncio
from datetime import timedelta
from unittest.mock import AsyncMock, MagicMock

import pytest

from reelcache import CatalogKeyBuilder, ReelCacheContext
from reelcache.core.entities.cache_config import CacheSettings, DomainSettings
from reelcache.core.entities.catalog import FilmCriteria
from reelcache.core.exceptions import UpstreamRejectedError, UpstreamUnavailableError

ITEMS = [{"id": f"tt{i:07d}", "type": "movie"} for i in range(37)]


@pytest.fixture
def context(auth, credential_store, clock) -> ReelCacheContext:
    settings = CacheSettings(catalog_page_size=10)
    return ReelCacheContext(
        auth=auth,
        credential_store=credential_store,
        settings=settings,
        timer=clock,
        wall_clock=clock.utc,
    )


class TestUserCatalogs:
    """Tests for per-user catalog caching and invalidation."""

    def test_write_then_read_pages(self, context) -> None:
        key = context.key_builder.build("user-1", "watchlist")

        first = context.set_user_catalog("user-1", key, ITEMS)

        assert first == ITEMS[:10]
        assert context.get_user_catalog_cached(key, skip=30) == ITEMS[30:]
        assert context.get_user_catalog_cached(key, skip=40) == []

    def test_miss_returns_none(self, context) -> None:
        assert context.get_user_catalog_cached("catalog:user-1:diary") is None

    def test_invalidate_then_miss(self, context) -> None:
        watchlist = context.key_builder.build("user-1", "watchlist")
        diary = context.key_builder.build("user-1", "diary", {"sort": "date"})
        other = context.key_builder.build("user-2", "watchlist")
        context.set_user_catalog("user-1", watchlist, ITEMS)
        context.set_user_catalog("user-1", diary, ITEMS)
        context.set_user_catalog("user-2", other, ITEMS)

        assert context.invalidate_user_catalogs("user-1") == 2

        assert context.get_user_catalog_cached(watchlist) is None
        assert context.get_user_catalog_cached(diary) is None
        assert context.get_user_catalog_cached(other) == ITEMS[:10]
        assert context.invalidate_user_catalogs("user-1") == 0

    def test_catalogs_expire(self, context, clock) -> None:
        key = context.key_builder.build("user-1", "watchlist")
        context.set_user_catalog("user-1", key, ITEMS)

        clock.advance(context.settings.user_catalog.ttl_seconds)

        assert context.get_user_catalog_cached(key) is None


class TestPublicCatalog:
    """Tests for catalogs shared by all users."""

    @pytest.mark.asyncio
    async def test_fetched_once_with_app_token(self, context, auth) -> None:
        fetch = AsyncMock(return_value=ITEMS)
        key = context.key_builder.build_public("popular")

        first = await context.get_public_catalog(key, fetch)
        second = await context.get_public_catalog(key, fetch, skip=20)

        assert first == ITEMS[:10]
        assert second == ITEMS[20:30]
        fetch.assert_awaited_once_with("app-1")
        assert auth.app_calls == 1

    @pytest.mark.asyncio
    async def test_not_indexed_per_user(self, context) -> None:
        key = context.key_builder.build_public("popular")
        await context.get_public_catalog(key, AsyncMock(return_value=ITEMS))

        assert len(context.index) == 0

    @pytest.mark.asyncio
    async def test_rejected_token_refreshed(self, context, auth) -> None:
        fetch = AsyncMock(side_effect=[UpstreamRejectedError(), ITEMS])

        page = await context.get_public_catalog("public:popular", fetch)

        assert page == ITEMS[:10]
        assert auth.app_calls == 2

    @pytest.mark.asyncio
    async def test_failure_not_cached(self, context) -> None:
        fetch = AsyncMock(side_effect=ConnectionError("reset"))

        with pytest.raises(UpstreamUnavailableError):
            await context.get_public_catalog("public:popular", fetch)

        assert not context.fabric.catalog_pages.has("public:popular")


class TestCredentials:
    """Tests for credential delegation."""

    @pytest.mark.asyncio
    async def test_user_token_cached_in_fabric(self, context, auth) -> None:
        assert await context.get_user_token("user-1") == "user-1"

        assert context.fabric.delegated_credentials.has("user-1")
        assert await context.call_with_user_token("user-1", AsyncMock(return_value="ok")) == "ok"
        assert len(auth.refresh_calls) == 1

    @pytest.mark.asyncio
    async def test_app_token(self, context) -> None:
        assert await context.get_app_token() == "app-1"
        assert await context.call_with_app_token(AsyncMock(return_value=3)) == 3


class TestLookups:
    """Tests for cache-backed lookups going through the fabric."""

    @pytest.mark.asyncio
    async def test_film_lands_in_film_domain(self, context) -> None:
        client = MagicMock()
        client.search_films = AsyncMock(return_value=[{"id": "a1", "name": "Heat"}])

        film = await context.resolve_film(client, FilmCriteria(title="Heat"))

        assert film is not None
        assert context.fabric.films.size == 1
        assert context.fabric.ratings.size == 0

    @pytest.mark.asyncio
    async def test_member_and_poster(self, context) -> None:
        client = MagicMock()
        client.search_member_by_username = AsyncMock(return_value={"id": "m1"})
        fetch = AsyncMock(return_value=b"jpeg")

        assert await context.resolve_member_id(client, "alice") == "m1"
        assert await context.get_poster(fetch, "https://img/x.jpg") == b"jpeg"
        assert context.fabric.member_ids.has("alice")
        assert context.fabric.posters.has("https://img/x.jpg")

    @pytest.mark.asyncio
    async def test_lookup_errors_are_unavailable(self, context) -> None:
        client = MagicMock()
        client.search_films = AsyncMock(side_effect=ConnectionError("upstream 503 secret-detail"))

        with pytest.raises(UpstreamUnavailableError) as exc_info:
            await context.resolve_film(client, FilmCriteria(title="Heat"))

        assert "secret-detail" not in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_lookups_use_configured_timeout(self, auth, credential_store, clock) -> None:
        settings = CacheSettings(upstream_timeout=timedelta(milliseconds=20))
        context = ReelCacheContext(auth, credential_store, settings, timer=clock)

        async def hang(*args, **kwargs):
            await asyncio.sleep(10)

        client = MagicMock()
        client.search_films = hang
        client.get_film_relationship = hang
        client.get_film_statistics = hang

        with pytest.raises(UpstreamUnavailableError):
            await context.resolve_film(client, FilmCriteria(title="Heat"))
        with pytest.raises(UpstreamUnavailableError):
            await context.get_film_rating(client, "a1", "user-1")

    @pytest.mark.asyncio
    async def test_rejected_lookup_retried_with_user_token(self, context, auth) -> None:
        client = MagicMock()

        async def relationship(film_id: str) -> dict:
            if client.token == "user-1":
                raise UpstreamRejectedError()
            return {"rating": 3.0}

        client.get_film_relationship = relationship
        client.get_film_statistics = AsyncMock(return_value={})

        async def fetch_rating(token: str):
            client.token = token
            return await context.get_film_rating(client, "a1", "user-1")

        rating = await context.call_with_user_token("user-1", fetch_rating)

        assert rating.user_rating == 3.0
        assert auth.refresh_calls == ["refresh-0", "refresh-1"]


class TestObservability:
    """Tests for stats and metrics."""

    def test_stats_cover_every_domain(self, context) -> None:
        stats = context.get_cache_stats()

        assert set(stats) == {
            "film",
            "rating",
            "member_id",
            "list_meta",
            "catalog_page",
            "poster",
            "delegated_credential",
            "user_catalog",
        }
        assert stats["poster"] == {"size": 0, "max": 300, "ttl": 86400.0}

    def test_metrics_follow_reads(self, context) -> None:
        key = context.key_builder.build("user-1", "watchlist")
        context.get_user_catalog_cached(key)
        context.set_user_catalog("user-1", key, ITEMS)
        context.get_user_catalog_cached(key)

        metrics = context.get_cache_metrics()

        assert metrics["user_catalog"]["hits"] == 1
        assert metrics["user_catalog"]["misses"] == 1

    def test_domain_settings_applied(self, auth, credential_store, clock) -> None:
        settings = CacheSettings(film=DomainSettings(max_size=5, ttl=timedelta(seconds=30)))
        context = ReelCacheContext(auth, credential_store, settings, timer=clock)

        assert context.get_cache_stats()["film"] == {"size": 0, "max": 5, "ttl": 30.0}


class TestLifecycle:
    """Tests for the background index sweep."""

    @pytest.mark.asyncio
    async def test_sweep_runs_until_closed(self, auth, credential_store, clock) -> None:
        settings = CacheSettings(index_sweep_interval=timedelta(milliseconds=1))
        context = ReelCacheContext(auth, credential_store, settings, timer=clock)
        key = context.key_builder.build("user-1", "watchlist")
        context.set_user_catalog("user-1", key, ITEMS)
        clock.advance(settings.user_catalog.ttl_seconds)

        async with context:
            for _ in range(100):
                if len(context.index) == 0:
                    break
                await asyncio.sleep(0.001)

        assert len(context.index) == 0

    @pytest.mark.asyncio
    async def test_start_is_idempotent(self, context) -> None:
        context.start()
        sweeper = context._sweeper
        context.start()

        assert context._sweeper is sweeper
        await context.aclose()
        assert context._sweeper is None
        await context.aclose()


def test_custom_key_builder(auth, credential_store, clock) -> None:
    builder = CatalogKeyBuilder(user_prefix="u", public_prefix="pub")
    context = ReelCacheContext(auth, credential_store, timer=clock, key_builder=builder)

    assert context.key_builder.build("user-1", "watchlist") == "u:user-1:watchlist"
