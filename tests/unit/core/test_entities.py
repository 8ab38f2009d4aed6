"""Tests for core entities."""

import asyncio
from datetime import timedelta

import pytest

from reelcache.core.entities import (
    AppCredential,
    AuthRejected,
    CacheEntry,
    CacheSettings,
    DelegatedCredential,
    DomainSettings,
    Failed,
    FilmCriteria,
    Ok,
    PaginatedResult,
    TokenGrant,
    call_upstream,
    capture,
)
from reelcache.core.exceptions import (
    ConfigurationError,
    UpstreamRejectedError,
    UpstreamUnavailableError,
)


class TestCacheEntry:
    """Tests for CacheEntry entity."""

    def test_create_cache_entry(self) -> None:
        """Test creating a cache entry with factory method."""
        entry = CacheEntry.create(value={"data": "value"}, now=100.0, ttl=300.0)

        assert entry.value == {"data": "value"}
        assert entry.inserted_at == 100.0
        assert entry.expires_at == 400.0
        assert entry.ttl == 300.0

    def test_cache_entry_is_expired(self) -> None:
        """An entry is expired from expires_at onwards."""
        entry = CacheEntry.create(value="value", now=0.0, ttl=10.0)

        assert not entry.is_expired(9.999)
        assert entry.is_expired(10.0)
        assert entry.is_expired(11.0)


class TestCacheSettings:
    """Tests for CacheSettings."""

    def test_defaults(self) -> None:
        settings = CacheSettings()

        assert settings.app_token_margin == timedelta(seconds=60)
        assert settings.catalog_page_size == 100
        assert settings.sweep_interval == settings.user_catalog.ttl
        assert len(settings.domain_settings()) == 8

    def test_explicit_sweep_interval(self) -> None:
        settings = CacheSettings(index_sweep_interval=timedelta(seconds=30))

        assert settings.sweep_interval == timedelta(seconds=30)

    def test_invalid_domain_settings(self) -> None:
        with pytest.raises(ConfigurationError):
            DomainSettings(max_size=0, ttl=timedelta(minutes=1))
        with pytest.raises(ConfigurationError):
            DomainSettings(max_size=10, ttl=timedelta(0))

    def test_invalid_page_size(self) -> None:
        with pytest.raises(ConfigurationError):
            CacheSettings(catalog_page_size=0)

    def test_from_env(self) -> None:
        settings = CacheSettings.from_env(
            {
                "CACHE_MAX_SIZE": "50",
                "CACHE_FILM_TTL": "120",
                "APP_TOKEN_MARGIN": "30",
                "UPSTREAM_TIMEOUT": "2.5",
                "DELEGATED_CREDENTIAL_TTL": "600",
                "CATALOG_PAGE_SIZE": "25",
            }
        )

        assert settings.film == DomainSettings(max_size=50, ttl=timedelta(seconds=120))
        assert settings.app_token_margin == timedelta(seconds=30)
        assert settings.upstream_timeout == timedelta(seconds=2.5)
        assert settings.delegated_credential.ttl == timedelta(minutes=10)
        assert settings.catalog_page_size == 25

    def test_from_env_empty_uses_defaults(self) -> None:
        assert CacheSettings.from_env({}) == CacheSettings()

    def test_from_env_partial_film_settings(self) -> None:
        settings = CacheSettings.from_env({"CACHE_FILM_TTL": "60"})

        assert settings.film.max_size == CacheSettings().film.max_size
        assert settings.film.ttl == timedelta(minutes=1)

    def test_from_env_invalid_value(self) -> None:
        with pytest.raises(ConfigurationError, match="CACHE_MAX_SIZE"):
            CacheSettings.from_env({"CACHE_MAX_SIZE": "lots"})


class TestPaginatedResult:
    """Tests for PaginatedResult slicing."""

    @pytest.fixture
    def result(self) -> PaginatedResult:
        return PaginatedResult.from_items([{"id": f"tt{i}"} for i in range(37)])

    def test_middle_page(self, result: PaginatedResult) -> None:
        page = result.page(10, 10)
        assert [m["id"] for m in page] == [f"tt{i}" for i in range(10, 20)]

    def test_last_partial_page(self, result: PaginatedResult) -> None:
        page = result.page(30, 10)
        assert [m["id"] for m in page] == [f"tt{i}" for i in range(30, 37)]

    def test_past_end(self, result: PaginatedResult) -> None:
        assert result.page(40, 10) == []

    def test_invalid_arguments(self, result: PaginatedResult) -> None:
        with pytest.raises(ValueError):
            result.page(-1, 10)
        with pytest.raises(ValueError):
            result.page(0, 0)

    def test_stored_whole(self, result: PaginatedResult) -> None:
        result.page(0, 5)
        assert len(result) == 37


class TestCredentials:
    """Tests for credential entities."""

    def test_app_credential_margin(self) -> None:
        credential = AppCredential(token="t", expires_at=120.0)

        assert not credential.is_expiring(30.0, margin=60.0)
        assert credential.is_expiring(60.0, margin=60.0)
        assert credential.is_expiring(61.0, margin=60.0)

    def test_delegated_credential_expiry(self) -> None:
        credential = DelegatedCredential("a", "r", expires_at=100.0)

        assert not credential.is_expired(99.0)
        assert credential.is_expired(100.0)

    def test_delegated_credential_repr_hides_tokens(self) -> None:
        credential = DelegatedCredential("secret-access", "secret-refresh", 1.0)
        assert "secret" not in repr(credential)

    def test_token_grant_from_response(self) -> None:
        grant = TokenGrant.from_response(
            {"access_token": "a", "expires_in": 3600, "refresh_token": "r"}
        )

        assert grant == TokenGrant(access_token="a", expires_in=3600.0, refresh_token="r")


class TestFilmCriteria:
    def test_as_dict_skips_unset(self) -> None:
        criteria = FilmCriteria(title="Alien", imdb_id="tt0078748")
        assert criteria.as_dict() == {"title": "Alien", "imdbId": "tt0078748"}


class TestCapture:
    """Tests for the upstream outcome classifier."""

    @pytest.mark.asyncio
    async def test_ok(self) -> None:
        async def call() -> int:
            return 42

        assert await capture(call(), timeout=1.0) == Ok(42)

    @pytest.mark.asyncio
    async def test_rejected(self) -> None:
        async def call() -> int:
            raise UpstreamRejectedError()

        assert isinstance(await capture(call(), timeout=1.0), AuthRejected)

    @pytest.mark.asyncio
    async def test_other_error(self) -> None:
        async def call() -> int:
            raise ConnectionError("reset")

        result = await capture(call(), timeout=1.0)

        assert isinstance(result, Failed)
        assert isinstance(result.error, ConnectionError)

    @pytest.mark.asyncio
    async def test_timeout_is_failure(self) -> None:
        async def call() -> int:
            await asyncio.sleep(10)
            return 1

        result = await capture(call(), timeout=0.01)

        assert isinstance(result, Failed)
        assert isinstance(result.error, asyncio.TimeoutError)


class TestCallUpstream:
    """Tests for mapping upstream outcomes to errors."""

    @pytest.mark.asyncio
    async def test_returns_value(self) -> None:
        async def call() -> str:
            return "ok"

        assert await call_upstream(call(), timeout=1.0) == "ok"

    @pytest.mark.asyncio
    async def test_rejection_reraised(self) -> None:
        rejection = UpstreamRejectedError()

        async def call() -> str:
            raise rejection

        with pytest.raises(UpstreamRejectedError) as exc_info:
            await call_upstream(call(), timeout=1.0)
        assert exc_info.value is rejection

    @pytest.mark.asyncio
    async def test_failure_mapped(self) -> None:
        async def call() -> str:
            raise ConnectionError("upstream 502 internal detail")

        with pytest.raises(UpstreamUnavailableError) as exc_info:
            await call_upstream(call(), timeout=1.0)
        assert str(exc_info.value) == "Upstream service unavailable"
        assert isinstance(exc_info.value.__cause__, ConnectionError)

    @pytest.mark.asyncio
    async def test_timeout_mapped(self) -> None:
        async def call() -> str:
            await asyncio.sleep(10)
            return "late"

        with pytest.raises(UpstreamUnavailableError):
            await call_upstream(call(), timeout=0.01)
