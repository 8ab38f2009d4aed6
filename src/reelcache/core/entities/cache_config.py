"""Cache configuration entity."""

import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import timedelta

from reelcache.core.exceptions import ConfigurationError


@dataclass(frozen=True)
class DomainSettings:
    """Capacity and TTL of a single cache domain."""

    max_size: int
    ttl: timedelta

    def __post_init__(self) -> None:
        if self.max_size <= 0:
            raise ConfigurationError(f"max_size must be positive, got {self.max_size}")
        if self.ttl <= timedelta(0):
            raise ConfigurationError(f"ttl must be positive, got {self.ttl}")

    @property
    def ttl_seconds(self) -> float:
        return self.ttl.total_seconds()


def _domain(max_size: int, **ttl: float) -> DomainSettings:
    return DomainSettings(max_size=max_size, ttl=timedelta(**ttl))


@dataclass
class CacheSettings:
    """Cache and credential configuration.

    Each domain is tuned to the volatility of the data it holds:
    reference data such as id mappings lives for hours, shared catalogs
    for tens of minutes, and personalized results for a few minutes.

    Credential settings:
        app_token_margin: Refresh the application token this long before
            it actually expires.
        upstream_timeout: Upper bound for every upstream call.
    """

    film: DomainSettings = field(default_factory=lambda: _domain(1000, hours=1))
    rating: DomainSettings = field(default_factory=lambda: _domain(5000, minutes=5))
    member_id: DomainSettings = field(default_factory=lambda: _domain(2000, hours=6))
    list_meta: DomainSettings = field(
        default_factory=lambda: _domain(1000, minutes=10)
    )
    catalog_page: DomainSettings = field(
        default_factory=lambda: _domain(500, minutes=30)
    )
    poster: DomainSettings = field(default_factory=lambda: _domain(300, hours=24))
    delegated_credential: DomainSettings = field(
        default_factory=lambda: _domain(1000, minutes=50)
    )
    user_catalog: DomainSettings = field(
        default_factory=lambda: _domain(1000, minutes=5)
    )

    app_token_margin: timedelta = timedelta(seconds=60)
    upstream_timeout: timedelta = timedelta(seconds=10)
    index_sweep_interval: timedelta | None = None
    catalog_page_size: int = 100

    def __post_init__(self) -> None:
        """Set default sweep interval and validate scalar settings."""
        if self.index_sweep_interval is None:
            self.index_sweep_interval = self.user_catalog.ttl
        if self.catalog_page_size <= 0:
            raise ConfigurationError("catalog_page_size must be positive")
        if self.app_token_margin < timedelta(0):
            raise ConfigurationError("app_token_margin must not be negative")
        if self.upstream_timeout <= timedelta(0):
            raise ConfigurationError("upstream_timeout must be positive")

    @property
    def sweep_interval(self) -> timedelta:
        """Return the effective index sweep interval."""
        return self.index_sweep_interval or self.user_catalog.ttl

    def domain_settings(self) -> dict[str, DomainSettings]:
        """Return the settings of every cache domain keyed by domain name."""
        return {
            "film": self.film,
            "rating": self.rating,
            "member_id": self.member_id,
            "list_meta": self.list_meta,
            "catalog_page": self.catalog_page,
            "poster": self.poster,
            "delegated_credential": self.delegated_credential,
            "user_catalog": self.user_catalog,
        }

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "CacheSettings":
        """Build settings from environment variables.

        Recognized variables (all optional, seconds unless noted):
            CACHE_MAX_SIZE: Capacity of the film domain (entries).
            CACHE_FILM_TTL: TTL of the film domain.
            DELEGATED_CREDENTIAL_TTL: Reuse ceiling for user credentials.
            APP_TOKEN_MARGIN, UPSTREAM_TIMEOUT, INDEX_SWEEP_INTERVAL.
            CATALOG_PAGE_SIZE: Items per catalog page.

        Raises:
            ConfigurationError: If a variable is not a valid number.
        """
        env = os.environ if environ is None else environ
        defaults = cls()
        kwargs: dict[str, object] = {}

        film_size = _read_int(env, "CACHE_MAX_SIZE")
        film_ttl = _read_seconds(env, "CACHE_FILM_TTL")
        if film_size is not None or film_ttl is not None:
            kwargs["film"] = DomainSettings(
                max_size=defaults.film.max_size if film_size is None else film_size,
                ttl=defaults.film.ttl if film_ttl is None else film_ttl,
            )

        delegated_ttl = _read_seconds(env, "DELEGATED_CREDENTIAL_TTL")
        if delegated_ttl is not None:
            kwargs["delegated_credential"] = DomainSettings(
                max_size=defaults.delegated_credential.max_size,
                ttl=delegated_ttl,
            )

        for name, var in (
            ("app_token_margin", "APP_TOKEN_MARGIN"),
            ("upstream_timeout", "UPSTREAM_TIMEOUT"),
            ("index_sweep_interval", "INDEX_SWEEP_INTERVAL"),
        ):
            value = _read_seconds(env, var)
            if value is not None:
                kwargs[name] = value

        page_size = _read_int(env, "CATALOG_PAGE_SIZE")
        if page_size is not None:
            kwargs["catalog_page_size"] = page_size

        return cls(**kwargs)  # type: ignore[arg-type]


def _read_int(env: Mapping[str, str], name: str) -> int | None:
    raw = env.get(name)
    if raw is None or raw == "":
        return None
    try:
        return int(raw)
    except ValueError:
        raise ConfigurationError(f"{name} must be an integer, got {raw!r}") from None


def _read_seconds(env: Mapping[str, str], name: str) -> timedelta | None:
    raw = env.get(name)
    if raw is None or raw == "":
        return None
    try:
        return timedelta(seconds=float(raw))
    except ValueError:
        raise ConfigurationError(f"{name} must be a number of seconds, got {raw!r}") from None
