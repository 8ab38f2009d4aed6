"""The fixed roster of cache domains."""

import time
from collections.abc import Callable
from types import MappingProxyType
from typing import Any

from reelcache.core.entities.cache_config import CacheSettings, DomainSettings
from reelcache.core.entities.catalog import (
    Film,
    FilmRating,
    ListSummary,
    PaginatedResult,
)
from reelcache.core.entities.credentials import DelegatedCredential
from reelcache.core.services.metrics import CacheMetrics
from reelcache.infrastructure.backends.memory import TimeBoundedStore


class CacheFabric:
    """Owns one independently typed and tuned store per cache domain.

    Domains are created once here and never afterwards. Each domain is a
    private namespace: a key written to one store can never be read
    through another.
    """

    def __init__(
        self,
        settings: CacheSettings | None = None,
        timer: Callable[[], float] = time.monotonic,
        metrics: CacheMetrics | None = None,
    ) -> None:
        """Initialize every domain from settings.

        Args:
            settings: Domain capacities and TTLs. Uses defaults if not provided.
            timer: Clock shared by all domains.
            metrics: Optional hit/miss counters shared by all domains.
        """
        self._settings = settings or CacheSettings()
        self._timer = timer
        self._metrics = metrics

        s = self._settings
        self.films: TimeBoundedStore[Film] = self._store("film", s.film)
        self.ratings: TimeBoundedStore[FilmRating] = self._store("rating", s.rating)
        self.member_ids: TimeBoundedStore[str] = self._store("member_id", s.member_id)
        self.lists: TimeBoundedStore[ListSummary] = self._store(
            "list_meta", s.list_meta
        )
        self.catalog_pages: TimeBoundedStore[PaginatedResult] = self._store(
            "catalog_page", s.catalog_page
        )
        self.posters: TimeBoundedStore[bytes] = self._store("poster", s.poster)
        self.delegated_credentials: TimeBoundedStore[DelegatedCredential] = (
            self._store("delegated_credential", s.delegated_credential)
        )
        self.user_catalogs: TimeBoundedStore[PaginatedResult] = self._store(
            "user_catalog", s.user_catalog
        )

        self._domains: MappingProxyType[str, TimeBoundedStore[Any]] = (
            MappingProxyType(
                {
                    store.name: store
                    for store in (
                        self.films,
                        self.ratings,
                        self.member_ids,
                        self.lists,
                        self.catalog_pages,
                        self.posters,
                        self.delegated_credentials,
                        self.user_catalogs,
                    )
                }
            )
        )

    def _store(self, name: str, domain: DomainSettings) -> TimeBoundedStore[Any]:
        return TimeBoundedStore(
            name=name,
            maxsize=domain.max_size,
            ttl=domain.ttl_seconds,
            timer=self._timer,
            metrics=self._metrics,
        )

    @property
    def settings(self) -> CacheSettings:
        return self._settings

    def domains(self) -> MappingProxyType[str, TimeBoundedStore[Any]]:
        """Return a read-only view of all domains keyed by name."""
        return self._domains

    def domain(self, name: str) -> TimeBoundedStore[Any]:
        """Return a domain by name.

        Raises:
            KeyError: If no domain with that name exists.
        """
        return self._domains[name]

    def stats(self) -> dict[str, dict[str, float]]:
        """Return size, capacity and TTL of every domain."""
        return {
            name: {"size": store.size, "max": store.maxsize, "ttl": store.ttl}
            for name, store in self._domains.items()
        }

    def clear(self) -> None:
        """Drop the contents of every domain."""
        for store in self._domains.values():
            store.clear()
