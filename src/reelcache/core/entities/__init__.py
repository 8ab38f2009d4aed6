"""Domain entities for reelcache."""

from reelcache.core.entities.cache_config import CacheSettings, DomainSettings
from reelcache.core.entities.cache_entry import CacheEntry
from reelcache.core.entities.catalog import (
    Film,
    FilmCriteria,
    FilmRating,
    ListSummary,
    Meta,
    PaginatedResult,
    ParsedListUrl,
)
from reelcache.core.entities.credentials import (
    AppCredential,
    AppCredentialState,
    DelegatedCredential,
    TokenGrant,
)
from reelcache.core.entities.upstream_result import (
    AuthRejected,
    Failed,
    Ok,
    UpstreamResult,
    call_upstream,
    capture,
)

__all__ = [
    "CacheEntry",
    "CacheSettings",
    "DomainSettings",
    # Catalog
    "Film",
    "FilmCriteria",
    "FilmRating",
    "ListSummary",
    "Meta",
    "PaginatedResult",
    "ParsedListUrl",
    # Credentials
    "AppCredential",
    "AppCredentialState",
    "DelegatedCredential",
    "TokenGrant",
    # Upstream outcomes
    "Ok",
    "AuthRejected",
    "Failed",
    "UpstreamResult",
    "call_upstream",
    "capture",
]
