"""Core domain layer for reelcache."""

from reelcache.core.entities import CacheEntry, CacheSettings, DomainSettings
from reelcache.core.exceptions import (
    AuthenticationFailedError,
    ConfigurationError,
    ReelCacheError,
    UpstreamRejectedError,
    UpstreamUnavailableError,
)
from reelcache.core.interfaces import (
    ICredentialStore,
    IFilmClient,
    IInvalidator,
    IKeyBuilder,
    IStore,
    IUpstreamAuth,
)
from reelcache.core.services import (
    CacheMetrics,
    CatalogPaginator,
    CredentialManager,
    InvalidationIndex,
)

__all__ = [
    # Entities
    "CacheEntry",
    "CacheSettings",
    "DomainSettings",
    # Errors
    "ReelCacheError",
    "ConfigurationError",
    "UpstreamRejectedError",
    "UpstreamUnavailableError",
    "AuthenticationFailedError",
    # Interfaces
    "IStore",
    "IKeyBuilder",
    "IInvalidator",
    "ICredentialStore",
    "IUpstreamAuth",
    "IFilmClient",
    # Services
    "CacheMetrics",
    "CatalogPaginator",
    "CredentialManager",
    "InvalidationIndex",
]
