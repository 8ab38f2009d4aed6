"""reelcache - tiered caching and OAuth credential lifecycle for a catalog proxy.

Keeps a media-catalog proxy fast and within upstream rate limits by
serving watchlists, ratings and lists from independently tuned in-memory
caches, while keeping application and per-user OAuth tokens valid.

Example:
    from reelcache import CacheSettings, FilmCriteria, ReelCacheContext

    context = ReelCacheContext(
        auth=token_client,          # implements IUpstreamAuth
        credential_store=users,     # implements ICredentialStore
        settings=CacheSettings.from_env(),
    )

    async with context:
        # Public catalog, fetched once with the application token
        page = await context.get_public_catalog(
            context.key_builder.build_public("popular"),
            fetch=lambda token: client.popular(token),
            skip=0,
        )

        # Per-user catalog, sliced from one cached full result
        key = context.key_builder.build(user_id, "watchlist")
        page = context.get_user_catalog_cached(key, skip=100)
        if page is None:
            films = await context.call_with_user_token(user_id, client.watchlist)
            page = context.set_user_catalog(user_id, key, films, skip=100)

        # After the user edits their catalog preferences
        context.invalidate_user_catalogs(user_id)
"""

from reelcache.context import ReelCacheContext
from reelcache.core.entities import (
    AppCredential,
    AppCredentialState,
    AuthRejected,
    CacheEntry,
    CacheSettings,
    DelegatedCredential,
    DomainSettings,
    Failed,
    Film,
    FilmCriteria,
    FilmRating,
    ListSummary,
    Meta,
    Ok,
    PaginatedResult,
    ParsedListUrl,
    TokenGrant,
    UpstreamResult,
)
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
from reelcache.infrastructure import (
    CacheFabric,
    CatalogKeyBuilder,
    TimeBoundedStore,
)

__version__ = "0.1.0"

__all__ = [
    # Version
    "__version__",
    # Context
    "ReelCacheContext",
    # Configuration
    "CacheSettings",
    "DomainSettings",
    # Core entities
    "CacheEntry",
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
    # Errors
    "ReelCacheError",
    "ConfigurationError",
    "UpstreamRejectedError",
    "UpstreamUnavailableError",
    "AuthenticationFailedError",
    # Core interfaces
    "IStore",
    "IKeyBuilder",
    "IInvalidator",
    "ICredentialStore",
    "IUpstreamAuth",
    "IFilmClient",
    # Core services
    "CacheMetrics",
    "CatalogPaginator",
    "CredentialManager",
    "InvalidationIndex",
    # Infrastructure implementations
    "TimeBoundedStore",
    "CacheFabric",
    "CatalogKeyBuilder",
]
