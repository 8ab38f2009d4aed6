"""Domain services for reelcache."""

from reelcache.core.services.catalog_pagination import CatalogPaginator
from reelcache.core.services.credential_manager import (
    APP_AUTH_FAILED,
    USER_AUTH_FAILED,
    CredentialManager,
)
from reelcache.core.services.film_service import (
    get_film_rating,
    get_poster,
    normalize_slug,
    parse_list_url,
    resolve_external_list,
    resolve_film,
    resolve_member_id,
)
from reelcache.core.services.invalidation_index import InvalidationIndex
from reelcache.core.services.metrics import CacheMetrics

__all__ = [
    "CacheMetrics",
    "CatalogPaginator",
    "CredentialManager",
    "InvalidationIndex",
    "APP_AUTH_FAILED",
    "USER_AUTH_FAILED",
    # Film lookups
    "resolve_film",
    "get_film_rating",
    "resolve_member_id",
    "resolve_external_list",
    "parse_list_url",
    "normalize_slug",
    "get_poster",
]
