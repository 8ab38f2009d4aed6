"""Cache-backed film, rating, member and list lookups."""

import asyncio
import logging
import re
from collections.abc import Awaitable, Callable, Mapping
from typing import Any, TypeVar

from reelcache.core.entities.catalog import (
    Film,
    FilmCriteria,
    FilmRating,
    ListSummary,
    ParsedListUrl,
)
from reelcache.core.entities.upstream_result import call_upstream
from reelcache.core.interfaces.cache_backend import IStore
from reelcache.core.interfaces.upstream import IFilmClient
from reelcache.utils.hashing import hash_value

logger = logging.getLogger(__name__)

SEARCH_PAGE_SIZE = 10
LIST_PAGE_SIZE = 100
MAX_LIST_PAGES = 5
DEFAULT_TIMEOUT = 10.0

T = TypeVar("T")
U = TypeVar("U")

_LIST_URL = re.compile(
    r"(?:https?://)?(?:www\.)?letterboxd\.com/([^/]+)/list/([^/]+)"
)
_NON_SLUG = re.compile(r"[^a-z0-9]+")


def film_cache_key(criteria: FilmCriteria) -> str:
    return f"film:{hash_value(criteria.as_dict())}"


def rating_cache_key(user_id: str, film_id: str) -> str:
    return f"rating:{user_id}:{film_id}"


def _external_id(film: Mapping[str, Any], link_type: str) -> str | None:
    for link in film.get("links") or ():
        if link.get("type") == link_type:
            return link.get("id")
    return None


def _best_poster_url(film: Mapping[str, Any]) -> str | None:
    sizes = (film.get("poster") or {}).get("sizes") or []
    if not sizes:
        return None
    return max(sizes, key=lambda size: size.get("width", 0)).get("url")


async def _both(
    first: Awaitable[T],
    second: Awaitable[U],
) -> tuple[T, U]:
    """Await two upstream calls concurrently.

    If either fails, the other is cancelled and awaited before the error
    propagates, so no request outlives its caller.
    """
    first_task = asyncio.ensure_future(first)
    second_task = asyncio.ensure_future(second)
    try:
        first_value, second_value = await asyncio.gather(first_task, second_task)
    except Exception:
        for task in (first_task, second_task):
            task.cancel()
        await asyncio.gather(first_task, second_task, return_exceptions=True)
        raise
    return first_value, second_value


def _pick_film(
    results: list[Mapping[str, Any]],
    criteria: FilmCriteria,
) -> Mapping[str, Any] | None:
    """Choose the best search result.

    Later matches override earlier ones: TMDb id beats IMDb id beats
    release year beats the first result.
    """
    if not results:
        return None
    film = results[0]
    matchers: list[Callable[[Mapping[str, Any]], bool]] = []
    if criteria.year is not None:
        matchers.append(lambda f: f.get("releaseYear") == criteria.year)
    if criteria.imdb_id:
        matchers.append(lambda f: _external_id(f, "imdb") == criteria.imdb_id)
    if criteria.tmdb_id:
        matchers.append(lambda f: _external_id(f, "tmdb") == criteria.tmdb_id)
    for matches in matchers:
        found = next((f for f in results if matches(f)), None)
        if found is not None:
            film = found
    return film


async def resolve_film(
    client: IFilmClient,
    criteria: FilmCriteria,
    cache: IStore[Film],
    timeout: float = DEFAULT_TIMEOUT,
) -> Film | None:
    """Resolve lookup criteria to an upstream film.

    Args:
        client: Authenticated upstream client.
        criteria: Title plus optional year and external ids.
        cache: The film domain.
        timeout: Seconds allowed for each upstream call.

    Returns:
        The resolved film, or None when nothing matches. Misses are not
        cached so a film added upstream later can still be found.

    Raises:
        UpstreamRejectedError: The client's credential was rejected.
        UpstreamUnavailableError: The search failed or timed out.
    """
    key = film_cache_key(criteria)
    cached = cache.get(key)
    if cached is not None:
        logger.debug("Film cache hit: %s", key)
        return cached

    picked: Mapping[str, Any] | None = None
    if criteria.title:
        results = await call_upstream(
            client.search_films(
                criteria.title, year=criteria.year, per_page=SEARCH_PAGE_SIZE
            ),
            timeout,
        )
        picked = _pick_film(list(results), criteria)

    if picked is None:
        logger.debug("Film not found: %s", criteria)
        return None

    film = Film(
        id=picked["id"],
        name=picked["name"],
        release_year=picked.get("releaseYear"),
        poster=_best_poster_url(picked),
        imdb_id=_external_id(picked, "imdb"),
        tmdb_id=_external_id(picked, "tmdb"),
    )
    cache.set(key, film)
    logger.debug("Film resolved: %s (%s)", film.name, film.id)
    return film


async def get_film_rating(
    client: IFilmClient,
    film_id: str,
    user_id: str,
    cache: IStore[FilmRating],
    timeout: float = DEFAULT_TIMEOUT,
) -> FilmRating:
    """Fetch a user's rating of a film together with community statistics."""
    key = rating_cache_key(user_id, film_id)
    cached = cache.get(key)
    if cached is not None:
        logger.debug("Rating cache hit: %s", key)
        return cached

    relationship, statistics = await _both(
        call_upstream(client.get_film_relationship(film_id), timeout),
        call_upstream(client.get_film_statistics(film_id), timeout),
    )
    rating = FilmRating(
        film_id=film_id,
        user_rating=relationship.get("rating"),
        watched=bool(relationship.get("watched")),
        liked=bool(relationship.get("liked")),
        in_watchlist=bool(relationship.get("inWatchlist")),
        community_rating=statistics.get("rating"),
        community_ratings=int((statistics.get("counts") or {}).get("ratings", 0)),
    )
    cache.set(key, rating)
    return rating


async def resolve_member_id(
    client: IFilmClient,
    username: str,
    cache: IStore[str],
    timeout: float = DEFAULT_TIMEOUT,
) -> str | None:
    """Map a public username to the upstream member id."""
    key = username.lower()

    async def load() -> str | None:
        member = await call_upstream(
            client.search_member_by_username(username), timeout
        )
        if member is None:
            logger.warning("Member not found: %s", username)
            return None
        return member["id"]

    return await cache.get_or_load(key, load)


def parse_list_url(url: str) -> ParsedListUrl | None:
    """Extract owner and slug from a list URL.

    Accepts forms like ``https://letterboxd.com/user/list/some-list/``.
    """
    match = _LIST_URL.search(url)
    if match is None:
        return None
    return ParsedListUrl(username=match.group(1), slug=match.group(2))


def normalize_slug(name: str) -> str:
    return _NON_SLUG.sub("-", name.lower()).strip("-")


async def resolve_external_list(
    client: IFilmClient,
    username: str,
    slug: str,
    lists: IStore[ListSummary],
    member_ids: IStore[str],
    timeout: float = DEFAULT_TIMEOUT,
) -> ListSummary | None:
    """Find a list by owner username and slug.

    Walks the owner's lists page by page (bounded) and matches the slug
    against each list's normalized name.
    """
    key = f"{username.lower()}/{slug}"
    cached = lists.get(key)
    if cached is not None:
        return cached

    logger.info("Resolving external list %s/%s", username, slug)
    member = await call_upstream(client.search_member_by_username(username), timeout)
    if member is None:
        logger.warning("Member not found: %s", username)
        return None
    member_ids.set(username.lower(), member["id"])

    cursor: str | None = None
    seen = 0
    for _ in range(MAX_LIST_PAGES):
        response = await call_upstream(
            client.search_lists(member["id"], per_page=LIST_PAGE_SIZE, cursor=cursor),
            timeout,
        )
        for item in response.get("items") or ():
            seen += 1
            if normalize_slug(item["name"]) == slug:
                summary = ListSummary(
                    id=item["id"],
                    name=item["name"],
                    owner=(
                        member.get("displayName") or member.get("username") or username
                    ),
                    film_count=int(item.get("filmCount", 0)),
                )
                lists.set(key, summary)
                return summary
        cursor = response.get("cursor")
        if not cursor:
            break

    logger.warning("List %s not found among %d lists of %s", slug, seen, username)
    return None


async def get_poster(
    fetch: Callable[[str], Awaitable[bytes | None]],
    url: str,
    cache: IStore[bytes],
    timeout: float = DEFAULT_TIMEOUT,
) -> bytes | None:
    """Return poster image bytes, downloading them once per TTL."""
    return await cache.get_or_load(url, lambda: call_upstream(fetch(url), timeout))
