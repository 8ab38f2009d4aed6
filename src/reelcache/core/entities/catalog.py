"""Catalog value objects shared by the cache domains."""

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any

# A catalog item in the media player's meta preview format.
Meta = Mapping[str, Any]


@dataclass(frozen=True)
class FilmCriteria:
    """Lookup criteria for resolving a film.

    At least a title is needed for a search; the external ids narrow
    the search results down.
    """

    title: str | None = None
    year: int | None = None
    imdb_id: str | None = None
    tmdb_id: str | None = None

    def as_dict(self) -> dict[str, Any]:
        """Return the set criteria only, for deterministic key hashing."""
        return {
            name: value
            for name, value in (
                ("title", self.title),
                ("year", self.year),
                ("imdbId", self.imdb_id),
                ("tmdbId", self.tmdb_id),
            )
            if value is not None
        }


@dataclass(frozen=True)
class Film:
    """A film resolved against the upstream catalog."""

    id: str
    name: str
    release_year: int | None = None
    poster: str | None = None
    imdb_id: str | None = None
    tmdb_id: str | None = None


@dataclass(frozen=True)
class FilmRating:
    """A user's relationship with a film plus community statistics."""

    film_id: str
    user_rating: float | None
    watched: bool
    liked: bool
    in_watchlist: bool
    community_rating: float | None
    community_ratings: int


@dataclass(frozen=True)
class ParsedListUrl:
    username: str
    slug: str


@dataclass(frozen=True)
class ListSummary:
    """Metadata of a user-curated list."""

    id: str
    name: str
    owner: str
    film_count: int


@dataclass(frozen=True)
class PaginatedResult:
    """A complete catalog result set, stored whole and sliced on read.

    Never mutated in place; a refresh replaces the whole value.
    """

    metas: tuple[Meta, ...]

    @classmethod
    def from_items(cls, items: Sequence[Meta]) -> "PaginatedResult":
        return cls(metas=tuple(items))

    def __len__(self) -> int:
        return len(self.metas)

    def page(self, skip: int, page_size: int) -> list[Meta]:
        """Return the ``page_size`` items starting at ``skip``.

        Raises:
            ValueError: If skip is negative or page_size is not positive.
        """
        if skip < 0:
            raise ValueError(f"skip must not be negative, got {skip}")
        if page_size <= 0:
            raise ValueError(f"page_size must be positive, got {page_size}")
        return list(self.metas[skip : skip + page_size])
