"""Upstream collaborator interfaces.

The wire-level client lives outside this package. Implementations signal
a rejected credential by raising ``UpstreamRejectedError`` and every other
failure by raising ``UpstreamUnavailableError`` (or any other exception,
which is treated the same way).
"""

from collections.abc import Mapping, Sequence
from typing import Any, Protocol

from reelcache.core.entities.credentials import TokenGrant


class IUpstreamAuth(Protocol):
    """OAuth token endpoint of the upstream service."""

    async def exchange_app_credentials(self) -> TokenGrant:
        """Perform a client-credentials exchange for the application."""
        ...

    async def refresh_delegated_credential(self, refresh_token: str) -> TokenGrant:
        """Trade a user's refresh token for a new access/refresh pair.

        Refresh tokens rotate: the returned grant carries a new one and
        the old one must not be used again.
        """
        ...


class IFilmClient(Protocol):
    """Authenticated data client of the upstream service.

    Payloads are the upstream JSON documents, decoded into mappings.
    """

    async def search_films(
        self,
        title: str,
        year: int | None = None,
        per_page: int = 10,
    ) -> Sequence[Mapping[str, Any]]:
        ...

    async def get_film_relationship(self, film_id: str) -> Mapping[str, Any]:
        ...

    async def get_film_statistics(self, film_id: str) -> Mapping[str, Any]:
        ...

    async def search_member_by_username(
        self, username: str
    ) -> Mapping[str, Any] | None:
        ...

    async def search_lists(
        self,
        member_id: str,
        per_page: int = 100,
        cursor: str | None = None,
    ) -> Mapping[str, Any]:
        """Return one page of lists owned by a member.

        The mapping holds ``items`` and, when more pages exist, ``cursor``.
        """
        ...
