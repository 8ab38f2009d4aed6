"""Credential entities."""

from dataclasses import dataclass
from enum import Enum
from typing import Any


class AppCredentialState(Enum):
    """Lifecycle state of the application credential.

    ABSENT: No token, or the last one was rejected.
    VALID: Token usable as is.
    EXPIRING: Token within the safety margin; the next request refreshes it.
    """

    ABSENT = "ABSENT"
    VALID = "VALID"
    EXPIRING = "EXPIRING"


@dataclass(frozen=True)
class TokenGrant:
    """Raw result of an upstream token exchange.

    ``refresh_token`` is None for client-credentials grants.
    """

    access_token: str
    expires_in: float
    refresh_token: str | None = None

    @classmethod
    def from_response(cls, payload: dict[str, Any]) -> "TokenGrant":
        """Build a grant from an OAuth token endpoint response body."""
        return cls(
            access_token=payload["access_token"],
            expires_in=float(payload["expires_in"]),
            refresh_token=payload.get("refresh_token"),
        )


@dataclass(frozen=True)
class AppCredential:
    """Process-wide application credential."""

    token: str
    expires_at: float

    def is_expiring(self, now: float, margin: float) -> bool:
        """Return True once the token is within ``margin`` seconds of expiry."""
        return now >= self.expires_at - margin


@dataclass(frozen=True)
class DelegatedCredential:
    """Access/refresh token pair acting on behalf of one user.

    ``expires_at`` is authoritative. The cache holding these credentials
    only bounds how long a stale value may occupy memory.
    """

    access_token: str
    refresh_token: str
    expires_at: float

    def is_expired(self, now: float) -> bool:
        return now >= self.expires_at

    def __repr__(self) -> str:
        return f"DelegatedCredential(expires_at={self.expires_at!r})"
