"""Persisted credential store interface."""

from collections.abc import Awaitable
from datetime import datetime
from typing import Protocol


class ICredentialStore(Protocol):
    """Encrypted persistence of long-lived user credentials.

    Either method may be synchronous or return an awaitable.
    """

    def get_decrypted_refresh_token(self, user_id: str) -> str | Awaitable[str]:
        """Return the user's current refresh token in clear text."""
        ...

    def update_user(
        self,
        user_id: str,
        refresh_token: str,
        expires_at: datetime,
    ) -> None | Awaitable[None]:
        """Persist a rotated refresh token and its access token expiry."""
        ...
