"""Pytest configuration for reelcache tests."""

import asyncio
from datetime import datetime, timedelta, timezone

import pytest

from reelcache.core.entities.credentials import TokenGrant
from reelcache.core.exceptions import UpstreamRejectedError

EPOCH = datetime(2026, 1, 1, tzinfo=timezone.utc)


class FakeClock:
    """Manually advanced clock, usable as a cachetools timer."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start
        self._start = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds

    def utc(self) -> datetime:
        return EPOCH + timedelta(seconds=self.now - self._start)


class FakeAuth:
    """Upstream token endpoint recording every exchange."""

    def __init__(self, expires_in: float = 3600.0) -> None:
        self.expires_in = expires_in
        self.app_calls = 0
        self.refresh_calls: list[str] = []
        self.reject_app = False
        self.reject_refresh = False
        self.gate: asyncio.Event | None = None

    async def exchange_app_credentials(self) -> TokenGrant:
        self.app_calls += 1
        call = self.app_calls
        if self.gate is not None:
            await self.gate.wait()
        if self.reject_app:
            raise UpstreamRejectedError()
        return TokenGrant(access_token=f"app-{call}", expires_in=self.expires_in)

    async def refresh_delegated_credential(self, refresh_token: str) -> TokenGrant:
        self.refresh_calls.append(refresh_token)
        call = len(self.refresh_calls)
        if self.gate is not None:
            await self.gate.wait()
        if self.reject_refresh:
            raise UpstreamRejectedError()
        return TokenGrant(
            access_token=f"user-{call}",
            expires_in=self.expires_in,
            refresh_token=f"refresh-{call}",
        )


class FakeCredentialStore:
    """In-memory stand-in for the encrypted user store."""

    def __init__(self) -> None:
        self.refresh_tokens: dict[str, str] = {}
        self.expiries: dict[str, datetime] = {}

    def get_decrypted_refresh_token(self, user_id: str) -> str:
        return self.refresh_tokens[user_id]

    def update_user(self, user_id: str, refresh_token: str, expires_at: datetime) -> None:
        self.refresh_tokens[user_id] = refresh_token
        self.expiries[user_id] = expires_at


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def auth() -> FakeAuth:
    return FakeAuth()


@pytest.fixture
def credential_store() -> FakeCredentialStore:
    store = FakeCredentialStore()
    store.refresh_tokens["user-1"] = "refresh-0"
    return store
