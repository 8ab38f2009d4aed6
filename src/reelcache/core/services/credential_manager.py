"""Credential lifecycle manager - application and delegated OAuth tokens."""

import asyncio
import inspect
import logging
import time
from collections.abc import Awaitable, Callable
from datetime import datetime, timedelta, timezone
from typing import Any, TypeVar

from reelcache.core.entities.cache_config import CacheSettings
from reelcache.core.entities.credentials import (
    AppCredential,
    AppCredentialState,
    DelegatedCredential,
    TokenGrant,
)
from reelcache.core.entities.upstream_result import (
    AuthRejected,
    Failed,
    UpstreamResult,
    capture,
)
from reelcache.core.exceptions import (
    AuthenticationFailedError,
    UpstreamUnavailableError,
)
from reelcache.core.interfaces.cache_backend import IStore
from reelcache.core.interfaces.credential_store import ICredentialStore
from reelcache.core.interfaces.upstream import IUpstreamAuth

logger = logging.getLogger(__name__)

T = TypeVar("T")

APP_AUTH_FAILED = "APP_AUTH_FAILED"
USER_AUTH_FAILED = "USER_AUTH_FAILED"


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


async def _maybe_await(value: Any) -> Any:
    if inspect.isawaitable(value):
        return await value
    return value


class CredentialManager:
    """Keeps application and per-user access tokens valid.

    The application token is shared process-wide. It is refreshed lazily
    once it enters the safety margin before expiry, and eagerly when the
    upstream rejects it. Only one exchange is ever in flight: concurrent
    callers await the same task.

    Delegated tokens are obtained from each user's persisted refresh token
    and kept in a cache domain whose TTL is only a memory ceiling. The
    credential's own ``expires_at`` decides whether it can be reused.
    """

    def __init__(
        self,
        auth: IUpstreamAuth,
        credential_store: ICredentialStore,
        delegated_cache: IStore[DelegatedCredential],
        settings: CacheSettings | None = None,
        timer: Callable[[], float] = time.monotonic,
        wall_clock: Callable[[], datetime] = utc_now,
    ) -> None:
        """Initialize the manager.

        Args:
            auth: Upstream token endpoint.
            credential_store: Persistence of user refresh tokens.
            delegated_cache: Cache domain for delegated credentials.
            settings: Safety margin and timeout. Uses defaults if not provided.
            timer: Monotonic clock in seconds, shared with the caches.
            wall_clock: Source of the UTC expiry persisted for users.
        """
        settings = settings or CacheSettings()
        self._auth = auth
        self._credential_store = credential_store
        self._delegated = delegated_cache
        self._margin = settings.app_token_margin.total_seconds()
        self._timeout = settings.upstream_timeout.total_seconds()
        self._timer = timer
        self._wall_clock = wall_clock

        self._app_credential: AppCredential | None = None
        self._app_margin = self._margin
        self._app_refresh: asyncio.Task[AppCredential] | None = None
        self._user_refreshes: dict[str, asyncio.Task[DelegatedCredential]] = {}

    # Application credential

    @property
    def app_state(self) -> AppCredentialState:
        credential = self._app_credential
        if credential is None:
            return AppCredentialState.ABSENT
        if credential.is_expiring(self._timer(), self._app_margin):
            return AppCredentialState.EXPIRING
        return AppCredentialState.VALID

    async def get_app_token(self) -> str:
        """Return a valid application token, refreshing it if needed.

        Raises:
            AuthenticationFailedError: The client credentials were rejected.
            UpstreamUnavailableError: The token endpoint could not be reached.
        """
        credential = self._app_credential
        if credential is not None and not credential.is_expiring(
            self._timer(), self._app_margin
        ):
            return credential.token

        if self._app_refresh is None:
            self._app_refresh = asyncio.ensure_future(self._exchange_app_credential())
        refreshed = await asyncio.shield(self._app_refresh)
        return refreshed.token

    def invalidate_app_token(self, token: str | None = None) -> None:
        """Drop the application credential.

        Args:
            token: If given, only drop the credential when it still holds
                this token, so a late rejection of an old token does not
                discard a token that was refreshed in the meantime.
        """
        credential = self._app_credential
        if credential is None:
            return
        if token is None or credential.token == token:
            self._app_credential = None

    async def call_with_app_token(self, fn: Callable[[str], Awaitable[T]]) -> T:
        """Run ``fn`` with the application token, retrying once on rejection.

        Args:
            fn: Coroutine function receiving the access token.

        Returns:
            Whatever ``fn`` returns.

        Raises:
            AuthenticationFailedError: A freshly obtained token was rejected too.
            UpstreamUnavailableError: Any other failure of ``fn``.
        """
        return await self._call_with_retry(
            fn,
            get_token=self.get_app_token,
            invalidate=self.invalidate_app_token,
            code=APP_AUTH_FAILED,
            subject="app",
        )

    async def _exchange_app_credential(self) -> AppCredential:
        try:
            logger.info("Requesting new app token via client credentials")
            grant = self._unwrap_grant(
                await capture(self._auth.exchange_app_credentials(), self._timeout),
                "Application credentials rejected",
                APP_AUTH_FAILED,
            )
            margin = self._margin
            if grant.expires_in <= margin:
                # Otherwise the token would be born expiring
                margin = grant.expires_in / 2
                logger.warning(
                    "App token lifetime %ss is within the %ss refresh margin, "
                    "refreshing %ss before expiry instead",
                    grant.expires_in,
                    self._margin,
                    margin,
                )
            credential = AppCredential(
                token=grant.access_token,
                expires_at=self._timer() + grant.expires_in,
            )
            self._app_margin = margin
            self._app_credential = credential
            logger.info("App token acquired (expires in %ss)", grant.expires_in)
            return credential
        finally:
            self._app_refresh = None

    # Delegated credentials

    async def get_user_token(self, user_id: str) -> str:
        """Return a valid access token acting on behalf of ``user_id``.

        Raises:
            AuthenticationFailedError: The stored refresh token was rejected.
            UpstreamUnavailableError: The token endpoint could not be reached.
        """
        credential = self._delegated.get(user_id)
        if credential is not None and not credential.is_expired(self._timer()):
            return credential.access_token

        task = self._user_refreshes.get(user_id)
        if task is None:
            # An expired credential still carries the latest rotated refresh token
            refresh_token = credential.refresh_token if credential is not None else None
            task = asyncio.ensure_future(
                self._refresh_user_credential(user_id, refresh_token)
            )
            self._user_refreshes[user_id] = task
        credential = await asyncio.shield(task)
        return credential.access_token

    def invalidate_user_token(self, user_id: str, token: str | None = None) -> None:
        """Drop the cached delegated credential of a user.

        Args:
            user_id: The user whose credential is dropped.
            token: If given, only drop the credential when it still holds
                this access token, so a late rejection of an old token does
                not discard a freshly rotated one.
        """
        if token is not None:
            credential = self._delegated.entry(user_id)
            if credential is None or credential.value.access_token != token:
                return
        self._delegated.delete(user_id)

    async def call_with_user_token(
        self,
        user_id: str,
        fn: Callable[[str], Awaitable[T]],
    ) -> T:
        """Run ``fn`` with the user's token, retrying once on rejection.

        Raises:
            AuthenticationFailedError: A freshly obtained token was rejected
                too; the user has to log in again.
            UpstreamUnavailableError: Any other failure of ``fn``.
        """

        async def get_token() -> str:
            return await self.get_user_token(user_id)

        def invalidate(token: str) -> None:
            self.invalidate_user_token(user_id, token)

        return await self._call_with_retry(
            fn,
            get_token=get_token,
            invalidate=invalidate,
            code=USER_AUTH_FAILED,
            subject=f"user {user_id}",
        )

    async def _refresh_user_credential(
        self, user_id: str, refresh_token: str | None
    ) -> DelegatedCredential:
        try:
            if refresh_token is None:
                refresh_token = await _maybe_await(
                    self._credential_store.get_decrypted_refresh_token(user_id)
                )
            logger.info("Refreshing delegated token for user %s", user_id)
            grant = self._unwrap_grant(
                await capture(
                    self._auth.refresh_delegated_credential(refresh_token),
                    self._timeout,
                ),
                "Stored refresh token rejected",
                USER_AUTH_FAILED,
            )
            # Refresh tokens rotate on use; keep the old one if none was issued
            rotated = grant.refresh_token or refresh_token
            await _maybe_await(
                self._credential_store.update_user(
                    user_id,
                    rotated,
                    self._wall_clock() + timedelta(seconds=grant.expires_in),
                )
            )
            credential = DelegatedCredential(
                access_token=grant.access_token,
                refresh_token=rotated,
                expires_at=self._timer() + grant.expires_in,
            )
            self._delegated.set(user_id, credential)
            return credential
        finally:
            self._user_refreshes.pop(user_id, None)

    # Shared

    async def _call_with_retry(
        self,
        fn: Callable[[str], Awaitable[T]],
        get_token: Callable[[], Awaitable[str]],
        invalidate: Callable[[str], None],
        code: str,
        subject: str,
    ) -> T:
        token = await get_token()
        result: UpstreamResult[T] = await capture(fn(token), self._timeout)

        if isinstance(result, AuthRejected):
            logger.info("Token for %s rejected, refreshing and retrying once", subject)
            invalidate(token)
            token = await get_token()
            result = await capture(fn(token), self._timeout)
            if isinstance(result, AuthRejected):
                logger.warning("Refreshed token for %s rejected again", subject)
                raise AuthenticationFailedError(
                    "Upstream rejected a freshly issued token", code
                ) from result.error

        if isinstance(result, Failed):
            raise UpstreamUnavailableError() from result.error
        return result.value

    @staticmethod
    def _unwrap_grant(
        result: "UpstreamResult[TokenGrant]",
        rejected_message: str,
        code: str,
    ) -> TokenGrant:
        if isinstance(result, AuthRejected):
            raise AuthenticationFailedError(rejected_message, code) from result.error
        if isinstance(result, Failed):
            logger.warning("Token exchange failed: %r", result.error)
            raise UpstreamUnavailableError() from result.error
        return result.value
