"""Exception hierarchy for reelcache."""


class ReelCacheError(Exception):
    """Base class for all reelcache errors."""


class ConfigurationError(ReelCacheError):
    """Raised when settings are missing or invalid."""


class UpstreamRejectedError(ReelCacheError):
    """The upstream service rejected the credential used for a call.

    Raised by collaborators on an authentication-rejected response
    (HTTP 401). Triggers the one-shot refresh-and-retry.
    """

    def __init__(self, message: str = "Upstream rejected credential") -> None:
        super().__init__(message)


class UpstreamUnavailableError(ReelCacheError):
    """The upstream service could not be reached or failed.

    Covers network errors, timeouts and 5xx responses. The message is kept
    generic so upstream details never reach the caller; the original
    error is available as ``__cause__``.
    """

    def __init__(self, message: str = "Upstream service unavailable") -> None:
        super().__init__(message)


class AuthenticationFailedError(ReelCacheError):
    """Terminal authentication failure.

    Raised after a refreshed credential is rejected a second time, or when
    the credential exchange itself is rejected. Callers should prompt the
    user to log in again.
    """

    def __init__(self, message: str, code: str) -> None:
        super().__init__(message)
        self.code = code
