"""Cache invalidator interface."""

from typing import Protocol


class IInvalidator(Protocol):
    """Contract for per-user cache invalidation.

    Any code path that changes a user's stored catalog preferences must
    call ``invalidate`` before reporting success.
    """

    def record(self, user_id: str, key: str) -> None:
        """Remember that ``key`` was written on behalf of ``user_id``."""
        ...

    def invalidate(self, user_id: str) -> int:
        """Remove every cached entry recorded for a user.

        Args:
            user_id: The user whose cached results must be dropped.

        Returns:
            Number of live entries removed.
        """
        ...
