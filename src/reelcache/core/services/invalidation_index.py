"""Per-user invalidation index for compound cached results."""

import asyncio
import logging
from collections import defaultdict
from typing import Any

from reelcache.core.interfaces.cache_backend import IStore

logger = logging.getLogger(__name__)


class InvalidationIndex:
    """Maps a user to the cache keys written on their behalf.

    The index is derived bookkeeping only. It may reference keys that
    have already expired or been evicted, but it must never miss a live
    key, which is why callers record a key before storing its value.
    """

    def __init__(self, store: IStore[Any]) -> None:
        """Initialize the index.

        Args:
            store: The cache domain holding the indexed entries.
        """
        self._store = store
        self._keys: defaultdict[str, set[str]] = defaultdict(set)

    def record(self, user_id: str, key: str) -> None:
        self._keys[user_id].add(key)

    def keys_for(self, user_id: str) -> frozenset[str]:
        return frozenset(self._keys.get(user_id, ()))

    def invalidate(self, user_id: str) -> int:
        """Remove every cached entry recorded for a user.

        Safe to call repeatedly; the index entry is absent afterwards.

        Args:
            user_id: The user whose preferences changed.

        Returns:
            Number of live entries removed from the store.
        """
        keys = self._keys.pop(user_id, set())
        removed = sum(1 for key in keys if self._store.delete(key))
        if keys:
            logger.info(
                "Invalidated %d cached catalogs for user %s (%d indexed keys)",
                removed,
                user_id,
                len(keys),
            )
        return removed

    def sweep(self) -> int:
        """Forget keys whose entries are already gone from the store.

        Housekeeping only: it bounds the index size and never evicts
        anything from the store itself.

        Returns:
            Number of user entries dropped because none of their keys
            were still live.
        """
        dropped = 0
        for user_id in list(self._keys):
            live = {key for key in self._keys[user_id] if self._store.has(key)}
            if live:
                self._keys[user_id] = live
            else:
                del self._keys[user_id]
                dropped += 1
        if dropped:
            logger.debug("Index sweep dropped %d users", dropped)
        return dropped

    async def run_periodic_sweep(self, interval: float) -> None:
        """Call ``sweep`` every ``interval`` seconds until cancelled."""
        while True:
            await asyncio.sleep(interval)
            self.sweep()

    def __len__(self) -> int:
        """Return the number of users with indexed keys."""
        return len(self._keys)
