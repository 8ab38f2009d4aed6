"""Process-wide cache hit/miss counters."""

import copy
from collections import defaultdict


class CacheMetrics:
    """Hit/miss counters per cache domain.

    Purely observational; nothing reads these counters to make a
    caching decision.
    """

    def __init__(self) -> None:
        self._hits: defaultdict[str, int] = defaultdict(int)
        self._misses: defaultdict[str, int] = defaultdict(int)

    def record_hit(self, domain: str) -> None:
        self._hits[domain] += 1

    def record_miss(self, domain: str) -> None:
        self._misses[domain] += 1

    def snapshot(self) -> dict[str, dict[str, float]]:
        """Get cache statistics.

        Returns:
            A fresh dictionary keyed by domain name, each value holding
            hits, misses, total and hit_rate, plus a ``_total`` aggregate
            over all domains.
        """
        result: dict[str, dict[str, float]] = {}
        for domain in sorted(set(self._hits) | set(self._misses)):
            result[domain] = _summary(self._hits[domain], self._misses[domain])
        result["_total"] = _summary(
            sum(self._hits.values()), sum(self._misses.values())
        )
        return copy.deepcopy(result)

    def reset(self) -> None:
        self._hits.clear()
        self._misses.clear()


def _summary(hits: int, misses: int) -> dict[str, float]:
    total = hits + misses
    return {
        "hits": hits,
        "misses": misses,
        "total": total,
        "hit_rate": hits / total if total else 0.0,
    }
