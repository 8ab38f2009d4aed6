"""Stable digests for cache key components."""

import hashlib
import json
from typing import Any

DIGEST_LENGTH = 16


def _canonical(value: Any) -> Any:
    if isinstance(value, dict):
        return {str(k): _canonical(v) for k, v in value.items() if v is not None}
    if isinstance(value, (set, frozenset)):
        return sorted((_canonical(v) for v in value), key=str)
    if isinstance(value, (list, tuple)):
        return [_canonical(v) for v in value]
    return value


def hash_value(value: Any, length: int = DIGEST_LENGTH) -> str:
    """Return a short digest that is equal for equivalent values.

    Mapping order does not matter and None-valued mapping entries are
    ignored, so ``{"sort": "date", "genre": None}`` and ``{"sort": "date"}``
    produce the same digest.

    Args:
        value: A JSON-like value. Unknown types are stringified.
        length: Number of hex characters of the SHA-256 digest to keep.
    """
    if value is None:
        return "none"
    payload = json.dumps(
        _canonical(value), sort_keys=True, default=str, separators=(",", ":")
    )
    return hashlib.sha256(payload.encode("utf-8")).hexdigest()[:length]
