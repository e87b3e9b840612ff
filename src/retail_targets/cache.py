"""In-memory TTL cache with a stale read path.

Metrics are cheap to serve from memory and expensive to recompute (every
request would hit the platform API). When recomputing fails, a value that has
expired only recently is still better than an error.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Any, Callable, Optional


@dataclass
class _Entry:
    value: Any
    expires_at: float


class TTLCache:
    """Key/value cache whose entries expire ``ttl`` seconds after being set.

    Args:
        clock: Function returning the current time in seconds. Defaults to
            time.monotonic.
    """

    def __init__(self, clock: Optional[Callable[[], float]] = None) -> None:
        self._clock = clock or time.monotonic
        self._store: dict[str, _Entry] = {}

    def get(self, key: str) -> Any:
        """Value for key, or None if missing or expired."""
        hit = self._store.get(key)
        if hit is None or self._clock() > hit.expires_at:
            return None
        return hit.value

    def get_stale(self, key: str, max_stale: float) -> Any:
        """Value for key even if expired, up to ``max_stale`` seconds past expiry.

        Entries older than that are evicted and None is returned.
        """
        hit = self._store.get(key)
        if hit is None:
            return None
        if self._clock() > hit.expires_at + max_stale:
            del self._store[key]
            return None
        return hit.value

    def set(self, key: str, value: Any, ttl: float) -> None:
        self._store[key] = _Entry(value=value, expires_at=self._clock() + ttl)

    def delete(self, key: str) -> None:
        self._store.pop(key, None)

    def clear(self) -> None:
        self._store.clear()
