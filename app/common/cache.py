"""Process-local TTL cache for hot, rarely changing reads (profile lookups)."""

from __future__ import annotations

import os
import time
from typing import Any, Callable, Dict, Optional, Tuple


class ReadCache:
    """Expiring key/value store. Not shared across workers."""

    def __init__(self, ttl_s: int = 60, *, enabled: bool = True, clock: Callable[[], float] = time.monotonic):
        self.ttl_s = max(1, int(ttl_s))
        self.enabled = enabled
        self._clock = clock
        self._store: Dict[str, Tuple[Any, float]] = {}

    def get(self, key: str) -> Optional[Any]:
        if not self.enabled:
            return None
        entry = self._store.get(key)
        if entry is None:
            return None
        value, expires_at = entry
        if self._clock() >= expires_at:
            del self._store[key]
            return None
        return value

    def set(self, key: str, value: Any, ttl_s: Optional[int] = None) -> None:
        if self.enabled:
            self._store[key] = (value, self._clock() + max(1, int(ttl_s or self.ttl_s)))

    def clear(self, prefix: Optional[str] = None) -> None:
        if prefix is None:
            self._store.clear()
        else:
            for key in [k for k in self._store if k.startswith(prefix)]:
                del self._store[key]


read_cache = ReadCache(
    int(os.getenv("READ_CACHE_SECONDS", "60")),
    enabled=os.getenv("READ_CACHE_DISABLED", "false").lower() != "true",
)

__all__ = ["ReadCache", "read_cache"]
