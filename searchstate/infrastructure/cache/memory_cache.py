"""In-process TTL cache, used when Redis is disabled (local development, tests).

Values are stored JSON-encoded so callers get the same copy semantics as
with Redis: mutating a returned mapping never changes the cached entry.
Entries are per process; multiple workers do not share them.
"""

from __future__ import annotations

import json
import logging
import time
from collections.abc import Callable
from typing import Any

logger = logging.getLogger(__name__)


class MemoryCache:
    """Dict-backed cache with per-entry expiry (monotonic clock)."""

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._store: dict[str, tuple[str, float]] = {}
        self._clock = clock

    def is_available(self) -> bool:
        return True

    async def get(self, key: str) -> Any | None:
        entry = self._store.get(key)
        if entry is None:
            logger.debug("Cache MISS: %s", key)
            return None
        serialized, expires_at = entry
        if self._clock() >= expires_at:
            del self._store[key]
            logger.debug("Cache EXPIRED: %s", key)
            return None
        logger.debug("Cache HIT: %s", key)
        return json.loads(serialized)

    async def set(self, key: str, value: Any, ttl: int = 3600) -> None:
        self._store[key] = (json.dumps(value), self._clock() + ttl)
        logger.debug("Cache SET: %s (TTL: %ss)", key, ttl)

    async def delete(self, key: str) -> None:
        self._store.pop(key, None)
        logger.debug("Cache DELETE: %s", key)
