"""Parameter store: cached search parameters per (user, route) key.

Every write refreshes the TTL. Read-modify-write operations (get with
backfill, update, store_defaults) are not atomic: two concurrent requests on
the same key can interleave and the last put wins. No locking is done; the
entry belongs to one user on one route, so a lost write only costs that user
a remembered filter.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from searchstate.domain.values import SearchParameters, missing_keys

if TYPE_CHECKING:
    from searchstate.application.interfaces.services import ICacheService

logger = logging.getLogger(__name__)


class ParameterStore:
    """get/put/update/store_defaults/clear of SearchParameters in a TTL cache."""

    def __init__(self, cache: "ICacheService", ttl_seconds: int) -> None:
        """Initialize the store.

        Args:
            cache: Cache service; CacheUnavailableException from it propagates.
            ttl_seconds: TTL applied on every write.
        """
        self.cache = cache
        self.ttl_seconds = ttl_seconds

    async def _read(self, key: str) -> SearchParameters:
        value = await self.cache.get(key)
        if isinstance(value, dict):
            return value
        if value is not None:
            logger.warning("Ignoring non-mapping search state under %s", key)
        return {}

    async def _write(self, key: str, params: SearchParameters) -> SearchParameters:
        await self.cache.set(key, params, ttl=self.ttl_seconds)
        return params

    async def get(
        self, key: str, defaults: Mapping[str, Any] | None = None
    ) -> SearchParameters:
        """Return cached parameters, backfilling missing or empty default keys.

        On a miss, or when any default key is absent or empty, the default
        values are set for exactly those keys and the result is written back
        before returning. Non-empty cached values are never overwritten by a
        default: a remembered {"sort": "title"} plus a missing "pagination"
        keeps "title". This is the same rule as store_defaults; a merge in
        which defaults win would reset every remembered value each time a
        new default key is declared.
        """
        defaults = defaults or {}
        params = await self._read(key)
        missing = missing_keys(params, defaults)
        if not params or missing:
            for name in missing:
                params[name] = defaults[name]
            logger.debug("Backfilled defaults %s for %s", missing, key)
            await self._write(key, params)
        return params

    async def put(self, key: str, params: Mapping[str, Any]) -> SearchParameters:
        """Overwrite the entry with params."""
        return await self._write(key, dict(params))

    async def update(self, key: str, partial: Mapping[str, Any]) -> SearchParameters:
        """Merge partial into the entry (partial wins on conflicts)."""
        params = await self._read(key)
        params.update(partial)
        return await self._write(key, params)

    async def store_defaults(
        self, key: str, defaults: Mapping[str, Any]
    ) -> SearchParameters:
        """Set each default key that is absent or empty; keep non-empty values."""
        params = await self._read(key)
        for name in missing_keys(params, defaults):
            params[name] = defaults[name]
        return await self._write(key, params)

    async def clear(self, key: str) -> None:
        """Delete the entry."""
        await self.cache.delete(key)
