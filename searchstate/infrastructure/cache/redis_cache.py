"""Redis backend for the search-state cache.

Values are stored as JSON strings with SETEX. An outage is never reported
as a miss: after one reconnect attempt every operation raises
CacheUnavailableException, which the API turns into a 503.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING, Any, TypeVar

import redis.asyncio as redis

from searchstate.core.config import get_settings
from searchstate.domain.exceptions import CacheUnavailableException

if TYPE_CHECKING:
    from searchstate.core.config import Settings

logger = logging.getLogger(__name__)

T = TypeVar("T")

_CONNECTION_ERRORS = (redis.ConnectionError, redis.TimeoutError)


class CacheService:
    """redis.asyncio client wrapper implementing ICacheService.

    The lifespan calls connect() on startup and disconnect() on shutdown.
    Passing client skips connect() (tests, shared pools).
    """

    def __init__(
        self,
        client: redis.Redis | None = None,
        settings: "Settings | None" = None,
    ) -> None:
        self.settings = settings or get_settings()
        self.redis = client
        self._connected = client is not None

    def _new_client(self) -> redis.Redis:
        password = self.settings.redis_password
        return redis.Redis(
            host=self.settings.redis_host,
            port=self.settings.redis_port,
            db=self.settings.redis_db,
            password=password.get_secret_value() if password else None,
            decode_responses=True,
            socket_connect_timeout=5,
            socket_keepalive=True,
        )

    async def connect(self) -> None:
        """Open a client and PING it; on failure stay disconnected (no raise)."""
        if self.redis is not None:
            return
        client = self._new_client()
        try:
            await client.ping()
        except _CONNECTION_ERRORS as e:
            logger.warning(
                "Redis at %s:%s unreachable (%s); search state unavailable",
                self.settings.redis_host,
                self.settings.redis_port,
                e,
            )
            await client.aclose()
            return
        self.redis = client
        self._connected = True
        logger.info("Search state cache on Redis %s:%s", self.settings.redis_host, self.settings.redis_port)

    async def disconnect(self) -> None:
        if self.redis is None:
            return
        await self.redis.aclose()
        self.redis = None
        self._connected = False
        logger.info("Redis connection closed")

    async def _reconnect(self) -> bool:
        stale, self.redis = self.redis, None
        self._connected = False
        if stale is not None:
            try:
                await stale.aclose()
            except redis.RedisError:
                logger.debug("Error closing stale Redis client ignored")
        await self.connect()
        return self._connected

    def is_available(self) -> bool:
        return self._connected and self.redis is not None

    async def _run(
        self,
        operation: str,
        key: str,
        call: Callable[[redis.Redis], Awaitable[T]],
    ) -> T:
        """Run call on the client; reconnect and retry once on a connection error.

        Raises:
            CacheUnavailableException: Still unreachable, or Redis rejected the command.
        """
        if not self.is_available() and not await self._reconnect():
            raise CacheUnavailableException(operation, key)
        try:
            return await call(self.redis)
        except _CONNECTION_ERRORS as e:
            if not await self._reconnect():
                logger.warning("Redis %s on %s failed: %s", operation, key, e)
                raise CacheUnavailableException(operation, key) from e
            logger.info("Reconnected to Redis; retrying %s on %s", operation, key)
        except redis.RedisError as e:
            logger.exception("Redis %s on %s rejected", operation, key)
            raise CacheUnavailableException(operation, key) from e
        try:
            return await call(self.redis)
        except redis.RedisError as e:
            logger.exception("Redis %s on %s failed after reconnect", operation, key)
            raise CacheUnavailableException(operation, key) from e

    async def get(self, key: str) -> Any | None:
        """Decoded value under key, or None when absent or not valid JSON."""
        raw = await self._run("get", key, lambda client: client.get(key))
        if raw is None:
            logger.debug("Cache MISS: %s", key)
            return None
        try:
            value = json.loads(raw)
        except ValueError:
            logger.warning("Cache value under %s is not JSON; treating as a miss", key)
            return None
        logger.debug("Cache HIT: %s", key)
        return value

    async def set(self, key: str, value: Any, ttl: int = 3600) -> None:
        """Store value (JSON-serializable) under key for ttl seconds."""
        payload = json.dumps(value)
        await self._run("set", key, lambda client: client.setex(key, ttl, payload))
        logger.debug("Cache SET: %s (TTL: %ss)", key, ttl)

    async def delete(self, key: str) -> None:
        await self._run("delete", key, lambda client: client.delete(key))
        logger.debug("Cache DELETE: %s", key)
