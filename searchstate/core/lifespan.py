"""Lifespan: open the search-state cache on startup, close it on shutdown.

app.state.cache is the only thing set here; dependencies read it per request
and answer 503 while it is None.
"""

import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator

from fastapi import FastAPI

from searchstate.core.config import Settings, get_settings

logger = logging.getLogger(__name__)


async def _open_cache(settings: Settings) -> Any:
    if not settings.redis_enabled:
        from searchstate.infrastructure.cache.memory_cache import MemoryCache

        logger.info("REDIS_ENABLED is off; search state kept in process memory")
        return MemoryCache()

    from searchstate.infrastructure.cache.redis_cache import CacheService

    # A Redis that is down now stays attached: CacheService reconnects per call.
    cache = CacheService(settings=settings)
    await cache.connect()
    return cache


@asynccontextmanager
async def create_lifespan(app: FastAPI) -> AsyncIterator[None]:
    app.state.cache = await _open_cache(get_settings())
    try:
        yield
    finally:
        cache, app.state.cache = app.state.cache, None
        close = getattr(cache, "disconnect", None)
        if close is not None:
            await close()
