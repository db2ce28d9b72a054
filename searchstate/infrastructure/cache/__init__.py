"""Cache: Redis and in-process services plus the search-state key builder.

Used by the parameter store. CacheService uses searchstate.core.config;
key format is in keys.py (DRY).
"""

from searchstate.infrastructure.cache.keys import search_state_key
from searchstate.infrastructure.cache.memory_cache import MemoryCache
from searchstate.infrastructure.cache.redis_cache import CacheService

__all__ = [
    "CacheService",
    "MemoryCache",
    "search_state_key",
]
