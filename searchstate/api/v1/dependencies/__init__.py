"""Presentation-layer dependency injection (composition root).

Provides FastAPI Depends() for identity, the cache-backed parameter store
and search sessions. Routes depend only on these, not on infrastructure.
"""

from .identity import get_current_user_id
from .search import (
    build_search_key,
    get_cache,
    get_parameter_store,
    get_request_params,
    get_resource_registry,
    search_session,
)

__all__ = [
    "build_search_key",
    "get_cache",
    "get_current_user_id",
    "get_parameter_store",
    "get_request_params",
    "get_resource_registry",
    "search_session",
]
