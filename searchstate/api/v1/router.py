"""API v1 router aggregation.

Includes all endpoint modules with consistent prefix and tags. All routes
use dependencies from searchstate.api.v1.dependencies.
"""

from fastapi import APIRouter

from searchstate.api.v1.endpoints import health, search_state

api_router = APIRouter()

api_router.include_router(health.router, prefix="/health", tags=["health"])
api_router.include_router(
    search_state.router, prefix="/search-state", tags=["search-state"]
)
