"""Search-state dependencies (composition root).

Listing endpoints declare a SearchResource once and depend on
search_session(resource). The session is keyed by the resource name, the
same name the /search-state/{route_name} endpoints take, so both address
one cache entry when the resource is also passed to create_app():

    ARTICLES = SearchResource.from_config("articles", filters={...}, sorts={...})
    app = create_app(resources=[ARTICLES])

    @router.get("/articles")
    async def list_articles(
        session: Annotated[SearchSession, Depends(search_session(ARTICLES))],
        params: Annotated[dict, Depends(get_request_params)],
    ): ...
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from typing import Annotated, Any

from fastapi import Depends, Request

from searchstate.application.services.parameter_store import ParameterStore
from searchstate.application.use_cases.search_session import (
    ResourceRegistry,
    SearchResource,
    SearchSession,
)
from searchstate.core.config import get_settings
from searchstate.domain.exceptions import CacheUnavailableException, ValidationException
from searchstate.infrastructure.cache.keys import search_state_key

from .identity import get_current_user_id


def get_cache(request: Request) -> Any:
    """Cache service created by the lifespan (app.state.cache)."""
    cache = getattr(request.app.state, "cache", None)
    if cache is None:
        raise CacheUnavailableException("connect")
    return cache


def get_parameter_store(
    cache: Annotated[Any, Depends(get_cache)],
) -> ParameterStore:
    """Parameter store with the configured TTL."""
    return ParameterStore(cache, ttl_seconds=get_settings().search_cache_ttl_seconds)


def get_resource_registry(request: Request) -> ResourceRegistry:
    """Registered search resources (app.state.search_resources)."""
    registry = getattr(request.app.state, "search_resources", None)
    return registry if registry is not None else ResourceRegistry()


def build_search_key(user_id: str | None, route_id: str) -> str:
    """Cache key for user + route; invalid components are a 400, not a 500."""
    try:
        return search_state_key(user_id, route_id, prefix=get_settings().search_cache_prefix)
    except ValueError as e:
        raise ValidationException(str(e), field="key") from e


def get_request_params(request: Request) -> dict[str, Any]:
    """Query parameters as a flat mapping; repeated keys become lists."""
    params: dict[str, Any] = {}
    for key in request.query_params.keys():
        values = request.query_params.getlist(key)
        params[key] = values if len(values) > 1 else values[0]
    return params


def search_session(
    resource: SearchResource,
) -> Callable[..., Awaitable[SearchSession]]:
    """Dependency factory: SearchSession for resource and the current user."""

    async def _session(
        store: Annotated[ParameterStore, Depends(get_parameter_store)],
        user_id: Annotated[str | None, Depends(get_current_user_id)],
    ) -> SearchSession:
        settings = get_settings()
        return SearchSession(
            store,
            build_search_key(user_id, resource.name),
            resource,
            default_page_size=settings.search_default_pagination,
            max_page_size=settings.search_max_page_size,
        )

    return _session
