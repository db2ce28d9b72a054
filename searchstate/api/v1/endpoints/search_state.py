"""Search-state API: store, read, update and clear remembered search parameters.

route_name identifies the listing route whose parameters are cached (the
same name its SearchResource is registered under); the user comes from the
bearer token, or guest.
"""

from typing import Annotated, Any

from fastapi import APIRouter, Body, Depends, HTTPException

from searchstate.api.v1.dependencies import (
    build_search_key,
    get_current_user_id,
    get_parameter_store,
    get_request_params,
    get_resource_registry,
)
from searchstate.application.services.parameter_store import ParameterStore
from searchstate.application.use_cases.search_session import (
    ResourceRegistry,
    SearchSession,
)
from searchstate.core.config import get_settings
from searchstate.schemas.search_state import ResolvedSearchResponse, SearchStateResponse

router = APIRouter()

UserId = Annotated[str | None, Depends(get_current_user_id)]
Store = Annotated[ParameterStore, Depends(get_parameter_store)]
Registry = Annotated[ResourceRegistry, Depends(get_resource_registry)]


@router.get("/{route_name}", response_model=SearchStateResponse)
async def get_search_state(
    route_name: str, user_id: UserId, store: Store, registry: Registry
) -> SearchStateResponse:
    """Cached parameters, backfilled with the registered resource's defaults."""
    resource = registry.get(route_name)
    defaults = (
        resource.declared_defaults(get_settings().search_default_pagination)
        if resource
        else {}
    )
    data = await store.get(build_search_key(user_id, route_name), defaults)
    return SearchStateResponse(data=data)


@router.put("/{route_name}", response_model=SearchStateResponse)
async def store_search_state(
    route_name: str,
    user_id: UserId,
    store: Store,
    params: Annotated[dict[str, Any], Body()],
) -> SearchStateResponse:
    """Replace the cached parameters."""
    data = await store.put(build_search_key(user_id, route_name), params)
    return SearchStateResponse(data=data)


@router.patch("/{route_name}", response_model=SearchStateResponse)
async def update_search_state(
    route_name: str,
    user_id: UserId,
    store: Store,
    params: Annotated[dict[str, Any], Body()],
) -> SearchStateResponse:
    """Merge params into the cached parameters (params win)."""
    data = await store.update(build_search_key(user_id, route_name), params)
    return SearchStateResponse(data=data)


@router.delete("/{route_name}", response_model=SearchStateResponse)
async def clear_search_state(
    route_name: str, user_id: UserId, store: Store
) -> SearchStateResponse:
    """Forget the cached parameters."""
    await store.clear(build_search_key(user_id, route_name))
    return SearchStateResponse()


@router.post("/{route_name}/defaults", response_model=SearchStateResponse)
async def store_search_defaults(
    route_name: str,
    user_id: UserId,
    store: Store,
    defaults: Annotated[dict[str, Any], Body()],
) -> SearchStateResponse:
    """Set each default whose key is absent or empty in the cached parameters."""
    data = await store.store_defaults(build_search_key(user_id, route_name), defaults)
    return SearchStateResponse(data=data)


@router.get("/{route_name}/resolve", response_model=ResolvedSearchResponse)
async def resolve_search_state(
    route_name: str,
    user_id: UserId,
    store: Store,
    registry: Registry,
    request_params: Annotated[dict[str, Any], Depends(get_request_params)],
) -> ResolvedSearchResponse:
    """Resolve query parameters against cache and defaults for a registered resource."""
    resource = registry.get(route_name)
    if resource is None:
        raise HTTPException(status_code=404, detail=f"Unknown search resource: {route_name}")
    settings = get_settings()
    session = SearchSession(
        store,
        build_search_key(user_id, route_name),
        resource,
        default_page_size=settings.search_default_pagination,
        max_page_size=settings.search_max_page_size,
    )
    params = await session.resolve(request_params)
    sort, direction = session.sort_state(params)
    page, page_size = session.page_state(params)
    return ResolvedSearchResponse(
        data=params,
        sort=sort,
        direction=direction.value,
        page=page,
        page_size=page_size,
    )
