"""Liveness and readiness checks."""

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from searchstate.schemas.health import HealthResponse, ReadinessResponse

router = APIRouter()


@router.get("", response_model=HealthResponse)
def liveness() -> HealthResponse:
    return HealthResponse()


@router.get(
    "/ready",
    response_model=ReadinessResponse,
    responses={503: {"model": ReadinessResponse, "description": "Search-state cache down"}},
)
def readiness(request: Request) -> ReadinessResponse | JSONResponse:
    """Ready only while the search-state cache answers; otherwise 503."""
    cache = getattr(request.app.state, "cache", None)
    if cache is None or not cache.is_available():
        body = ReadinessResponse(status="not_ready", cache="unavailable")
        return JSONResponse(status_code=503, content=body.model_dump())
    return ReadinessResponse(cache="available")
