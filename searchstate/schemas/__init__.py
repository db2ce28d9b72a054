from searchstate.schemas.health import HealthResponse, ReadinessResponse
from searchstate.schemas.search_state import ResolvedSearchResponse, SearchStateResponse

__all__ = [
    "HealthResponse",
    "ReadinessResponse",
    "ResolvedSearchResponse",
    "SearchStateResponse",
]
