"""Application layer: interfaces, services, use cases.

Depends only on domain and protocol definitions (DIP).
Infrastructure implements the interfaces (cache, query adapter).
"""

from searchstate.application.interfaces import ICacheService, QueryCapability
from searchstate.application.services import ParameterStore
from searchstate.application.use_cases import (
    ResourceRegistry,
    SearchResource,
    SearchSession,
)

__all__ = [
    "ICacheService",
    "ParameterStore",
    "QueryCapability",
    "ResourceRegistry",
    "SearchResource",
    "SearchSession",
]
