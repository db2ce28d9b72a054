"""Application interfaces (ports): cache service and query capability protocols.

Define contracts for infrastructure implementations (DIP).
No runtime imports from searchstate.infrastructure.
"""

from searchstate.application.interfaces.query import QueryCapability
from searchstate.application.interfaces.services import ICacheService

__all__ = [
    "ICacheService",
    "QueryCapability",
]
