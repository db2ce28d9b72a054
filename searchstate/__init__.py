"""searchstate: remembered search, filter and sort parameters for list endpoints.

Caches each user's last-used search parameters per route, merges them with
request parameters and declared defaults, and applies declarative filter and
sort configuration to SQLAlchemy queries.
"""

from searchstate.application.use_cases.search_session import (
    ResourceRegistry,
    SearchResource,
    SearchSession,
)
from searchstate.infrastructure.persistence.search_query import SearchQuery

__all__ = ["ResourceRegistry", "SearchQuery", "SearchResource", "SearchSession"]
