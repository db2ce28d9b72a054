from searchstate.application.use_cases.search_session import (
    ResourceRegistry,
    SearchResource,
    SearchSession,
)

__all__ = ["ResourceRegistry", "SearchResource", "SearchSession"]
