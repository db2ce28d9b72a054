"""Application services: parameter store, default resolution, filter/sort/pagination engines."""

from searchstate.application.services.filter_engine import apply_filters
from searchstate.application.services.pagination import (
    apply_pagination,
    resolve_page,
    resolve_page_size,
)
from searchstate.application.services.parameter_resolution import (
    resolve_parameters,
    supplied_parameters,
)
from searchstate.application.services.parameter_store import ParameterStore
from searchstate.application.services.sort_engine import apply_sort, sort_state

__all__ = [
    "ParameterStore",
    "apply_filters",
    "apply_pagination",
    "apply_sort",
    "resolve_page",
    "resolve_page_size",
    "resolve_parameters",
    "sort_state",
    "supplied_parameters",
]
