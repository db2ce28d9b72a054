"""Page size and page number resolution."""

from collections.abc import Mapping
from typing import Any

from searchstate.application.interfaces.query import QueryCapability
from searchstate.core.constants import PAGE_PARAM, PAGINATION_PARAM


def _positive_int(value: Any) -> int | None:
    if isinstance(value, bool):
        return None
    try:
        number = int(str(value).strip())
    except ValueError:
        return None
    return number if number >= 1 else None


def resolve_page_size(params: Mapping[str, Any], default: int, maximum: int) -> int:
    """Return params["pagination"] clamped to [1, maximum], or default if unusable."""
    size = _positive_int(params.get(PAGINATION_PARAM))
    if size is None:
        return default
    return min(size, maximum)


def resolve_page(params: Mapping[str, Any]) -> int:
    """Return params["page"] (>= 1), defaulting to 1."""
    return _positive_int(params.get(PAGE_PARAM)) or 1


def apply_pagination(
    query: QueryCapability,
    params: Mapping[str, Any],
    default: int,
    maximum: int,
) -> QueryCapability:
    """Limit query to the resolved page."""
    size = resolve_page_size(params, default, maximum)
    page = resolve_page(params)
    return query.paginate(limit=size, offset=(page - 1) * size)
