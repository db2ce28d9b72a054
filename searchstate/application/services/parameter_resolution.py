"""Default resolution: merge request, cached and declared default parameters."""

from collections.abc import Mapping
from typing import Any

from searchstate.domain.values import SearchParameters, is_empty_value


def resolve_parameters(
    request_params: Mapping[str, Any] | None,
    cached_params: Mapping[str, Any] | None,
    defaults: Mapping[str, Any] | None,
) -> SearchParameters:
    """Return the effective parameters for one request.

    For each key in any source the value is the first non-empty one of
    request, cache, default (see is_empty_value). When every source holds an
    empty value the first supplied one is kept, in the same order, so a key
    never disappears. Key order: defaults, then cached, then request keys.
    """
    sources = (request_params or {}, cached_params or {}, defaults or {})
    keys: dict[str, None] = {}
    for source in reversed(sources):
        keys.update(dict.fromkeys(source))

    resolved: SearchParameters = {}
    for key in keys:
        present = [source[key] for source in sources if key in source]
        resolved[key] = next(
            (value for value in present if not is_empty_value(value)), present[0]
        )
    return resolved


def supplied_parameters(request_params: Mapping[str, Any] | None) -> SearchParameters:
    """Return only the request parameters that carry a non-empty value."""
    return {
        key: value
        for key, value in (request_params or {}).items()
        if not is_empty_value(value)
    }
