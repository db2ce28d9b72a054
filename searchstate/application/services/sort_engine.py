"""Sort engine: turn a SortSpec and resolved parameters into an ordering."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from searchstate.application.interfaces.query import QueryCapability
from searchstate.core.constants import DEFAULT_SORT_KEY
from searchstate.domain.descriptors import (
    IDENTIFIER_RE,
    CallbackSort,
    FieldSort,
    SortDescriptor,
    SortSpec,
)
from searchstate.domain.enums import SortDirection
from searchstate.domain.exceptions import DisallowedSortFieldException
from searchstate.domain.values import is_empty_value

logger = logging.getLogger(__name__)


def sort_state(params: Mapping[str, Any], sort_spec: SortSpec) -> tuple[str | None, SortDirection]:
    """Return (sort key or None, direction) read from params."""
    raw_key = params.get(sort_spec.sort_param)
    key = None if is_empty_value(raw_key) else str(raw_key).strip()
    direction = SortDirection.parse(
        params.get(sort_spec.direction_param), sort_spec.default_direction
    )
    return key, direction


def _apply_descriptor(
    query: QueryCapability,
    descriptor: SortDescriptor,
    direction: SortDirection,
    params: Mapping[str, Any],
) -> QueryCapability:
    if isinstance(descriptor, CallbackSort):
        result = descriptor.callback(query, direction, params)
        return query if result is None else result
    return query.order_by(descriptor.field, direction)


def _check_fallback_field(
    query: QueryCapability | None, key: str, sort_spec: SortSpec
) -> None:
    """Reject raw sort keys that are not plain, allowed, existing fields.

    Without a query only the identifier shape and allowed_fields are checked.
    """
    if not IDENTIFIER_RE.match(key):
        raise DisallowedSortFieldException(key)
    if sort_spec.allowed_fields is not None and key not in sort_spec.allowed_fields:
        raise DisallowedSortFieldException(key)
    if query is not None and not query.has_field(key):
        raise DisallowedSortFieldException(key)


def check_sort_key(
    params: Mapping[str, Any],
    sort_spec: SortSpec,
    query: QueryCapability | None = None,
) -> None:
    """Raise if apply_sort would reject the sort key in params.

    Empty, "default" and declared keys always pass.

    Raises:
        DisallowedSortFieldException: Undeclared key that is not an allowed field.
    """
    key, _ = sort_state(params, sort_spec)
    if key is None or key == DEFAULT_SORT_KEY or key in sort_spec.entries:
        return
    _check_fallback_field(query, key, sort_spec)


def apply_sort(
    query: QueryCapability,
    params: Mapping[str, Any],
    sort_spec: SortSpec,
) -> QueryCapability:
    """Order query by the resolved sort key and direction.

    Empty key or the key "default": the declared default entry, or no
    ordering. Declared key: its field or callback. Any other key: order by
    the key itself as a field name, once it passes _check_fallback_field.

    Raises:
        DisallowedSortFieldException: Undeclared key that is not an allowed field.
    """
    key, direction = sort_state(params, sort_spec)
    if key is None or key == DEFAULT_SORT_KEY:
        if sort_spec.default is None:
            return query
        return _apply_descriptor(query, sort_spec.default, direction, params)

    descriptor = sort_spec.entries.get(key)
    if descriptor is not None:
        return _apply_descriptor(query, descriptor, direction, params)

    _check_fallback_field(query, key, sort_spec)
    logger.debug("Sorting by undeclared field %s %s", key, direction.value)
    return _apply_descriptor(query, FieldSort(field=key), direction, params)
