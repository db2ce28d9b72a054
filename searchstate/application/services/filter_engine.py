"""Filter engine: turn a FilterSpec and resolved parameters into query predicates.

Descriptors are applied in declaration order and every predicate is AND-ed
into the query; a text filter over several columns or several values
contributes one OR group. A field whose resolved value is empty
(is_empty_value) is skipped.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from datetime import date, datetime
from typing import Any

from searchstate.application.interfaces.query import QueryCapability
from searchstate.domain.descriptors import (
    CustomFilter,
    DateFilter,
    ExactFilter,
    FilterSpec,
    RelationFilter,
    TextFilter,
)
from searchstate.domain.enums import DatePart
from searchstate.domain.values import is_empty_value

logger = logging.getLogger(__name__)


def _as_int(value: Any, low: int, high: int) -> int | None:
    """Return value as an int within [low, high], or None if it is not one."""
    if isinstance(value, bool):
        return None
    try:
        number = int(str(value).strip())
    except ValueError:
        return None
    return number if low <= number <= high else None


def _as_date(value: Any) -> date | None:
    """Return value as a date (ISO string, date or datetime), or None."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        text = value.strip()
        try:
            return date.fromisoformat(text[:10])
        except ValueError:
            return None
    return None


def _apply_text(
    query: QueryCapability, spec: TextFilter, value: Any, params: Mapping[str, Any]
) -> QueryCapability:
    # A list value (repeated query key) matches any of its non-empty items.
    values = value if isinstance(value, (list, tuple, set, frozenset)) else [value]
    terms = [str(item).strip() for item in values if not is_empty_value(item)]
    conditions = []
    for text in terms:
        for column in spec.columns:
            related = spec.relations.get(column)
            if related is not None:
                conditions.append(
                    query.related(
                        related.relation,
                        lambda q, field=related.field, text=text: q.like(field, text),
                    )
                )
            else:
                conditions.append(query.like(column, text))
    if not conditions:
        return query
    if len(conditions) == 1:
        return query.where(conditions[0])
    return query.where_any(conditions)


def _apply_exact(
    query: QueryCapability, spec: ExactFilter, value: Any, params: Mapping[str, Any]
) -> QueryCapability:
    return query.where(query.equals(spec.column, value))


def _date_column(spec: DateFilter, params: Mapping[str, Any]) -> str:
    if spec.column_param is not None:
        chosen = params.get(spec.column_param)
        if isinstance(chosen, str) and chosen in spec.columns:
            return chosen
    return spec.column or spec.field


def _apply_date(query: QueryCapability, spec: DateFilter, params: Mapping[str, Any]) -> QueryCapability:
    column = _date_column(spec, params)
    relation = spec.relations.get(column)

    def add(build: Callable[[QueryCapability], Any]) -> None:
        nonlocal query
        if relation is not None:
            query = query.where(query.related(relation, build))
        else:
            query = query.where(build(query))

    for param, part, low, high in (
        (spec.year_param, DatePart.YEAR, 1, 9999),
        (spec.month_param, DatePart.MONTH, 1, 12),
    ):
        if param is None or is_empty_value(params.get(param)):
            continue
        number = _as_int(params[param], low, high)
        if number is None:
            logger.warning("Ignoring invalid %s %r for filter %s", part.value, params[param], spec.field)
            continue
        add(lambda q, part=part, number=number: q.date_part(column, part, number))

    if spec.matches_full_date and not is_empty_value(params.get(spec.field)):
        day = _as_date(params[spec.field])
        if day is None:
            logger.warning("Ignoring invalid date %r for filter %s", params[spec.field], spec.field)
        else:
            add(lambda q: q.date_equals(column, day))
    return query


def _apply_relation(
    query: QueryCapability, spec: RelationFilter, value: Any, params: Mapping[str, Any]
) -> QueryCapability:
    return query.where(
        query.related(spec.relation, lambda q: q.equals(spec.related_field, value))
    )


def _apply_custom(
    query: QueryCapability, spec: CustomFilter, value: Any, params: Mapping[str, Any]
) -> QueryCapability:
    result = spec.callback(query, value, params)
    return query if result is None else result


_VALUE_APPLIERS: dict[type, Callable[..., QueryCapability]] = {
    TextFilter: _apply_text,
    ExactFilter: _apply_exact,
    RelationFilter: _apply_relation,
    CustomFilter: _apply_custom,
}


def apply_filters(
    query: QueryCapability,
    params: Mapping[str, Any],
    filter_spec: FilterSpec,
) -> QueryCapability:
    """Extend query with the predicates of every filter whose value is supplied.

    Args:
        query: Query capability to extend.
        params: Resolved parameters (read only).
        filter_spec: Parsed filter descriptors.

    Returns:
        The extended query (the object returned by the last query call).
    """
    for spec in filter_spec:
        if isinstance(spec, DateFilter):
            query = _apply_date(query, spec, params)
            continue
        value = params.get(spec.field)
        if is_empty_value(value):
            continue
        logger.debug("Applying %s filter on %s", type(spec).__name__, spec.field)
        query = _VALUE_APPLIERS[type(spec)](query, spec, value, params)
    return query
