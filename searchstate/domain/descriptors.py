"""Filter and sort descriptors.

Filter and sort declarations are plain mappings in controller code. They
are parsed once, at configuration-load time, into the tagged variants
below; the engines dispatch on the variant type and never inspect raw
configuration while serving a request.

Filter declaration shapes (field -> value):

    "status": "exact"                                   # type name only
    "name": {"type": "text", "columns": ["name", "author"],
             "relations": {"author": {"relation": "author", "field": "name"}}}
    "period": {"type": "date", "year": "year", "month": "month",
               "column": "start_date", "columns": ["start_date", "end_date"],
               "column_param": "type_date", "relations": {"end_date": "period"}}
    "tag": {"type": "relation", "relation": "tags", "field": "slug"}
    "owner": {"type": "custom", "callback": fn}         # or just: "owner": fn

Sort declaration shapes (sort key -> value):

    "name": "name"                                      # field name
    "newest": {"field": "created_at"}
    "popular": {"callback": fn}                         # or just: "popular": fn
    "default": fn                                       # applied when no sort key
"""

from __future__ import annotations

import re
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any

from searchstate.core.constants import (
    DEFAULT_SORT_KEY,
    DIRECTION_PARAM,
    SORT_PARAM,
)
from searchstate.domain.enums import FilterType, SortDirection
from searchstate.domain.exceptions import ConfigurationException

# Plain column/relation identifier; also the allow-list shape for raw sort keys.
IDENTIFIER_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")

# callback(query, value, params) -> query | None
FilterCallback = Callable[[Any, Any, Mapping[str, Any]], Any]
# callback(query, direction, params) -> query | None
SortCallback = Callable[[Any, SortDirection, Mapping[str, Any]], Any]


@dataclass(frozen=True)
class RelatedColumn:
    """Column reached through a relation (relation name + field on the related model)."""

    relation: str
    field: str


@dataclass(frozen=True)
class TextFilter:
    """Substring match; several columns are OR-ed inside one group."""

    field: str
    columns: tuple[str, ...]
    relations: Mapping[str, RelatedColumn] = field(default_factory=dict)


@dataclass(frozen=True)
class ExactFilter:
    """Equality (or IN for list values) on column."""

    field: str
    column: str


@dataclass(frozen=True)
class DateFilter:
    """Year/month component match and/or full-date match.

    target column: params[column_param] when it is one of columns, else
    column, else field. Full-date match reads params[field] and is enabled
    when column is configured or when neither year_param nor month_param is.
    """

    field: str
    column: str | None = None
    columns: tuple[str, ...] = ()
    column_param: str | None = None
    year_param: str | None = None
    month_param: str | None = None
    relations: Mapping[str, str] = field(default_factory=dict)

    @property
    def matches_full_date(self) -> bool:
        return self.column is not None or (
            self.year_param is None and self.month_param is None
        )


@dataclass(frozen=True)
class RelationFilter:
    """Existence of a related row whose related_field equals the value."""

    field: str
    relation: str
    related_field: str = "id"


@dataclass(frozen=True)
class CustomFilter:
    """Caller-supplied predicate injection."""

    field: str
    callback: FilterCallback


FilterDescriptor = TextFilter | ExactFilter | DateFilter | RelationFilter | CustomFilter


@dataclass(frozen=True)
class FieldSort:
    """Order by a literal field name."""

    field: str


@dataclass(frozen=True)
class CallbackSort:
    """Order through a caller-supplied callback."""

    callback: SortCallback


SortDescriptor = FieldSort | CallbackSort


def _require_identifier(value: Any, option: str, entry: str) -> str:
    if not isinstance(value, str) or not IDENTIFIER_RE.match(value):
        raise ConfigurationException(
            f"Option '{option}' of '{entry}' must be a plain identifier, got {value!r}",
            entry,
        )
    return value


def _optional_identifier(options: Mapping[str, Any], option: str, entry: str) -> str | None:
    value = options.get(option)
    if value is None:
        return None
    return _require_identifier(value, option, entry)


def _identifier_list(value: Any, option: str, entry: str) -> tuple[str, ...]:
    if isinstance(value, str) or not isinstance(value, Iterable):
        raise ConfigurationException(
            f"Option '{option}' of '{entry}' must be a list of identifiers", entry
        )
    items = tuple(_require_identifier(v, option, entry) for v in value)
    if not items:
        raise ConfigurationException(f"Option '{option}' of '{entry}' must not be empty", entry)
    return items


def _check_options(options: Mapping[str, Any], allowed: set[str], entry: str) -> None:
    unknown = sorted(set(options) - allowed - {"type"})
    if unknown:
        raise ConfigurationException(
            f"Unknown option(s) for '{entry}': {', '.join(unknown)}", entry
        )


def _parse_text(name: str, options: Mapping[str, Any]) -> TextFilter:
    _check_options(options, {"columns", "relations"}, name)
    columns = (
        _identifier_list(options["columns"], "columns", name)
        if "columns" in options
        else (name,)
    )
    relations: dict[str, RelatedColumn] = {}
    for column, target in (options.get("relations") or {}).items():
        if column not in columns:
            raise ConfigurationException(
                f"Relation for '{column}' in '{name}' is not one of its columns", name
            )
        if not isinstance(target, Mapping):
            raise ConfigurationException(
                f"Relation for '{column}' in '{name}' must be a mapping with 'relation' and 'field'",
                name,
            )
        relations[column] = RelatedColumn(
            relation=_require_identifier(target.get("relation"), "relation", name),
            field=_require_identifier(target.get("field"), "field", name),
        )
    return TextFilter(field=name, columns=columns, relations=relations)


def _parse_exact(name: str, options: Mapping[str, Any]) -> ExactFilter:
    _check_options(options, {"column"}, name)
    return ExactFilter(field=name, column=_optional_identifier(options, "column", name) or name)


def _parse_date(name: str, options: Mapping[str, Any]) -> DateFilter:
    _check_options(
        options, {"column", "columns", "column_param", "year", "month", "relations"}, name
    )
    columns = (
        _identifier_list(options["columns"], "columns", name) if "columns" in options else ()
    )
    column_param = options.get("column_param")
    if column_param is not None and not columns:
        raise ConfigurationException(
            f"'column_param' of '{name}' requires the allowed 'columns'", name
        )
    if column_param is not None and not isinstance(column_param, str):
        raise ConfigurationException(f"'column_param' of '{name}' must be a string", name)
    relations = {}
    for column, relation in (options.get("relations") or {}).items():
        relations[_require_identifier(column, "relations", name)] = _require_identifier(
            relation, "relations", name
        )
    year_param = options.get("year")
    month_param = options.get("month")
    for option, value in (("year", year_param), ("month", month_param)):
        if value is not None and not isinstance(value, str):
            raise ConfigurationException(f"'{option}' of '{name}' must name a parameter", name)
    return DateFilter(
        field=name,
        column=_optional_identifier(options, "column", name),
        columns=columns,
        column_param=column_param,
        year_param=year_param,
        month_param=month_param,
        relations=relations,
    )


def _parse_relation(name: str, options: Mapping[str, Any]) -> RelationFilter:
    _check_options(options, {"relation", "field"}, name)
    return RelationFilter(
        field=name,
        relation=_optional_identifier(options, "relation", name) or name,
        related_field=_optional_identifier(options, "field", name) or "id",
    )


def _parse_custom(name: str, options: Mapping[str, Any]) -> CustomFilter:
    _check_options(options, {"callback"}, name)
    callback = options.get("callback")
    if not callable(callback):
        raise ConfigurationException(f"Custom filter '{name}' needs a callable 'callback'", name)
    return CustomFilter(field=name, callback=callback)


_FILTER_PARSERS: dict[FilterType, Callable[[str, Mapping[str, Any]], FilterDescriptor]] = {
    FilterType.TEXT: _parse_text,
    FilterType.EXACT: _parse_exact,
    FilterType.DATE: _parse_date,
    FilterType.RELATION: _parse_relation,
    FilterType.CUSTOM: _parse_custom,
}


def parse_filter(name: str, config: Any) -> FilterDescriptor:
    """Parse one filter declaration into its descriptor.

    Raises:
        ConfigurationException: Unknown type, unknown option, or bad option value.
    """
    if not isinstance(name, str) or not name:
        raise ConfigurationException("Filter field names must be non-empty strings")
    if callable(config) and not isinstance(config, (str, Mapping)):
        return CustomFilter(field=name, callback=config)
    if isinstance(config, str):
        options: Mapping[str, Any] = {"type": config}
    elif isinstance(config, Mapping):
        options = config
    else:
        raise ConfigurationException(
            f"Filter '{name}' must be a type name, a mapping or a callable", name
        )
    raw_type = options.get("type", FilterType.TEXT.value)
    try:
        filter_type = FilterType.parse(raw_type)
    except ValueError:
        raise ConfigurationException(
            f"Unknown filter type {raw_type!r} for '{name}' "
            f"(expected one of: {', '.join(FilterType.values())})",
            name,
        ) from None
    return _FILTER_PARSERS[filter_type](name, options)


def parse_sort(key: str, config: Any) -> SortDescriptor:
    """Parse one sort declaration into its descriptor.

    Raises:
        ConfigurationException: Not a field name, a callable, or a mapping holding one.
    """
    if callable(config) and not isinstance(config, (str, Mapping)):
        return CallbackSort(callback=config)
    if isinstance(config, str):
        return FieldSort(field=_require_identifier(config, "field", key))
    if isinstance(config, Mapping):
        _check_options(config, {"field", "callback"}, key)
        if "callback" in config:
            if not callable(config["callback"]):
                raise ConfigurationException(f"Sort '{key}' has a non-callable 'callback'", key)
            return CallbackSort(callback=config["callback"])
        if "field" in config:
            return FieldSort(field=_require_identifier(config["field"], "field", key))
    raise ConfigurationException(
        f"Sort '{key}' must be a field name, a callable, or a mapping with 'field' or 'callback'",
        key,
    )


@dataclass(frozen=True)
class FilterSpec:
    """Ordered filter descriptors of one resource."""

    descriptors: tuple[FilterDescriptor, ...] = ()

    @classmethod
    def from_config(cls, config: Mapping[str, Any] | None) -> FilterSpec:
        """Parse a field -> declaration mapping, keeping declaration order."""
        return cls(tuple(parse_filter(name, value) for name, value in (config or {}).items()))

    def __iter__(self):
        return iter(self.descriptors)

    def __len__(self) -> int:
        return len(self.descriptors)


@dataclass(frozen=True)
class SortSpec:
    """Sort descriptors of one resource plus the parameter names they read.

    allowed_fields, when set, restricts which undeclared sort keys may fall
    back to ordering by the raw key.
    """

    entries: Mapping[str, SortDescriptor] = field(default_factory=dict)
    default: SortDescriptor | None = None
    allowed_fields: frozenset[str] | None = None
    sort_param: str = SORT_PARAM
    direction_param: str = DIRECTION_PARAM
    default_direction: SortDirection = SortDirection.DESC

    @classmethod
    def from_config(
        cls,
        config: Mapping[str, Any] | None,
        *,
        allowed_fields: Iterable[str] | None = None,
        sort_param: str = SORT_PARAM,
        direction_param: str = DIRECTION_PARAM,
        default_direction: str = SortDirection.DESC.value,
    ) -> SortSpec:
        """Parse a sort key -> declaration mapping; the 'default' key becomes the default entry."""
        entries: dict[str, SortDescriptor] = {}
        default: SortDescriptor | None = None
        for key, value in (config or {}).items():
            if not isinstance(key, str) or not key:
                raise ConfigurationException("Sort keys must be non-empty strings")
            descriptor = parse_sort(key, value)
            if key == DEFAULT_SORT_KEY:
                default = descriptor
            else:
                entries[key] = descriptor
        try:
            direction = SortDirection(default_direction)
        except ValueError:
            raise ConfigurationException(
                f"default_direction must be one of: {', '.join(SortDirection.values())}"
            ) from None
        allowed = None
        if allowed_fields is not None:
            allowed = frozenset(
                _require_identifier(f, "allowed_fields", "sorts") for f in allowed_fields
            )
        return cls(
            entries=entries,
            default=default,
            allowed_fields=allowed,
            sort_param=sort_param,
            direction_param=direction_param,
            default_direction=direction,
        )
