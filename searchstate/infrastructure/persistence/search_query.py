"""SQLAlchemy implementation of the query capability.

Wraps a Select over one mapped model. Field names are resolved against the
model's mapped columns and relationships only, never interpolated into SQL,
so a raw sort key or filter column that the model does not map raises
UnknownFieldException (has_field lets the sort engine check first).
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import date
from typing import Any

from sqlalchemy import Date, ColumnElement, Select, extract, func, or_, select
from sqlalchemy import inspect as sa_inspect

from searchstate.domain.enums import DatePart, SortDirection
from searchstate.domain.exceptions import UnknownFieldException

_LIKE_ESCAPE = "\\"


def _escape_like(value: str) -> str:
    """Escape LIKE wildcards so value matches literally."""
    return (
        value.replace(_LIKE_ESCAPE, _LIKE_ESCAPE * 2)
        .replace("%", _LIKE_ESCAPE + "%")
        .replace("_", _LIKE_ESCAPE + "_")
    )


class SearchQuery:
    """Mutable query under construction: model + Select statement.

    Methods that add to the query return self; condition builders (equals,
    like, date_part, date_equals, related) return SQLAlchemy expressions.
    """

    def __init__(
        self,
        model: type[Any],
        statement: Select[Any] | None = None,
        *,
        case_insensitive: bool = False,
    ) -> None:
        """Initialize for a mapped model.

        Args:
            model: Mapped ORM class the statement selects from.
            statement: Starting Select; defaults to select(model).
            case_insensitive: Use ILIKE instead of LIKE for text matches.
        """
        self.model = model
        self.statement = statement if statement is not None else select(model)
        self.case_insensitive = case_insensitive
        self._mapper = sa_inspect(model)

    @classmethod
    def for_model(cls, model: type[Any], *, case_insensitive: bool = False) -> SearchQuery:
        return cls(model, case_insensitive=case_insensitive)

    def _column(self, field: str) -> Any:
        if not self.has_field(field):
            raise UnknownFieldException(field, self.model.__name__)
        return getattr(self.model, field)

    def has_field(self, field: str) -> bool:
        return field in self._mapper.column_attrs

    def has_relation(self, relation: str, field: str | None = None) -> bool:
        prop = self._mapper.relationships.get(relation)
        if prop is None:
            return False
        return field is None or field in prop.mapper.column_attrs

    def equals(self, field: str, value: Any) -> ColumnElement[bool]:
        column = self._column(field)
        if isinstance(value, (list, tuple, set, frozenset)):
            return column.in_(list(value))
        return column == value

    def like(self, field: str, value: str) -> ColumnElement[bool]:
        column = self._column(field)
        pattern = f"%{_escape_like(value)}%"
        if self.case_insensitive:
            return column.ilike(pattern, escape=_LIKE_ESCAPE)
        return column.like(pattern, escape=_LIKE_ESCAPE)

    def date_part(self, field: str, part: DatePart, value: int) -> ColumnElement[bool]:
        return extract(part.value, self._column(field)) == value

    def date_equals(self, field: str, value: date) -> ColumnElement[bool]:
        return func.date(self._column(field), type_=Date) == value

    def related(
        self, relation: str, build: Callable[[SearchQuery], Any]
    ) -> ColumnElement[bool]:
        """EXISTS over relation (any() for collections, has() for scalars)."""
        prop = self._mapper.relationships.get(relation)
        if prop is None:
            raise UnknownFieldException(relation, self.model.__name__)
        target = SearchQuery(prop.mapper.class_, case_insensitive=self.case_insensitive)
        condition = build(target)
        attribute = getattr(self.model, relation)
        if prop.uselist:
            return attribute.any(condition)
        return attribute.has(condition)

    def where(self, *conditions: Any) -> SearchQuery:
        self.statement = self.statement.where(*conditions)
        return self

    def where_any(self, conditions: list[Any]) -> SearchQuery:
        self.statement = self.statement.where(or_(*conditions))
        return self

    def order_by(self, field: str, direction: SortDirection) -> SearchQuery:
        column = self._column(field)
        clause = column.asc() if direction is SortDirection.ASC else column.desc()
        self.statement = self.statement.order_by(clause)
        return self

    def paginate(self, limit: int, offset: int) -> SearchQuery:
        self.statement = self.statement.limit(limit).offset(offset)
        return self

    def count_statement(self) -> Select[Any]:
        """SELECT count(*) over the filtered statement, ignoring order and pagination."""
        inner = self.statement.order_by(None).limit(None).offset(None).subquery()
        return select(func.count()).select_from(inner)
