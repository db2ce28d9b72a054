"""Query capability consumed by the filter, sort and pagination engines.

The engines only call these methods; they never build SQL. Conditions are
opaque backend objects produced by one method and handed back to where /
where_any / related. Custom filter and sort callbacks receive the query and
may pass any backend clause to where().
"""

from __future__ import annotations

from datetime import date
from typing import Any, Protocol

from searchstate.domain.enums import DatePart, SortDirection


class QueryCapability(Protocol):
    """Protocol for a mutable query under construction (DIP)."""

    def has_field(self, field: str) -> bool:
        """Return True if field resolves to a column of the query target."""
        ...

    def has_relation(self, relation: str, field: str | None = None) -> bool:
        """Return True if relation exists (and maps field on its target, when given)."""
        ...

    def equals(self, field: str, value: Any) -> Any:
        """Condition: field = value (field IN value for lists)."""
        ...

    def like(self, field: str, value: str) -> Any:
        """Condition: field LIKE %value% (wildcards in value are literal)."""
        ...

    def date_part(self, field: str, part: DatePart, value: int) -> Any:
        """Condition: the year or month component of field equals value."""
        ...

    def date_equals(self, field: str, value: date) -> Any:
        """Condition: the date part of field equals value."""
        ...

    def related(self, relation: str, build: Any) -> Any:
        """Condition: a related row exists for which build(related_query) holds.

        build receives a query capability bound to the related model and
        returns a condition on it.
        """
        ...

    def where(self, *conditions: Any) -> QueryCapability:
        """AND the conditions into the query."""
        ...

    def where_any(self, conditions: list[Any]) -> QueryCapability:
        """AND one group made of the conditions OR-ed together."""
        ...

    def order_by(self, field: str, direction: SortDirection) -> QueryCapability:
        """Append an ordering on field."""
        ...

    def paginate(self, limit: int, offset: int) -> QueryCapability:
        """Apply limit and offset."""
        ...
