"""Domain enums: filter types, sort directions, date components."""

from enum import Enum


class _ValuesMixin:
    """Mixin that adds a values() classmethod to str Enums."""

    @classmethod
    def values(cls) -> list[str]:
        """Return all valid values as strings."""
        return [member.value for member in cls]


class FilterType(_ValuesMixin, str, Enum):
    """Predicate-generation strategy of a filter descriptor."""

    TEXT = "text"
    EXACT = "exact"
    DATE = "date"
    RELATION = "relation"
    CUSTOM = "custom"

    @classmethod
    def parse(cls, raw: str) -> "FilterType":
        """Return the member for raw, accepting the legacy 'status' alias of exact.

        Raises:
            ValueError: If raw names no filter type.
        """
        if raw == "status":
            return cls.EXACT
        return cls(raw)


class SortDirection(_ValuesMixin, str, Enum):
    """Ordering direction."""

    ASC = "asc"
    DESC = "desc"

    @classmethod
    def parse(cls, raw: object, default: "SortDirection") -> "SortDirection":
        """Return the direction for raw (case-insensitive), or default when unrecognised."""
        if isinstance(raw, str):
            try:
                return cls(raw.strip().lower())
            except ValueError:
                pass
        return default


class DatePart(_ValuesMixin, str, Enum):
    """Date component matched by year/month filters."""

    YEAR = "year"
    MONTH = "month"
