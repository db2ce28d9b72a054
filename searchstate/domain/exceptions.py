"""Domain exceptions for searchstate.

Defines the errors the search engines and parameter store raise. They are
independent of infrastructure concerns; the presentation layer maps them
to HTTP responses in exception handlers.
"""

from typing import Any


class SearchStateException(Exception):
    """Root of every error searchstate raises.

    error_code is the stable, machine-readable name clients switch on (it
    falls back to the class name); details holds structured context such as
    the offending field or cache key.
    """

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.error_code = error_code or type(self).__name__
        self.details = dict(details) if details else {}

    def to_dict(self) -> dict[str, Any]:
        """Return the JSON body used by the exception handlers."""
        return {
            "error": self.error_code,
            "message": self.message,
            "details": self.details,
        }


class ValidationException(SearchStateException):
    """Request input the API cannot use (e.g. a user id that breaks the cache key)."""

    def __init__(self, message: str, field: str | None = None) -> None:
        super().__init__(message, "VALIDATION_ERROR", {"field": field} if field else None)


class AuthenticationException(SearchStateException):
    """A bearer token was sent but could not be verified. No token means guest."""

    def __init__(self, message: str = "Authentication failed") -> None:
        super().__init__(message, "AUTHENTICATION_ERROR")


class ConfigurationException(SearchStateException):
    """Raised when a filter or sort declaration is malformed.

    Raised at configuration-load time (SearchResource.from_config and
    SearchResource.check_fields), never while serving a request.
    """

    def __init__(self, message: str, entry: str | None = None) -> None:
        """Initialize with message and the offending declaration key.

        Args:
            message: What is wrong with the declaration.
            entry: Filter field or sort key whose descriptor is invalid, or the
                resource name when several entries are at fault.
        """
        details = {"entry": entry} if entry else {}
        super().__init__(message, "CONFIGURATION_ERROR", details)


class CacheUnavailableException(SearchStateException):
    """Raised when the cache backend cannot be reached.

    The parameter store propagates this instead of treating the request as
    a cache miss, so callers never silently lose remembered parameters.
    """

    def __init__(self, operation: str, key: str | None = None) -> None:
        """Initialize with the failed cache operation.

        Args:
            operation: Cache operation that failed (get, set, delete).
            key: Cache key involved, if any.
        """
        details: dict[str, Any] = {"operation": operation}
        if key:
            details["key"] = key
        super().__init__(
            f"Search cache unavailable during {operation}",
            "CACHE_UNAVAILABLE",
            details,
        )


class UnknownFieldException(SearchStateException):
    """Raised when a filter or sort names a field the query target does not have."""

    def __init__(self, field: str, target: str) -> None:
        """Initialize with field and query target names.

        Args:
            field: Field name that could not be resolved.
            target: Model or relation the field was looked up on.
        """
        super().__init__(
            f"Unknown field '{field}' on {target}",
            "UNKNOWN_FIELD",
            {"field": field, "target": target},
        )


class DisallowedSortFieldException(SearchStateException):
    """Raised when an undeclared sort key is not an allowed field identifier."""

    def __init__(self, sort_key: str) -> None:
        """Initialize with the rejected sort key.

        Args:
            sort_key: Raw sort key from the resolved parameters.
        """
        super().__init__(
            f"Sorting by '{sort_key}' is not allowed",
            "DISALLOWED_SORT_FIELD",
            {"sort_key": sort_key},
        )
