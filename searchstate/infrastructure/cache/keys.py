"""Cache key builder for search state. Single place for key format (DRY).

Key format: {prefix}{user}{CACHE_KEY_SEP}{route}. The user component must
not contain CACHE_KEY_SEP, so the first separator after the prefix always
splits user from route and distinct (user, route) pairs never collide.
The route component may contain anything (route names, request paths).
"""

from searchstate.core.constants import CACHE_KEY_SEP, GUEST_USER


def _validate_key_component(value: str, name: str) -> None:
    """Raise ValueError if value contains the cache key separator.

    Args:
        value: String component used in a cache key.
        name: Name of the component (for error message).

    Raises:
        ValueError: If value contains CACHE_KEY_SEP.
    """
    if CACHE_KEY_SEP in value:
        raise ValueError(
            f"Cache key component {name!r} must not contain separator {CACHE_KEY_SEP!r}"
        )


def search_state_key(
    user_id: str | int | None,
    route_id: str,
    prefix: str = "search_",
) -> str:
    """Cache key for the search parameters of one user on one route.

    Args:
        user_id: Authenticated user id, or None for guests.
        route_id: Route name, or request path when the route has no name.
        prefix: Key prefix (settings.search_cache_prefix).

    Returns:
        Deterministic cache key.

    Raises:
        ValueError: If route_id is empty or user_id contains CACHE_KEY_SEP.
    """
    if not route_id:
        raise ValueError("Cache key component 'route_id' must not be empty")
    user = GUEST_USER if user_id is None or user_id == "" else str(user_id)
    _validate_key_component(user, "user_id")
    return f"{prefix}{user}{CACHE_KEY_SEP}{route_id}"
