"""Core constants: cache key structure and shared literal values.

Single source of truth for the search-state key format and the parameter
names the engines read by default.
"""

# Delimiter between the user and route components of a search cache key
CACHE_KEY_SEP = ":"

# User component used when the request carries no identity
GUEST_USER = "guest"

# Parameter value meaning "no filter"
ALL_SENTINEL = "all"

# Default parameter names
SORT_PARAM = "sort"
DIRECTION_PARAM = "direction"
PAGINATION_PARAM = "pagination"
PAGE_PARAM = "page"

# Sort key that selects the declared default ordering
DEFAULT_SORT_KEY = "default"
