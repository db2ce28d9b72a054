"""Parameter values: the emptiness rule and the parameter mapping type.

Every place that asks "was this value supplied?" (parameter resolution,
default backfill, filter and sort application) goes through is_empty_value
so the answer is the same everywhere.
"""

from collections.abc import Mapping
from typing import Any

from searchstate.core.constants import ALL_SENTINEL

# Flat mapping of parameter name to scalar or list value (JSON-serializable).
SearchParameters = dict[str, Any]


def is_empty_value(value: Any) -> bool:
    """Return True if value counts as "not supplied".

    Empty: None, a blank or whitespace-only string, the "all" sentinel
    (no filter), or an empty list/tuple/set/dict. 0 and False are values.
    """
    if value is None:
        return True
    if isinstance(value, str):
        stripped = value.strip()
        return stripped == "" or stripped == ALL_SENTINEL
    if isinstance(value, (list, tuple, set, frozenset, dict)):
        return len(value) == 0
    return False


def missing_keys(params: Mapping[str, Any], keys: Mapping[str, Any]) -> list[str]:
    """Return keys absent from params or holding an empty value, in keys order."""
    return [key for key in keys if is_empty_value(params.get(key))]
