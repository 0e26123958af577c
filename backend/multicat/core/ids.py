"""Coercion and sanitisation of category id lists coming from requests and forms."""

from typing import Any, Iterable, List

# Upper bound of the Integer id columns; larger ids cannot match any row
MAX_CATEGORY_ID = 2**31 - 1


def to_int_list(values: Any) -> List[int]:
    """
    Coerce a scalar or iterable to a list of ints.

    Values that are not integers (or integer strings) become 0, which the
    sanitiser later drops. Order and duplicates are preserved.
    """
    if values is None:
        return []
    if isinstance(values, (str, bytes, int)) or not isinstance(values, Iterable):
        values = [values]

    result = []
    for value in values:
        if isinstance(value, bool):
            result.append(0)
            continue
        try:
            result.append(int(value))
        except (TypeError, ValueError, OverflowError):
            result.append(0)
    return result


def sanitize_category_ids(values: Any) -> List[int]:
    """Positive ids within the id column range, de-duplicated, ascending."""
    return sorted(
        {value for value in to_int_list(values) if 0 < value <= MAX_CATEGORY_ID}
    )
