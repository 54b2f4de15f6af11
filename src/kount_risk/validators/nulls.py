"""Null and blank normalization utilities."""

from typing import Any

# Values that should be treated as null
NULL_STRING_VALUES = {"", "null", "NULL", "Null", "none", "None", "NONE"}


def normalize_null(value: Any) -> Any | None:
    """
    Normalize various null representations to Python None.

    Used on provider responses, where Kount may spell an absent value as
    a string. Caller data goes through is_blank instead.

    Handles:
    - None -> None
    - "", "   " -> None
    - "null", "NULL", "Null" -> None
    - "none", "None", "NONE" -> None

    Args:
        value: Any value to check

    Returns:
        None if value represents null, otherwise the original value
    """
    if value is None:
        return None

    if isinstance(value, str) and value.strip() in NULL_STRING_VALUES:
        return None

    return value


def is_blank(value: Any) -> bool:
    """
    Check whether a value is absent or empty.

    Only None, whitespace-only strings and empty containers are blank. Words
    like "null" or "none" are caller data; zero and False are values.
    """
    if value is None:
        return True

    if isinstance(value, str) and not value.strip():
        return True

    if isinstance(value, (dict, list, tuple, set)) and not value:
        return True

    return False


def compact(value: Any) -> Any:
    """
    Recursively drop blank entries from dicts and lists.

    A container that only held blank entries becomes blank itself and is
    dropped from its parent as well.
    """
    if isinstance(value, dict):
        cleaned = {}
        for key, item in value.items():
            item = compact(item)
            if not is_blank(item):
                cleaned[key] = item
        return cleaned

    if isinstance(value, (list, tuple)):
        return [c for c in (compact(item) for item in value) if not is_blank(c)]

    return value
