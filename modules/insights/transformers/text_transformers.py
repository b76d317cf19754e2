"""Text transformation functions."""

import re
from typing import Any, Iterable, Optional


def clean_whitespace(value: Any) -> Optional[str]:
    """
    Remove extra whitespace and trim.

    Args:
        value: Input value

    Returns:
        Cleaned string or None

    Example:
        >>> clean_whitespace("  hello   world  ")
        "hello world"
    """
    if value is None or value == "":
        return None

    if isinstance(value, (dict, list, tuple, set)):
        return None

    str_value = str(value)
    # Strip leading/trailing whitespace
    cleaned = str_value.strip()
    # Collapse multiple spaces to single space
    cleaned = re.sub(r'\s+', ' ', cleaned)

    return cleaned if cleaned else None


def lowercase(value: Any) -> Optional[str]:
    """
    Convert to lowercase.

    Args:
        value: Input value

    Returns:
        Lowercase string or None

    Example:
        >>> lowercase("HELLO")
        "hello"
    """
    cleaned = clean_whitespace(value)
    return cleaned.lower() if cleaned else None


def to_string_list(value: Any) -> list:
    """
    Coerce a scalar or sequence into a list of cleaned strings.

    Example:
        >>> to_string_list("math, science")
        ["math", "science"]
        >>> to_string_list(["Art", None, " "])
        ["Art"]
    """
    if value is None:
        return []

    if isinstance(value, str):
        items = value.split(",")
    elif isinstance(value, (list, tuple, set)):
        items = list(value)
    else:
        items = [value]

    return [cleaned for cleaned in (clean_whitespace(item) for item in items) if cleaned]


def contains_any(value: Any, terms: Iterable[Any]) -> bool:
    """
    Case-insensitive substring match against any of the given terms.

    Example:
        >>> contains_any("Science Fair Project", ["project"])
        True
    """
    text = lowercase(value)
    if not text:
        return False

    return any(str(term).lower() in text for term in terms if term not in (None, ""))
