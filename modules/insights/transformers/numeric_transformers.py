"""Numeric transformation functions."""

import math
import re
from typing import Any, Optional


def extract_integer(value: Any, pattern: str = r"(\d+)") -> Optional[int]:
    """
    Extract the first integer from a string.

    Args:
        value: Input value
        pattern: Regex pattern with one capture group

    Returns:
        Extracted integer or None

    Example:
        >>> extract_integer("Grade 7")
        7
        >>> extract_integer("10th")
        10
    """
    if value is None or value == "" or isinstance(value, bool):
        return None

    if isinstance(value, int):
        return value

    match = re.search(pattern, str(value).strip())
    if match:
        try:
            return int(match.group(1))
        except (ValueError, IndexError):
            pass

    return None


def to_integer(value: Any) -> Optional[int]:
    """
    Convert value to integer.

    Args:
        value: Input value

    Returns:
        Integer or None

    Example:
        >>> to_integer("42")
        42
        >>> to_integer(42.7)
        42
    """
    number = to_float(value)
    return int(number) if number is not None else None


def to_float(value: Any) -> Optional[float]:
    """
    Convert value to float.

    Booleans, NaN and infinities are rejected.

    Args:
        value: Input value

    Returns:
        Float or None

    Example:
        >>> to_float("42.5")
        42.5
        >>> to_float("1,234.56")
        1234.56
    """
    if value is None or value == "" or isinstance(value, bool):
        return None

    try:
        # Handle string numbers
        if isinstance(value, str):
            # Remove commas, spaces and a trailing percent sign
            value = value.replace(',', '').replace(' ', '').rstrip('%').strip()

        number = float(value)
    except (ValueError, TypeError):
        return None

    if math.isnan(number) or math.isinf(number):
        return None

    return number


def to_boolean(value: Any) -> Optional[bool]:
    """
    Convert common truthy/falsy representations to bool.

    Example:
        >>> to_boolean("true")
        True
        >>> to_boolean(0)
        False
    """
    if value is None or value == "":
        return None

    if isinstance(value, bool):
        return value

    if isinstance(value, (int, float)):
        return value != 0

    normalized = str(value).strip().lower()
    if normalized in ("true", "yes", "y", "1"):
        return True
    if normalized in ("false", "no", "n", "0"):
        return False

    return None
