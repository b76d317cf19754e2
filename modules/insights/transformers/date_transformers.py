"""Date transformation functions."""

from datetime import datetime, date, timezone
from typing import Any, Optional

from dateutil import parser as date_parser

# Numbers above this are treated as epoch milliseconds
_EPOCH_MILLIS_THRESHOLD = 10_000_000_000

# Fills date parts a string leaves out ("March 5" -> 1970-03-05)
_MISSING_PARTS_DEFAULT = datetime(1970, 1, 1)


def parse_date(value: Any) -> Optional[datetime]:
    """
    Parse a loosely-typed date into an aware datetime (UTC when naive).

    Accepts datetime/date objects, Firestore timestamp payloads
    ({"seconds": ...} or {"_seconds": ...}), epoch seconds or milliseconds,
    and date strings understood by dateutil. Parts a string omits are taken
    from 1970-01-01, never from the current date.

    Args:
        value: Input date value

    Returns:
        Parsed datetime or None

    Example:
        >>> parse_date("2024-03-01")
        datetime.datetime(2024, 3, 1, 0, 0, tzinfo=datetime.timezone.utc)
    """
    if value is None or value == "" or isinstance(value, bool):
        return None

    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime(value.year, value.month, value.day)
    elif isinstance(value, dict):
        seconds = value.get("seconds", value.get("_seconds"))
        if not isinstance(seconds, (int, float)) or isinstance(seconds, bool):
            return None
        nanos = value.get("nanoseconds", value.get("_nanoseconds", 0)) or 0
        try:
            return datetime.fromtimestamp(seconds + nanos / 1e9, tz=timezone.utc)
        except (OverflowError, OSError, ValueError, TypeError):
            return None
    elif isinstance(value, (int, float)):
        seconds = value / 1000 if abs(value) >= _EPOCH_MILLIS_THRESHOLD else value
        try:
            return datetime.fromtimestamp(seconds, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None
    else:
        try:
            parsed = date_parser.parse(str(value).strip(), default=_MISSING_PARTS_DEFAULT)
        except (ValueError, OverflowError, TypeError):
            return None

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)

    return parsed


def to_timestamp(value: Any) -> Optional[float]:
    """
    Convert a loosely-typed date to epoch seconds.

    Example:
        >>> to_timestamp({"seconds": 1700000000, "nanoseconds": 0})
        1700000000.0
    """
    parsed = parse_date(value)
    return parsed.timestamp() if parsed is not None else None


def calculate_age_from_dob(value: Any, today: Optional[date] = None) -> Optional[int]:
    """
    Calculate age from date of birth.

    Args:
        value: Date of birth (string, timestamp payload or date object)
        today: Reference date (defaults to today)

    Returns:
        Age in years or None

    Example:
        >>> calculate_age_from_dob("2015-06-01", today=date(2025, 6, 1))
        10
    """
    parsed = parse_date(value)
    if parsed is None:
        return None

    dob = parsed.date()
    today = today or date.today()
    age = today.year - dob.year

    # Adjust if birthday hasn't occurred this year
    if (today.month, today.day) < (dob.month, dob.day):
        age -= 1

    return age if age >= 0 else None
