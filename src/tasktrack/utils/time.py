"""Time utilities for UTC timestamp handling.

All timestamps are stored as naive UTC datetimes (SQLite has no timezone
support), so every value entering a query is normalized the same way.
"""

from datetime import datetime, timezone


def utc_now() -> datetime:
    """
    Get current UTC time as a naive datetime.

    Returns:
        Naive datetime representing the current UTC instant

    Example:
        >>> utc_now().tzinfo is None
        True
    """
    return to_utc_naive(datetime.now(timezone.utc))


def to_utc_naive(dt: datetime) -> datetime:
    """
    Convert datetime to naive UTC.

    Timezone-aware values are converted to UTC first; naive values are
    assumed to already be UTC and returned unchanged.

    Args:
        dt: Datetime object

    Returns:
        Naive datetime in UTC
    """
    if dt.tzinfo is None:
        return dt
    return dt.astimezone(timezone.utc).replace(tzinfo=None)


def parse_datetime(value: str) -> datetime:
    """
    Parse an ISO 8601 string (trailing 'Z' allowed) into naive UTC.

    Raises:
        ValueError: If the string is not ISO 8601
    """
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError as exc:
        raise ValueError(f"Invalid ISO 8601 datetime: {value!r}") from exc
    return to_utc_naive(parsed)
