"""Date parsing utilities."""

from datetime import date, datetime, timedelta, timezone
from dateutil import parser as date_parser


def parse_datetime(date_str: str) -> datetime:
    """Parse a source date string into a naive UTC datetime.

    Accepts ISO dates ("2024-01-15"), ISO timestamps with or without an
    offset, and the usual export formats ("01/15/2024", "January 15, 2024").
    Aware values are converted to UTC; date-only values land on midnight.

    Args:
        date_str: Date string

    Returns:
        Naive datetime in UTC

    Raises:
        ValueError: If date string cannot be parsed
    """
    if date_str is None or not str(date_str).strip():
        raise ValueError("Empty date string")

    try:
        dt = date_parser.parse(str(date_str).strip())
    except (ValueError, TypeError, OverflowError) as e:
        raise ValueError(f"Could not parse date '{date_str}': {e}")

    if dt.tzinfo is not None:
        dt = dt.astimezone(timezone.utc).replace(tzinfo=None)
    return dt


def from_unix_seconds(seconds: int | float) -> datetime:
    """Convert Unix seconds to a naive UTC datetime."""
    return datetime.fromtimestamp(int(seconds), tz=timezone.utc).replace(tzinfo=None)


def to_unix_seconds(value: date | datetime) -> int:
    """Convert a date or datetime to integer Unix seconds.

    Naive datetimes and plain dates are interpreted as UTC.
    """
    if not isinstance(value, datetime):
        value = datetime(value.year, value.month, value.day)
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return int(value.timestamp())


def utcnow() -> datetime:
    """Return the current time as a naive UTC datetime."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def days_ago(days: int, now: datetime | None = None) -> datetime:
    """Return the naive UTC datetime ``days`` before ``now``."""
    if now is None:
        now = utcnow()
    return now - timedelta(days=days)
