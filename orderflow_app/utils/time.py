"""
Timestamp helpers shared by the generator, the trade records and the
session store.

All timestamps are timezone-aware UTC datetimes in memory and ISO8601
strings on the wire.
"""

from datetime import datetime, timezone


def utc_now() -> datetime:
    """Current wall-clock time as a UTC datetime."""
    return datetime.now(timezone.utc)


def ensure_utc(ts: datetime) -> datetime:
    """
    Normalize a datetime to UTC.

    Naive datetimes are assumed to already be UTC.
    """
    if ts.tzinfo is None:
        return ts.replace(tzinfo=timezone.utc)
    return ts.astimezone(timezone.utc)


def format_timestamp(ts: datetime) -> str:
    """
    Format a timestamp for storage and logging.

    Args:
        ts: Timestamp to format

    Returns:
        ISO8601 formatted string
    """
    return ensure_utc(ts).isoformat()


def parse_timestamp(value: str) -> datetime:
    """
    Parse an ISO8601 timestamp, accepting a trailing Z.

    Args:
        value: ISO8601 string

    Returns:
        UTC datetime

    Raises:
        ValueError: value is not an ISO8601 timestamp
    """
    return ensure_utc(datetime.fromisoformat(value.replace("Z", "+00:00")))
