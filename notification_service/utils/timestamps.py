"""Timestamp utilities for UTC handling."""

from datetime import datetime, timezone
from typing import Optional


def utc_now() -> datetime:
    """Get current UTC time as timezone-aware datetime.

    Example:
        >>> now = utc_now()
        >>> now.tzinfo == timezone.utc
        True
    """
    return datetime.now(timezone.utc)


def from_epoch_millis(millis: Optional[int]) -> Optional[datetime]:
    """Convert a broker timestamp (milliseconds since epoch) to UTC datetime.

    Non-positive values mean the broker supplied no timestamp and map to None.
    """
    if millis is None or millis <= 0:
        return None
    return datetime.fromtimestamp(millis / 1000, tz=timezone.utc)


def format_timestamp_for_log(dt: Optional[datetime]) -> Optional[str]:
    """Format a datetime as ISO-8601 UTC with a 'Z' suffix."""
    if dt is None:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S.%f")[:-3] + "Z"
