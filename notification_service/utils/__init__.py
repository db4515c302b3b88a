"""Shared utility functions."""

from .timestamps import format_timestamp_for_log, from_epoch_millis, utc_now

__all__ = [
    "utc_now",
    "from_epoch_millis",
    "format_timestamp_for_log",
]
