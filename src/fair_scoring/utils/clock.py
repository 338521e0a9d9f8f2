"""Timestamps for the database layer."""

from datetime import datetime, timezone


def utcnow() -> datetime:
    """Current UTC time as a naive datetime.

    DateTime columns are timezone-naive and hold UTC; SQLite hands naive
    values back even when aware ones are stored, so aware and naive values
    never get mixed when rows are sorted by time.
    """
    return datetime.now(timezone.utc).replace(tzinfo=None)
