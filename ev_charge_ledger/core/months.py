"""
Calendar helpers for month bucketing.

Timestamps are epoch milliseconds. A ``tz`` of None means the host's
local timezone, which is how owners see their own calendar.
"""

from datetime import datetime, tzinfo
from typing import Optional

# Facet sentinel meaning "do not filter on this dimension"
ALL = "all"


def to_local_datetime(timestamp_ms: int, tz: Optional[tzinfo] = None) -> datetime:
    """Convert epoch milliseconds to a datetime in the owner's calendar."""
    return datetime.fromtimestamp(timestamp_ms / 1000, tz)


def month_key_of(moment: datetime) -> str:
    """Format a datetime's calendar month as ``YYYY-MM``."""
    return f"{moment.year:04d}-{moment.month:02d}"


def month_key(timestamp_ms: int, tz: Optional[tzinfo] = None) -> str:
    """Calendar month key (``YYYY-MM``) of an epoch-millisecond timestamp."""
    return month_key_of(to_local_datetime(timestamp_ms, tz))


def month_label(timestamp_ms: int, tz: Optional[tzinfo] = None) -> str:
    """Short bucket label: the month number without padding."""
    return str(to_local_datetime(timestamp_ms, tz).month)
