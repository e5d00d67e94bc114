"""
Timestamp utilities for gitreport.

Git reports times as Unix epoch seconds; everything internal is UTC.
Conversion to the report timezone happens only for display and day bucketing.
"""

from datetime import datetime, timezone
from typing import Optional
from zoneinfo import ZoneInfo


def parse_epoch(value: Optional[str]) -> Optional[datetime]:
    """
    Parse an epoch-seconds string (git's %ct / %at) to an aware UTC datetime.

    Returns None if parsing fails.
    """
    if not value:
        return None

    try:
        return datetime.fromtimestamp(int(value.strip()), tz=timezone.utc)
    except (ValueError, TypeError, OverflowError, OSError):
        return None


def to_zone_display(dt: Optional[datetime], tz_name: str = "UTC", with_seconds: bool = False) -> str:
    """
    Format a datetime in the given timezone for report display.

    Args:
        dt: datetime object (naive values are treated as UTC)
        tz_name: IANA timezone name
        with_seconds: Include seconds in the output

    Returns:
        Formatted string, or "N/A" if None
    """
    if not dt:
        return "N/A"

    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)

    local_dt = dt.astimezone(ZoneInfo(tz_name))
    return local_dt.strftime('%Y-%m-%d %H:%M:%S' if with_seconds else '%Y-%m-%d %H:%M')


def to_date_string(dt) -> str:
    """Convert a date or datetime to YYYY-MM-DD, "N/A" if None."""
    if not dt:
        return "N/A"
    return dt.strftime('%Y-%m-%d')
