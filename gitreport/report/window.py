"""
Report window selection.

Daily windows run from local midnight of the requested date for 24 hours.
Weekly windows cover the ISO week (Monday 00:00 to the next Monday 00:00)
containing the requested date. Boundaries are computed in the configured
timezone, then stored in UTC; durations are absolute hours.
"""

import re
from datetime import date, datetime, time, timedelta, timezone
from typing import Iterable, Iterator, Union
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from gitreport.errors import InvalidInput
from gitreport.models.entities import DAILY, REPORT_TYPES, WEEKLY, Commit, ReportWindow

_DATE_RE = re.compile(r'^\d{4}-\d{2}-\d{2}$')

WINDOW_LENGTH = {
    DAILY: timedelta(days=1),
    WEEKLY: timedelta(days=7),
}


def parse_report_date(value: Union[str, date, None]) -> date:
    """
    Parse a YYYY-MM-DD report date.

    Raises:
        InvalidInput: value is empty or not a real calendar date
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value

    text = (value or "").strip()
    if not _DATE_RE.match(text):
        raise InvalidInput(f"Invalid date '{value}': expected YYYY-MM-DD", field="date")
    try:
        return datetime.strptime(text, '%Y-%m-%d').date()
    except ValueError:
        raise InvalidInput(f"Invalid date '{value}': not a calendar date", field="date")


def validate_report_type(report_type: str) -> str:
    if report_type not in REPORT_TYPES:
        raise InvalidInput(
            f"Invalid report type '{report_type}'. Use 'daily' or 'weekly'",
            field="type",
        )
    return report_type


def resolve_timezone(tz_name: str) -> ZoneInfo:
    try:
        return ZoneInfo(tz_name)
    except (ZoneInfoNotFoundError, ValueError):
        raise InvalidInput(f"Unknown timezone '{tz_name}'", field="timezone")


def compute_window(report_type: str, report_date: Union[str, date], tz: str = "UTC") -> ReportWindow:
    """
    Compute the half-open window a report covers.

    Args:
        report_type: 'daily' or 'weekly'
        report_date: Requested date (YYYY-MM-DD string or date)
        tz: IANA timezone the date is interpreted in

    Returns:
        ReportWindow with UTC boundaries
    """
    validate_report_type(report_type)
    day = parse_report_date(report_date)
    zone = resolve_timezone(tz)

    if report_type == WEEKLY:
        first_day = day - timedelta(days=day.weekday())
    else:
        first_day = day

    local_start = datetime.combine(first_day, time.min, tzinfo=zone)
    start = local_start.astimezone(timezone.utc)
    end = start + WINDOW_LENGTH[report_type]

    return ReportWindow(start=start, end=end, report_type=report_type, timezone=tz, date=day)


# Consecutive commits older than the window before reading stops. git's
# date order keeps children ahead of parents, so a child with a slow clock
# can come before a newer parent; git's own --since cutoff allows 5.
OLDER_COMMIT_SLOP = 5


def filter_commits(
    commits: Iterable[Commit],
    window: ReportWindow,
    slop: int = OLDER_COMMIT_SLOP,
) -> Iterator[Commit]:
    """
    Yield the commits inside [window.start, window.end).

    Input is expected newest first, as git's date order gives it. Iteration
    stops after `slop` consecutive commits older than the window and the
    upstream iterator is closed, so the rest of the history is never read.
    A commit inside or after the window resets the count.
    """
    iterator = iter(commits)
    older = 0
    try:
        for commit in iterator:
            if commit.timestamp < window.start:
                older += 1
                if older >= slop:
                    break
                continue
            older = 0
            if commit.timestamp >= window.end:
                continue
            yield commit
    finally:
        close = getattr(iterator, "close", None)
        if close is not None:
            close()
