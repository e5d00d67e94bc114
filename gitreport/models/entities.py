"""
Data structures (entities) for gitreport.

Uses dataclasses for clean, typed data structures.
All timestamps are timezone-aware and stored in UTC.
"""

from collections import Counter
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import Dict, List, Optional, Set, Tuple
from zoneinfo import ZoneInfo

DAILY = "daily"
WEEKLY = "weekly"
REPORT_TYPES = (DAILY, WEEKLY)


@dataclass(frozen=True)
class Commit:
    """A single commit read from repository history."""
    hash: str
    author_name: str
    author_email: str
    timestamp: datetime  # committer time, the key git log orders by
    message: str
    files_changed: Tuple[str, ...] = ()
    insertions: Optional[int] = None
    deletions: Optional[int] = None
    authored_at: Optional[datetime] = None

    @property
    def subject(self) -> str:
        """First line of the commit message."""
        lines = self.message.strip().splitlines()
        return lines[0].strip() if lines else ""

    @property
    def short_hash(self) -> str:
        return self.hash[:8]


@dataclass(frozen=True)
class ReportWindow:
    """Half-open time window [start, end) a report covers."""
    start: datetime
    end: datetime
    report_type: str
    timezone: str = "UTC"
    date: Optional[date] = None

    def __post_init__(self):
        if self.start > self.end:
            raise ValueError("window start must not be after end")

    def contains(self, ts: datetime) -> bool:
        return self.start <= ts < self.end

    @property
    def tzinfo(self) -> ZoneInfo:
        return ZoneInfo(self.timezone)

    def local_date(self, ts: datetime) -> date:
        """Calendar date of a timestamp in the window's timezone."""
        return ts.astimezone(self.tzinfo).date()

    def days(self) -> List[date]:
        """Calendar dates covered by the window, oldest first."""
        first = self.local_date(self.start)
        count = max(1, round((self.end - self.start) / timedelta(days=1)))
        return [first + timedelta(days=i) for i in range(count)]

    def day_slot(self, ts: datetime) -> date:
        """
        Row of days() a timestamp is counted under.

        Rows are consecutive 24h slices from start, so a window that spans
        a DST change still puts every contained timestamp in exactly one row.
        """
        days = self.days()
        index = int((ts - self.start) // timedelta(days=1))
        return days[min(max(index, 0), len(days) - 1)]


@dataclass
class AuthorSummary:
    """Activity of one author inside a report window."""
    author_name: str
    author_email: str
    commit_count: int = 0
    file_counts: Counter = field(default_factory=Counter)
    day_buckets: Dict[date, int] = field(default_factory=dict)
    insertions: int = 0
    deletions: int = 0
    commits: List[Commit] = field(default_factory=list)
    categories: Counter = field(default_factory=Counter)

    @property
    def files_touched(self) -> Set[str]:
        return set(self.file_counts)


@dataclass
class ReportTotals:
    """Repository-level totals across all authors."""
    commits: int = 0
    authors: int = 0
    files: int = 0
    insertions: int = 0
    deletions: int = 0
    categories: Counter = field(default_factory=Counter)
    file_types: Counter = field(default_factory=Counter)
    top_files: List[Tuple[str, int]] = field(default_factory=list)
    per_day: Dict[date, int] = field(default_factory=dict)


@dataclass(frozen=True)
class RepoInfo:
    """Best-effort repository description shown in report headers."""
    name: Optional[str] = None
    url: Optional[str] = None
    branch: Optional[str] = None


@dataclass(frozen=True)
class ReportRequest:
    """Inputs for a single report generation."""
    repo_path: str
    report_type: str
    date: str
    author: Optional[str] = None
    template: Optional[str] = None  # Jinja2 template path, overrides config


@dataclass(frozen=True)
class ReportDocument:
    """Final rendered report that crosses the service boundary."""
    report_type: str
    date: str
    content: str

    @property
    def filename(self) -> str:
        return f"{self.report_type}-report-{self.date}.md"
