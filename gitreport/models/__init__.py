"""Models package - report entities."""

from .entities import (
    DAILY,
    WEEKLY,
    REPORT_TYPES,
    Commit,
    ReportWindow,
    AuthorSummary,
    ReportTotals,
    RepoInfo,
    ReportRequest,
    ReportDocument,
)

__all__ = [
    "DAILY",
    "WEEKLY",
    "REPORT_TYPES",
    "Commit",
    "ReportWindow",
    "AuthorSummary",
    "ReportTotals",
    "RepoInfo",
    "ReportRequest",
    "ReportDocument",
]
