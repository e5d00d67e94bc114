"""
Commit aggregation for gitreport.

Groups windowed commits by author and computes the statistics the
renderer prints: commit counts, touched files, line totals, work
categories and (weekly reports) per-day activity.
"""

from collections import Counter
from typing import Dict, Iterable, List, Tuple

from gitreport.models.entities import WEEKLY, AuthorSummary, Commit, ReportTotals, ReportWindow
from gitreport.report.categories import classify_commit, file_type


def author_key(commit: Commit) -> str:
    """Stable grouping identity: normalized email, or name when email is empty."""
    email = (commit.author_email or "").strip().lower()
    if email:
        return email
    return "name:" + (commit.author_name or "").strip().lower()


def _sort_key(summary: AuthorSummary) -> Tuple:
    return (-summary.commit_count, summary.author_name.casefold(), summary.author_name, summary.author_email)


def aggregate(commits: Iterable[Commit], window: ReportWindow) -> List[AuthorSummary]:
    """
    Group commits by author.

    Args:
        commits: Commits already filtered to the window
        window: Window the commits belong to (day buckets use its timezone)

    Returns:
        One AuthorSummary per author, most active first; ties ordered by
        display name. Empty list when there are no commits.
    """
    groups: Dict[str, AuthorSummary] = {}
    latest = {}
    weekly = window.report_type == WEEKLY

    for commit in commits:
        key = author_key(commit)
        summary = groups.get(key)
        if summary is None:
            summary = AuthorSummary(
                author_name=commit.author_name,
                author_email=(commit.author_email or "").strip(),
            )
            if weekly:
                summary.day_buckets = {day: 0 for day in window.days()}
            groups[key] = summary
            latest[key] = commit.timestamp
        elif commit.timestamp > latest[key]:
            # Display name follows the most recent commit of the group
            summary.author_name = commit.author_name
            latest[key] = commit.timestamp

        summary.commit_count += 1
        summary.commits.append(commit)
        summary.insertions += commit.insertions or 0
        summary.deletions += commit.deletions or 0
        summary.categories[classify_commit(commit.message)] += 1
        # A file listed twice in one commit still counts once for it
        summary.file_counts.update(dict.fromkeys(commit.files_changed, 1))

        if weekly:
            day = window.day_slot(commit.timestamp)
            summary.day_buckets[day] += 1

    for summary in groups.values():
        summary.commits.sort(key=lambda c: (c.timestamp, c.hash), reverse=True)

    return sorted(groups.values(), key=_sort_key)


def summarize(summaries: List[AuthorSummary], top_files: int = 5) -> ReportTotals:
    """
    Compute repository-level totals from per-author summaries.

    Args:
        summaries: Output of aggregate()
        top_files: Number of most changed files to keep

    Returns:
        ReportTotals
    """
    totals = ReportTotals()
    file_counts: Counter = Counter()

    for summary in summaries:
        totals.commits += summary.commit_count
        totals.insertions += summary.insertions
        totals.deletions += summary.deletions
        totals.categories.update(summary.categories)
        file_counts.update(summary.file_counts)
        for day, count in summary.day_buckets.items():
            totals.per_day[day] = totals.per_day.get(day, 0) + count

    totals.authors = len(summaries)
    totals.files = len(file_counts)

    for path, count in file_counts.items():
        totals.file_types[file_type(path)] += count

    ranked = sorted(file_counts.items(), key=lambda item: (-item[1], item[0]))
    totals.top_files = ranked[:top_files]

    return totals
