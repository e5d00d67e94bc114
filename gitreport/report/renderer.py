"""
Markdown renderer for daily and weekly reports.

Output depends only on the arguments: no clock reads, no unordered
iteration. The same summaries always render to byte-identical text.
"""

from typing import List, Optional

from gitreport.models.entities import WEEKLY, AuthorSummary, RepoInfo, ReportTotals, ReportWindow
from gitreport.output.markdown import (
    bullet, code_span, escape, format_lines_changed, format_number, format_table, heading
)
from gitreport.report.aggregator import summarize
from gitreport.report.categories import CATEGORY_ORDER
from gitreport.utils.timestamps import to_date_string, to_zone_display

NO_ACTIVITY = "No activity recorded for this period."

DAY_SHORT = ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]


def _plural(count: int, word: str) -> str:
    return f"{format_number(count)} {word}{'' if count == 1 else 's'}"


def report_title(window: ReportWindow, report_type: str) -> str:
    """Title text without the heading marker."""
    if report_type == WEEKLY:
        days = window.days()
        return f"Weekly Report: {to_date_string(days[0])} to {to_date_string(days[-1])}"
    return f"Daily Report: {to_date_string(window.date or window.local_date(window.start))}"


def _title(window: ReportWindow, report_type: str) -> str:
    return heading(report_title(window, report_type))


def _header(window: ReportWindow, repo_info: Optional[RepoInfo]) -> List[str]:
    lines = [
        f"**Period:** {to_zone_display(window.start, window.timezone)} to "
        f"{to_zone_display(window.end, window.timezone)} ({escape(window.timezone)})",
    ]
    if repo_info and (repo_info.name or repo_info.branch):
        text = escape(repo_info.name) if repo_info.name else "(unnamed)"
        if repo_info.branch:
            text += f" on branch {code_span(repo_info.branch)}"
        lines.append("")
        lines.append(f"**Repository:** {text}")
    return lines


def _summary_section(totals: ReportTotals) -> List[str]:
    return [
        heading("Summary", 2),
        "",
        bullet(f"Commits: {format_number(totals.commits)}"),
        bullet(f"Authors: {format_number(totals.authors)}"),
        bullet(f"Files changed: {format_number(totals.files)}"),
        bullet(f"Lines changed: {format_lines_changed(totals.insertions, totals.deletions)}"),
    ]


def _day_table(counts, window: ReportWindow) -> str:
    rows = [
        [f"{DAY_SHORT[day.weekday()]} {to_date_string(day)}", format_number(counts.get(day, 0))]
        for day in window.days()
    ]
    return format_table(["Day", "Commits"], rows, ['l', 'r'])


def _author_section(
    summary: AuthorSummary,
    window: ReportWindow,
    report_type: str,
    max_files: int,
) -> List[str]:
    title = escape(summary.author_name) or "Unknown author"
    if summary.author_email:
        title += f" ({escape(summary.author_email)})"

    lines = [
        heading(title, 3),
        "",
        bullet(f"Commits: {format_number(summary.commit_count)}"),
        bullet(f"Files touched: {format_number(len(summary.file_counts))}"),
        bullet(f"Lines changed: {format_lines_changed(summary.insertions, summary.deletions)}"),
    ]

    if report_type == WEEKLY:
        lines += ["", "**Daily breakdown**", "", _day_table(summary.day_buckets, window)]

    lines += ["", "**Commits**", ""]
    for commit in summary.commits:
        when = to_zone_display(commit.timestamp, window.timezone)
        subject = escape(commit.subject) or "(no message)"
        lines.append(bullet(f"{when} {code_span(commit.short_hash)} {subject}"))

    if summary.file_counts:
        lines += ["", "**Files touched**", ""]
        paths = sorted(summary.file_counts)
        for path in paths[:max_files]:
            lines.append(bullet(f"{code_span(path)} ({_plural(summary.file_counts[path], 'commit')})"))
        if len(paths) > max_files:
            lines.append(bullet(f"and {format_number(len(paths) - max_files)} more"))

    return lines


def _categories_section(totals: ReportTotals) -> List[str]:
    lines = [heading("Work Categories", 2), ""]
    for category in CATEGORY_ORDER:
        count = totals.categories.get(category, 0)
        if count:
            lines.append(bullet(f"{category}: {format_number(count)}"))
    return lines


def _file_types_section(totals: ReportTotals) -> List[str]:
    lines = [heading("File Types", 2), ""]
    for label, count in sorted(totals.file_types.items(), key=lambda item: (-item[1], item[0])):
        lines.append(bullet(f"{escape(label)}: {format_number(count)}"))
    return lines


def _top_files_section(totals: ReportTotals) -> List[str]:
    lines = [heading("Most Changed Files", 2), ""]
    for rank, (path, count) in enumerate(totals.top_files, start=1):
        lines.append(f"{rank}. {code_span(path)} ({_plural(count, 'commit')})")
    return lines


def _total_line(totals: ReportTotals) -> str:
    return (
        f"**Total:** {_plural(totals.commits, 'commit')} by {_plural(totals.authors, 'author')}, "
        f"{_plural(totals.files, 'file')} changed, "
        f"{format_lines_changed(totals.insertions, totals.deletions)} lines."
    )


def render(
    summaries: List[AuthorSummary],
    window: ReportWindow,
    report_type: str,
    repo_info: Optional[RepoInfo] = None,
    max_files_per_author: int = 50,
    top_files: int = 5,
) -> str:
    """
    Render aggregated activity as a standalone markdown document.

    Args:
        summaries: Output of aggregate(), already ordered
        window: Window the report covers
        report_type: 'daily' or 'weekly'
        repo_info: Optional repository name/branch for the header
        max_files_per_author: Cap on files listed per author
        top_files: Number of entries in the most-changed list

    Returns:
        Markdown text ending with a newline
    """
    totals = summarize(summaries, top_files=top_files)

    lines = [_title(window, report_type), ""]
    lines += _header(window, repo_info)
    lines.append("")
    lines += _summary_section(totals)
    lines.append("")

    if not summaries:
        lines += [f"_{NO_ACTIVITY}_", ""]
    else:
        if report_type == WEEKLY:
            lines += [heading("Activity by Day", 2), "", _day_table(totals.per_day, window), ""]

        lines += [heading("Activity by Author", 2), ""]
        for summary in summaries:
            lines += _author_section(summary, window, report_type, max_files_per_author)
            lines.append("")

        lines += _categories_section(totals)
        lines.append("")
        if totals.file_types:
            lines += _file_types_section(totals)
            lines.append("")
        if totals.top_files:
            lines += _top_files_section(totals)
            lines.append("")

    lines += ["---", "", _total_line(totals)]
    return '\n'.join(lines) + '\n'
