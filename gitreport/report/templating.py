"""
Custom report templates.

A user-supplied Jinja2 file replaces the built-in markdown layout. The
template sees the same aggregated data the built-in renderer prints:

    report_type   'daily' or 'weekly'
    title         e.g. "Daily Report: 2026-01-15"
    period        dict with start, end (local "YYYY-MM-DD HH:MM") and timezone
    repo          RepoInfo or None
    summaries     AuthorSummary list, most active first
    totals        ReportTotals
    days          list of dicts (date, label, count) for the window's days
    categories    (name, count) pairs in category order, zero counts omitted
    file_types    (label, count) pairs, most frequent first
    top_files     (path, count) pairs

Filters: md (escape text), code (code span), when (local timestamp),
number (thousands separators), lines (e.g. ``totals.insertions|lines(totals.deletions)``).
Global: day_rows(counts) gives the days list for one author's day_buckets.
"""

import logging
from pathlib import Path
from typing import Dict, List, Optional

from jinja2 import Environment, FileSystemLoader, StrictUndefined, TemplateError

from gitreport.errors import InternalRenderError
from gitreport.models.entities import AuthorSummary, RepoInfo, ReportWindow
from gitreport.output.markdown import code_span, escape, format_lines_changed, format_number
from gitreport.report.aggregator import summarize
from gitreport.report.categories import CATEGORY_ORDER
from gitreport.report.renderer import DAY_SHORT, report_title
from gitreport.utils.timestamps import to_date_string, to_zone_display

logger = logging.getLogger(__name__)


def _day_rows(counts: Dict, window: ReportWindow) -> List[Dict]:
    return [
        {
            "date": to_date_string(day),
            "label": f"{DAY_SHORT[day.weekday()]} {to_date_string(day)}",
            "count": counts.get(day, 0),
        }
        for day in window.days()
    ]


def _environment(template_dir: Path, window: ReportWindow) -> Environment:
    env = Environment(
        loader=FileSystemLoader(str(template_dir)),
        undefined=StrictUndefined,
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=True,
    )
    env.filters["md"] = escape
    env.filters["code"] = code_span
    env.filters["when"] = lambda ts: to_zone_display(ts, window.timezone)
    env.filters["number"] = format_number
    env.filters["lines"] = format_lines_changed
    env.globals["day_rows"] = lambda counts: _day_rows(counts, window)
    return env


def render_template(
    template_path: str,
    summaries: List[AuthorSummary],
    window: ReportWindow,
    report_type: str,
    repo_info: Optional[RepoInfo] = None,
    top_files: int = 5,
) -> str:
    """
    Render aggregated activity through a Jinja2 template file.

    Raises:
        InternalRenderError: the template cannot be loaded, parsed or rendered
    """
    path = Path(template_path).expanduser()
    totals = summarize(summaries, top_files=top_files)

    context = {
        "report_type": report_type,
        "title": report_title(window, report_type),
        "period": {
            "start": to_zone_display(window.start, window.timezone),
            "end": to_zone_display(window.end, window.timezone),
            "timezone": window.timezone,
        },
        "repo": repo_info,
        "window": window,
        "summaries": summaries,
        "totals": totals,
        "days": _day_rows(totals.per_day, window),
        "categories": [
            (category, totals.categories[category])
            for category in CATEGORY_ORDER
            if totals.categories.get(category, 0)
        ],
        "file_types": sorted(totals.file_types.items(), key=lambda item: (-item[1], item[0])),
        "top_files": list(totals.top_files),
    }

    try:
        env = _environment(path.parent, window)
        content = env.get_template(path.name).render(**context)
    except TemplateError as exc:
        logger.error("Template %s failed: %s", path, exc)
        raise InternalRenderError(f"Failed to render template {path.name}: {exc}")
    except (OSError, UnicodeDecodeError) as exc:
        logger.error("Cannot read template %s: %s", path, exc)
        raise InternalRenderError(f"Cannot read template {path.name}")

    if not content.endswith('\n'):
        content += '\n'
    return content
