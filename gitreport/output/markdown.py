"""
Markdown formatting helpers for gitreport.

Free-form text from repositories (author names, commit subjects) must never
change document structure, so it is flattened to one line and every
markdown-significant character is backslash-escaped.
"""

import re
from typing import Any, List, Optional

# Punctuation with inline meaning in CommonMark/GFM. Escaped text is never
# placed at the start of a line, so block markers like "-" or "1." are safe.
_SPECIAL_CHARS = set('\\`*_{}[]()<>#!|~&')
_WHITESPACE_RE = re.compile(r'\s+')
_BACKTICK_RUN_RE = re.compile(r'`+')


def single_line(text: Optional[str]) -> str:
    """Collapse all whitespace, including line breaks, to single spaces."""
    if not text:
        return ""
    return _WHITESPACE_RE.sub(' ', text).strip()


def escape(text: Optional[str]) -> str:
    """Escape free-form text for safe inline use in markdown."""
    flat = single_line(text)
    return ''.join('\\' + ch if ch in _SPECIAL_CHARS else ch for ch in flat)


def code_span(text: Optional[str]) -> str:
    """
    Wrap text in a code span that survives embedded backticks.

    The fence is one backtick longer than the longest run inside; padding
    spaces are added when the content touches a backtick.
    """
    flat = single_line(text)
    if not flat:
        return "` `"

    longest = max((len(run) for run in _BACKTICK_RUN_RE.findall(flat)), default=0)
    fence = '`' * (longest + 1)
    if flat.startswith('`') or flat.endswith('`'):
        flat = f" {flat} "
    return f"{fence}{flat}{fence}"


def heading(text: str, level: int = 1) -> str:
    return f"{'#' * level} {text}"


def bullet(text: str) -> str:
    return f"- {text}"


def format_lines_changed(insertions: int, deletions: int) -> str:
    return f"+{insertions:,} / -{deletions:,}"


def format_number(value: int) -> str:
    """Format number with thousands separator."""
    return f"{int(value):,}"


def format_table(headers: List[str], rows: List[List[Any]], alignments: Optional[List[str]] = None) -> str:
    """
    Format data as a markdown pipe table.

    Args:
        headers: Column headers (already escaped)
        rows: List of row lists (cells already escaped)
        alignments: List of 'l', 'r', or 'c' for each column
    """
    if alignments is None:
        alignments = ['l'] * len(headers)

    separators = {'l': '---', 'r': '---:', 'c': ':---:'}
    lines = [
        '| ' + ' | '.join(headers) + ' |',
        '| ' + ' | '.join(separators[a] for a in alignments) + ' |',
    ]
    for row in rows:
        lines.append('| ' + ' | '.join(str(cell) for cell in row) + ' |')
    return '\n'.join(lines)
