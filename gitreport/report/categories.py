"""
Commit and file classification.

Commits are sorted into work categories from their messages; files are
labelled by language/format from their extension.
"""

import re
from pathlib import PurePosixPath
from typing import Optional

FEATURES = "Features"
BUG_FIXES = "Bug Fixes"
REFACTORING = "Refactoring"
DOCUMENTATION = "Documentation"
TESTS = "Tests"
CONFIGURATION = "Configuration"
OTHER = "Other"

# Display order in reports
CATEGORY_ORDER = [FEATURES, BUG_FIXES, REFACTORING, DOCUMENTATION, TESTS, CONFIGURATION, OTHER]

# Conventional commit types -> category
CONVENTIONAL_TYPES = {
    "feat": FEATURES,
    "feature": FEATURES,
    "fix": BUG_FIXES,
    "bugfix": BUG_FIXES,
    "hotfix": BUG_FIXES,
    "perf": REFACTORING,
    "refactor": REFACTORING,
    "style": REFACTORING,
    "docs": DOCUMENTATION,
    "doc": DOCUMENTATION,
    "test": TESTS,
    "tests": TESTS,
    "build": CONFIGURATION,
    "ci": CONFIGURATION,
    "chore": CONFIGURATION,
    "config": CONFIGURATION,
}

# Keyword fallback, checked in this order
CATEGORY_KEYWORDS = [
    (FEATURES, ("feat", "feature", "add", "implement", "introduce", "support")),
    (BUG_FIXES, ("fix", "bug", "patch", "resolve", "repair", "hotfix")),
    (REFACTORING, ("refactor", "cleanup", "clean up", "restructure", "simplify", "rename")),
    (DOCUMENTATION, ("doc", "readme", "changelog", "comment")),
    (TESTS, ("test", "spec", "coverage")),
    (CONFIGURATION, ("config", "setting", "dependency", "dependencies", "bump", "upgrade")),
]

_CONVENTIONAL_RE = re.compile(r'^\s*([a-zA-Z]+)(\([^)]*\))?!?:')

# Keywords match at the start of a word: "add" hits "added", not "padding"
_KEYWORD_PATTERNS = [
    (category, re.compile(r'\b(?:' + '|'.join(re.escape(k) for k in keywords) + ')'))
    for category, keywords in CATEGORY_KEYWORDS
]

# Language/format labels by file extension
EXTENSION_TO_TYPE = {
    '.py': 'Python',
    '.pyw': 'Python',
    '.js': 'JavaScript/TypeScript',
    '.mjs': 'JavaScript/TypeScript',
    '.cjs': 'JavaScript/TypeScript',
    '.jsx': 'JavaScript/TypeScript',
    '.ts': 'JavaScript/TypeScript',
    '.tsx': 'JavaScript/TypeScript',
    '.go': 'Go',
    '.java': 'Java',
    '.kt': 'Kotlin',
    '.rs': 'Rust',
    '.c': 'C/C++',
    '.h': 'C/C++',
    '.cc': 'C/C++',
    '.cpp': 'C/C++',
    '.cxx': 'C/C++',
    '.hpp': 'C/C++',
    '.cs': 'C#',
    '.rb': 'Ruby',
    '.php': 'PHP',
    '.swift': 'Swift',
    '.sh': 'Shell',
    '.bash': 'Shell',
    '.sql': 'SQL',
    '.html': 'HTML',
    '.htm': 'HTML',
    '.css': 'CSS',
    '.scss': 'CSS',
    '.sass': 'CSS',
    '.less': 'CSS',
    '.vue': 'Vue',
    '.md': 'Markdown',
    '.markdown': 'Markdown',
    '.rst': 'reStructuredText',
    '.txt': 'Text',
    '.json': 'Config',
    '.yaml': 'Config',
    '.yml': 'Config',
    '.toml': 'Config',
    '.ini': 'Config',
    '.cfg': 'Config',
    '.xml': 'Config',
}

NO_EXTENSION = "No extension"


def classify_commit(message: Optional[str]) -> str:
    """
    Classify a commit into a work category.

    Conventional commit prefixes (feat:, fix(api):, ...) take precedence;
    otherwise the subject line is scanned for keywords.
    """
    if not message:
        return OTHER

    subject = message.strip().splitlines()[0] if message.strip() else ""

    match = _CONVENTIONAL_RE.match(subject)
    if match:
        category = CONVENTIONAL_TYPES.get(match.group(1).lower())
        if category:
            return category

    lowered = subject.lower()
    for category, pattern in _KEYWORD_PATTERNS:
        if pattern.search(lowered):
            return category

    return OTHER


def file_type(path: Optional[str]) -> str:
    """Label a file by its extension, e.g. 'Python' or '.lock'."""
    if not path:
        return NO_EXTENSION

    suffix = PurePosixPath(path).suffix
    if not suffix:
        return NO_EXTENSION

    lowered = suffix.lower()
    return EXTENSION_TO_TYPE.get(lowered, lowered)
