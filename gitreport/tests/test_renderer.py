"""Tests for markdown report rendering."""

import unittest
from datetime import datetime, timezone

from gitreport.models.entities import Commit, RepoInfo
from gitreport.report.aggregator import aggregate
from gitreport.report.renderer import NO_ACTIVITY, render
from gitreport.report.window import compute_window


def utc(*args):
    return datetime(*args, tzinfo=timezone.utc)


def make_commit(hash_, ts, name="Alice", email="alice@example.com", message="work",
                files=(), insertions=None, deletions=None):
    return Commit(
        hash=hash_, author_name=name, author_email=email, timestamp=ts, message=message,
        files_changed=tuple(files), insertions=insertions, deletions=deletions,
    )


EXPECTED_DAILY = """\
# Daily Report: 2026-01-15

**Period:** 2026-01-15 00:00 to 2026-01-16 00:00 (UTC)

## Summary

- Commits: 1
- Authors: 1
- Files changed: 1
- Lines changed: +10 / -2

## Activity by Author

### Alice (alice@example.com)

- Commits: 1
- Files touched: 1
- Lines changed: +10 / -2

**Commits**

- 2026-01-15 09:30 `abcdef12` feat: add \\*bold\\* \\#1

**Files touched**

- `src/app.py` (1 commit)

## Work Categories

- Features: 1

## File Types

- Python: 1

## Most Changed Files

1. `src/app.py` (1 commit)

---

**Total:** 1 commit by 1 author, 1 file changed, +10 / -2 lines.
"""


class TestRenderDaily(unittest.TestCase):
    """Test daily report output."""

    def setUp(self):
        self.window = compute_window("daily", "2026-01-15")

    def test_full_document(self):
        commits = [
            make_commit("abcdef1234567890", utc(2026, 1, 15, 9, 30), message="feat: add *bold* #1",
                        files=["src/app.py"], insertions=10, deletions=2),
        ]
        content = render(aggregate(commits, self.window), self.window, "daily")
        self.assertEqual(content, EXPECTED_DAILY)

    def test_no_activity(self):
        content = render([], self.window, "daily")
        self.assertIn(NO_ACTIVITY, content)
        self.assertIn("- Commits: 0", content)
        self.assertNotIn("## Activity by Author", content)
        self.assertTrue(content.startswith("# Daily Report: 2026-01-15\n"))
        self.assertTrue(content.endswith("**Total:** 0 commits by 0 authors, 0 files changed, +0 / -0 lines.\n"))

    def test_deterministic(self):
        commits = [
            make_commit("c3", utc(2026, 1, 15, 15), name="Bob", email="bob@x.org", files=["b.py", "a.py"]),
            make_commit("c2", utc(2026, 1, 15, 12), files=["z.md", "a.py"]),
            make_commit("c1", utc(2026, 1, 15, 9), name="Carol", email="carol@x.org", files=["c.go"]),
        ]
        first = render(aggregate(commits, self.window), self.window, "daily")
        second = render(aggregate(list(reversed(commits)), self.window), self.window, "daily")
        self.assertEqual(first, second)

    def test_hostile_names_cannot_add_headings(self):
        commits = [
            make_commit("1", utc(2026, 1, 15, 9), name="# Evil\n## Name", email="evil@x.org",
                        message="### injected\n\n- not a list", files=["we`ird.txt"]),
        ]
        content = render(aggregate(commits, self.window), self.window, "daily")
        headings = [line for line in content.splitlines() if line.startswith("#")]
        self.assertEqual(headings, [
            "# Daily Report: 2026-01-15",
            "## Summary",
            "## Activity by Author",
            "### \\# Evil \\#\\# Name (evil@x.org)",
            "## Work Categories",
            "## File Types",
            "## Most Changed Files",
        ])
        self.assertIn("\\#\\#\\# injected", content)
        self.assertIn("``we`ird.txt``", content)

    def test_repository_line(self):
        info = RepoInfo(name="widgets", url="git@github.com:acme/widgets.git", branch="main")
        content = render([], self.window, "daily", repo_info=info)
        self.assertIn("**Repository:** widgets on branch `main`", content)

    def test_files_touched_is_capped(self):
        commits = [make_commit("1", utc(2026, 1, 15, 9), files=[f"f{i}.py" for i in range(5)])]
        content = render(aggregate(commits, self.window), self.window, "daily", max_files_per_author=2)
        self.assertIn("- `f0.py` (1 commit)", content)
        self.assertIn("- `f1.py` (1 commit)", content)
        self.assertNotIn("- `f2.py` (1 commit)", content)
        self.assertIn("- and 3 more", content)

    def test_timezone_display(self):
        window = compute_window("daily", "2026-01-15", tz="Asia/Tokyo")
        commits = [make_commit("abc", utc(2026, 1, 15, 0, 30))]
        content = render(aggregate(commits, window), window, "daily")
        self.assertIn("**Period:** 2026-01-15 00:00 to 2026-01-16 00:00 (Asia/Tokyo)", content)
        self.assertIn("- 2026-01-15 09:30 `abc` work", content)


class TestRenderWeekly(unittest.TestCase):
    """Test weekly report output."""

    def setUp(self):
        self.window = compute_window("weekly", "2026-01-15")

    def test_weekly_sections(self):
        commits = [
            make_commit("b", utc(2026, 1, 16, 10), name="Bob", email="bob@x.org", message="fix: bug"),
            make_commit("a", utc(2026, 1, 12, 10)),
        ]
        content = render(aggregate(commits, self.window), self.window, "weekly")

        self.assertTrue(content.startswith("# Weekly Report: 2026-01-12 to 2026-01-18\n"))
        self.assertIn("## Activity by Day", content)
        self.assertIn("| Mon 2026-01-12 | 1 |", content)
        self.assertIn("| Tue 2026-01-13 | 0 |", content)
        self.assertIn("| Fri 2026-01-16 | 1 |", content)
        self.assertIn("| Sun 2026-01-18 | 0 |", content)
        self.assertIn("**Daily breakdown**", content)
        self.assertIn("- Bug Fixes: 1", content)
        self.assertIn("- Other: 1", content)
        self.assertTrue(content.endswith("**Total:** 2 commits by 2 authors, 0 files changed, +0 / -0 lines.\n"))

    def test_weekly_no_activity_still_has_title(self):
        content = render([], self.window, "weekly")
        self.assertTrue(content.startswith("# Weekly Report: 2026-01-12 to 2026-01-18\n"))
        self.assertIn(NO_ACTIVITY, content)

    def test_dst_week_day_table_counts_last_hour(self):
        window = compute_window("weekly", "2026-03-04", tz="America/New_York")
        commits = [make_commit("a", utc(2026, 3, 9, 4, 30))]
        content = render(aggregate(commits, window), window, "weekly")
        self.assertTrue(content.startswith("# Weekly Report: 2026-03-02 to 2026-03-08\n"))
        self.assertIn("| Sun 2026-03-08 | 1 |", content)
        self.assertNotIn("2026-03-09 |", content)


if __name__ == '__main__':
    unittest.main()
