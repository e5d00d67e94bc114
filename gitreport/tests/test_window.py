"""Tests for report window computation and commit filtering."""

import unittest
from datetime import date, datetime, timedelta, timezone

from gitreport.errors import InvalidInput
from gitreport.models.entities import Commit
from gitreport.report.window import compute_window, filter_commits, parse_report_date


def make_commit(hash_, ts, email="dev@example.com", name="Dev"):
    return Commit(hash=hash_, author_name=name, author_email=email, timestamp=ts, message=f"commit {hash_}")


def utc(*args):
    return datetime(*args, tzinfo=timezone.utc)


class TestParseReportDate(unittest.TestCase):
    """Test date parsing."""

    def test_valid_date(self):
        self.assertEqual(parse_report_date("2026-01-15"), date(2026, 1, 15))

    def test_date_object_passthrough(self):
        self.assertEqual(parse_report_date(date(2026, 1, 15)), date(2026, 1, 15))

    def test_malformed_date_names_field(self):
        with self.assertRaises(InvalidInput) as ctx:
            parse_report_date("not-a-date")
        self.assertEqual(ctx.exception.field, "date")
        self.assertIn("date", ctx.exception.message)

    def test_impossible_calendar_date(self):
        with self.assertRaises(InvalidInput):
            parse_report_date("2026-02-30")

    def test_loose_formats_rejected(self):
        for value in ["2026-1-5", "20260105", "2026/01/05", "", None]:
            with self.assertRaises(InvalidInput, msg=repr(value)):
                parse_report_date(value)


class TestComputeWindow(unittest.TestCase):
    """Test window boundaries."""

    def test_daily_window_utc(self):
        window = compute_window("daily", "2026-01-15")
        self.assertEqual(window.start, utc(2026, 1, 15))
        self.assertEqual(window.end, utc(2026, 1, 16))
        self.assertEqual(window.end - window.start, timedelta(hours=24))
        self.assertEqual(window.report_type, "daily")

    def test_weekly_window_starts_monday(self):
        # 2026-01-15 is a Thursday
        window = compute_window("weekly", "2026-01-15")
        self.assertEqual(window.start, utc(2026, 1, 12))
        self.assertEqual(window.end, utc(2026, 1, 19))
        self.assertEqual(window.end - window.start, timedelta(days=7))

    def test_weekly_window_on_monday_and_sunday(self):
        monday = compute_window("weekly", "2026-01-12")
        sunday = compute_window("weekly", "2026-01-18")
        self.assertEqual(monday.start, sunday.start)
        self.assertEqual(monday.end, sunday.end)

    def test_weekly_window_crosses_year(self):
        # ISO week 1 of 2026 starts on Monday 2025-12-29
        window = compute_window("weekly", "2026-01-01")
        self.assertEqual(window.start, utc(2025, 12, 29))

    def test_timezone_shifts_boundaries(self):
        window = compute_window("daily", "2026-01-15", tz="America/New_York")
        self.assertEqual(window.start, utc(2026, 1, 15, 5))
        self.assertEqual(window.end, utc(2026, 1, 16, 5))
        self.assertEqual(window.timezone, "America/New_York")

    def test_daily_window_is_24h_across_dst(self):
        window = compute_window("daily", "2026-03-08", tz="America/New_York")
        self.assertEqual(window.end - window.start, timedelta(hours=24))

    def test_unknown_type_rejected(self):
        with self.assertRaises(InvalidInput) as ctx:
            compute_window("monthly", "2026-01-15")
        self.assertEqual(ctx.exception.field, "type")

    def test_unknown_timezone_rejected(self):
        with self.assertRaises(InvalidInput):
            compute_window("daily", "2026-01-15", tz="Mars/Olympus")

    def test_window_days(self):
        weekly = compute_window("weekly", "2026-01-15")
        days = weekly.days()
        self.assertEqual(len(days), 7)
        self.assertEqual(days[0], date(2026, 1, 12))
        self.assertEqual(days[-1], date(2026, 1, 18))
        self.assertEqual(compute_window("daily", "2026-01-15").days(), [date(2026, 1, 15)])

    def test_day_slot_utc(self):
        weekly = compute_window("weekly", "2026-01-15")
        self.assertEqual(weekly.day_slot(utc(2026, 1, 12, 0)), date(2026, 1, 12))
        self.assertEqual(weekly.day_slot(utc(2026, 1, 14, 23, 59)), date(2026, 1, 14))
        self.assertEqual(weekly.day_slot(utc(2026, 1, 18, 23, 59)), date(2026, 1, 18))

    def test_day_slot_covers_dst_start_week(self):
        # Clocks go forward on Sunday 2026-03-08 in New York
        weekly = compute_window("weekly", "2026-03-04", tz="America/New_York")
        last = weekly.end - timedelta(minutes=1)
        self.assertTrue(weekly.contains(utc(2026, 3, 9, 4, 30)))
        self.assertEqual(weekly.local_date(utc(2026, 3, 9, 4, 30)), date(2026, 3, 9))
        self.assertEqual(weekly.day_slot(utc(2026, 3, 9, 4, 30)), date(2026, 3, 8))
        self.assertEqual(weekly.day_slot(last), date(2026, 3, 8))
        self.assertIn(weekly.day_slot(weekly.start), weekly.days())


class TestFilterCommits(unittest.TestCase):
    """Test window filtering."""

    def setUp(self):
        self.window = compute_window("daily", "2026-01-15")
        # Newest first, like git log
        self.commits = [
            make_commit("a", utc(2026, 1, 16, 9)),
            make_commit("b", utc(2026, 1, 16, 0)),       # exactly at end
            make_commit("c", utc(2026, 1, 15, 23, 59)),
            make_commit("d", utc(2026, 1, 15, 8)),
            make_commit("e", utc(2026, 1, 15, 0)),       # exactly at start
            make_commit("f", utc(2026, 1, 14, 23, 59)),
            make_commit("g", utc(2026, 1, 10)),
        ]

    def test_exact_subset(self):
        result = list(filter_commits(self.commits, self.window))
        self.assertEqual([c.hash for c in result], ["c", "d", "e"])
        for commit in result:
            self.assertTrue(self.window.start <= commit.timestamp < self.window.end)

    def test_half_open_boundaries(self):
        start_only = [make_commit("s", self.window.start)]
        end_only = [make_commit("x", self.window.end)]
        self.assertEqual(len(list(filter_commits(start_only, self.window))), 1)
        self.assertEqual(len(list(filter_commits(end_only, self.window))), 0)

    def test_idempotent(self):
        once = list(filter_commits(self.commits, self.window))
        twice = list(filter_commits(once, self.window))
        self.assertEqual(once, twice)

    def test_stops_after_run_of_older_commits(self):
        history = self.commits + [make_commit(f"old{i}", utc(2026, 1, 9 - i)) for i in range(6)]
        consumed = []

        def source():
            for commit in history:
                consumed.append(commit.hash)
                yield commit

        list(filter_commits(source(), self.window))
        # f, g, old0, old1, old2 are five in a row; old3 onwards is never read
        self.assertEqual(consumed, ["a", "b", "c", "d", "e", "f", "g", "old0", "old1", "old2"])

    def test_slow_clock_child_before_newer_parent(self):
        # git shows a child before its parent even when the child is older
        history = [
            make_commit("child", utc(2026, 1, 14, 10)),
            make_commit("parent", utc(2026, 1, 15, 10)),
            make_commit("root", utc(2026, 1, 1)),
        ]
        result = list(filter_commits(history, self.window))
        self.assertEqual([c.hash for c in result], ["parent"])

    def test_in_window_commit_resets_older_run(self):
        history = []
        for i in range(3):
            history += [make_commit(f"old{i}{j}", utc(2026, 1, 10, i, j)) for j in range(4)]
            history.append(make_commit(f"in{i}", utc(2026, 1, 15, 12, i)))
        result = list(filter_commits(history, self.window))
        self.assertEqual([c.hash for c in result], ["in0", "in1", "in2"])

    def test_custom_slop(self):
        history = [
            make_commit("old", utc(2026, 1, 14)),
            make_commit("late", utc(2026, 1, 15, 6)),
        ]
        self.assertEqual(list(filter_commits(history, self.window, slop=1)), [])
        self.assertEqual([c.hash for c in filter_commits(history, self.window, slop=2)], ["late"])

    def test_closes_upstream_iterator(self):
        closed = []

        def source():
            try:
                for commit in self.commits:
                    yield commit
            finally:
                closed.append(True)

        list(filter_commits(source(), self.window))
        self.assertEqual(closed, [True])

    def test_empty_input(self):
        self.assertEqual(list(filter_commits([], self.window)), [])


if __name__ == '__main__':
    unittest.main()
