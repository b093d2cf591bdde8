import unittest
from datetime import datetime, timedelta, timezone

from window import ROLLING, WEEKLY, compute_window, format_short_date, parse_override, parse_timestamp

UTC = timezone.utc


class TestComputeWindow(unittest.TestCase):
    def test_weekly_window_covers_previous_saturday_to_friday(self):
        # 2024-01-13 is a Saturday
        window = compute_window(datetime(2024, 1, 13, 9, 30, tzinfo=UTC), WEEKLY)
        self.assertEqual(window.start, datetime(2024, 1, 6, 0, 0, tzinfo=UTC))
        self.assertEqual(window.end.date(), datetime(2024, 1, 12).date())
        self.assertEqual((window.end.hour, window.end.minute, window.end.second), (23, 59, 59))
        self.assertEqual(window.search_range, "2024-01-06..2024-01-12")
        self.assertEqual(window.title, "Week in AWL | 6 January 2024 - 12 January 2024")

    def test_rolling_window_uses_full_instants(self):
        now = datetime(2024, 1, 13, 9, 30, tzinfo=UTC)
        window = compute_window(now, ROLLING, report_name="Weekly PR Summary")
        self.assertEqual(window.end, now)
        self.assertEqual(window.start, now - timedelta(days=7))
        self.assertEqual(window.search_range, "2024-01-06T09:30:00Z..2024-01-13T09:30:00Z")
        self.assertTrue(window.title.startswith("Weekly PR Summary | 6 January 2024"))

    def test_naive_now_is_treated_as_utc(self):
        window = compute_window(datetime(2024, 1, 13), WEEKLY)
        self.assertEqual(window.start.tzinfo, UTC)

    def test_unknown_strategy_raises(self):
        with self.assertRaises(ValueError):
            compute_window(datetime(2024, 1, 13, tzinfo=UTC), "monthly")

    def test_contains_is_inclusive_and_ignores_missing(self):
        window = compute_window(datetime(2024, 1, 13, tzinfo=UTC), WEEKLY)
        self.assertTrue(window.contains(window.start))
        self.assertTrue(window.contains(parse_timestamp("2024-01-12T18:00:00Z")))
        self.assertFalse(window.contains(parse_timestamp("2024-01-13T00:00:00Z")))
        self.assertFalse(window.contains(None))


class TestParsing(unittest.TestCase):
    def test_parse_timestamp_zulu(self):
        ts = parse_timestamp("2024-01-10T12:34:56Z")
        self.assertEqual(ts, datetime(2024, 1, 10, 12, 34, 56, tzinfo=UTC))

    def test_parse_timestamp_empty(self):
        self.assertIsNone(parse_timestamp(None))
        self.assertIsNone(parse_timestamp(""))

    def test_parse_override_date_only(self):
        self.assertEqual(parse_override("2024-01-13"), datetime(2024, 1, 13, tzinfo=UTC))

    def test_parse_override_rejects_garbage(self):
        with self.assertRaises(ValueError):
            parse_override("next saturday")
        with self.assertRaises(ValueError):
            parse_override("  ")

    def test_format_short_date(self):
        self.assertEqual(format_short_date(datetime(2024, 1, 6, tzinfo=UTC)), "Jan 6")


if __name__ == '__main__':
    unittest.main()
