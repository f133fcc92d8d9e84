import unittest
from datetime import date, datetime

from tracker.dates import (
    format_date_key,
    parse_date_key,
    trailing_five_weeks,
    trailing_window,
    week_days,
    week_start,
)


class TestWeekStart(unittest.TestCase):
    def test_sunday_is_its_own_week_start(self) -> None:
        self.assertEqual(week_start(date(2024, 3, 10)), date(2024, 3, 10))

    def test_saturday_goes_back_six_days(self) -> None:
        self.assertEqual(week_start(date(2024, 3, 16)), date(2024, 3, 10))

    def test_wednesday(self) -> None:
        self.assertEqual(week_start(date(2024, 3, 13)), date(2024, 3, 10))

    def test_crosses_month_boundary(self) -> None:
        self.assertEqual(week_start(date(2024, 3, 1)), date(2024, 2, 25))

    def test_naive_datetime_uses_its_date(self) -> None:
        self.assertEqual(week_start(datetime(2024, 3, 13, 23, 59)), date(2024, 3, 10))


class TestWindows(unittest.TestCase):
    def test_week_days_are_seven_consecutive_days(self) -> None:
        days = week_days(date(2024, 3, 10))
        self.assertEqual(len(days), 7)
        self.assertEqual(days[0], date(2024, 3, 10))
        self.assertEqual(days[-1], date(2024, 3, 16))

    def test_trailing_five_weeks_oldest_first(self) -> None:
        weeks = trailing_five_weeks(date(2024, 3, 13))
        self.assertEqual(len(weeks), 5)
        self.assertTrue(all(len(week) == 7 for week in weeks))
        self.assertEqual(weeks[-1][0], date(2024, 3, 10))
        self.assertEqual(weeks[0][0], date(2024, 2, 11))
        for week in weeks:
            self.assertEqual(week[0].weekday(), 6)

    def test_trailing_window_bounds(self) -> None:
        start, end = trailing_window(date(2024, 3, 13))
        self.assertEqual(start, date(2024, 2, 11))
        self.assertEqual(end, date(2024, 3, 16))
        self.assertEqual((end - start).days, 34)


class TestDateKeys(unittest.TestCase):
    def test_date_and_datetime(self) -> None:
        self.assertEqual(format_date_key(date(2024, 1, 5)), "2024-01-05")
        self.assertEqual(format_date_key(datetime(2024, 1, 5, 8, 30)), "2024-01-05")

    def test_strings_are_cut_at_the_date_portion(self) -> None:
        self.assertEqual(format_date_key("2024-01-05"), "2024-01-05")
        self.assertEqual(format_date_key("2024-01-05T23:10:00+00:00"), "2024-01-05")
        self.assertEqual(format_date_key("2024-01-05 23:10:00"), "2024-01-05")

    def test_invalid_inputs(self) -> None:
        self.assertIsNone(format_date_key(None))
        self.assertIsNone(format_date_key(""))
        self.assertIsNone(format_date_key("not a date"))
        self.assertIsNone(format_date_key("2024-13-40"))

    def test_parse_gives_back_the_same_day(self) -> None:
        for day in (date(2024, 2, 29), date(2023, 12, 31), date(2024, 1, 1)):
            self.assertEqual(parse_date_key(format_date_key(day)), day)
        self.assertIsNone(parse_date_key("garbage"))


if __name__ == "__main__":
    unittest.main(verbosity=2)
