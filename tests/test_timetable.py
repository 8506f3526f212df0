import unittest
from dataclasses import replace
from datetime import date, datetime

from factories import TERM1, session

from termplan.model import Schedule, ScheduleEntry
from termplan.timetable import (
    normalize_date,
    parse_date,
    schedule_date_range,
    session_dates,
    session_in_week,
    week_ranges,
)


class TestParseDate(unittest.TestCase):
    def test_formats(self) -> None:
        self.assertEqual(parse_date("2025-09-01"), date(2025, 9, 1))
        self.assertEqual(parse_date("2025-09-01 00:00:00"), date(2025, 9, 1))
        self.assertEqual(parse_date("01/09/2025"), date(2025, 9, 1))
        self.assertEqual(parse_date("1-Sep-2025"), date(2025, 9, 1))
        self.assertEqual(parse_date(datetime(2025, 9, 1, 8, 30)), date(2025, 9, 1))

    def test_unreadable(self) -> None:
        self.assertIsNone(parse_date(None))
        self.assertIsNone(parse_date("  "))
        self.assertIsNone(parse_date("TBA"))

    def test_normalize_keeps_raw_text(self) -> None:
        self.assertEqual(normalize_date("01/09/2025"), "2025-09-01")
        self.assertEqual(normalize_date("TBA"), "TBA")
        self.assertIsNone(normalize_date(""))


class TestRanges(unittest.TestCase):
    def test_schedule_range_skips_unreadable_dates(self) -> None:
        early = session(days=("mon",))
        late = session(days=("fri",), code="Y1001")
        bad = replace(session(days=("tue",), code="Z1001"), start_date="TBA")
        schedule = Schedule(
            entries=[
                ScheduleEntry("X1001", "X", TERM1, "L1", (early,)),
                ScheduleEntry("Y1001", "Y", TERM1, "L1", (late,)),
                ScheduleEntry("Z1001", "Z", TERM1, "L1", (bad,)),
            ]
        )
        self.assertEqual(schedule_date_range(schedule), (date(2025, 9, 1), date(2025, 11, 29)))

    def test_empty_schedule_range(self) -> None:
        self.assertEqual(schedule_date_range(Schedule()), (None, None))
        self.assertEqual(week_ranges(None, None), [])

    def test_weeks_start_on_sunday(self) -> None:
        weeks = week_ranges(date(2025, 9, 1), date(2025, 9, 14))
        self.assertEqual(
            weeks,
            [
                (1, date(2025, 8, 31), date(2025, 9, 6)),
                (2, date(2025, 9, 7), date(2025, 9, 13)),
                (3, date(2025, 9, 14), date(2025, 9, 20)),
            ],
        )

    def test_session_in_week(self) -> None:
        s = session()
        self.assertTrue(session_in_week(s, date(2025, 8, 31), date(2025, 9, 6)))
        self.assertFalse(session_in_week(s, date(2025, 12, 7), date(2025, 12, 13)))


class TestSessionDates(unittest.TestCase):
    def test_every_monday_of_the_term(self) -> None:
        dates = session_dates(session(days=("mon",)))
        self.assertEqual(len(dates), 13)
        self.assertEqual(dates[0], date(2025, 9, 1))
        self.assertEqual(dates[-1], date(2025, 11, 24))
        self.assertTrue(all(d.weekday() == 0 for d in dates))

    def test_two_days_a_week(self) -> None:
        dates = session_dates(session(days=("mon", "wed")))
        self.assertEqual(dates[:3], [date(2025, 9, 1), date(2025, 9, 3), date(2025, 9, 8)])

    def test_no_days(self) -> None:
        self.assertEqual(session_dates(session(days=())), [])


if __name__ == "__main__":
    unittest.main()
