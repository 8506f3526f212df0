import unittest

from factories import TERM1, TERM2

from termplan.compose import balance_variance, is_complete, join_terms, rank_schedules, year_long_sections_match
from termplan.model import Schedule, ScheduleEntry


def _entry(code: str, term: str, section: str = "L1") -> ScheduleEntry:
    return ScheduleEntry(course_code=code, course_title="", term=term, section=section)


class TestJoinTerms(unittest.TestCase):
    def test_year_long_section_must_match(self) -> None:
        first = [_entry("Y1000FY", TERM1, "L1")]
        self.assertTrue(year_long_sections_match(first, [_entry("Y1000FY", TERM2, "L1")], ["Y1000FY"]))
        self.assertFalse(year_long_sections_match(first, [_entry("Y1000FY", TERM2, "L2")], ["Y1000FY"]))
        # absent from one half is not a mismatch
        self.assertTrue(year_long_sections_match(first, [], ["Y1000FY"]))

    def test_join_order(self) -> None:
        combos1 = [[_entry("Y1000FY", TERM1, "L1")], [_entry("Y1000FY", TERM1, "L2")]]
        combos2 = [[_entry("Y1000FY", TERM2, "L1")], [_entry("Y1000FY", TERM2, "L2")]]
        joined = list(join_terms(combos1, combos2, ["Y1000FY"]))
        self.assertEqual([[e.section for e in s.entries] for s in joined], [["L1", "L1"], ["L2", "L2"]])

        self.assertEqual(len(list(join_terms(combos1, combos2))), 4)


class TestRanking(unittest.TestCase):
    def test_variance_counts_empty_term(self) -> None:
        lopsided = Schedule([_entry("A", TERM1), _entry("B", TERM1)])
        even = Schedule([_entry("A", TERM1), _entry("B", TERM2)])
        self.assertEqual(balance_variance(lopsided, [TERM1, TERM2]), 1.0)
        self.assertEqual(balance_variance(even, [TERM1, TERM2]), 0.0)
        self.assertEqual(balance_variance(even, []), 0.0)

    def test_stable_sort(self) -> None:
        a = Schedule([_entry("A", TERM1), _entry("B", TERM1)])
        b = Schedule([_entry("A", TERM1), _entry("B", TERM2)])
        c = Schedule([_entry("A", TERM2), _entry("B", TERM1)])
        self.assertEqual(rank_schedules([a, b, c], [TERM1, TERM2]), [b, c, a])

    def test_is_complete(self) -> None:
        s = Schedule([_entry("A", TERM1)])
        self.assertTrue(is_complete(s, {"A"}))
        self.assertFalse(is_complete(s, {"A", "B"}))


if __name__ == "__main__":
    unittest.main()
