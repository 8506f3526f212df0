import unittest

from factories import TERM1, TERM2, row, select

from termplan.catalog import build_catalog
from termplan.diagnostics import Diagnostics
from termplan.model import Selection
from termplan.planner import (
    FLEXIBLE_OVER_CAPACITY,
    OVER_CAPACITY,
    CourseSplit,
    available_sections,
    check_capacity,
    classify_selections,
    iter_distributions,
    remaining_slots,
)


def _codes(selections):
    return [s.course_code for s in selections]


class TestClassify(unittest.TestCase):
    def setUp(self) -> None:
        self.catalog = build_catalog(
            [
                row("ONE1001", "L1", term=TERM1),
                row("TWO1001", "L1", term=TERM2),
                row("BOTH1001", "L1", term=TERM1),
                row("BOTH1001", "L1", term=TERM2),
                row("SPLIT1001", "A", term=TERM1),
                row("SPLIT1001", "B", term=TERM2),
                row("YEAR1000FY", "L1", term=TERM1),
            ]
        )

    def test_buckets(self) -> None:
        sels = [
            select(self.catalog, "ONE1001"),
            select(self.catalog, "TWO1001"),
            select(self.catalog, "BOTH1001"),
            select(self.catalog, "YEAR1000FY"),
        ]
        split = classify_selections(sels, self.catalog)
        self.assertEqual(_codes(split.term1_only), ["ONE1001"])
        self.assertEqual(_codes(split.term2_only), ["TWO1001"])
        self.assertEqual(_codes(split.flexible), ["BOTH1001"])
        self.assertEqual(_codes(split.year_long), ["YEAR1000FY"])
        self.assertEqual(split.excluded, [])

    def test_only_accepted_sections_count(self) -> None:
        # offered in both terms, but section B only exists in term 2
        split = classify_selections([select(self.catalog, "SPLIT1001", "B")], self.catalog)
        self.assertEqual(_codes(split.term2_only), ["SPLIT1001"])

        split = classify_selections([select(self.catalog, "SPLIT1001")], self.catalog)
        self.assertEqual(_codes(split.flexible), ["SPLIT1001"])

    def test_no_matching_section_is_excluded_and_reported(self) -> None:
        diag = Diagnostics()
        ghost = Selection(course_code="ONE1001", section_ids=("Z9",), terms=(TERM1,))
        split = classify_selections([ghost], self.catalog, diag)
        self.assertEqual(_codes(split.excluded), ["ONE1001"])
        self.assertEqual(diag.codes(), ["no-matching-section"])

    def test_single_term_fixes_everything(self) -> None:
        catalog = build_catalog([row("YEAR1000FY"), row("ONE1001", "L2")])
        split = classify_selections(
            [select(catalog, "YEAR1000FY"), select(catalog, "ONE1001")],
            catalog,
        )
        self.assertEqual(_codes(split.term1_only), ["YEAR1000FY", "ONE1001"])
        self.assertEqual(split.year_long, [])
        self.assertEqual(split.flexible, [])

    def test_available_sections(self) -> None:
        sel = select(self.catalog, "SPLIT1001")
        self.assertEqual(available_sections(sel, self.catalog, TERM1), ["A"])
        self.assertEqual(available_sections(sel, self.catalog, TERM2), ["B"])
        self.assertEqual(available_sections(sel, self.catalog, "2030 Sem 1"), [])


def _sel(code: str) -> Selection:
    return Selection(course_code=code, section_ids=("L1",))


class TestCapacity(unittest.TestCase):
    def test_slots(self) -> None:
        split = CourseSplit(
            year_long=[_sel("Y1FY")],
            term1_only=[_sel("A1"), _sel("A2")],
            term2_only=[_sel("B1")],
        )
        self.assertEqual(remaining_slots(split, 6), (3, 4))

    def test_fixed_courses_over_limit(self) -> None:
        diag = Diagnostics()
        split = CourseSplit(term1_only=[_sel(f"A{i}") for i in range(7)])
        self.assertEqual(check_capacity(split, 6, diag), OVER_CAPACITY)
        self.assertEqual(diag.codes(), [OVER_CAPACITY])

    def test_year_long_counts_in_both_terms(self) -> None:
        split = CourseSplit(
            year_long=[_sel(f"Y{i}FY") for i in range(4)],
            term2_only=[_sel(f"B{i}") for i in range(3)],
        )
        self.assertEqual(check_capacity(split, 6), OVER_CAPACITY)
        self.assertIsNone(check_capacity(split, 7))

    def test_flexible_over_remaining_slots(self) -> None:
        split = CourseSplit(
            term1_only=[_sel(f"A{i}") for i in range(5)],
            term2_only=[_sel(f"B{i}") for i in range(5)],
            flexible=[_sel("F1"), _sel("F2"), _sel("F3")],
        )
        self.assertEqual(check_capacity(split, 6), FLEXIBLE_OVER_CAPACITY)
        split.flexible.pop()
        self.assertIsNone(check_capacity(split, 6))


class TestDistributions(unittest.TestCase):
    def test_all_partitions_in_depth_first_order(self) -> None:
        flexible = [_sel("F1"), _sel("F2")]
        got = [(_codes(a), _codes(b)) for a, b in iter_distributions(flexible, 2, 2)]
        self.assertEqual(
            got,
            [
                (["F1", "F2"], []),
                (["F1"], ["F2"]),
                (["F2"], ["F1"]),
                ([], ["F1", "F2"]),
            ],
        )

    def test_pruned_by_slots(self) -> None:
        diag = Diagnostics()
        flexible = [_sel("F1"), _sel("F2")]
        got = [(_codes(a), _codes(b)) for a, b in iter_distributions(flexible, 1, 1, diag)]
        self.assertEqual(got, [(["F1"], ["F2"]), (["F2"], ["F1"])])
        self.assertEqual(diag.summary()["distributions"], 2)

    def test_no_flexible_courses_gives_one_empty_distribution(self) -> None:
        self.assertEqual(list(iter_distributions([], 0, 0)), [([], [])])

    def test_count_is_exhaustive(self) -> None:
        flexible = [_sel(f"F{i}") for i in range(5)]
        self.assertEqual(len(list(iter_distributions(flexible, 5, 5))), 32)
        # C(5,2) + C(5,3) splits keep both terms within 3
        self.assertEqual(len(list(iter_distributions(flexible, 3, 3))), 20)


if __name__ == "__main__":
    unittest.main()
