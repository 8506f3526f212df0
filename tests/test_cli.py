"""
Tests for CLI entry points.

Every test works on a temporary workbook and cart file (passed with
--workbook / --cart) so real user data is never touched.
"""

import io
import json
import tempfile
import unittest
from contextlib import redirect_stdout
from datetime import datetime, time
from pathlib import Path

from openpyxl import Workbook

from termplan.cli import main

HEADERS = [
    "TERM",
    "ACAD_CAREER",
    "COURSE CODE",
    "CLASS SECTION",
    "START DATE",
    "END DATE",
    "MON",
    "TUE",
    "WED",
    "FRI",
    "START TIME",
    "END TIME",
    "COURSE TITLE",
    "OFFER DEPT",
    "VENUE",
]

SEM1 = ("2025-26 Sem 1", datetime(2025, 9, 1), datetime(2025, 11, 29))
SEM2 = ("2025-26 Sem 2", datetime(2026, 1, 19), datetime(2026, 4, 30))


def _row(term, code, section, day, start, end, title):
    name, first, last = term
    days = [d if d == day else None for d in ("MON", "TUE", "WED", "FRI")]
    return [name, "UG", code, section, first, last, *days, start, end, title, "Computer Science", "MB101"]


def _write_workbook(path: Path, extra: list | None = None) -> None:
    wb = Workbook()
    ws = wb.active
    ws.append(HEADERS)
    rows = [
        _row(SEM1, "COMP1117", "1A", "MON", time(9, 30), time(10, 20), "Computer programming"),
        _row(SEM1, "COMP1117", "1B", "TUE", time(9, 30), time(10, 20), "Computer programming"),
        _row(SEM2, "COMP1117", "2A", "WED", time(9, 30), time(10, 20), "Computer programming"),
        _row(SEM1, "MATH1013", "1A", "FRI", time(12, 30), time(13, 20), "University mathematics"),
        *(extra or []),
    ]
    for r in rows:
        ws.append(r)
    wb.save(path)


class TestCLI(unittest.TestCase):
    def setUp(self) -> None:
        self.tmp = tempfile.TemporaryDirectory()
        base = Path(self.tmp.name)
        self.workbook = base / "timetable.xlsx"
        self.cart = base / "cart.json"
        _write_workbook(self.workbook)

    def tearDown(self) -> None:
        self.tmp.cleanup()

    def _run(self, *argv: str) -> tuple[int, str]:
        out = io.StringIO()
        with redirect_stdout(out):
            with self.assertRaises(SystemExit) as ctx:
                main(["--workbook", str(self.workbook), "--cart", str(self.cart), *argv])
        return ctx.exception.code, out.getvalue()

    def _cart(self) -> dict:
        return json.loads(self.cart.read_text(encoding="utf-8"))

    def test_cli_search_requires_text(self) -> None:
        code, _ = self._run("search", "")
        self.assertNotEqual(code, 0)

    def test_search(self) -> None:
        code, out = self._run("search", "programming")
        self.assertEqual(code, 0)
        self.assertIn("COMP1117", out)
        self.assertNotIn("MATH1013", out)

    def test_missing_workbook(self) -> None:
        self.workbook.unlink()
        code, out = self._run("selected")
        self.assertEqual(code, 1)
        self.assertIn("termplan fetch", out)

    def test_add_and_remove(self) -> None:
        self.assertEqual(self._run("add", "comp1117", "-s", "1A")[0], 0)
        self.assertEqual(self._run("add", "MATH1013")[0], 0)
        data = self._cart()
        self.assertEqual(
            [(s["course_code"], s["section_ids"]) for s in data["selected_courses"]],
            [("COMP1117", ["1A"]), ("MATH1013", ["1A"])],
        )

        # adding again replaces the section choice
        code, out = self._run("add", "COMP1117")
        self.assertEqual(code, 0)
        self.assertIn("Updated", out)
        self.assertEqual(self._cart()["selected_courses"][-1]["section_ids"], ["1A", "1B", "2A"])

        self.assertEqual(self._run("remove", "COMP1117")[0], 0)
        self.assertEqual([s["course_code"] for s in self._cart()["selected_courses"]], ["MATH1013"])

    def test_add_unknown(self) -> None:
        self.assertEqual(self._run("add", "NOPE1000")[0], 1)
        self.assertEqual(self._run("add", "COMP1117", "-s", "9Z")[0], 1)
        self.assertFalse(self.cart.exists())

    def test_overload(self) -> None:
        self.assertEqual(self._run("overload", "12")[0], 1)
        self.assertEqual(self._run("overload", "lots")[0], 1)
        self.assertEqual(self._run("overload", "8")[0], 0)
        self.assertEqual(self._cart()["overload"], 8)
        self.assertEqual(self._run("overload", "off")[0], 0)
        self.assertIsNone(self._cart()["overload"])

    def test_blockouts(self) -> None:
        code, _ = self._run("blockout", "add", "fri", "12:00", "13:00", "--label", "Lunch", "--term", "term1")
        self.assertEqual(code, 0)
        self.assertEqual(
            self._cart()["blockouts"],
            [{"day": "fri", "start_time": "12:00", "end_time": "13:00", "label": "Lunch", "applies_to": "term1"}],
        )

        self.assertEqual(self._run("blockout", "add", "mon", "13:00", "12:00")[0], 1)
        self.assertEqual(self._run("blockout", "remove", "5")[0], 1)

        code, out = self._run("blockout", "list")
        self.assertIn("fri 12:00-13:00 Lunch [term1]", out)
        self.assertEqual(self._run("blockout", "remove", "1")[0], 0)
        self.assertEqual(self._cart()["blockouts"], [])

    def test_plan_without_selection(self) -> None:
        code, out = self._run("plan")
        self.assertEqual(code, 0)
        self.assertIn("No courses selected", out)

    def test_plan_show_and_export(self) -> None:
        self._run("add", "COMP1117")
        self._run("add", "MATH1013")

        self.assertEqual(self._run("plan")[0], 0)
        self.assertEqual(self._run("show", "1")[0], 0)
        self.assertEqual(self._run("show", "99")[0], 1)

        out_file = Path(self.tmp.name) / "plan"
        code, out = self._run("export", "1", str(out_file))
        self.assertEqual(code, 0)
        ics = out_file.with_suffix(".ics")
        self.assertTrue(ics.exists())
        self.assertIn("BEGIN:VEVENT", ics.read_text(encoding="utf-8"))

    def test_lunch_blockout_removes_the_only_section(self) -> None:
        self._run("add", "MATH1013")
        self._run("blockout", "add", "fri", "12:00", "13:00")
        code, out = self._run("plan")
        self.assertEqual(code, 0)
        self.assertIn("No conflict-free schedule found", out)

    def test_strict_sections_reports_the_missing_section(self) -> None:
        _write_workbook(
            self.workbook,
            extra=[
                _row(SEM1, "ENGL1000FY", "1A", "TUE", time(14, 30), time(15, 20), "Academic English"),
                _row(SEM2, "ENGL1000FY", "2A", "TUE", time(14, 30), time(15, 20), "Academic English"),
            ],
        )
        self.assertEqual(self._run("add", "ENGL1000FY", "-s", "1A")[0], 0)

        code, out = self._run("plan", "--strict-sections")
        self.assertEqual(code, 1)
        self.assertIn("ENGL1000FY", out)
        self.assertIn("2025-26 Sem 2", out)
        self.assertNotIn("Something went wrong", out)

        # the default policy skips the course in the second term
        self.assertEqual(self._run("plan")[0], 0)

    def test_changed_data_clears_cart(self) -> None:
        self._run("add", "COMP1117")
        _write_workbook(
            self.workbook,
            extra=[_row(SEM2, "STAT1603", "2A", "MON", time(14, 30), time(15, 20), "Introductory statistics")],
        )
        code, out = self._run("selected")
        self.assertEqual(code, 0)
        self.assertIn("saved selection was cleared", out)
        self.assertIn("No courses selected.", out)


if __name__ == "__main__":
    unittest.main()
