"""
Small builders for timetable rows, sessions and selections used by the tests.
"""

from __future__ import annotations

from typing import Any, Optional

from termplan.catalog import Catalog
from termplan.model import Selection, Session

TERM1 = "2025-26 Sem 1"
TERM2 = "2025-26 Sem 2"

_DATES = {
    TERM1: ("2025-09-01", "2025-11-29"),
    TERM2: ("2026-01-19", "2026-04-30"),
}


def row(
    code: str,
    section: str = "L1",
    term: str = TERM1,
    days: tuple[str, ...] = ("mon",),
    start: Any = "09:00",
    end: Any = "10:00",
    career: str = "UG",
    title: Optional[str] = None,
    venue: str = "MB101",
) -> dict[str, Any]:
    start_date, end_date = _DATES.get(term, ("2025-06-01", "2025-07-31"))
    r: dict[str, Any] = {
        "TERM": term,
        "ACAD_CAREER": career,
        "COURSE CODE": code,
        "CLASS SECTION": section,
        "START DATE": start_date,
        "END DATE": end_date,
        "VENUE": venue,
        "START TIME": start,
        "END TIME": end,
        "COURSE TITLE": title or f"{code} title",
        "OFFER DEPT": "Dept",
    }
    for d in days:
        r[d.upper()] = d.upper()
    return r


def session(
    days: tuple[str, ...] = ("mon",),
    start: Optional[str] = "09:00",
    end: Optional[str] = "10:00",
    code: str = "X1001",
    section: str = "L1",
    term: str = TERM1,
) -> Session:
    start_date, end_date = _DATES[term]
    return Session(
        course_code=code,
        term=term,
        section=section,
        days=days,
        start_time=start,
        end_time=end,
        start_date=start_date,
        end_date=end_date,
        venue="MB101",
    )


def select(catalog: Catalog, code: str, *sections: str) -> Selection:
    course = catalog.course(code)
    assert course is not None, code
    return Selection.for_course(course, list(sections) or None)
