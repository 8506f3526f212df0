"""
Course catalog index (row records -> structured courses).

- Keeps undergraduate rows only and drops summer terms
- Groups rows into Course -> Term -> Section -> [Session]
- Picks the two active terms (lexical order: earlier = term 1)
- Copies year-long ('FY') courses from term 1 into term 2 when the sheet
  only lists them once
- Builds the unique-course list used for searching and selecting

Important rules:
- 1 sheet row = 1 Session
- rows without a course code are dropped silently
- an existing term-2 entry of a year-long course is never overwritten
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, datetime, time
from typing import Any, Iterable, Optional

from termplan.conflicts import minutes_to_time, time_to_minutes
from termplan.diagnostics import Diagnostics, warn
from termplan.errors import CatalogLookupError
from termplan.model import DAYS, Course, CourseOffering, Section, Session, is_year_long, offering_key
from termplan.timetable import normalize_date, parse_date

logger = logging.getLogger(__name__)

UNDERGRADUATE_CAREERS = frozenset({"UG", "UGME", "UGDE"})
SUMMER_MARKERS = ("summer", "sum sem")

# Column headers of the timetable sheet
COL_TERM = "TERM"
COL_CAREER = "ACAD_CAREER"
COL_CODE = "COURSE CODE"
COL_SECTION = "CLASS SECTION"
COL_CLASS_NUMBER = "CLASS NUMBER"
COL_START_DATE = "START DATE"
COL_END_DATE = "END DATE"
COL_VENUE = "VENUE"
COL_START_TIME = "START TIME"
COL_END_TIME = "END TIME"
COL_TITLE = "COURSE TITLE"
COL_DEPT = "OFFER DEPT"
COL_INSTRUCTOR = "INSTRUCTOR"


# ---------------------------------------------------------------------------
# Row helpers
# ---------------------------------------------------------------------------


def is_summer_term(term: Optional[str]) -> bool:
    if not term:
        return False
    low = term.lower()
    return any(marker in low for marker in SUMMER_MARKERS)


def is_undergraduate(career: Optional[str]) -> bool:
    return (career or "").strip() in UNDERGRADUATE_CAREERS


def _text(value: Any) -> str:
    return "" if value is None else str(value).strip()


def normalize_row(row: dict[str, Any]) -> dict[str, Any]:
    """
    Strip whitespace around header names (the sheet has ' COURSE CODE' in
    some exports).
    """
    return {str(k).strip(): v for k, v in row.items() if k is not None}


def normalize_time(value: Any) -> Optional[str]:
    """
    'HH:MM' for readable times, raw text for unreadable ones, None if empty.
    """
    if value is None:
        return None
    if isinstance(value, (time, datetime)):
        return f"{value.hour:02d}:{value.minute:02d}"
    text = str(value).strip()
    if not text:
        return None
    try:
        return minutes_to_time(time_to_minutes(text))
    except ValueError:
        return text


def parse_session(row: dict[str, Any], term: Optional[str] = None) -> Session:
    """
    Build one Session from a normalized row.
    """
    days = tuple(d for d in DAYS if _text(row.get(d.upper())))
    return Session(
        course_code=_text(row.get(COL_CODE)),
        term=term if term is not None else _text(row.get(COL_TERM)),
        section=_text(row.get(COL_SECTION)),
        days=days,
        start_time=normalize_time(row.get(COL_START_TIME)),
        end_time=normalize_time(row.get(COL_END_TIME)),
        start_date=normalize_date(row.get(COL_START_DATE)),
        end_date=normalize_date(row.get(COL_END_DATE)),
        venue=_text(row.get(COL_VENUE)),
        class_number=_text(row.get(COL_CLASS_NUMBER)),
        instructor=_text(row.get(COL_INSTRUCTOR)),
    )


def filter_rows(rows: Iterable[dict[str, Any]]) -> list[dict[str, Any]]:
    """
    Keep undergraduate, non-summer rows.
    """
    out: list[dict[str, Any]] = []
    for row in rows:
        if not is_undergraduate(_text(row.get(COL_CAREER))):
            continue
        if is_summer_term(_text(row.get(COL_TERM))):
            continue
        out.append(row)
    return out


# ---------------------------------------------------------------------------
# Build steps
# ---------------------------------------------------------------------------


def group_sections(rows: Iterable[dict[str, Any]]) -> dict[str, CourseOffering]:
    """
    Group rows by (course code, term) into offerings with sections keyed by id.
    """
    grouped: dict[str, CourseOffering] = {}

    for row in rows:
        code = _text(row.get(COL_CODE))
        if not code:
            continue
        term = _text(row.get(COL_TERM))
        section_id = _text(row.get(COL_SECTION))

        key = offering_key(code, term)
        offering = grouped.get(key)
        if offering is None:
            offering = CourseOffering(
                course_code=code,
                title=_text(row.get(COL_TITLE)),
                department=_text(row.get(COL_DEPT)),
                term=term,
            )
            grouped[key] = offering

        section = offering.sections.get(section_id)
        if section is None:
            section = Section(section_id=section_id)
            offering.sections[section_id] = section
        section.sessions.append(parse_session(row, term=term))

    return grouped


def active_terms(rows: Iterable[dict[str, Any]]) -> list[str]:
    """
    All distinct non-summer term labels, sorted.
    """
    terms = {_text(r.get(COL_TERM)) for r in rows}
    return sorted(t for t in terms if t and not is_summer_term(t))


def synthesize_year_long(
    offerings: dict[str, CourseOffering],
    terms: list[str],
    diagnostics: Diagnostics | None = None,
) -> int:
    """
    Copy every year-long course that only has term-1 rows into term 2,
    re-tagging its sessions. The copies take the date range of the native
    term-2 sessions; if term 2 has no readable dates they keep the term-1
    dates and a 'year-long-dates' issue is recorded. Returns the number of
    offerings created.
    """
    if len(terms) < 2:
        return 0
    term1, term2 = terms[0], terms[1]
    dates2 = term_date_range(offerings, term2)

    created = 0
    for offering in list(offerings.values()):
        if offering.term != term1 or not is_year_long(offering.course_code):
            continue
        key2 = offering_key(offering.course_code, term2)
        if key2 in offerings:
            continue

        copy = CourseOffering(
            course_code=offering.course_code,
            title=offering.title,
            department=offering.department,
            term=term2,
        )
        for section_id, section in offering.sections.items():
            copy.sections[section_id] = Section(
                section_id=section_id,
                sessions=[_retag(s, term2, dates2) for s in section.sessions],
            )
        offerings[key2] = copy
        created += 1
        if dates2 is None:
            warn(
                diagnostics,
                "year-long-dates",
                f"No readable dates in {term2}; {offering.course_code} keeps its {term1} dates there",
                course_code=offering.course_code,
                term=term2,
            )
        logger.debug(
            "Duplicated year-long course %s from %s to %s (%d sections)",
            offering.course_code,
            term1,
            term2,
            len(offering.sections),
        )

    return created


def term_date_range(offerings: dict[str, CourseOffering], term: str) -> Optional[tuple[str, str]]:
    """
    Earliest start and latest end date (ISO) over every session of `term`.
    None if no session there has readable dates.
    """
    first: Optional[date] = None
    last: Optional[date] = None
    for offering in offerings.values():
        if offering.term != term:
            continue
        for section in offering.sections.values():
            for session in section.sessions:
                start = parse_date(session.start_date)
                end = parse_date(session.end_date)
                if start is None or end is None:
                    continue
                if first is None or start < first:
                    first = start
                if last is None or end > last:
                    last = end
    if first is None or last is None:
        return None
    return first.isoformat(), last.isoformat()


def _retag(session: Session, term: str, dates: Optional[tuple[str, str]] = None) -> Session:
    start_date, end_date = dates if dates is not None else (session.start_date, session.end_date)
    return Session(
        course_code=session.course_code,
        term=term,
        section=session.section,
        days=session.days,
        start_time=session.start_time,
        end_time=session.end_time,
        start_date=start_date,
        end_date=end_date,
        venue=session.venue,
        class_number=session.class_number,
        instructor=session.instructor,
    )


def unique_courses(offerings: dict[str, CourseOffering]) -> list[Course]:
    """
    One Course per code with the union of its section ids and its terms,
    sorted by code.
    """
    by_code: dict[str, Course] = {}
    for offering in offerings.values():
        course = by_code.get(offering.course_code)
        if course is None:
            course = Course(
                course_code=offering.course_code,
                title=offering.title,
                department=offering.department,
            )
            by_code[offering.course_code] = course
        if offering.term not in course.terms:
            course.terms.append(offering.term)
        for section_id in offering.sections:
            if section_id not in course.section_ids:
                course.section_ids.append(section_id)

    return sorted(by_code.values(), key=lambda c: c.course_code)


# ---------------------------------------------------------------------------
# Catalog
# ---------------------------------------------------------------------------


@dataclass
class Catalog:
    offerings: dict[str, CourseOffering] = field(default_factory=dict)
    courses: list[Course] = field(default_factory=list)
    terms: list[str] = field(default_factory=list)
    total_sessions: int = 0

    def __post_init__(self) -> None:
        self._by_code = {c.course_code: c for c in self.courses}

    @property
    def term1(self) -> Optional[str]:
        return self.terms[0] if self.terms else None

    @property
    def term2(self) -> Optional[str]:
        return self.terms[1] if len(self.terms) > 1 else None

    def find_offering(self, course_code: str, term: str) -> Optional[CourseOffering]:
        return self.offerings.get(offering_key(course_code, term))

    def offering(self, course_code: str, term: str) -> CourseOffering:
        found = self.find_offering(course_code, term)
        if found is None:
            raise CatalogLookupError(course_code, term)
        return found

    def course(self, course_code: str) -> Optional[Course]:
        return self._by_code.get(course_code.strip().upper()) or self._by_code.get(course_code.strip())

    def search(self, text: str) -> list[Course]:
        """
        Substring match over code, title and department (case-insensitive).
        """
        query = text.strip().lower()
        if not query:
            return []
        out = []
        for c in self.courses:
            hay = f"{c.course_code} {c.title} {c.department}".lower()
            if query in hay:
                out.append(c)
        return out


def build_catalog(rows: Iterable[dict[str, Any]], diagnostics: Diagnostics | None = None) -> Catalog:
    """
    Build the catalog from raw sheet rows. Pure function of its input.
    """
    normalized = [normalize_row(r) for r in rows]
    filtered = filter_rows(normalized)
    terms = active_terms(filtered)

    if len(terms) > 2:
        warn(
            diagnostics,
            "extra-terms",
            f"Found {len(terms)} terms {terms}; only {terms[0]} and {terms[1]} are planned",
            terms=terms,
        )
        kept = set(terms[:2])
        filtered = [r for r in filtered if _text(r.get(COL_TERM)) in kept]
        terms = terms[:2]

    offerings = group_sections(filtered)
    synthesize_year_long(offerings, terms, diagnostics)
    courses = unique_courses(offerings)

    logger.info(
        "Catalog built: %d rows kept, %d offerings, %d courses, terms=%s",
        len(filtered),
        len(offerings),
        len(courses),
        terms,
    )
    return Catalog(
        offerings=offerings,
        courses=courses,
        terms=terms,
        total_sessions=len(filtered),
    )
