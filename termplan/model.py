"""
Central data model definitions used across the project.

This module defines the canonical structure of the planner objects so that:
- the catalog, the engine, storage and the CLI share the same field names
- engine inputs stay immutable (frozen dataclasses, tuples instead of lists)
- a schedule carries everything needed to render it without the catalog
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from termplan.errors import InvalidBlockoutError, InvalidSelectionError

DAYS: tuple[str, ...] = ("mon", "tue", "wed", "thu", "fri", "sat", "sun")

# Blockout applicability values
TERM1 = "term1"
TERM2 = "term2"
BOTH = "both"
APPLICABILITY: tuple[str, ...] = (TERM1, TERM2, BOTH)

YEAR_LONG_SUFFIX = "FY"


def is_year_long(course_code: Optional[str]) -> bool:
    """
    A course whose code ends with 'FY' runs through both terms with a single
    section choice.
    """
    return bool(course_code) and course_code.strip().endswith(YEAR_LONG_SUFFIX)


@dataclass(frozen=True)
class Session:
    """
    One meeting pattern of a section (one row of the timetable sheet).

    `days` holds the active day keys (subset of DAYS). Times are 'HH:MM' and
    dates ISO 'YYYY-MM-DD' when the source value could be read; otherwise the
    raw text is kept so the conflict layer can report it.
    """

    course_code: str
    term: str
    section: str
    days: tuple[str, ...] = ()
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    venue: str = ""
    class_number: str = ""
    instructor: str = ""

    def meets_on(self, day: str) -> bool:
        return day in self.days


@dataclass
class Section:
    section_id: str
    sessions: list[Session] = field(default_factory=list)


@dataclass
class CourseOffering:
    """
    A course in one term: sections keyed by id, in first-seen order.
    """

    course_code: str
    title: str
    department: str
    term: str
    sections: dict[str, Section] = field(default_factory=dict)

    @property
    def key(self) -> str:
        return offering_key(self.course_code, self.term)


def offering_key(course_code: str, term: str) -> str:
    return f"{course_code}-{term}"


@dataclass
class Course:
    """
    Represents one course across all terms (the unique-course list entry).
    """

    course_code: str
    title: str
    department: str
    terms: list[str] = field(default_factory=list)
    section_ids: list[str] = field(default_factory=list)

    @property
    def is_year_long(self) -> bool:
        return is_year_long(self.course_code)

    @property
    def section_count(self) -> int:
        return len(self.section_ids)


@dataclass(frozen=True)
class Selection:
    """
    One chosen course plus the sections the user is willing to take.

    Use `Selection.for_course` to build one from the catalog; passing no
    sections there means "any section" and is resolved immediately, so later
    catalog changes do not alter a selection already made.
    """

    course_code: str
    section_ids: tuple[str, ...]
    terms: tuple[str, ...] = ()
    title: str = ""

    def __post_init__(self) -> None:
        if not self.section_ids:
            raise InvalidSelectionError(self.course_code)

    @classmethod
    def for_course(cls, course: Course, section_ids: Optional[list[str]] = None) -> "Selection":
        if section_ids:
            chosen = tuple(dict.fromkeys(s.strip() for s in section_ids if s.strip()))
            unknown = [s for s in chosen if s not in course.section_ids]
            if unknown:
                raise InvalidSelectionError(
                    course.course_code, f"unknown sections {', '.join(unknown)}"
                )
        else:
            chosen = tuple(course.section_ids)
        return cls(
            course_code=course.course_code,
            section_ids=chosen,
            terms=tuple(course.terms),
            title=course.title,
        )

    @property
    def is_year_long(self) -> bool:
        return is_year_long(self.course_code)


@dataclass(frozen=True)
class Blockout:
    """
    A weekly time window the user is not available, e.g. a part-time job.
    """

    day: str
    start_time: str
    end_time: str
    label: str = ""
    applies_to: str = BOTH

    def __post_init__(self) -> None:
        # local import: conflicts imports this module
        from termplan.conflicts import time_to_minutes

        if self.day not in DAYS:
            raise InvalidBlockoutError(f"Unknown day {self.day!r}, expected one of {', '.join(DAYS)}")
        if self.applies_to not in APPLICABILITY:
            raise InvalidBlockoutError(
                f"Unknown applicability {self.applies_to!r}, expected one of {', '.join(APPLICABILITY)}"
            )
        try:
            start = time_to_minutes(self.start_time)
            end = time_to_minutes(self.end_time)
        except ValueError as exc:
            raise InvalidBlockoutError(str(exc)) from exc
        if start >= end:
            raise InvalidBlockoutError(
                f"Blockout start {self.start_time} must be before end {self.end_time}"
            )

    def applies_to_term(self, term_index: int) -> bool:
        """term_index is 1 or 2."""
        if self.applies_to == BOTH:
            return True
        return self.applies_to == (TERM1 if term_index == 1 else TERM2)


@dataclass(frozen=True)
class ScheduleEntry:
    course_code: str
    course_title: str
    term: str
    section: str
    sessions: tuple[Session, ...] = ()


@dataclass
class Schedule:
    """
    One complete assignment: one entry per (course, term it is taken in).
    Year-long courses contribute one entry per term.
    """

    entries: list[ScheduleEntry] = field(default_factory=list)

    def course_codes(self) -> set[str]:
        return {e.course_code for e in self.entries}

    def count_in(self, term: str) -> int:
        return sum(1 for e in self.entries if e.term == term)

    def entries_in(self, term: str) -> list[ScheduleEntry]:
        return [e for e in self.entries if e.term == term]

    def section_of(self, course_code: str, term: str) -> Optional[str]:
        for e in self.entries:
            if e.course_code == course_code and e.term == term:
                return e.section
        return None


@dataclass
class PlanSummary:
    """Display companion of a Schedule: per-term counts and distinct courses."""

    schedule: Schedule
    term_counts: dict[str, int]
    total_courses: int


@dataclass
class PlanResult:
    """
    Output of one engine run. `schedules` is empty when nothing fits; `reason`
    then says why.
    """

    schedules: list[Schedule] = field(default_factory=list)
    plans: list[PlanSummary] = field(default_factory=list)
    terms: list[str] = field(default_factory=list)
    reason: Optional[str] = None

    @property
    def feasible(self) -> bool:
        return bool(self.schedules)
