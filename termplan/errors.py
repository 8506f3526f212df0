"""
Exception types raised by termplan.

Expected infeasibility (too many courses, every combination clashes) is NOT
an exception: the engine returns an empty PlanResult for that. The classes
below are for bad input and for faults that should never happen when the
catalog was built correctly.
"""

from __future__ import annotations


class PlannerError(Exception):
    """Base class for all termplan errors."""


class WorkbookError(PlannerError):
    """The timetable workbook could not be fetched or read."""

    def __init__(self, message: str, path: str | None = None):
        self.path = path
        if path:
            message = f"{message} ({path})"
        super().__init__(message)


class CatalogLookupError(PlannerError, KeyError):
    """A course offering that upstream data guaranteed to exist is missing."""

    def __init__(self, course_code: str, term: str):
        self.course_code = course_code
        self.term = term
        super().__init__(f"No catalog entry for {course_code!r} in term {term!r}")

    def __str__(self) -> str:
        # KeyError would otherwise wrap the message in quotes
        return str(self.args[0])


class InvalidSelectionError(PlannerError, ValueError):
    """A selection without any acceptable section."""

    def __init__(self, course_code: str, message: str = "no acceptable sections"):
        self.course_code = course_code
        super().__init__(f"Invalid selection for {course_code!r}: {message}")


class InvalidBlockoutError(PlannerError, ValueError):
    """A blockout with an unknown day, bad times or unknown applicability."""


class InvalidConfigError(PlannerError, ValueError):
    """Planner configuration outside the allowed range."""


class SectionUnavailableError(PlannerError):
    """Raised by the strict missing-section policy."""

    def __init__(self, course_code: str, term: str, section_ids: tuple[str, ...]):
        self.course_code = course_code
        self.term = term
        self.section_ids = section_ids
        super().__init__(
            f"None of the selected sections {', '.join(section_ids)} of {course_code} "
            f"are offered in {term}"
        )
