"""
Section assignment for one term.

Given the courses placed in a term, enumerate every choice of one section per
course (cartesian product, course order then section order) that has no
internal time clash and does not hit an applicable blockout.

The search keeps a single stack of chosen sections (push before descending,
pop after) and abandons a branch as soon as the newest section clashes with
one already chosen. Leaves come out in the same order as a full product
filtered afterwards would give.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Sequence

from termplan.catalog import Catalog
from termplan.config import MISSING_ERROR, MISSING_SKIP
from termplan.conflicts import blocked_by, sections_conflict
from termplan.diagnostics import Diagnostics, count, warn
from termplan.errors import SectionUnavailableError
from termplan.model import Blockout, ScheduleEntry, Section, Selection


@dataclass(frozen=True)
class TermCourse:
    """A course placed in a term with the sections it may use there."""

    course_code: str
    course_title: str
    term: str
    options: tuple[Section, ...]


def prepare_term_courses(
    selections: Iterable[Selection],
    catalog: Catalog,
    term: str,
    policy: str = MISSING_SKIP,
    diagnostics: Diagnostics | None = None,
) -> list[TermCourse]:
    """
    Look up, for every selection placed in `term`, which of its accepted
    sections exist there.

    A course without any such section is dropped from the term with a warning
    (policy 'skip') or raises SectionUnavailableError (policy 'error').
    """
    out: list[TermCourse] = []
    for sel in selections:
        offering = catalog.find_offering(sel.course_code, term)
        options: list[Section] = []
        if offering is not None:
            options = [offering.sections[s] for s in sel.section_ids if s in offering.sections]

        if not options:
            if policy == MISSING_ERROR:
                raise SectionUnavailableError(sel.course_code, term, sel.section_ids)
            if offering is None:
                message = f"Course {sel.course_code} not offered in {term}, skipping"
            else:
                message = (
                    f"None of the selected sections for {sel.course_code} are available "
                    f"in {term}, skipping this course for this term"
                )
            warn(diagnostics, "section-unavailable", message, course_code=sel.course_code, term=term)
            continue

        out.append(
            TermCourse(
                course_code=sel.course_code,
                course_title=sel.title or offering.title,
                term=term,
                options=tuple(options),
            )
        )
    return out


def blockouts_for_term(blockouts: Iterable[Blockout], term_index: int) -> list[Blockout]:
    """Blockouts marked 'both' or this term (1 or 2)."""
    return [b for b in blockouts if b.applies_to_term(term_index)]


def enumerate_term(
    courses: Sequence[TermCourse],
    blockouts: Sequence[Blockout] = (),
    diagnostics: Diagnostics | None = None,
) -> list[list[ScheduleEntry]]:
    """
    Every conflict-free combination of one section per course.

    An empty course list has exactly one combination: the empty one.
    """
    if not courses:
        return [[]]

    # A section hit by a blockout can never be part of a combination
    options: list[list[Section]] = []
    for course in courses:
        kept = []
        for section in course.options:
            if blockouts and blocked_by(section.sessions, blockouts, diagnostics) is not None:
                count(diagnostics, "blockout_rejections")
                continue
            kept.append(section)
        options.append(kept)

    results: list[list[ScheduleEntry]] = []
    chosen: list[tuple[int, int]] = []
    clash_cache: dict[tuple[int, int, int, int], bool] = {}

    def clashes(i: int, j: int) -> bool:
        for pi, pj in chosen:
            key = (pi, pj, i, j)
            hit = clash_cache.get(key)
            if hit is None:
                hit = sections_conflict(options[pi][pj].sessions, options[i][j].sessions, diagnostics)
                clash_cache[key] = hit
            if hit:
                return True
        return False

    def walk(i: int) -> None:
        if i == len(courses):
            count(diagnostics, "combinations")
            results.append(
                [
                    ScheduleEntry(
                        course_code=courses[ci].course_code,
                        course_title=courses[ci].course_title,
                        term=courses[ci].term,
                        section=options[ci][sj].section_id,
                        sessions=tuple(options[ci][sj].sessions),
                    )
                    for ci, sj in chosen
                ]
            )
            return

        for j in range(len(options[i])):
            if clashes(i, j):
                count(diagnostics, "conflict_rejections")
                continue
            chosen.append((i, j))
            walk(i + 1)
            chosen.pop()

    walk(0)
    return results
