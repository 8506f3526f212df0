"""
Term capacity planning.

Splits the selected courses into:
- year-long courses (one slot in each term)
- courses that can only go into term 1 / term 2
- flexible courses (accepted sections exist in both terms)

and enumerates every way of distributing the flexible courses between the
two terms without exceeding the per-term limit. This is exhaustive: two
distributions can lead to different conflict-free timetables, so none may be
skipped.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator, Optional, Sequence

from termplan.catalog import Catalog
from termplan.diagnostics import Diagnostics, count, warn
from termplan.model import Selection

# Reasons for an empty plan detected before any search
OVER_CAPACITY = "over-capacity"
FLEXIBLE_OVER_CAPACITY = "flexible-over-capacity"


@dataclass
class CourseSplit:
    year_long: list[Selection] = field(default_factory=list)
    term1_only: list[Selection] = field(default_factory=list)
    term2_only: list[Selection] = field(default_factory=list)
    flexible: list[Selection] = field(default_factory=list)
    excluded: list[Selection] = field(default_factory=list)


def available_sections(selection: Selection, catalog: Catalog, term: str) -> list[str]:
    """
    The selection's accepted section ids that exist in `term`, in the order
    the user listed them.
    """
    offering = catalog.find_offering(selection.course_code, term)
    if offering is None:
        return []
    return [s for s in selection.section_ids if s in offering.sections]


def _offered_in(selection: Selection, term: Optional[str]) -> bool:
    if term is None:
        return False
    # selections built by hand may not list their terms; check the catalog then
    return not selection.terms or term in selection.terms


def classify_selections(
    selections: Sequence[Selection],
    catalog: Catalog,
    diagnostics: Diagnostics | None = None,
) -> CourseSplit:
    """
    Sort every selection into one bucket of a CourseSplit.

    With fewer than two active terms every course (year-long ones included)
    is fixed to the single term.
    """
    term1, term2 = catalog.term1, catalog.term2
    split = CourseSplit()

    for sel in selections:
        if sel.is_year_long and term2 is not None:
            split.year_long.append(sel)
            continue

        in1 = _offered_in(sel, term1) and bool(available_sections(sel, catalog, term1))
        in2 = _offered_in(sel, term2) and bool(available_sections(sel, catalog, term2))

        if in1 and in2:
            split.flexible.append(sel)
        elif in1:
            split.term1_only.append(sel)
        elif in2:
            split.term2_only.append(sel)
        else:
            split.excluded.append(sel)
            warn(
                diagnostics,
                "no-matching-section",
                f"No valid sections found for {sel.course_code} in any term "
                f"(accepted: {', '.join(sel.section_ids)})",
                course_code=sel.course_code,
            )

    return split


def remaining_slots(split: CourseSplit, capacity: int) -> tuple[int, int]:
    """
    Free slots per term once fixed and year-long courses are placed. May be
    negative.
    """
    fy = len(split.year_long)
    return capacity - len(split.term1_only) - fy, capacity - len(split.term2_only) - fy


def check_capacity(
    split: CourseSplit,
    capacity: int,
    diagnostics: Diagnostics | None = None,
) -> Optional[str]:
    """
    Return a reason string if no distribution can exist, else None.
    """
    slots1, slots2 = remaining_slots(split, capacity)
    fy = len(split.year_long)

    if slots1 < 0 or slots2 < 0:
        over_term = 1 if slots1 < 0 else 2
        fixed = split.term1_only if over_term == 1 else split.term2_only
        codes = [s.course_code for s in split.year_long + fixed]
        warn(
            diagnostics,
            OVER_CAPACITY,
            f"{len(fixed)} term-{over_term}-only + {fy} year-long courses exceed the limit "
            f"of {capacity}: {', '.join(codes)}",
            term=over_term,
            capacity=capacity,
        )
        return OVER_CAPACITY

    if len(split.flexible) > slots1 + slots2:
        warn(
            diagnostics,
            FLEXIBLE_OVER_CAPACITY,
            f"{len(split.flexible)} flexible courses need slots, but only "
            f"{slots1 + slots2} are left",
            capacity=capacity,
        )
        return FLEXIBLE_OVER_CAPACITY

    return None


def iter_distributions(
    flexible: Sequence[Selection],
    slots1: int,
    slots2: int,
    diagnostics: Diagnostics | None = None,
) -> Iterator[tuple[list[Selection], list[Selection]]]:
    """
    Yield every (to_term1, to_term2) split of `flexible` that fits the free
    slots. Depth-first, "term 1" branch before "term 2" branch.
    """
    to1: list[Selection] = []
    to2: list[Selection] = []

    def walk(index: int) -> Iterator[tuple[list[Selection], list[Selection]]]:
        if index == len(flexible):
            count(diagnostics, "distributions")
            yield list(to1), list(to2)
            return

        course = flexible[index]
        if len(to1) < slots1:
            to1.append(course)
            yield from walk(index + 1)
            to1.pop()
        if len(to2) < slots2:
            to2.append(course)
            yield from walk(index + 1)
            to2.pop()

    yield from walk(0)
