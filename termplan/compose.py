"""
Joining per-term combinations into full schedules, and ranking them.

Rules:
- a year-long course must use the same section id in both terms
- a schedule missing any selected course is dropped
- schedules are ordered by the variance of their per-term course counts
  (even split first); equal variances keep generation order
"""

from __future__ import annotations

from typing import Iterable, Iterator, Sequence

from termplan.model import PlanSummary, Schedule, ScheduleEntry


def _sections_by_code(entries: Iterable[ScheduleEntry]) -> dict[str, str]:
    return {e.course_code: e.section for e in entries}


def year_long_sections_match(
    term1_entries: Sequence[ScheduleEntry],
    term2_entries: Sequence[ScheduleEntry],
    year_long_codes: Iterable[str],
) -> bool:
    """
    False if some year-long course sits in both halves with different sections.
    """
    first = _sections_by_code(term1_entries)
    second = _sections_by_code(term2_entries)
    for code in year_long_codes:
        s1 = first.get(code)
        s2 = second.get(code)
        if s1 is not None and s2 is not None and s1 != s2:
            return False
    return True


def join_terms(
    term1_combinations: Sequence[Sequence[ScheduleEntry]],
    term2_combinations: Sequence[Sequence[ScheduleEntry]],
    year_long_codes: Sequence[str] = (),
) -> Iterator[Schedule]:
    """
    Every (term 1, term 2) pairing that keeps year-long sections consistent.
    """
    for first in term1_combinations:
        for second in term2_combinations:
            if year_long_codes and not year_long_sections_match(first, second, year_long_codes):
                continue
            yield Schedule(entries=[*first, *second])


def is_complete(schedule: Schedule, selected_codes: set[str]) -> bool:
    return schedule.course_codes() == selected_codes


def term_counts(schedule: Schedule, terms: Sequence[str]) -> dict[str, int]:
    return {term: schedule.count_in(term) for term in terms}


def balance_variance(schedule: Schedule, terms: Sequence[str]) -> float:
    """
    Population variance of per-term entry counts, over all active terms (a
    term with no course counts as 0).
    """
    counts = list(term_counts(schedule, terms).values())
    if not counts:
        return 0.0
    mean = sum(counts) / len(counts)
    return sum((c - mean) ** 2 for c in counts) / len(counts)


def rank_schedules(schedules: Iterable[Schedule], terms: Sequence[str]) -> list[Schedule]:
    # sorted() is stable, so ties stay in generation order
    return sorted(schedules, key=lambda s: balance_variance(s, terms))


def summarize(schedule: Schedule, terms: Sequence[str]) -> PlanSummary:
    return PlanSummary(
        schedule=schedule,
        term_counts=term_counts(schedule, terms),
        total_courses=len(schedule.course_codes()),
    )
