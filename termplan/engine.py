"""
Schedule generation: the single entry point of the planner.

Algorithm:
1. Classify the selected courses (year-long / term-1 only / term-2 only /
   flexible) from the sections the user actually accepted
2. Stop early if fixed and year-long courses alone exceed the term limit,
   or if the flexible ones cannot fit into what is left
3. Enumerate every distribution of flexible courses over the two terms
4. For each distribution, enumerate conflict-free section combinations per
   term (blockouts applied per term)
5. Join term-1 and term-2 combinations, keeping year-long sections equal
6. Drop schedules missing a selected course, rank by term balance

The call is pure and synchronous but can take a while for large selections;
run it off any latency-sensitive thread.
"""

from __future__ import annotations

import logging
from typing import Iterable, Optional, Sequence

from termplan.assign import blockouts_for_term, enumerate_term, prepare_term_courses
from termplan.catalog import Catalog
from termplan.compose import is_complete, join_terms, rank_schedules, summarize
from termplan.config import PlannerConfig
from termplan.diagnostics import Diagnostics, count
from termplan.model import Blockout, PlanResult, Schedule, Selection
from termplan.planner import check_capacity, classify_selections, iter_distributions, remaining_slots

logger = logging.getLogger(__name__)

NO_SELECTION = "no-selection"
NO_SCHEDULE = "no-schedule"
INCOMPLETE = "incomplete"


def generate_schedules(
    selections: Sequence[Selection],
    catalog: Catalog,
    blockouts: Iterable[Blockout] = (),
    config: Optional[PlannerConfig] = None,
    diagnostics: Diagnostics | None = None,
) -> PlanResult:
    """
    Return every complete, conflict-free schedule for `selections`, most
    balanced first. An empty result (with `reason` set) means nothing fits.
    """
    config = config or PlannerConfig()
    terms = list(catalog.terms)
    blockouts = list(blockouts)

    if not selections:
        return PlanResult(terms=terms, reason=NO_SELECTION)

    term1, term2 = catalog.term1, catalog.term2
    logger.info(
        "Generating schedules for %d courses, terms=%s, limit=%d, blockouts=%d",
        len(selections),
        terms,
        config.capacity,
        len(blockouts),
    )

    split = classify_selections(selections, catalog, diagnostics)
    logger.debug(
        "Year-long: %s | term 1 only: %s | term 2 only: %s | flexible: %s",
        [s.course_code for s in split.year_long],
        [s.course_code for s in split.term1_only],
        [s.course_code for s in split.term2_only],
        [s.course_code for s in split.flexible],
    )

    reason = check_capacity(split, config.capacity, diagnostics)
    if reason is not None:
        return PlanResult(terms=terms, reason=reason)
    if term1 is None:
        return PlanResult(terms=terms, reason=NO_SCHEDULE)

    slots1, slots2 = remaining_slots(split, config.capacity)
    block1 = blockouts_for_term(blockouts, 1)
    block2 = blockouts_for_term(blockouts, 2)
    year_long_codes = [s.course_code for s in split.year_long]

    generated: list[Schedule] = []
    for to_term1, to_term2 in iter_distributions(split.flexible, slots1, slots2, diagnostics):
        courses1 = prepare_term_courses(
            [*split.year_long, *split.term1_only, *to_term1],
            catalog,
            term1,
            config.missing_sections,
            diagnostics,
        )
        combos1 = enumerate_term(courses1, block1, diagnostics)
        if not combos1:
            continue

        if term2 is not None:
            courses2 = prepare_term_courses(
                [*split.year_long, *split.term2_only, *to_term2],
                catalog,
                term2,
                config.missing_sections,
                diagnostics,
            )
            combos2 = enumerate_term(courses2, block2, diagnostics)
        else:
            combos2 = [[]]

        generated.extend(join_terms(combos1, combos2, year_long_codes))

    selected_codes = {s.course_code for s in selections}
    complete = [s for s in generated if is_complete(s, selected_codes)]
    count(diagnostics, "incomplete_rejections", len(generated) - len(complete))

    ranked = rank_schedules(complete, terms)
    logger.info("Found %d complete schedule(s) out of %d generated", len(ranked), len(generated))

    if not ranked:
        return PlanResult(terms=terms, reason=INCOMPLETE if generated else NO_SCHEDULE)

    return PlanResult(
        schedules=ranked,
        plans=[summarize(s, terms) for s in ranked],
        terms=terms,
    )
