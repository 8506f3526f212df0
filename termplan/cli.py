"""
CLI (Command Line Interface).

This module provides the terminal commands, e.g.:

    termplan fetch <url>
    termplan search <text>
    termplan add <course_code> [--section L1 --section L2]
    termplan remove <course_code>
    termplan selected
    termplan blockout add fri 12:00 13:00 --label Lunch --term both
    termplan overload 8 | off
    termplan plan
    termplan show <n>
    termplan export <n> <file.ics>

Note:
- The timetable workbook is read on every call (it is small) and the cart is
  checked against its hash
- Plans are listed with rich tables; other commands print plain text
"""

from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import Optional

from rich import box
from rich.console import Console
from rich.table import Table

from termplan.catalog import Catalog, build_catalog
from termplan.config import MISSING_ERROR, MISSING_SKIP, OVERLOAD_MAX, OVERLOAD_MIN, PlannerConfig
from termplan.diagnostics import Diagnostics
from termplan.engine import INCOMPLETE, NO_SCHEDULE, NO_SELECTION, generate_schedules
from termplan.errors import (
    InvalidBlockoutError,
    InvalidConfigError,
    InvalidSelectionError,
    PlannerError,
    SectionUnavailableError,
)
from termplan.export_ics import export_schedule_to_ics
from termplan.fetch import default_workbook_path, download_workbook
from termplan.model import APPLICABILITY, BOTH, DAYS, Blockout, PlanResult, Schedule, Selection
from termplan.planner import FLEXIBLE_OVER_CAPACITY, OVER_CAPACITY
from termplan.storage import Cart, has_saved_cart, hash_rows, load_cart, save_cart
from termplan.timetable import schedule_date_range, session_in_week, week_ranges
from termplan.workbook import read_workbook_rows

console = Console()

REASON_MESSAGES = {
    NO_SELECTION: "No courses selected. Add some with: termplan add <course_code>",
    OVER_CAPACITY: "Too many courses are fixed to one term for the per-term limit. "
    "Remove courses or enable overload.",
    FLEXIBLE_OVER_CAPACITY: "The selected courses do not fit into two terms with the current limit.",
    NO_SCHEDULE: "No conflict-free schedule found. Try fewer or different courses/sections, "
    "or remove blockouts.",
    INCOMPLETE: "Some courses have none of the selected sections in the term they would need. "
    "Check your section choices.",
}


class _State:
    """
    Catalog and cart for one CLI call.
    """

    def __init__(self, catalog: Catalog, data_hash: str, cart: Cart, cart_path: Optional[Path]):
        self.catalog = catalog
        self.data_hash = data_hash
        self.cart = cart
        self.cart_path = cart_path

    def save(self) -> None:
        save_cart(
            self.data_hash,
            self.cart.selections,
            self.cart.blockouts,
            overload=self.cart.overload,
            path=self.cart_path,
        )

    def config(self, strict_sections: bool = False) -> PlannerConfig:
        return PlannerConfig.with_overload(
            self.cart.overload,
            missing_sections=MISSING_ERROR if strict_sections else MISSING_SKIP,
        )


def _load_state(args: argparse.Namespace) -> Optional[_State]:
    """
    Read the workbook and the matching cart.

    CLI behavior: missing data is reported, never a traceback.
    """
    workbook = Path(args.workbook) if args.workbook else default_workbook_path()
    try:
        rows = read_workbook_rows(workbook)
    except PlannerError as exc:
        print(f"Cannot read timetable data: {exc}")
        print("Download it with: termplan fetch <url>  (or pass --workbook <file.xlsx>)")
        return None

    data_hash = hash_rows(rows)
    catalog = build_catalog(rows)

    cart_path = Path(args.cart) if args.cart else None
    had_cart = has_saved_cart(cart_path)
    cart = load_cart(data_hash, cart_path)
    if cart is None:
        if had_cart:
            print("Timetable data changed since your last session; saved selection was cleared.")
        cart = Cart()

    return _State(catalog, data_hash, cart, cart_path)


def _course_line(catalog: Catalog, code: str) -> str:
    c = catalog.course(code)
    if c is None:
        return f"{code} | (not in timetable)"
    fy = " | full year" if c.is_year_long else ""
    return f"{c.course_code} | {c.title or '(no title)'} | {c.department} | {', '.join(c.terms)}{fy}"


def _cmd_fetch(args: argparse.Namespace) -> int:
    """
    Download the timetable workbook.
    """
    dest = Path(args.workbook) if args.workbook else default_workbook_path()
    try:
        path = download_workbook(args.url, dest, refresh=args.refresh)
    except PlannerError as exc:
        print(f"Download failed: {exc}")
        return 1
    print(f"Timetable saved to: {path}")
    return 0


def _cmd_search(args: argparse.Namespace, state: _State) -> int:
    """
    Search courses by substring match in code, title or department.
    """
    matches = state.catalog.search(args.text)
    if not matches:
        print("No results.")
        return 0

    # show max 20
    for c in matches[:20]:
        print(f"{_course_line(state.catalog, c.course_code)} | sections: {', '.join(c.section_ids)}")
    if len(matches) > 20:
        print(f"... and {len(matches) - 20} more results")
    return 0


def _cmd_add(args: argparse.Namespace, state: _State) -> int:
    """
    Add a course (optionally restricted to some sections) to the cart.
    Adding an already selected course replaces its section choice.
    """
    code = args.course_code.strip().upper()
    course = state.catalog.course(code)
    if course is None:
        print(f"Course '{code}' not found in the timetable.")
        return 1

    try:
        selection = Selection.for_course(course, args.section)
    except InvalidSelectionError as exc:
        print(str(exc))
        return 1

    others = [s for s in state.cart.selections if s.course_code != course.course_code]
    replaced = len(others) != len(state.cart.selections)
    state.cart.selections = [*others, selection]
    state.save()

    verb = "Updated" if replaced else "Added"
    print(
        f"{verb}: {course.course_code} sections {', '.join(selection.section_ids)} "
        f"(selected: {len(state.cart.selections)})"
    )
    return 0


def _cmd_remove(args: argparse.Namespace, state: _State) -> int:
    code = args.course_code.strip().upper()
    kept = [s for s in state.cart.selections if s.course_code.upper() != code]
    if len(kept) == len(state.cart.selections):
        print(f"Not selected: {code}")
        return 0

    state.cart.selections = kept
    state.save()
    print(f"Removed: {code} (selected: {len(kept)})")
    return 0


def _cmd_selected(args: argparse.Namespace, state: _State) -> int:
    cart = state.cart
    if not cart.selections:
        print("No courses selected.")
    else:
        print("Selected courses:")
        for s in cart.selections:
            print(f"- {_course_line(state.catalog, s.course_code)} | sections: {', '.join(s.section_ids)}")

    _print_blockouts(cart)
    limit = cart.overload if cart.overload is not None else PlannerConfig().capacity
    print(f"Courses per term: {limit}{' (overload)' if cart.overload is not None else ''}")
    return 0


def _print_blockouts(cart: Cart) -> None:
    if not cart.blockouts:
        print("No blockouts.")
        return
    print("Blockouts:")
    for i, b in enumerate(cart.blockouts, start=1):
        label = f" {b.label}" if b.label else ""
        print(f"{i}) {b.day} {b.start_time}-{b.end_time}{label} [{b.applies_to}]")


def _cmd_blockout(args: argparse.Namespace, state: _State) -> int:
    cart = state.cart

    if args.blockout_command == "list":
        _print_blockouts(cart)
        return 0

    if args.blockout_command == "add":
        try:
            blockout = Blockout(
                day=args.day,
                start_time=args.start,
                end_time=args.end,
                label=args.label or "",
                applies_to=args.term,
            )
        except InvalidBlockoutError as exc:
            print(f"Invalid blockout: {exc}")
            return 1
        cart.blockouts.append(blockout)
        state.save()
        print(f"Blockout added ({len(cart.blockouts)} total).")
        return 0

    # remove
    if not (1 <= args.index <= len(cart.blockouts)):
        print("Out of range.")
        return 1
    removed = cart.blockouts.pop(args.index - 1)
    state.save()
    print(f"Removed blockout: {removed.day} {removed.start_time}-{removed.end_time}")
    return 0


def _cmd_overload(args: argparse.Namespace, state: _State) -> int:
    value = args.value.strip().lower()
    if value == "off":
        state.cart.overload = None
        state.save()
        print(f"Overload disabled ({PlannerConfig().capacity} courses per term).")
        return 0

    try:
        config = PlannerConfig.with_overload(int(value))
    except (ValueError, InvalidConfigError):
        print(f"Please enter an integer between {OVERLOAD_MIN} and {OVERLOAD_MAX}, or 'off'.")
        return 1

    state.cart.overload = config.capacity
    state.save()
    print(f"Overload enabled ({config.capacity} courses per term).")
    return 0


def _generate(args: argparse.Namespace, state: _State) -> Optional[PlanResult]:
    """
    Run the engine. Unexpected errors are reported, not raised.
    """
    diag = Diagnostics()
    try:
        result = generate_schedules(
            state.cart.selections,
            state.catalog,
            state.cart.blockouts,
            state.config(strict_sections=args.strict_sections),
            diag,
        )
    except SectionUnavailableError as exc:
        print(f"{exc}. Run without --strict-sections to skip such courses.")
        return None
    except PlannerError as exc:
        print(f"Something went wrong while generating schedules ({exc}). Please try again.")
        return None

    if diag.issues:
        print(f"{len(diag.issues)} data warning(s); run with -v for details.")
    return result


def _entries_label(schedule: Schedule, term: str) -> str:
    return ", ".join(f"{e.course_code} {e.section}" for e in schedule.entries_in(term))


def _cmd_plan(args: argparse.Namespace, state: _State) -> int:
    result = _generate(args, state)
    if result is None:
        return 1
    if not result.feasible:
        print(REASON_MESSAGES.get(result.reason or NO_SCHEDULE, REASON_MESSAGES[NO_SCHEDULE]))
        return 0

    shown = result.plans[: args.limit]
    table = Table(title=f"Plans ({len(result.plans)} found, best first)", box=box.SIMPLE)
    table.add_column("#", justify="right")
    for term in result.terms:
        table.add_column(f"{term}")
    table.add_column("Courses", justify="right")
    for i, plan in enumerate(shown, start=1):
        row = [str(i)]
        for term in result.terms:
            row.append(f"[{plan.term_counts[term]}] {_entries_label(plan.schedule, term)}")
        row.append(str(plan.total_courses))
        table.add_row(*row)
    console.print(table)

    if len(result.plans) > len(shown):
        print(f"... and {len(result.plans) - len(shown)} more plans (use --limit)")
    return 0


def _pick_plan(args: argparse.Namespace, state: _State) -> Optional[Schedule]:
    result = _generate(args, state)
    if result is None:
        return None
    if not result.feasible:
        print(REASON_MESSAGES.get(result.reason or NO_SCHEDULE, REASON_MESSAGES[NO_SCHEDULE]))
        return None
    if not (1 <= args.index <= len(result.schedules)):
        print(f"Out of range (1-{len(result.schedules)}).")
        return None
    return result.schedules[args.index - 1]


def _cmd_show(args: argparse.Namespace, state: _State) -> int:
    """
    Print one plan in detail, term by term.
    """
    schedule = _pick_plan(args, state)
    if schedule is None:
        return 1

    for term in state.catalog.terms:
        entries = schedule.entries_in(term)
        table = Table(title=f"{term} ({len(entries)} courses)", box=box.SIMPLE)
        table.add_column("Course")
        table.add_column("Section")
        table.add_column("Days")
        table.add_column("Time")
        table.add_column("Venue")
        for e in entries:
            for s in e.sessions:
                table.add_row(
                    f"{e.course_code} {e.course_title}",
                    e.section,
                    " ".join(d.capitalize() for d in s.days),
                    f"{s.start_time or '?'}-{s.end_time or '?'}",
                    s.venue,
                )
        console.print(table)

    first, last = schedule_date_range(schedule)
    weeks = week_ranges(first, last)
    if weeks:
        busy = sum(
            1
            for _, start, end in weeks
            if any(session_in_week(s, start, end) for e in schedule.entries for s in e.sessions)
        )
        print(f"Teaching period: {first} to {last} ({len(weeks)} weeks, {busy} with classes)")
    return 0


def _cmd_export(args: argparse.Namespace, state: _State) -> int:
    """
    Export one plan into an iCalendar (.ics) file.
    """
    schedule = _pick_plan(args, state)
    if schedule is None:
        return 1

    out_path = Path(args.out)
    if out_path.suffix.lower() != ".ics":
        out_path = out_path.with_suffix(".ics")

    n = export_schedule_to_ics(schedule, out_path)
    print(f"Exported {n} events to: {out_path}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    """
    Build the argparse CLI parser with sub-commands.
    """
    parser = argparse.ArgumentParser(prog="termplan", description="Two-term course schedule planner")
    parser.add_argument("--workbook", type=str, default=None, help="Timetable .xlsx (default: package data)")
    parser.add_argument("--cart", type=str, default=None, help="Cart JSON file (default: package data)")
    parser.add_argument("-v", "--verbose", action="count", default=0, help="Show warnings (-v) or debug log (-vv)")
    sub = parser.add_subparsers(dest="command", required=True)

    p_fetch = sub.add_parser("fetch", help="Download the timetable workbook")
    p_fetch.add_argument("url", type=str, help="URL of the .xlsx file")
    p_fetch.add_argument("--refresh", action="store_true", help="Re-download even if a copy exists")

    p_search = sub.add_parser("search", help="Search for courses")
    p_search.add_argument("text", type=str, help="Search text")

    p_add = sub.add_parser("add", help="Add course by course code")
    p_add.add_argument("course_code", type=str, help="Course code (e.g. COMP1117)")
    p_add.add_argument(
        "--section", "-s", action="append", default=None, help="Accept only this section (repeatable)"
    )

    p_remove = sub.add_parser("remove", help="Remove course by course code")
    p_remove.add_argument("course_code", type=str, help="Course code")

    sub.add_parser("selected", help="Show selected courses, blockouts and limit")

    p_block = sub.add_parser("blockout", help="Manage unavailable time blocks")
    block_sub = p_block.add_subparsers(dest="blockout_command", required=True)
    p_badd = block_sub.add_parser("add", help="Add a weekly blockout")
    p_badd.add_argument("day", type=str, choices=DAYS, help="Day of week")
    p_badd.add_argument("start", type=str, help="Start time HH:MM")
    p_badd.add_argument("end", type=str, help="End time HH:MM")
    p_badd.add_argument("--label", type=str, default="", help="Label (e.g. 'Part-time job')")
    p_badd.add_argument("--term", type=str, choices=APPLICABILITY, default=BOTH, help="Which term it applies to")
    p_bremove = block_sub.add_parser("remove", help="Remove blockout by number")
    p_bremove.add_argument("index", type=int, help="Number shown by 'blockout list'")
    block_sub.add_parser("list", help="List blockouts")

    p_over = sub.add_parser("overload", help="Set courses per term (7-11) or 'off'")
    p_over.add_argument("value", type=str, help="Limit or 'off'")

    for name, help_text in (
        ("plan", "Generate and list schedules"),
        ("show", "Show one schedule in detail"),
        ("export", "Export one schedule to .ics"),
    ):
        p = sub.add_parser(name, help=help_text)
        if name in ("show", "export"):
            p.add_argument("index", type=int, help="Plan number from 'plan'")
        if name == "export":
            p.add_argument("out", type=str, help="Output file path (e.g. plan.ics)")
        if name == "plan":
            p.add_argument("--limit", type=int, default=10, help="How many plans to list")
        p.add_argument(
            "--strict-sections",
            action="store_true",
            help="Fail instead of skipping a course whose sections are missing in a term",
        )

    return parser


def _setup_logging(verbosity: int) -> None:
    level = logging.ERROR
    if verbosity == 1:
        level = logging.WARNING
    elif verbosity >= 2:
        level = logging.DEBUG
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")


def main(argv: list[str] | None = None) -> None:
    """
    CLI entry point. Parses args, dispatches to command handlers,
    and exits via SystemExit with a return code.
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    _setup_logging(args.verbose)

    if args.command == "fetch":
        raise SystemExit(_cmd_fetch(args))

    if args.command == "search" and not args.text.strip():
        print("Please provide a search text.")
        raise SystemExit(1)

    state = _load_state(args)
    if state is None:
        raise SystemExit(1)

    handlers = {
        "search": _cmd_search,
        "add": _cmd_add,
        "remove": _cmd_remove,
        "selected": _cmd_selected,
        "blockout": _cmd_blockout,
        "overload": _cmd_overload,
        "plan": _cmd_plan,
        "show": _cmd_show,
        "export": _cmd_export,
    }
    handler = handlers.get(args.command)
    if handler is None:
        raise SystemExit(2)
    raise SystemExit(handler(args, state))
