"""
Conflict detection.

Two sessions conflict if they meet on at least one common weekday and their
time intervals overlap:
    start < other_end AND end > other_start

Touching endpoints (end == start) is NOT a conflict. A session whose times
cannot be read, or that does not end after it starts, never conflicts; the
problem is reported to the diagnostics sink instead of aborting the search.
"""

from __future__ import annotations

from datetime import datetime, time
from typing import Any, Iterable, Optional

from termplan.diagnostics import Diagnostics, warn
from termplan.model import Blockout, Session


def time_to_minutes(value: Any) -> int:
    """
    Convert a time of day to minutes since midnight.

    Accepts 'HH:MM', 'HH:MM:SS', datetime.time and datetime.datetime.
    Raises ValueError for anything else.
    """
    if isinstance(value, datetime):
        return value.hour * 60 + value.minute
    if isinstance(value, time):
        return value.hour * 60 + value.minute
    if value is None:
        raise ValueError("Missing time value")

    parts = str(value).strip().split(":")
    if len(parts) not in (2, 3):
        raise ValueError(f"Invalid time format: {value!r}")
    try:
        h = int(parts[0])
        m = int(parts[1])
    except ValueError:
        raise ValueError(f"Invalid time format: {value!r}") from None
    if not (0 <= h <= 23 and 0 <= m <= 59):
        raise ValueError(f"Invalid time value: {value!r}")
    return h * 60 + m


def minutes_to_time(minutes: int) -> str:
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def _overlaps(a_start: int, a_end: int, b_start: int, b_end: int) -> bool:
    return a_start < b_end and a_end > b_start


def session_interval(session: Session) -> Optional[tuple[int, int]]:
    """
    (start, end) in minutes, or None when either time is missing/malformed
    or the session does not end after it starts.
    """
    try:
        start, end = time_to_minutes(session.start_time), time_to_minutes(session.end_time)
    except ValueError:
        return None
    if start >= end:
        return None
    return start, end


def _shared_days(a: Session, b: Session) -> bool:
    return any(day in b.days for day in a.days)


def sessions_conflict(a: Session, b: Session, diagnostics: Diagnostics | None = None) -> bool:
    """
    True iff both sessions meet on a common day and their times overlap.
    """
    if not _shared_days(a, b):
        return False

    ia = session_interval(a)
    ib = session_interval(b)
    if ia is None or ib is None:
        bad = a if ia is None else b
        warn(
            diagnostics,
            "malformed-time",
            f"Unusable times {bad.start_time!r}-{bad.end_time!r} of "
            f"{bad.course_code} {bad.section} ({bad.term}); treating as no conflict",
            course_code=bad.course_code,
            section=bad.section,
            term=bad.term,
        )
        return False

    return _overlaps(ia[0], ia[1], ib[0], ib[1])


def overlaps_blockout(session: Session, blockout: Blockout, diagnostics: Diagnostics | None = None) -> bool:
    """
    True iff the session meets on the blockout's day and overlaps its window.

    The caller is responsible for only passing blockouts that apply to the
    session's term.
    """
    if not session.meets_on(blockout.day):
        return False

    interval = session_interval(session)
    if interval is None:
        warn(
            diagnostics,
            "malformed-time",
            f"Unusable times {session.start_time!r}-{session.end_time!r} of "
            f"{session.course_code} {session.section} ({session.term}); ignoring blockout {blockout.label!r}",
            course_code=session.course_code,
            section=session.section,
            term=session.term,
        )
        return False

    return _overlaps(
        interval[0],
        interval[1],
        time_to_minutes(blockout.start_time),
        time_to_minutes(blockout.end_time),
    )


def sections_conflict(
    a_sessions: Iterable[Session],
    b_sessions: Iterable[Session],
    diagnostics: Diagnostics | None = None,
) -> bool:
    """
    True if any session of one section clashes with any session of the other.
    """
    b_list = list(b_sessions)
    for s1 in a_sessions:
        for s2 in b_list:
            if sessions_conflict(s1, s2, diagnostics):
                return True
    return False


def blocked_by(
    sessions: Iterable[Session],
    blockouts: Iterable[Blockout],
    diagnostics: Diagnostics | None = None,
) -> Optional[Blockout]:
    """
    Return the first blockout hit by any of the sessions, or None.
    """
    blockout_list = list(blockouts)
    for session in sessions:
        for blockout in blockout_list:
            if overlaps_blockout(session, blockout, diagnostics):
                return blockout
    return None
