"""
Date helpers for schedules: date ranges, week buckets and meeting dates.

Sessions store ISO dates. Anything that cannot be read as a date is skipped
here, the same way malformed times are skipped by the conflict check.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import Any, Optional

from termplan.model import DAYS, Schedule, Session

# Formats seen in timetable exports, tried in order
_DATE_FORMATS = (
    "%Y-%m-%d",
    "%Y-%m-%d %H:%M:%S",
    "%Y-%m-%dT%H:%M:%S",
    "%d/%m/%Y",
    "%d-%b-%Y",
    "%d %b %Y",
)


def parse_date(value: Any) -> Optional[date]:
    """
    Read a date from a workbook cell or an ISO string. Returns None if the
    value is empty or unreadable.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value

    text = str(value).strip()
    if not text:
        return None
    for fmt in _DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue
    return None


def normalize_date(value: Any) -> Optional[str]:
    """
    ISO 'YYYY-MM-DD' for readable dates, the raw text otherwise, None if empty.
    """
    parsed = parse_date(value)
    if parsed is not None:
        return parsed.isoformat()
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def session_date_range(session: Session) -> Optional[tuple[date, date]]:
    start = parse_date(session.start_date)
    end = parse_date(session.end_date)
    if start is None or end is None:
        return None
    return start, end


def schedule_date_range(schedule: Schedule) -> tuple[Optional[date], Optional[date]]:
    """
    Earliest start date and latest end date over all sessions of a schedule.
    (None, None) if no session has usable dates.
    """
    min_date: Optional[date] = None
    max_date: Optional[date] = None

    for entry in schedule.entries:
        for session in entry.sessions:
            rng = session_date_range(session)
            if rng is None:
                continue
            start, end = rng
            if min_date is None or start < min_date:
                min_date = start
            if max_date is None or end > max_date:
                max_date = end

    return min_date, max_date


def week_ranges(min_date: Optional[date], max_date: Optional[date]) -> list[tuple[int, date, date]]:
    """
    Sunday-to-Saturday weeks covering [min_date, max_date], numbered from 1.
    """
    if min_date is None or max_date is None:
        return []

    # date.weekday(): Monday == 0, so Sunday is (weekday + 1) % 7 days back
    current = min_date - timedelta(days=(min_date.weekday() + 1) % 7)
    weeks: list[tuple[int, date, date]] = []
    week_no = 1
    while current <= max_date:
        weeks.append((week_no, current, current + timedelta(days=6)))
        current += timedelta(days=7)
        week_no += 1
    return weeks


def session_in_week(session: Session, week_start: date, week_end: date) -> bool:
    rng = session_date_range(session)
    if rng is None:
        return False
    start, end = rng
    return start <= week_end and end >= week_start


def session_dates(session: Session) -> list[date]:
    """
    Every concrete date the session meets: each active weekday between its
    start and end date (inclusive).
    """
    rng = session_date_range(session)
    if rng is None or not session.days:
        return []
    start, end = rng
    weekdays = {DAYS.index(d) for d in session.days}

    out: list[date] = []
    current = start
    while current <= end:
        if current.weekday() in weekdays:
            out.append(current)
        current += timedelta(days=1)
    return out

