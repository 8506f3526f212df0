"""
iCalendar (.ics) export of one schedule.

Each weekly session is expanded into its concrete dates (every active
weekday between its start and end date), one VEVENT per meeting, so the
file imports the same way into:
- Google Calendar
- Outlook
- Apple Calendar
"""

from __future__ import annotations

from datetime import date, datetime, timezone
from pathlib import Path

from termplan.conflicts import session_interval
from termplan.model import Schedule
from termplan.timetable import session_dates


def _ics_escape(text: str) -> str:
    """
    Escape text for ICS fields (very small subset, sufficient for our use).
    """
    return (
        text.replace("\\", "\\\\").replace("\r\n", "\\n").replace("\n", "\\n").replace(";", "\\;").replace(",", "\\,")
    )


def _dt_local(day: date, minutes: int) -> str:
    """
    Local datetime string 'YYYYMMDDTHHMM00'.
    """
    return f"{day.strftime('%Y%m%d')}T{minutes // 60:02d}{minutes % 60:02d}00"


def export_schedule_to_ics(schedule: Schedule, out_path: str | Path) -> int:
    """
    Export a schedule to an .ics file. Returns number of exported events.
    """
    out = Path(out_path)
    out.parent.mkdir(parents=True, exist_ok=True)

    lines: list[str] = []
    lines.append("BEGIN:VCALENDAR")
    lines.append("VERSION:2.0")
    lines.append("PRODID:-//termplan//EN")
    lines.append("CALSCALE:GREGORIAN")

    dtstamp = datetime.now(timezone.utc).strftime("%Y%m%dT%H%M%SZ")
    count = 0
    for entry in schedule.entries:
        summary = f"{entry.course_code} {entry.course_title}".strip()
        for session in entry.sessions:
            interval = session_interval(session)
            if interval is None:
                continue
            start, end = interval

            for day in session_dates(session):
                dtstart = _dt_local(day, start)
                uid = f"{entry.course_code}-{entry.section}-{dtstart}@termplan"

                lines.append("BEGIN:VEVENT")
                lines.append(f"UID:{_ics_escape(uid)}")
                lines.append(f"DTSTAMP:{dtstamp}")
                lines.append(f"DTSTART:{dtstart}")
                lines.append(f"DTEND:{_dt_local(day, end)}")
                lines.append(f"SUMMARY:{_ics_escape(summary)} ({_ics_escape(entry.section)})")
                if session.venue:
                    lines.append(f"LOCATION:{_ics_escape(session.venue)}")
                details = [entry.term]
                if session.instructor:
                    details.append(session.instructor)
                lines.append(f"DESCRIPTION:{_ics_escape(' / '.join(details))}")
                lines.append("END:VEVENT")
                count += 1

    lines.append("END:VCALENDAR")

    # ICS standard uses CRLF
    out.write_text("\r\n".join(lines) + "\r\n", encoding="utf-8")
    return count
