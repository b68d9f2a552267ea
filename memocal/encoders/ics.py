"""
iCalendar (RFC 5545) encoder.

Start and end are written as floating local wall-clock times; no timezone
conversion happens here. Reminders become display alarms triggered a fixed
number of minutes before the start.
"""

import hashlib
from datetime import datetime, timezone
from typing import List

from memocal.errors import EncodingError
from memocal.registry import encoders
from memocal.reminders import minutes_before
from memocal.types import EventCandidate

PRODID = "-//memocal//MemoCalendar//JA"
DESCRIPTION_TEMPLATE = "MemoCalendarから追加された予定\n入力日付: {raw_date}"
ALARM_TEMPLATE = "リマインダー: {title}"


def escape_text(value: str) -> str:
    return (
        value.replace("\\", "\\\\")
        .replace(";", "\\;")
        .replace(",", "\\,")
        .replace("\r\n", "\\n")
        .replace("\n", "\\n")
    )


def fold_line(line: str, limit: int = 75) -> str:
    """Fold a content line at ``limit`` octets without splitting characters."""
    parts: List[str] = []
    current = ""
    size = 0
    for char in line:
        width = len(char.encode("utf-8"))
        if size + width > limit:
            parts.append(current)
            current = " "
            size = 1
        current += char
        size += width
    parts.append(current)
    return "\r\n".join(parts)


def format_local(value: datetime) -> str:
    return value.strftime("%Y%m%dT%H%M00")


def event_uid(event: EventCandidate) -> str:
    return hashlib.sha256(event.id.encode("utf-8")).hexdigest()[:32] + "@memocal"


@encoders.register("ics")
class IcsEncoder:
    """Builds a single-event VCALENDAR payload."""

    media_type = "text/calendar;charset=utf-8"
    suffix = ".ics"

    def __init__(self, status: str = "CONFIRMED", busy_status: str = "BUSY") -> None:
        self.status = status
        self.busy_status = busy_status

    def encode(self, event: EventCandidate) -> str:
        if event.end < event.start:
            raise EncodingError(f"Event '{event.title}' ends before it starts")

        stamp = datetime.now(timezone.utc).strftime("%Y%m%dT%H%M%SZ")
        lines = [
            "BEGIN:VCALENDAR",
            "VERSION:2.0",
            f"PRODID:{PRODID}",
            "CALSCALE:GREGORIAN",
            "METHOD:PUBLISH",
            "BEGIN:VEVENT",
            f"UID:{event_uid(event)}",
            f"DTSTAMP:{stamp}",
            f"DTSTART:{format_local(event.start)}",
            f"DTEND:{format_local(event.end)}",
            f"SUMMARY:{escape_text(event.title)}",
            f"DESCRIPTION:{escape_text(DESCRIPTION_TEMPLATE.format(raw_date=event.raw_date))}",
            f"STATUS:{self.status}",
            f"X-MICROSOFT-CDO-BUSYSTATUS:{self.busy_status}",
        ]
        for offset in event.reminder_offsets:
            lines.extend(
                [
                    "BEGIN:VALARM",
                    "ACTION:DISPLAY",
                    f"DESCRIPTION:{escape_text(ALARM_TEMPLATE.format(title=event.title))}",
                    f"TRIGGER:-PT{minutes_before(offset)}M",
                    "END:VALARM",
                ]
            )
        lines.extend(["END:VEVENT", "END:VCALENDAR"])
        return "\r\n".join(fold_line(line) for line in lines) + "\r\n"

