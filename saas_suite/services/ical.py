"""
iCalendar Feeds

Channel managers (Booking.com, Airbnb, VRBO, Google Calendar) sync room
availability by polling .ics feeds. We export reservations as all-day
VEVENTs and parse channel feeds back into blocked periods.

Only the RFC 5545 subset these channels use is handled: VCALENDAR/VEVENT
blocks, UID, DTSTAMP, DTSTART, DTEND, SUMMARY, DESCRIPTION, STATUS.
Imported feeds carry dates only; guest details never come through.
"""
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from typing import Iterable, List, Optional, Union
import re

PRODID = "-//SaaS Suite//Channel Manager//EN"
UID_DOMAIN = "saas-suite"
CRLF = "\r\n"

_EVENT_RE = re.compile(r"BEGIN:VEVENT(.*?)END:VEVENT", re.DOTALL)


@dataclass
class CalendarEntry:
    """One reservation as it appears in an exported feed."""

    id: str
    check_in: date
    check_out: date
    guest_name: Optional[str] = None
    room_number: Optional[str] = None
    status: Optional[str] = None


@dataclass
class ChannelBooking:
    """One event read from a channel's feed."""

    channel_booking_id: str
    check_in: Union[date, datetime]
    check_out: Union[date, datetime]
    guest_name: str
    status: str = "confirmed"
    raw: dict = field(default_factory=dict)


def format_date(value: date) -> str:
    return value.strftime("%Y%m%d")


def format_datetime(value: datetime) -> str:
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc)
    return value.strftime("%Y%m%dT%H%M%SZ")


def _escape(text: str) -> str:
    return (
        text.replace("\\", "\\\\")
        .replace(";", "\\;")
        .replace(",", "\\,")
        .replace("\n", "\\n")
    )


def generate_calendar(
    entries: Iterable[CalendarEntry],
    calendar_name: str = "Hotel Reservations",
    now: Optional[datetime] = None,
) -> str:
    """Render entries as an .ics document. Cancelled entries are left out."""
    stamp = format_datetime(now or datetime.now(timezone.utc))
    lines: List[str] = [
        "BEGIN:VCALENDAR",
        "VERSION:2.0",
        f"PRODID:{PRODID}",
        f"X-WR-CALNAME:{_escape(calendar_name)}",
        "CALSCALE:GREGORIAN",
        "METHOD:PUBLISH",
    ]

    for entry in entries:
        if entry.status and entry.status.upper() == "CANCELLED":
            continue

        summary = f"Reserved - {entry.guest_name}" if entry.guest_name else "Reserved"
        lines.extend([
            "BEGIN:VEVENT",
            f"UID:{entry.id}@{UID_DOMAIN}",
            f"DTSTAMP:{stamp}",
            f"DTSTART;VALUE=DATE:{format_date(entry.check_in)}",
            f"DTEND;VALUE=DATE:{format_date(entry.check_out)}",
            f"SUMMARY:{_escape(summary)}",
        ])
        if entry.room_number:
            lines.append(f"DESCRIPTION:Room {_escape(entry.room_number)}")
        lines.extend(["STATUS:CONFIRMED", "END:VEVENT"])

    lines.append("END:VCALENDAR")
    return CRLF.join(lines) + CRLF


def parse_ical_date(value: str) -> Optional[Union[date, datetime]]:
    """
    Parse DATE (20240115) and DATE-TIME (20240115T120000, 20240115T120000Z).

    Values with a trailing Z are UTC-aware; floating times stay naive.
    Returns None for anything else.
    """
    value = value.strip()
    try:
        if len(value) == 8 and value.isdigit():
            return datetime.strptime(value, "%Y%m%d").date()
        if "T" in value:
            if value.endswith("Z"):
                return datetime.strptime(value, "%Y%m%dT%H%M%SZ").replace(tzinfo=timezone.utc)
            return datetime.strptime(value[:15], "%Y%m%dT%H%M%S")
    except ValueError:
        return None
    return None


def _unfold(text: str) -> str:
    # Continuation lines start with a single space or tab
    return re.sub(r"\r?\n[ \t]", "", text)


def _property(block: str, name: str) -> Optional[str]:
    match = re.search(rf"^{name}(?:;[^:\r\n]*)?:(.*)$", block, re.MULTILINE | re.IGNORECASE)
    return match.group(1).strip() if match else None


def parse_calendar(
    text: str,
    start: Optional[date] = None,
    end: Optional[date] = None,
) -> List[ChannelBooking]:
    """
    Read VEVENTs from a channel feed.

    Events without UID, DTSTART or DTEND, or with unparseable dates, are
    skipped. When start/end are given, events entirely outside the window
    are dropped.
    """
    bookings: List[ChannelBooking] = []

    for block in _EVENT_RE.findall(_unfold(text)):
        uid = _property(block, "UID")
        dtstart = _property(block, "DTSTART")
        dtend = _property(block, "DTEND")
        if not uid or not dtstart or not dtend:
            continue

        check_in = parse_ical_date(dtstart)
        check_out = parse_ical_date(dtend)
        if check_in is None or check_out is None:
            continue

        if start and _as_date(check_out) < start:
            continue
        if end and _as_date(check_in) > end:
            continue

        summary = _property(block, "SUMMARY")
        guest_name = summary or "OTA Booking"
        status = "confirmed"
        if summary:
            lowered = summary.lower()
            if "blocked" in lowered or "not available" in lowered or "unavailable" in lowered:
                guest_name = "Blocked"
            elif "cancelled" in lowered:
                status = "cancelled"

        bookings.append(ChannelBooking(
            channel_booking_id=uid,
            check_in=check_in,
            check_out=check_out,
            guest_name=guest_name,
            status=status,
            raw={"uid": uid, "summary": summary, "description": _property(block, "DESCRIPTION")},
        ))

    return bookings


def _as_date(value: Union[date, datetime]) -> date:
    return value.date() if isinstance(value, datetime) else value
