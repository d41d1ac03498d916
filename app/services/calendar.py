# app/services/calendar.py  # iCalendar (.ics) file for the wedding weekend.

from datetime import datetime, timezone
from typing import Optional

from icalendar import Calendar, Event

from app.core.wedding import WeddingEvent, get_wedding_event

ICS_FILENAME = "wedding.ics"


def generate_wedding_ics(event: Optional[WeddingEvent] = None) -> bytes:
    """All-day event covering the wedding dates (DTEND exclusive, RFC 5545)."""
    event = event or get_wedding_event()

    cal = Calendar()
    cal.add("prodid", "-//Wedding RSVP//Calendar//EN")
    cal.add("version", "2.0")
    cal.add("calscale", "GREGORIAN")

    ev = Event()
    ev.add("uid", f"wedding-{event.start.isoformat()}@wedding-rsvp")
    ev.add("dtstamp", datetime.now(timezone.utc))
    ev.add("dtstart", event.start)
    ev.add("dtend", event.end)
    ev.add("summary", event.title)
    ev.add("description", event.description)
    ev.add("location", event.location)
    ev.add("url", event.url)
    ev.add("status", "CONFIRMED")
    ev.add("transp", "OPAQUE")  # Busy.
    cal.add_component(ev)

    return cal.to_ical()
