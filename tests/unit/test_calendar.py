# tests/unit/test_calendar.py
# =======================
# 🗓️ Wedding .ics file and event configuration
# =======================

from datetime import date

from icalendar import Calendar

from app.core.wedding import DEFAULT_TITLE, get_wedding_event
from app.services.calendar import generate_wedding_ics


def test_ics_is_an_all_day_event():
    cal = Calendar.from_ical(generate_wedding_ics())
    events = list(cal.walk("VEVENT"))
    assert len(events) == 1
    ev = events[0]
    assert str(ev["summary"]) == DEFAULT_TITLE
    assert ev.decoded("dtstart") == date(2026, 5, 22)
    assert ev.decoded("dtend") == date(2026, 5, 25)
    assert str(ev["status"]) == "CONFIRMED"


def test_event_overrides_from_env(monkeypatch):
    monkeypatch.setenv("WEDDING_TITLE", "Ana & Luis")
    monkeypatch.setenv("WEDDING_START", "2027-06-10")
    monkeypatch.setenv("WEDDING_END", "2027-06-12")
    event = get_wedding_event()
    assert event.title == "Ana & Luis"
    assert (event.start, event.end) == (date(2027, 6, 10), date(2027, 6, 12))


def test_bad_date_falls_back(monkeypatch):
    monkeypatch.setenv("WEDDING_START", "next spring")
    assert get_wedding_event().start == date(2026, 5, 22)
