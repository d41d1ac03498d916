# app/core/wedding.py  # Event details and the RSVP deadline, read from the environment.

# =================================================================================
# 💒 WEDDING CONFIGURATION
# ---------------------------------------------------------------------------------
# - WEDDING_TITLE / WEDDING_LOCATION / WEDDING_START / WEDDING_END (ISO dates,
#   END is exclusive as in iCalendar all-day events).
# - RSVP_DEADLINE: ISO datetime (naive = UTC). Empty means submissions stay open.
# Values are read on every call so tests and deployments can override them.
# =================================================================================

import os
from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import Optional

from loguru import logger

DEFAULT_TITLE = "Rebecca & Matthew's Wedding"
DEFAULT_LOCATION = "Gran Villa Rosa, Vilanova i la Geltrú, Spain"
DEFAULT_START = "2026-05-22"
DEFAULT_END = "2026-05-25"  # Exclusive: the celebration runs through May 24.
DEFAULT_URL = "https://maps.google.com/?q=Gran+Villa+Rosa,+Vilanova+i+la+Geltrú,+Spain"


@dataclass(frozen=True)
class WeddingEvent:
    title: str
    location: str
    start: date
    end: date
    url: str

    @property
    def description(self) -> str:
        return f"Wedding celebration at {self.location}."


def _parse_date(raw: str, default: str) -> date:
    try:
        return date.fromisoformat((raw or default).strip())
    except ValueError:
        logger.warning("Invalid wedding date '{}'; using {}", raw, default)
        return date.fromisoformat(default)


def get_wedding_event() -> WeddingEvent:
    return WeddingEvent(
        title=os.getenv("WEDDING_TITLE", DEFAULT_TITLE),
        location=os.getenv("WEDDING_LOCATION", DEFAULT_LOCATION),
        start=_parse_date(os.getenv("WEDDING_START", ""), DEFAULT_START),
        end=_parse_date(os.getenv("WEDDING_END", ""), DEFAULT_END),
        url=os.getenv("WEDDING_MAP_URL", DEFAULT_URL),
    )


# =================================================================================
# ⏰ RSVP DEADLINE
# =================================================================================
def _to_utc(dt: datetime) -> datetime:
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def get_rsvp_deadline() -> Optional[datetime]:
    """Configured deadline as an aware UTC datetime, or None when unset/invalid."""
    raw = (os.getenv("RSVP_DEADLINE") or "").strip()
    if not raw:
        return None
    try:
        return _to_utc(datetime.fromisoformat(raw.replace("Z", "+00:00")))
    except ValueError:
        logger.error("RSVP_DEADLINE='{}' is not an ISO datetime; submissions stay open", raw)
        return None


def is_rsvp_closed(now: Optional[datetime] = None) -> bool:
    """True once `now` reaches the deadline."""
    deadline = get_rsvp_deadline()
    if deadline is None:
        return False
    now = _to_utc(now) if now is not None else datetime.now(timezone.utc)
    return now >= deadline
