# app/meta.py  # Public wedding metadata for the frontend.

from fastapi import APIRouter

import app.schemas as schemas
from app.core.wedding import get_rsvp_deadline, get_wedding_event, is_rsvp_closed

router = APIRouter(prefix="/api/meta", tags=["meta"])


@router.get("/wedding", response_model=schemas.WeddingMeta)
def get_wedding_meta() -> schemas.WeddingMeta:
    """Event title, place, dates and whether RSVPs are still open."""
    event = get_wedding_event()
    return schemas.WeddingMeta(
        title=event.title,
        location=event.location,
        start_date=event.start.isoformat(),
        end_date=event.end.isoformat(),
        rsvp_deadline=get_rsvp_deadline(),
        rsvp_closed=is_rsvp_closed(),
    )
