# app/routers/calendar.py
# =============================================================================
# 🗓️ Calendar download: GET /api/calendar/{code}
# Only guests holding a valid code get the .ics file.
# =============================================================================

from fastapi import APIRouter, Depends, Response
from sqlalchemy.orm import Session

from app.crud import rsvp_crud
from app.db import get_db
from app.errors import FormatError, NotFoundError
from app.rate_limit import GENERAL, RateLimitResult, rate_limit, rate_limit_headers
from app.services.calendar import ICS_FILENAME, generate_wedding_ics
from app.services.rsvp_loader import CODE_LENGTH

router = APIRouter(prefix="/api/calendar", tags=["calendar"])


@router.get("/{code}", response_class=Response)
def download_calendar(code: str,
                      db: Session = Depends(get_db),
                      rl: RateLimitResult = Depends(rate_limit(GENERAL))):
    if len(code) != CODE_LENGTH:
        raise FormatError()
    if rsvp_crud.get_rsvp_by_code(db, code) is None:
        raise NotFoundError()

    return Response(
        content=generate_wedding_ics(),
        media_type="text/calendar; charset=utf-8",
        headers={
            "Content-Disposition": f'attachment; filename="{ICS_FILENAME}"',
            "Cache-Control": "no-cache",
            **rate_limit_headers(rl),
        },
    )
