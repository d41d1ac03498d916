# app/routers/invitation.py
# =============================================================================
# 💌 Public invitation lookup: GET /api/invitation/{slug}
# - Rate limited per IP ('invitation' namespace).
# - One fixed 404 payload for every failure cause (no enumeration signal).
# =============================================================================

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

import app.schemas as schemas
from app.db import get_db
from app.rate_limit import INVITATION, RateLimitResult, rate_limit, rate_limit_headers
from app.services.invitation_lookup import INVALID_INVITATION_LINK, lookup_invitation

router = APIRouter(prefix="/api/invitation", tags=["invitation"])


@router.get(
    "/{slug}",
    response_model=schemas.InvitationLookupResponse,
    responses={404: {"model": schemas.ErrorResponse}},
)
def get_invitation(slug: str,
                   db: Session = Depends(get_db),
                   rl: RateLimitResult = Depends(rate_limit(INVITATION))):
    match = lookup_invitation(db, slug)
    if match is None:
        return JSONResponse(
            status_code=status.HTTP_404_NOT_FOUND,
            content={"error": INVALID_INVITATION_LINK},
            headers=rate_limit_headers(rl),
        )
    return schemas.InvitationLookupResponse(
        code=match.code,
        guest_names=match.guest_names,
        invitation_id=match.invitation_id,
    )
