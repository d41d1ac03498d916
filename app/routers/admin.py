# app/routers/admin.py
# =============================================================================
# 👑 Admin routes: invitations and the RSVP dashboard counters
# - Protected with the `x-admin-key` header via `require_admin`
# - POST creates invitation + invitees + empty RSVP with a fresh unique code
# - GET lists invitations with their code, link and RSVP status
# - GET /summary returns the dashboard counters
# =============================================================================

from typing import List

from fastapi import APIRouter, Depends, HTTPException, status
from loguru import logger
from sqlalchemy.orm import Session

import app.schemas as schemas
from app.core.security import require_admin
from app.crud import rsvp_crud
from app.db import get_db
from app.models import Invitation

router = APIRouter(prefix="/api/admin", tags=["admin"], dependencies=[Depends(require_admin)])


# ------------------------------ Local helpers ---------------------------------

def invitation_link(invitation: Invitation) -> str:
    """'first-first-CODE' path segment for the personalised invitation page."""
    names = [inv.first_name.strip().lower().replace(" ", "") for inv in invitation.invitees]
    return "-".join([n for n in names if n] + [invitation.rsvp.short_url])


def _to_admin_out(invitation: Invitation) -> schemas.InvitationAdminOut:
    rsvp = invitation.rsvp
    return schemas.InvitationAdminOut(
        id=invitation.id,
        side=invitation.side,
        code=rsvp.short_url,
        villa_offered=rsvp.villa_is_offered,
        accepted=rsvp.accepted,
        staying_villa=rsvp.staying_villa,
        updated_at=rsvp.updated_at,
        link=invitation_link(invitation),
        invitees=[schemas.InviteeOut.model_validate(inv) for inv in invitation.invitees],
    )


# --------------------------------- Endpoints ----------------------------------

@router.get("/invitations", response_model=List[schemas.InvitationAdminOut])
def list_invitations(db: Session = Depends(get_db)):
    return [_to_admin_out(inv) for inv in rsvp_crud.list_invitations(db) if inv.rsvp is not None]


@router.post("/invitations", response_model=schemas.InvitationAdminOut, status_code=status.HTTP_201_CREATED)
def create_invitation(payload: schemas.InvitationCreate, db: Session = Depends(get_db)):
    try:
        invitation = rsvp_crud.create_invitation(
            db,
            [i.model_dump() for i in payload.invitees],
            side=payload.side,
            villa_offered=payload.villa_offered,
        )
    except RuntimeError as e:
        logger.error("Admin create_invitation failed: {}", e)
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(e))
    return _to_admin_out(invitation)


@router.get("/summary", response_model=schemas.AdminSummary)
def rsvp_summary(db: Session = Depends(get_db)):
    summary = schemas.AdminSummary()
    for invitation in rsvp_crud.list_invitations(db):
        rsvp = invitation.rsvp
        if rsvp is None:
            continue
        summary.invitations += 1
        summary.invitees += len(invitation.invitees)
        if rsvp.is_amendment:
            summary.responded += 1
        if rsvp.accepted is True:
            summary.accepted += 1
            summary.attending_invitees += sum(1 for inv in invitation.invitees if inv.coming)
            if rsvp.villa_is_offered:
                if rsvp.staying_villa is True:
                    summary.villa_yes += 1
                elif rsvp.staying_villa is False:
                    summary.villa_no += 1
                else:
                    summary.villa_undecided += 1
        elif rsvp.accepted is False:
            summary.declined += 1
        else:
            summary.pending += 1
    return summary
