# app/services/rsvp_loader.py  # Builds the RSVP form state for a code from storage.

# =================================================================================
# 📋 RSVP DATA LOADER
# ---------------------------------------------------------------------------------
# - Raw details for GET /api/rsvp/{code}.
# - Form state for GET /api/rsvp/{code}/form: party display name, villa flag,
#   amendment info, the "original" snapshot (amendments only) and the live
#   initial form. Rebuilt from storage on every call, never cached.
# =================================================================================

from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional

from loguru import logger
from sqlalchemy.orm import Session

from app.core.wedding import is_rsvp_closed
from app.crud import rsvp_crud
from app.errors import FormatError, NotFoundError
from app.models import Invitee, RSVP
from app.schemas import FormSnapshot, InviteeOut, InviteeSnapshot
from app.utils.guest_names import format_party_name, full_name, primary_first

CODE_LENGTH = 6


@dataclass
class RSVPFormState:
    code: str
    guest_names: str
    villa_offered: bool
    is_amendment: bool
    info_text: Optional[str]
    original: Optional[FormSnapshot]
    initial: FormSnapshot
    rsvp_closed: bool = False


def _require_rsvp(db: Session, code: str) -> RSVP:
    if not code or len(code) != CODE_LENGTH:
        raise FormatError()
    rsvp = rsvp_crud.get_rsvp_by_code(db, code)
    if rsvp is None:
        raise NotFoundError()
    return rsvp


def format_amendment_info(updated_at: datetime) -> str:
    # e.g. "Friday 22 May 2026 at 18:30"
    stamp = f"{updated_at:%A} {updated_at.day} {updated_at:%B %Y} at {updated_at:%H:%M}"
    return f"You're amending your RSVP, last updated on {stamp}"


def snapshot_from_storage(rsvp: RSVP, invitees: List[Invitee]) -> FormSnapshot:
    """Form snapshot of what is stored, with every nullable text normalised to ''."""
    accepted = rsvp.acceptance.is_yes
    single = len(invitees) == 1
    rows = [
        InviteeSnapshot(
            id=inv.id,
            name=full_name(inv),
            # A lone invitee who accepted is coming even if the flag was never set.
            coming=True if (single and accepted) else inv.attendance.is_yes,
        )
        for inv in primary_first(invitees)
    ]
    return FormSnapshot(
        accepted=accepted,
        invitees=rows,
        staying_villa=bool(rsvp.staying_villa) if rsvp.villa_is_offered else False,
        dietary_restrictions=rsvp.dietary_restrictions or "",
        song_request=rsvp.song_request or "",
        travel_plans=rsvp.travel_plans or "",
        message=rsvp.message or "",
    )


def default_snapshot(rsvp: RSVP, invitees: List[Invitee]) -> FormSnapshot:
    """First-time form: accepting, everyone coming, villa yes unless not offered."""
    return FormSnapshot(
        accepted=True,
        invitees=[InviteeSnapshot(id=inv.id, name=full_name(inv), coming=True) for inv in primary_first(invitees)],
        staying_villa=rsvp.villa_is_offered,
    )


def load_rsvp_form(db: Session, code: str, now: Optional[datetime] = None) -> RSVPFormState:
    rsvp = _require_rsvp(db, code)
    invitees = rsvp_crud.list_invitees(db, rsvp.invitation_id)

    if rsvp.is_amendment:
        original = snapshot_from_storage(rsvp, invitees)
        initial = original.model_copy(deep=True)
        info_text = format_amendment_info(rsvp.updated_at)
    else:
        original = None
        initial = default_snapshot(rsvp, invitees)
        info_text = None

    logger.debug("RSVP form loaded for {} (amendment={}, invitees={})",
                 rsvp_crud.mask_code(rsvp.short_url), rsvp.is_amendment, len(invitees))
    return RSVPFormState(
        code=rsvp.short_url,
        guest_names=format_party_name(invitees),
        villa_offered=rsvp.villa_is_offered,
        is_amendment=rsvp.is_amendment,
        info_text=info_text,
        original=original,
        initial=initial,
        rsvp_closed=is_rsvp_closed(now),
    )


def get_rsvp_details(db: Session, code: str) -> dict:
    """Stored RSVP and invitee attendance, shaped for RSVPDetailsResponse."""
    rsvp = _require_rsvp(db, code)
    invitees = rsvp_crud.list_invitees(db, rsvp.invitation_id)
    return {
        "rsvp_id": rsvp.id,
        "invitation_id": rsvp.invitation_id,
        "accepted": rsvp.accepted,
        "staying_villa": rsvp.staying_villa,
        "dietary_restrictions": rsvp.dietary_restrictions,
        "song_request": rsvp.song_request,
        "travel_plans": rsvp.travel_plans,
        "message": rsvp.message,
        "updated_at": rsvp.updated_at,
        "villa_offered": rsvp.villa_is_offered,
        "invitees": [InviteeOut.model_validate(inv) for inv in primary_first(invitees)],
    }
