# app/services/invitation_lookup.py  # Resolves a personalised invitation link to its invitation.

# =================================================================================
# 💌 INVITATION LOOKUP
# ---------------------------------------------------------------------------------
# slug -> code + names -> RSVP -> invitees -> first-name set check.
# Every failure (bad slug, unknown code, empty roster, name mismatch, storage
# error) collapses to None. The router turns None into one fixed 404 payload, so
# callers cannot tell the causes apart.
# =================================================================================

from dataclasses import dataclass
from typing import List, Optional

from loguru import logger
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.crud import rsvp_crud
from app.services.slug_parser import parse_slug

INVALID_INVITATION_LINK = "Invalid invitation link"


@dataclass(frozen=True)
class InvitationMatch:
    code: str
    guest_names: List[str]
    invitation_id: int


def names_match(url_names: List[str], first_names: List[str]) -> bool:
    """Order-independent, count-exact comparison of lower-cased first names."""
    url_norm = [n.lower() for n in url_names]
    db_norm = [n.lower() for n in first_names]
    return (
        len(url_norm) == len(db_norm)
        and all(n in db_norm for n in url_norm)
        and all(n in url_norm for n in db_norm)
    )


def lookup_invitation(db: Session, slug: str) -> Optional[InvitationMatch]:
    parsed = parse_slug(slug)
    if not parsed.ok:
        return None

    try:
        rsvp = rsvp_crud.get_rsvp_by_code(db, parsed.code)
        if rsvp is None:
            return None
        invitees = rsvp_crud.list_invitees(db, rsvp.invitation_id)
    except SQLAlchemyError as e:
        logger.error("Invitation lookup failed for code {}: {}", rsvp_crud.mask_code(parsed.code), e)
        return None

    if not invitees:
        return None

    first_names = [inv.first_name for inv in invitees]
    if not names_match(parsed.names, first_names):
        logger.info("Invitation lookup: name mismatch for code {}", rsvp_crud.mask_code(parsed.code))
        return None

    return InvitationMatch(code=rsvp.short_url, guest_names=first_names, invitation_id=rsvp.invitation_id)
