# app/crud/rsvp_crud.py  # Row-level CRUD for invitations, invitees and RSVPs.

# =================================================================================
# 🧩 RSVP CRUD
# - Lookups by public code (case-insensitive) and by invitation.
# - Guest writes: RSVP answers (parent row) and invitee attendance, the latter
#   ALWAYS filtered by invitation_id so one invitation cannot touch another's rows.
# - Admin writes: invitation + invitees + empty RSVP with a unique short code.
# Functions flush/commit but never swallow storage errors: callers decide.
# =================================================================================

import secrets
from datetime import datetime
from typing import Iterable, List, Optional, Union

from loguru import logger
from sqlalchemy import func, update
from sqlalchemy.orm import Session

from app.models import Answer, Invitation, Invitee, RSVP, SideEnum, utcnow

# Unambiguous alphabet: no 0/O, 1/I/L.
CODE_ALPHABET = "ABCDEFGHJKMNPQRSTUVWXYZ23456789"
CODE_LENGTH = 6

TriState = Union[Answer, Optional[bool]]


def to_column(value: TriState) -> Optional[bool]:
    """Answer (or a plain nullable bool) as stored in a tri-state column."""
    answer = value if isinstance(value, Answer) else Answer.from_db(value)
    return answer.to_db()


def mask_code(code: Optional[str]) -> str:
    """'TEST01' -> 'TE****' for logs."""
    if not code:
        return "<empty>"
    return f"{code[:2]}{'*' * max(0, len(code) - 2)}"


# ---------------------------------------------------------------------------------
# 🔎 Lookups
# ---------------------------------------------------------------------------------
def get_rsvp_by_code(db: Session, code: str) -> Optional[RSVP]:
    """RSVP whose short_url matches `code` ignoring case, or None."""
    if not code:
        return None
    norm = code.strip().upper()
    return db.query(RSVP).filter(func.upper(RSVP.short_url) == norm).first()


def list_invitees(db: Session, invitation_id: int) -> List[Invitee]:
    """Invitees of one invitation in creation order."""
    return (
        db.query(Invitee)
        .filter(Invitee.invitation_id == invitation_id)
        .order_by(Invitee.id.asc())
        .all()
    )


def list_invitations(db: Session) -> List[Invitation]:
    return db.query(Invitation).order_by(Invitation.id.asc()).all()


# ---------------------------------------------------------------------------------
# ✍️ Guest writes
# ---------------------------------------------------------------------------------
def update_rsvp_answers(
    db: Session,
    rsvp_id: int,
    *,
    accepted: TriState,
    staying_villa: TriState,
    dietary_restrictions: Optional[str],
    song_request: Optional[str],
    travel_plans: Optional[str],
    message: Optional[str],
    updated_at: datetime,
) -> int:
    """Updates the parent RSVP row and commits. Returns the number of rows matched."""
    result = db.execute(
        update(RSVP)
        .where(RSVP.id == rsvp_id)
        .values(
            accepted=to_column(accepted),
            staying_villa=to_column(staying_villa),
            dietary_restrictions=dietary_restrictions,
            song_request=song_request,
            travel_plans=travel_plans,
            message=message,
            updated_at=updated_at,
        )
    )
    db.commit()
    return result.rowcount


def set_invitee_attendance(db: Session, invitation_id: int, invitee_id: int, coming: TriState,
                           updated_at: Optional[datetime] = None) -> int:
    """Sets `coming` for one invitee of `invitation_id` and commits.

    The invitation_id filter is mandatory: an id from another invitation
    matches no row and is left untouched. Returns the number of rows updated.
    """
    result = db.execute(
        update(Invitee)
        .where(Invitee.id == invitee_id, Invitee.invitation_id == invitation_id)
        .values(coming=to_column(coming), updated_at=updated_at or utcnow())
    )
    db.commit()
    return result.rowcount


# ---------------------------------------------------------------------------------
# 🛠️ Admin writes
# ---------------------------------------------------------------------------------
def generate_short_code(db: Session, max_tries: int = 20) -> str:
    """Random 6-char code not yet used by any RSVP."""
    for _ in range(max_tries):
        code = "".join(secrets.choice(CODE_ALPHABET) for _ in range(CODE_LENGTH))
        if get_rsvp_by_code(db, code) is None:
            return code
    raise RuntimeError("Could not generate a unique RSVP code")


def create_invitation(
    db: Session,
    invitees: Iterable[dict],
    side: Optional[SideEnum] = None,
    villa_offered: bool = True,
    code: Optional[str] = None,
) -> Invitation:
    """Creates an invitation with its invitees and an empty RSVP row.

    `invitees` are dicts with first_name, last_name and is_primary. A caller
    supplied `code` is upper-cased and must be unused.
    """
    if code:
        code = code.strip().upper()
        if len(code) != CODE_LENGTH or not code.isalnum():
            raise ValueError(f"RSVP code must be {CODE_LENGTH} alphanumeric characters")
        if get_rsvp_by_code(db, code) is not None:
            raise ValueError("RSVP code already in use")
    else:
        code = generate_short_code(db)

    invitation = Invitation(side=side)
    for item in invitees:
        invitation.invitees.append(
            Invitee(
                first_name=(item.get("first_name") or "").strip(),
                last_name=(item.get("last_name") or "").strip(),
                is_primary=bool(item.get("is_primary", False)),
            )
        )
    invitation.rsvp = RSVP(short_url=code, villa_offered=villa_offered)

    db.add(invitation)
    try:
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(invitation)
    logger.info("CRUD/create_invitation → id={} code={} invitees={}",
                invitation.id, mask_code(code), len(invitation.invitees))
    return invitation
