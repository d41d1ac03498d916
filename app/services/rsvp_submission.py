# app/services/rsvp_submission.py  # Validates and persists a guest's RSVP submission.

# =================================================================================
# 📝 RSVP SUBMISSION
# ---------------------------------------------------------------------------------
# 1. Deadline, code format, "accepting with nobody coming": rejected up front.
# 2. Lookup by code. Attendance counted over this invitation's roster only
#    (last value per id); villa requested where it is not offered: rejected.
# 3. Parent RSVP row written first. If that fails nothing else is written.
# 4. One UPDATE per submitted invitee, always filtered by invitation_id.
#    A failing invitee is rolled back and recorded; the loop carries on.
# 5. Outcome: success (notification built) or partial (failed ids reported).
# Re-submitting the same form is idempotent and is the retry path for partials.
# =================================================================================

from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional, Set

from loguru import logger
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.wedding import is_rsvp_closed
from app.crud import rsvp_crud
from app.errors import (
    DeadlineError,
    FormatError,
    NotFoundError,
    TotalPersistenceFailure,
    ValidationError,
)
from app.mailer import RSVPNotification
from app.models import Answer, utcnow
from app.schemas import RSVPSubmitRequest
from app.utils.guest_names import full_name, primary_first

CODE_LENGTH = 6
SUCCESS_MESSAGE = "RSVP submitted successfully"
PARTIAL_WARNING = "Some guests could not be updated"
NO_ATTENDEES = "Please select at least one guest who will be attending"
VILLA_NOT_OFFERED = "Villa accommodation is not available for this invitation"


@dataclass
class SubmissionOutcome:
    code: str
    failed_invitee_ids: List[int] = field(default_factory=list)
    skipped_invitee_ids: List[int] = field(default_factory=list)
    notification: Optional[RSVPNotification] = None

    @property
    def success(self) -> bool:
        return not self.failed_invitee_ids

    @property
    def partial(self) -> bool:
        return bool(self.failed_invitee_ids)


def _validate_request(code: str, payload: RSVPSubmitRequest, now: Optional[datetime]) -> None:
    if is_rsvp_closed(now):
        raise DeadlineError()
    if not code or len(code) != CODE_LENGTH:
        raise FormatError()
    if payload.accepted and not payload.any_coming:
        raise ValidationError(NO_ATTENDEES)


def _roster_attendance(payload: RSVPSubmitRequest, roster_ids: Set[int]) -> Dict[int, bool]:
    """Last submitted value per invitee of this invitation; foreign ids are left out."""
    attendance: Dict[int, bool] = {}
    for item in payload.invitees:
        if item.id in roster_ids:
            attendance[item.id] = item.coming
    return attendance


def submit_rsvp(db: Session, code: str, payload: RSVPSubmitRequest,
                now: Optional[datetime] = None) -> SubmissionOutcome:
    _validate_request(code, payload, now)

    rsvp = rsvp_crud.get_rsvp_by_code(db, code)
    if rsvp is None:
        raise NotFoundError()

    # Plain values: the ORM instance expires on commit.
    rsvp_id = rsvp.id
    invitation_id = rsvp.invitation_id
    short_code = rsvp.short_url
    was_amendment = rsvp.is_amendment
    villa_offered = rsvp.villa_is_offered
    roster = primary_first(rsvp_crud.list_invitees(db, invitation_id))
    names_by_id: Dict[int, str] = {inv.id: full_name(inv) for inv in roster}
    attendance = _roster_attendance(payload, set(names_by_id))

    if payload.accepted and not any(attendance.values()):
        logger.warning("RSVP {} accepted with nobody from the invitation coming; rejecting",
                       rsvp_crud.mask_code(short_code))
        raise ValidationError(NO_ATTENDEES)

    if payload.staying_villa and not villa_offered:
        logger.warning("Villa requested for {} where it is not offered; rejecting", rsvp_crud.mask_code(short_code))
        raise ValidationError(VILLA_NOT_OFFERED)

    stamp = now or utcnow()
    accepted = Answer.yes if payload.accepted else Answer.no
    staying_villa = Answer.from_db(payload.staying_villa) if payload.accepted else Answer.unknown

    # --- Parent row ---
    try:
        matched = rsvp_crud.update_rsvp_answers(
            db,
            rsvp_id,
            accepted=accepted,
            staying_villa=staying_villa,
            dietary_restrictions=payload.dietary_restrictions or None,
            song_request=payload.song_request or None,
            travel_plans=payload.travel_plans or None,
            message=payload.message or None,
            updated_at=stamp,
        )
    except SQLAlchemyError as e:
        db.rollback()
        logger.error("RSVP update failed for {}: {}", rsvp_crud.mask_code(short_code), e)
        raise TotalPersistenceFailure() from e
    if matched == 0:
        logger.error("RSVP row for {} vanished before update", rsvp_crud.mask_code(short_code))
        raise TotalPersistenceFailure()

    # --- Invitee rows (ownership-filtered) ---
    outcome = SubmissionOutcome(code=short_code)
    for item in payload.invitees:
        coming = Answer.yes if item.coming else Answer.no
        try:
            updated = rsvp_crud.set_invitee_attendance(db, invitation_id, item.id, coming, stamp)
        except SQLAlchemyError as e:
            db.rollback()
            logger.error("Invitee {} update failed for {}: {}", item.id, rsvp_crud.mask_code(short_code), e)
            if item.id not in outcome.failed_invitee_ids:
                outcome.failed_invitee_ids.append(item.id)
            continue
        if updated == 0 and item.id not in outcome.skipped_invitee_ids:
            logger.warning("Invitee {} does not belong to invitation of {}; skipped",
                           item.id, rsvp_crud.mask_code(short_code))
            outcome.skipped_invitee_ids.append(item.id)

    if outcome.partial:
        logger.warning("RSVP {} stored with {} failed invitee update(s)",
                       rsvp_crud.mask_code(short_code), len(outcome.failed_invitee_ids))
        return outcome

    coming_names = [names_by_id[inv_id] for inv_id in names_by_id if attendance.get(inv_id)]
    outcome.notification = RSVPNotification(
        guest_names=list(names_by_id.values()),
        accepted=payload.accepted,
        attending_count=len(coming_names) if payload.accepted else 0,
        total_invited=len(roster),
        code=short_code,
        staying_villa=payload.staying_villa if payload.accepted else None,
        dietary_restrictions=payload.dietary_restrictions or None,
        song_request=payload.song_request or None,
        travel_plans=payload.travel_plans or None,
        message=payload.message or None,
        is_amendment=was_amendment,
        attending_names=coming_names if payload.accepted else [],
    )
    logger.info("RSVP {} stored (accepted={}, amendment={})",
                rsvp_crud.mask_code(short_code), payload.accepted, was_amendment)
    return outcome
