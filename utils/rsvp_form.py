# utils/rsvp_form.py  # View-scoped RSVP form state for guest frontends.

# =================================================================================
# 📝 RSVP FORM SESSION
# ---------------------------------------------------------------------------------
# One object per open RSVP view:
# - load() pulls the form state (initial values + original snapshot).
# - set_* helpers edit the live copy; toggling acceptance ticks/unticks
#   every invitee.
# - can_submit is gated by change detection (advisory; the API never blocks).
# - close() tears the view down. A response that lands after close() is
#   discarded and never touches the form state.
# =================================================================================

from dataclasses import dataclass, field
from typing import List, Optional

from loguru import logger

from app.schemas import MAX_DIETARY, MAX_MESSAGE, MAX_SONG, MAX_TRAVEL, FormSnapshot
from app.services.change_detection import TEXT_FIELDS, has_changes
from utils.api_client import NETWORK_MESSAGE, RSVPApiClient, RSVPClientError

TEXT_LIMITS = {
    "dietary_restrictions": (MAX_DIETARY, "Dietary restrictions must be less than 500 characters"),
    "song_request": (MAX_SONG, "Song request must be less than 200 characters"),
    "travel_plans": (MAX_TRAVEL, "Travel plans must be less than 500 characters"),
    "message": (MAX_MESSAGE, "Message must be less than 1000 characters"),
}
NO_ATTENDEES = "Please select at least one guest who will be attending"


@dataclass
class SubmitResult:
    ok: bool = False
    partial: bool = False
    discarded: bool = False
    status_code: Optional[int] = None
    message: str = ""
    failed_invitee_ids: List[int] = field(default_factory=list)


class RSVPFormSession:
    def __init__(self, code: str, client: Optional[RSVPApiClient] = None):
        self.code = (code or "").strip().upper()
        self.client = client or RSVPApiClient()
        self.closed = False
        self.loaded = False
        self.error = ""
        self.guest_names = ""
        self.villa_offered = True
        self.is_amendment = False
        self.info_text = ""
        self.rsvp_closed = False
        self.original: Optional[FormSnapshot] = None
        self.current: Optional[FormSnapshot] = None

    # ------------------------------------------------------------------ load
    def load(self) -> bool:
        """Fetches the form state. Returns False on error or when the view was closed meanwhile."""
        self.error = ""
        try:
            resp = self.client.get_form(self.code)
        except RSVPClientError as e:
            if not self.closed:
                self.error = e.message
            return False

        if self.closed:
            logger.debug("Discarding form load for a closed view")
            return False
        if not resp.ok:
            self.error = resp.error or "Failed to load RSVP data"
            return False

        data = resp.data
        self.guest_names = data.get("guestNames", "")
        self.villa_offered = bool(data.get("villaOffered", True))
        self.is_amendment = bool(data.get("isAmendment", False))
        self.info_text = data.get("infoText") or ""
        self.rsvp_closed = bool(data.get("rsvpClosed", False))
        self.current = FormSnapshot.model_validate(data["form"])
        self.original = FormSnapshot.model_validate(data["original"]) if data.get("original") else None
        self.loaded = True
        return True

    # ----------------------------------------------------------------- edits
    def _require_form(self) -> FormSnapshot:
        if self.current is None:
            raise RuntimeError("RSVP form not loaded")
        return self.current

    def set_accepted(self, accepted: bool) -> None:
        form = self._require_form()
        if form.accepted == accepted:
            return
        form.accepted = accepted
        for inv in form.invitees:
            inv.coming = accepted

    def set_invitee_coming(self, invitee_id: int, coming: bool) -> None:
        form = self._require_form()
        for inv in form.invitees:
            if inv.id == invitee_id:
                inv.coming = coming
                return
        raise KeyError(invitee_id)

    def set_staying_villa(self, staying: bool) -> None:
        form = self._require_form()
        form.staying_villa = bool(staying) if self.villa_offered else False

    def set_text(self, name: str, value: Optional[str]) -> None:
        if name not in TEXT_FIELDS:
            raise KeyError(name)
        setattr(self._require_form(), name, value or "")

    # ------------------------------------------------------------- gating
    @property
    def has_changes(self) -> bool:
        if self.current is None:
            return False
        return has_changes(self.original, self.current, self.villa_offered)

    def validation_errors(self) -> List[str]:
        form = self._require_form()
        errors = []
        if form.accepted and not any(inv.coming for inv in form.invitees):
            errors.append(NO_ATTENDEES)
        for name, (limit, message) in TEXT_LIMITS.items():
            if len(getattr(form, name)) > limit:
                errors.append(message)
        return errors

    @property
    def can_submit(self) -> bool:
        return (
            not self.closed
            and self.loaded
            and not self.rsvp_closed
            and self.has_changes
            and not self.validation_errors()
        )

    # -------------------------------------------------------------- submit
    def submit(self) -> SubmitResult:
        form = self._require_form()
        body = form.to_submission()
        try:
            resp = self.client.submit_rsvp(self.code, body)
        except RSVPClientError as e:
            if self.closed:
                return SubmitResult(discarded=True)
            self.error = e.message
            return SubmitResult(message=e.message)

        if self.closed:
            logger.debug("Discarding submit response ({}) for a closed view", resp.status_code)
            return SubmitResult(discarded=True, status_code=resp.status_code)

        if resp.status_code == 200:
            self.error = ""
            self.original = form.model_copy(deep=True)
            self.is_amendment = True
            return SubmitResult(ok=True, status_code=200, message=resp.data.get("message", ""))

        if resp.status_code == 207:
            failed = list(resp.data.get("failedInviteeIds", []))
            self.error = resp.data.get("warning", "Some guests could not be updated")
            return SubmitResult(partial=True, status_code=207, message=self.error, failed_invitee_ids=failed)

        if resp.status_code == 403:
            self.rsvp_closed = True
        self.error = resp.error or ("Failed to submit RSVP" if resp.status_code < 500 else NETWORK_MESSAGE)
        return SubmitResult(status_code=resp.status_code, message=self.error)

    # --------------------------------------------------------------- close
    def close(self) -> None:
        self.closed = True
        self.client.close()
