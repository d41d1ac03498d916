# app/errors.py  # Domain error taxonomy of the RSVP pipeline.

# =================================================================================
# 🚨 RSVP ERRORS
# ---------------------------------------------------------------------------------
# Services raise these; a single handler in app/main.py renders them as
# {"error": message} with the matching HTTP status.
# A partial persistence failure is NOT an exception: it is a submission
# outcome (see app/services/rsvp_submission.py) rendered as 207.
# =================================================================================

from fastapi import status


class RSVPError(Exception):
    """Base class: carries the guest-facing message and the HTTP status."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message: str = "Internal server error"

    def __init__(self, message: str | None = None, *, extra: dict | None = None):
        self.message = message or self.default_message
        self.extra = extra or {}
        super().__init__(self.message)

    def to_payload(self) -> dict:
        return {"error": self.message, **self.extra}


class FormatError(RSVPError):  # Malformed code/slug (client bug).
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid RSVP code format"


class NotFoundError(RSVPError):  # Code absent.
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "RSVP code not found"


class ValidationError(RSVPError):  # Business-rule violation (no attendees, villa bypass...).
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid RSVP submission"


class DeadlineError(RSVPError):  # RSVP window closed.
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "RSVP submissions are now closed. Please contact us directly if you need to make changes."


class TotalPersistenceFailure(RSVPError):  # Parent write failed: nothing was stored.
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Failed to update RSVP"
