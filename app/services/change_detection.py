# app/services/change_detection.py  # Decides whether an edited RSVP form differs from what is stored.

# =================================================================================
# 🔍 CHANGE DETECTION
# ---------------------------------------------------------------------------------
# Gates the submit button for returning guests. Advisory only: the server never
# rejects an unchanged submission.
# =================================================================================

from typing import Dict, Optional

from app.schemas import FormSnapshot

TEXT_FIELDS = ("dietary_restrictions", "song_request", "travel_plans", "message")


def _text(value: Optional[str]) -> str:
    # None and "" are the same empty value. No trimming: a typed space counts.
    return value or ""


def _attendance(snapshot: FormSnapshot) -> Dict[int, bool]:
    return {inv.id: bool(inv.coming) for inv in snapshot.invitees}


def has_changes(original: Optional[FormSnapshot], current: FormSnapshot, villa_offered: bool = True) -> bool:
    """True when `current` differs meaningfully from `original`.

    A missing original (first-time guest) always counts as changed. When the
    guest is declining only the message is compared, since every other field
    is hidden.
    """
    if original is None:
        return True

    if bool(original.accepted) != bool(current.accepted):
        return True

    if not current.accepted:
        return _text(original.message) != _text(current.message)

    if villa_offered and bool(original.staying_villa) != bool(current.staying_villa):
        return True

    for name in TEXT_FIELDS:
        if _text(getattr(original, name)) != _text(getattr(current, name)):
            return True

    return _attendance(original) != _attendance(current)
