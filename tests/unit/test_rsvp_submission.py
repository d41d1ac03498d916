# tests/unit/test_rsvp_submission.py
# =======================
# 📝 RSVP submission pipeline
# =======================

from datetime import datetime

import pytest
from sqlalchemy.exc import SQLAlchemyError

from app.crud import rsvp_crud
from app.errors import DeadlineError, FormatError, NotFoundError, TotalPersistenceFailure, ValidationError
from app.models import Invitee, RSVP
from app.schemas import RSVPSubmitRequest
from app.services.rsvp_submission import NO_ATTENDEES, VILLA_NOT_OFFERED, submit_rsvp


def _payload(invitee_ids, coming=True, **overrides) -> RSVPSubmitRequest:
    data = {
        "accepted": True,
        "staying_villa": True,
        "dietary_restrictions": "",
        "song_request": "",
        "travel_plans": "",
        "message": "",
        "invitees": [{"id": i, "coming": coming} for i in invitee_ids],
    }
    data.update(overrides)
    return RSVPSubmitRequest(**data)


def _rsvp(db, code) -> RSVP:
    db.expire_all()
    return db.query(RSVP).filter(RSVP.short_url == code).one()


def _coming(db, invitee_id):
    db.expire_all()
    return db.get(Invitee, invitee_id).coming


# --- Happy path ---

def test_full_success_persists_everything(db_session, make_invitation):
    seeded = make_invitation(["John Smith", "Jane Smith"], code="TEST01")
    now = datetime(2026, 3, 1, 12, 0)
    outcome = submit_rsvp(db_session, "test01",
                          _payload(seeded.invitee_ids, dietary_restrictions="Vegetarian, no nuts"), now=now)

    assert outcome.success and not outcome.partial
    assert outcome.code == "TEST01"
    rsvp = _rsvp(db_session, "TEST01")
    assert rsvp.accepted is True
    assert rsvp.staying_villa is True
    assert rsvp.dietary_restrictions == "Vegetarian, no nuts"
    assert rsvp.song_request is None  # Empty text stored as NULL.
    assert rsvp.updated_at == now
    assert all(_coming(db_session, i) is True for i in seeded.invitee_ids)

    n = outcome.notification
    assert n.accepted is True
    assert n.attending_count == 2 and n.total_invited == 2
    assert n.attending_names == ["John Smith", "Jane Smith"]
    assert n.is_amendment is False


def test_second_submission_is_an_amendment(db_session, make_invitation):
    seeded = make_invitation(["John Smith", "Jane Smith"], code="TEST01")
    submit_rsvp(db_session, "TEST01", _payload(seeded.invitee_ids))
    outcome = submit_rsvp(db_session, "TEST01", _payload(seeded.invitee_ids, message="See you!"))
    assert outcome.notification.is_amendment is True
    assert _rsvp(db_session, "TEST01").message == "See you!"


def test_declining_clears_villa(db_session, make_invitation):
    seeded = make_invitation(["John Smith", "Jane Smith"], code="TEST01")
    outcome = submit_rsvp(db_session, "TEST01",
                          _payload(seeded.invitee_ids, coming=False, accepted=False, staying_villa=False))
    rsvp = _rsvp(db_session, "TEST01")
    assert rsvp.accepted is False
    assert rsvp.staying_villa is None
    assert outcome.notification.attending_count == 0
    assert all(_coming(db_session, i) is False for i in seeded.invitee_ids)


def test_resubmitting_same_payload_is_idempotent(db_session, make_invitation):
    seeded = make_invitation(["John Smith", "Jane Smith"], code="TEST01")
    payload = _payload(seeded.invitee_ids, song_request="Dancing Queen")
    submit_rsvp(db_session, "TEST01", payload, now=datetime(2026, 3, 1))
    submit_rsvp(db_session, "TEST01", payload, now=datetime(2026, 3, 1))
    rsvp = _rsvp(db_session, "TEST01")
    assert (rsvp.accepted, rsvp.staying_villa, rsvp.song_request) == (True, True, "Dancing Queen")


# --- Rejections before any write ---

def test_deadline_passed(db_session, make_invitation, monkeypatch):
    seeded = make_invitation(["John Smith"], code="TEST01")
    monkeypatch.setenv("RSVP_DEADLINE", "2026-04-01T00:00:00Z")
    with pytest.raises(DeadlineError):
        submit_rsvp(db_session, "TEST01", _payload(seeded.invitee_ids), now=datetime(2026, 4, 2))
    assert _rsvp(db_session, "TEST01").updated_at is None


def test_bad_code_format(db_session):
    with pytest.raises(FormatError):
        submit_rsvp(db_session, "ABC", _payload([1]))


def test_unknown_code(db_session):
    with pytest.raises(NotFoundError):
        submit_rsvp(db_session, "ZZZZZZ", _payload([1]))


def test_accepting_with_nobody_coming(db_session, make_invitation):
    seeded = make_invitation(["John Smith", "Jane Smith"], code="TEST01")
    with pytest.raises(ValidationError) as exc:
        submit_rsvp(db_session, "TEST01", _payload(seeded.invitee_ids, coming=False))
    assert exc.value.message == NO_ATTENDEES
    assert _rsvp(db_session, "TEST01").accepted is None


def test_villa_bypass_rejected(db_session, make_invitation):
    seeded = make_invitation(["Ana Lopez"], code="NOVILA", villa_offered=False)
    with pytest.raises(ValidationError) as exc:
        submit_rsvp(db_session, "NOVILA", _payload(seeded.invitee_ids, staying_villa=True))
    assert exc.value.message == VILLA_NOT_OFFERED
    assert _rsvp(db_session, "NOVILA").updated_at is None
    assert _coming(db_session, seeded.invitee_ids[0]) is None


# --- Ownership ---

def test_foreign_invitee_does_not_count_as_attending(db_session, make_invitation):
    mine = make_invitation(["John Smith", "Jane Smith"], code="TEST01")
    other = make_invitation(["Bob Jones"], code="OTHER1")
    payload = RSVPSubmitRequest(
        accepted=True,
        staying_villa=True,
        invitees=[{"id": i, "coming": False} for i in mine.invitee_ids]
        + [{"id": other.invitee_ids[0], "coming": True}],
    )

    with pytest.raises(ValidationError) as exc:
        submit_rsvp(db_session, "TEST01", payload)

    assert exc.value.message == NO_ATTENDEES
    assert _rsvp(db_session, "TEST01").updated_at is None
    assert _coming(db_session, other.invitee_ids[0]) is None


def test_duplicate_invitee_uses_last_value(db_session, make_invitation):
    seeded = make_invitation(["John Smith"], code="TEST01")
    john = seeded.invitee_ids[0]
    flip_to_no = RSVPSubmitRequest(accepted=True, invitees=[{"id": john, "coming": True}, {"id": john, "coming": False}])

    with pytest.raises(ValidationError):
        submit_rsvp(db_session, "TEST01", flip_to_no)
    assert _rsvp(db_session, "TEST01").accepted is None

    flip_to_yes = RSVPSubmitRequest(accepted=True, invitees=[{"id": john, "coming": False}, {"id": john, "coming": True}])
    outcome = submit_rsvp(db_session, "TEST01", flip_to_yes)
    assert outcome.success
    assert outcome.notification.attending_names == ["John Smith"]
    assert _coming(db_session, john) is True



def test_foreign_invitee_is_never_mutated(db_session, make_invitation):
    mine = make_invitation(["John Smith", "Jane Smith"], code="TEST01")
    other = make_invitation(["Bob Jones"], code="OTHER1")
    payload = _payload(mine.invitee_ids + other.invitee_ids)

    outcome = submit_rsvp(db_session, "TEST01", payload)

    assert outcome.success
    assert outcome.skipped_invitee_ids == other.invitee_ids
    assert _coming(db_session, other.invitee_ids[0]) is None
    assert all(_coming(db_session, i) is True for i in mine.invitee_ids)


# --- Storage failures ---

def test_parent_failure_writes_nothing(db_session, make_invitation, monkeypatch):
    seeded = make_invitation(["John Smith", "Jane Smith"], code="TEST01")
    calls = []

    def _boom(*args, **kwargs):
        raise SQLAlchemyError("disk full")

    monkeypatch.setattr(rsvp_crud, "update_rsvp_answers", _boom)
    monkeypatch.setattr(rsvp_crud, "set_invitee_attendance", lambda *a, **k: calls.append(a))

    with pytest.raises(TotalPersistenceFailure):
        submit_rsvp(db_session, "TEST01", _payload(seeded.invitee_ids))
    assert calls == []


def test_invitee_failure_is_partial(db_session, make_invitation, monkeypatch):
    seeded = make_invitation(["John Smith", "Jane Smith"], code="TEST01")
    failing_id = seeded.invitee_ids[1]
    real = rsvp_crud.set_invitee_attendance

    def _flaky(db, invitation_id, invitee_id, coming, updated_at=None):
        if invitee_id == failing_id:
            raise SQLAlchemyError("locked")
        return real(db, invitation_id, invitee_id, coming, updated_at)

    monkeypatch.setattr(rsvp_crud, "set_invitee_attendance", _flaky)
    outcome = submit_rsvp(db_session, "TEST01", _payload(seeded.invitee_ids))

    assert outcome.partial
    assert outcome.failed_invitee_ids == [failing_id]
    assert outcome.notification is None
    assert _rsvp(db_session, "TEST01").accepted is True
    assert _coming(db_session, seeded.invitee_ids[0]) is True
    assert _coming(db_session, failing_id) is None
