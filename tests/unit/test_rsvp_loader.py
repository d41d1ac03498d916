# tests/unit/test_rsvp_loader.py
# =======================
# 📋 Form state built from storage
# =======================

from datetime import datetime

import pytest

from app.crud import rsvp_crud
from app.errors import FormatError, NotFoundError
from app.services.rsvp_loader import format_amendment_info, get_rsvp_details, load_rsvp_form


def test_bad_length_is_format_error(db_session):
    with pytest.raises(FormatError):
        load_rsvp_form(db_session, "ABC")


def test_unknown_code_is_not_found(db_session):
    with pytest.raises(NotFoundError):
        load_rsvp_form(db_session, "ZZZZZZ")


def test_first_visit_defaults(db_session, make_invitation):
    seeded = make_invitation(["John Smith", "Jane Smith"], code="TEST01")
    state = load_rsvp_form(db_session, "test01")

    assert state.code == "TEST01"
    assert state.guest_names == "John & Jane Smith"
    assert state.is_amendment is False
    assert state.info_text is None
    assert state.original is None
    assert state.rsvp_closed is False
    assert state.initial.accepted is True
    assert state.initial.staying_villa is True
    assert [i.id for i in state.initial.invitees] == seeded.invitee_ids
    assert all(i.coming for i in state.initial.invitees)
    assert state.initial.message == ""


def test_first_visit_without_villa(db_session, make_invitation):
    make_invitation(["Ana Lopez"], code="NOVILA", villa_offered=False)
    state = load_rsvp_form(db_session, "NOVILA")
    assert state.villa_offered is False
    assert state.initial.staying_villa is False


def test_amendment_snapshot_normalises_storage(db_session, make_invitation):
    seeded = make_invitation(["John Smith", "Jane Smith"], code="TEST01")
    rsvp = rsvp_crud.get_rsvp_by_code(db_session, "TEST01")
    stamp = datetime(2026, 5, 22, 18, 30)
    rsvp_crud.update_rsvp_answers(
        db_session, rsvp.id, accepted=True, staying_villa=None, dietary_restrictions=None,
        song_request="Dancing Queen", travel_plans=None, message=None, updated_at=stamp,
    )
    rsvp_crud.set_invitee_attendance(db_session, seeded.invitation_id, seeded.invitee_ids[0], True)
    db_session.expire_all()

    state = load_rsvp_form(db_session, "TEST01")
    assert state.is_amendment is True
    assert state.info_text == "You're amending your RSVP, last updated on Friday 22 May 2026 at 18:30"
    original = state.original
    assert original.accepted is True
    assert original.staying_villa is False
    assert original.song_request == "Dancing Queen"
    assert original.dietary_restrictions == "" and original.message == ""
    # Second invitee never answered: NULL reads as not coming.
    assert {i.id: i.coming for i in original.invitees} == {seeded.invitee_ids[0]: True, seeded.invitee_ids[1]: False}
    assert state.initial == original
    assert state.initial is not original


def test_single_invitee_accepted_counts_as_coming(db_session, make_invitation):
    make_invitation(["Ana Lopez"], code="SOLO01")
    rsvp = rsvp_crud.get_rsvp_by_code(db_session, "SOLO01")
    rsvp_crud.update_rsvp_answers(
        db_session, rsvp.id, accepted=True, staying_villa=True, dietary_restrictions=None,
        song_request=None, travel_plans=None, message=None, updated_at=datetime(2026, 1, 1),
    )
    db_session.expire_all()
    state = load_rsvp_form(db_session, "SOLO01")
    assert state.original.invitees[0].coming is True


def test_deadline_flags_form_closed(db_session, make_invitation, monkeypatch):
    make_invitation(["John Smith"], code="TEST01")
    monkeypatch.setenv("RSVP_DEADLINE", "2026-04-01T00:00:00")
    assert load_rsvp_form(db_session, "TEST01", now=datetime(2026, 3, 31)).rsvp_closed is False
    assert load_rsvp_form(db_session, "TEST01", now=datetime(2026, 4, 1)).rsvp_closed is True


def test_details_are_primary_first(db_session, make_invitation):
    seeded = make_invitation(["Jane Smith", "John Smith"], code="TEST01", primary_index=1)
    details = get_rsvp_details(db_session, "TEST01")
    assert details["invitation_id"] == seeded.invitation_id
    assert details["accepted"] is None
    assert details["villa_offered"] is True
    assert [i.first_name for i in details["invitees"]] == ["John", "Jane"]


def test_amendment_info_format():
    assert format_amendment_info(datetime(2026, 1, 3, 9, 5)) == (
        "You're amending your RSVP, last updated on Saturday 3 January 2026 at 09:05"
    )
