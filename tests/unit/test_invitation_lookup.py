# tests/unit/test_invitation_lookup.py
# =======================
# 💌 Personalised invitation lookup
# =======================

import pytest
from sqlalchemy.exc import OperationalError

from app.crud import rsvp_crud
from app.services.invitation_lookup import lookup_invitation, names_match


@pytest.mark.parametrize(
    "url_names, roster, expected",
    [
        (["john", "jane"], ["John", "Jane"], True),
        (["jane", "john"], ["John", "Jane"], True),
        (["john"], ["John", "Jane"], False),
        (["john", "jane", "bob"], ["John", "Jane"], False),
        (["john", "john"], ["John", "Jane"], False),
        (["JOHN"], ["john"], True),
    ],
)
def test_names_match(url_names, roster, expected):
    assert names_match(url_names, roster) is expected


def test_lookup_success(db_session, make_invitation):
    seeded = make_invitation(["John Smith", "Jane Smith"], code="TEST01")
    match = lookup_invitation(db_session, "jane-john-test01")
    assert match is not None
    assert match.code == "TEST01"
    assert match.guest_names == ["John", "Jane"]
    assert match.invitation_id == seeded.invitation_id


@pytest.mark.parametrize(
    "slug",
    [
        "john-jane",             # Malformed.
        "john-jane-ZZZZZZ",      # Unknown code.
        "john-TEST01",           # Too few names.
        "john-jane-bob-TEST01",  # Too many names.
        "john-mary-TEST01",      # Wrong name.
    ],
)
def test_lookup_failures_collapse_to_none(db_session, make_invitation, slug):
    make_invitation(["John Smith", "Jane Smith"], code="TEST01")
    assert lookup_invitation(db_session, slug) is None


def test_lookup_empty_roster(db_session, make_invitation):
    make_invitation([], code="EMPTY1")
    assert lookup_invitation(db_session, "john-EMPTY1") is None


def test_lookup_storage_error(db_session, monkeypatch):
    def _boom(db, code):
        raise OperationalError("SELECT", {}, Exception("database is locked"))

    monkeypatch.setattr(rsvp_crud, "get_rsvp_by_code", _boom)
    assert lookup_invitation(db_session, "john-jane-TEST01") is None
