# tests/unit/test_import_invitations.py
# =======================
# 🚚 Guest-list import script
# =======================

import pytest

from app.crud import rsvp_crud
from scripts.import_invitations import import_invitations, load_invitation_rows

CSV = """invitation_key,side,first_name,last_name,is_primary,villa_offered,code
smith,bride,John,Smith,1,yes,TEST01
smith,,Jane,Smith,0,,
jones,groom,Bob,Jones,yes,no,
,,Ghost,,,,
lopez,aunt,Ana,Lopez,,maybe,
"""


@pytest.fixture()
def guest_csv(tmp_path):
    path = tmp_path / "guests.csv"
    path.write_text(CSV, encoding="utf-8")
    return str(path)


def test_rows_grouped_by_key(guest_csv):
    rows, errors = load_invitation_rows(guest_csv)
    by_key = {r.key: r for r in rows}

    assert list(by_key) == ["smith", "jones", "lopez"]
    smith = by_key["smith"]
    assert smith.side == "bride" and smith.code == "TEST01" and smith.villa_offered is True
    assert [i["first_name"] for i in smith.invitees] == ["John", "Jane"]
    assert [i["is_primary"] for i in smith.invitees] == [True, False]
    assert by_key["jones"].villa_offered is False
    assert by_key["lopez"].side is None

    assert len(errors) == 3  # Empty key, unknown side, unreadable villa flag.


def test_missing_columns(tmp_path):
    path = tmp_path / "bad.csv"
    path.write_text("name\nJohn\n", encoding="utf-8")
    with pytest.raises(ValueError):
        load_invitation_rows(str(path))


def test_import_creates_invitations(db_session, guest_csv):
    rows, _ = load_invitation_rows(guest_csv)
    created, errors = import_invitations(db_session, rows)

    assert errors == []
    links = dict(created)
    assert links["smith"] == "john-jane-TEST01"
    assert links["jones"].startswith("bob-")
    rsvp = rsvp_crud.get_rsvp_by_code(db_session, "TEST01")
    assert [i.first_name for i in rsvp_crud.list_invitees(db_session, rsvp.invitation_id)] == ["John", "Jane"]


def test_import_reports_bad_code_and_continues(db_session, make_invitation, guest_csv):
    make_invitation(["Someone Else"], code="TEST01")
    rows, _ = load_invitation_rows(guest_csv)
    created, errors = import_invitations(db_session, rows)
    assert [key for key, _ in created] == ["jones", "lopez"]
    assert len(errors) == 1 and "smith" in errors[0]
