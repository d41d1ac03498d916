# tests/api/test_invitation_api.py
# =======================
# 💌 GET /api/invitation/{slug}
# =======================

import pytest


def test_valid_link(client, make_invitation):
    seeded = make_invitation(["John Smith", "Jane Smith"], code="TEST01")
    r = client.get("/api/invitation/john-jane-test01")
    assert r.status_code == 200
    assert r.json() == {
        "valid": True,
        "code": "TEST01",
        "guestNames": ["John", "Jane"],
        "invitationId": seeded.invitation_id,
    }
    assert r.headers["X-RateLimit-Limit"] == "30"


@pytest.mark.parametrize("slug", ["nonsense", "john-jane-ZZZZZZ", "john-TEST01", "bob-mary-TEST01"])
def test_every_failure_looks_the_same(client, make_invitation, slug):
    make_invitation(["John Smith", "Jane Smith"], code="TEST01")
    r = client.get(f"/api/invitation/{slug}")
    assert r.status_code == 404
    assert r.content == b'{"error":"Invalid invitation link"}'
    assert "X-RateLimit-Remaining" in r.headers


def test_rate_limited_after_30(client):
    for _ in range(30):
        assert client.get("/api/invitation/john-jane-ZZZZZZ").status_code == 404
    r = client.get("/api/invitation/john-jane-ZZZZZZ")
    assert r.status_code == 429
    body = r.json()
    assert body["error"] == "Too many requests. Please try again later."
    assert body["retryAfter"] >= 1
    assert r.headers["Retry-After"] == str(body["retryAfter"])
    assert r.headers["X-RateLimit-Remaining"] == "0"
