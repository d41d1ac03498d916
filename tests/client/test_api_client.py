# tests/client/test_api_client.py
# =======================
# 🌐 Guest HTTP client: timeout bands and error mapping
# =======================

from unittest import mock

import pytest
import requests

from utils.api_client import (
    NETWORK_MESSAGE,
    TIMEOUT_MESSAGE,
    NetworkError,
    RequestCancelledError,
    RequestTimeoutError,
    RSVPApiClient,
)


def _client(side_effect=None, status=200, payload=None):
    session = mock.Mock(spec=requests.Session)
    if side_effect is not None:
        session.request.side_effect = side_effect
    else:
        session.request.return_value = mock.Mock(status_code=status, json=mock.Mock(return_value=payload or {}))
    return RSVPApiClient(base_url="http://api.test/", session=session), session


def test_timeout_bands():
    client, session = _client(payload={"valid": True})
    client.validate_code("TEST01")
    session.request.assert_called_with("GET", "http://api.test/api/rsvp/validate/TEST01", timeout=5)
    client.lookup_invitation("john-TEST01")
    session.request.assert_called_with("GET", "http://api.test/api/invitation/john-TEST01", timeout=5)
    client.get_form("TEST01")
    session.request.assert_called_with("GET", "http://api.test/api/rsvp/TEST01/form", timeout=10)
    client.submit_rsvp("TEST01", {"accepted": False})
    session.request.assert_called_with("POST", "http://api.test/api/rsvp/TEST01", timeout=10, json={"accepted": False})


def test_timeout_maps_to_friendly_error():
    client, session = _client(side_effect=requests.Timeout("slow"))
    with pytest.raises(RequestTimeoutError) as exc:
        client.get_form("TEST01")
    assert exc.value.message == TIMEOUT_MESSAGE
    assert session.request.call_count == 1  # No automatic retry.


def test_transport_error_maps_to_network_error():
    client, _ = _client(side_effect=requests.ConnectionError("refused"))
    with pytest.raises(NetworkError) as exc:
        client.validate_code("TEST01")
    assert exc.value.message == NETWORK_MESSAGE


def test_response_wrapping():
    client, _ = _client(status=404, payload={"error": "RSVP code not found"})
    resp = client.validate_code("ZZZZZZ")
    assert resp.ok is False
    assert resp.error == "RSVP code not found"


def test_non_json_body():
    client, session = _client()
    session.request.return_value = mock.Mock(status_code=502, json=mock.Mock(side_effect=ValueError("no json")))
    resp = client.get_form("TEST01")
    assert resp.status_code == 502 and resp.data == {}


def test_closed_client_refuses_requests():
    client, session = _client()
    client.close()
    session.close.assert_called_once()
    with pytest.raises(RequestCancelledError):
        client.get_form("TEST01")
    session.request.assert_not_called()
