# utils/api_client.py  # HTTP client used by guest-facing frontends to talk to the RSVP API.

# =================================================================================
# 🌐 RSVP API CLIENT
# ---------------------------------------------------------------------------------
# - Thin wrapper over a requests.Session with explicit timeout bands:
#   SHORT (5s) for code validation / invitation lookup,
#   STANDARD (10s) for form load and submit.
# - Timeouts and transport errors become RequestTimeoutError / NetworkError
#   carrying a guest-friendly message. No automatic retry.
# - close() marks the client as closed: later calls raise RequestCancelledError.
# =================================================================================

import os
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

import requests
from loguru import logger

API_BASE_URL = os.getenv("API_BASE_URL", "http://127.0.0.1:8000")

TIMEOUT_MESSAGE = "Request timed out. Please check your connection and try again."
NETWORK_MESSAGE = "Something went wrong. Please try again."
CANCELLED_MESSAGE = "Request cancelled."


class RSVPClientError(Exception):
    """Base error for the guest client; `message` is safe to show to guests."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class RequestTimeoutError(RSVPClientError):
    def __init__(self, message: str = TIMEOUT_MESSAGE):
        super().__init__(message)


class NetworkError(RSVPClientError):
    def __init__(self, message: str = NETWORK_MESSAGE):
        super().__init__(message)


class RequestCancelledError(RSVPClientError):
    def __init__(self, message: str = CANCELLED_MESSAGE):
        super().__init__(message)


@dataclass
class ApiResponse:
    status_code: int
    data: Dict[str, Any] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300

    @property
    def error(self) -> Optional[str]:
        return self.data.get("error") if isinstance(self.data, dict) else None


class RSVPApiClient:
    SHORT_TIMEOUT = 5
    STANDARD_TIMEOUT = 10

    def __init__(self, base_url: Optional[str] = None, session: Optional[requests.Session] = None):
        self.base_url = (base_url or API_BASE_URL).rstrip("/")
        self.session = session or requests.Session()
        self.closed = False

    def _request(self, method: str, path: str, timeout: float, **kwargs) -> ApiResponse:
        if self.closed:
            raise RequestCancelledError()
        url = f"{self.base_url}{path}"
        try:
            resp = self.session.request(method, url, timeout=timeout, **kwargs)
        except requests.Timeout as e:
            logger.warning("{} {} timed out after {}s: {}", method, path, timeout, e)
            raise RequestTimeoutError() from e
        except requests.RequestException as e:
            logger.warning("{} {} failed: {}", method, path, e)
            raise NetworkError() from e

        try:
            data = resp.json()
        except ValueError:
            data = {}
        return ApiResponse(status_code=resp.status_code, data=data if isinstance(data, dict) else {"items": data})

    # --- Short band ---
    def validate_code(self, code: str) -> ApiResponse:
        return self._request("GET", f"/api/rsvp/validate/{code}", self.SHORT_TIMEOUT)

    def lookup_invitation(self, slug: str) -> ApiResponse:
        return self._request("GET", f"/api/invitation/{slug}", self.SHORT_TIMEOUT)

    # --- Standard band ---
    def get_form(self, code: str) -> ApiResponse:
        return self._request("GET", f"/api/rsvp/{code}/form", self.STANDARD_TIMEOUT)

    def submit_rsvp(self, code: str, body: Dict[str, Any]) -> ApiResponse:
        return self._request("POST", f"/api/rsvp/{code}", self.STANDARD_TIMEOUT, json=body)

    def close(self) -> None:
        self.closed = True
        self.session.close()
