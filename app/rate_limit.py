# app/rate_limit.py  # In-memory fixed-window rate limiter for the public endpoints.

# =================================================================================
# 🚦 LIGHTWEIGHT IN-MEMORY RATE LIMIT
# ---------------------------------------------------------------------------------
# - Fixed window per key ('namespace:ip'): once the window resets, the next
#   check opens a fresh window with count 1.
# - One RateLimiter per application, stored on app.state and reached through
#   the `rate_limit(policy)` dependency. No module-level counters.
# - Expired windows are evicted lazily on access (interval elapsed or store
#   over its size cap). There is no timer thread.
# - Per-process only: multi-instance deployments need Redis or a reverse proxy.
# =================================================================================

import ipaddress
import math
import os
import threading
import time
from dataclasses import dataclass
from typing import Callable, Dict, Optional

from fastapi import Depends, HTTPException, Request, Response, status
from loguru import logger

LOOPBACK_SENTINEL = "127.0.0.1"
CLEANUP_INTERVAL_S = 5 * 60
MAX_ENTRIES = 10_000
TOO_MANY_REQUESTS = "Too many requests. Please try again later."


@dataclass
class _Window:
    count: int
    reset_at: float


@dataclass(frozen=True)
class RateLimitResult:
    allowed: bool
    limit: int
    remaining: int
    reset_at: float  # Epoch seconds.


class RateLimiter:
    """Fixed-window counters keyed by 'namespace:client_key'."""

    def __init__(self, clock: Callable[[], float] = time.time,
                 cleanup_interval_s: float = CLEANUP_INTERVAL_S, max_entries: int = MAX_ENTRIES):
        self._clock = clock
        self._cleanup_interval_s = cleanup_interval_s
        self._max_entries = max_entries
        self._store: Dict[str, _Window] = {}
        self._lock = threading.Lock()
        self._last_cleanup = clock()

    def now(self) -> float:
        return self._clock()

    def __len__(self) -> int:
        return len(self._store)

    def _evict_expired(self, now: float) -> None:
        # Caller holds the lock.
        if now - self._last_cleanup < self._cleanup_interval_s and len(self._store) < self._max_entries:
            return
        self._last_cleanup = now
        expired = [key for key, win in self._store.items() if win.reset_at <= now]
        for key in expired:
            del self._store[key]
        if expired:
            logger.debug("Rate limiter evicted {} expired windows", len(expired))

    def check(self, client_key: str, limit: int, window_seconds: int, namespace: str = "") -> RateLimitResult:
        """Counts one hit for `client_key` in `namespace` and says whether it is allowed."""
        key = f"{namespace}:{client_key}" if namespace else client_key
        with self._lock:
            now = self._clock()
            self._evict_expired(now)

            if limit <= 0:  # Limit disabled via env.
                return RateLimitResult(True, limit, 0, now + window_seconds)

            win = self._store.get(key)
            if win is None or win.reset_at <= now:
                win = _Window(count=1, reset_at=now + window_seconds)
                self._store[key] = win
                return RateLimitResult(True, limit, limit - 1, win.reset_at)

            win.count += 1
            allowed = win.count <= limit
            result = RateLimitResult(allowed, limit, max(0, limit - win.count), win.reset_at)

        if not allowed:
            logger.warning("Rate limit hit for key='{}' ({}/{} in {}s)", key, win.count, limit, window_seconds)
        return result

    def reset(self) -> None:
        with self._lock:
            self._store.clear()


# =================================================================================
# 🌐 CLIENT IDENTIFICATION
# =================================================================================
def _valid_ip(value: Optional[str]) -> Optional[str]:
    value = (value or "").strip()
    if not value:
        return None
    try:
        ipaddress.ip_address(value)
    except ValueError:
        return None
    return value


def client_ip(request: Request) -> str:
    """First X-Forwarded-For entry, else X-Real-IP, else the loopback sentinel.

    Header values that are not syntactically valid addresses are ignored so an
    attacker cannot pick arbitrary limiter keys.
    """
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        ip = _valid_ip(forwarded.split(",")[0])
        if ip:
            return ip
    real_ip = _valid_ip(request.headers.get("x-real-ip"))
    if real_ip:
        return real_ip
    return LOOPBACK_SENTINEL


# =================================================================================
# ⚙️ POLICIES (overridable with <PREFIX>_MAX / <PREFIX>_WINDOW)
# =================================================================================
def get_limits_from_env(prefix: str, default_max: int, default_window: int) -> tuple[int, int]:
    """Reads {prefix}_MAX and {prefix}_WINDOW (seconds) from env, falling back to defaults."""
    try:
        max_req = int(os.getenv(f"{prefix}_MAX", str(default_max)))
        window = int(os.getenv(f"{prefix}_WINDOW", str(default_window)))
    except ValueError:
        max_req, window = default_max, default_window
    return max_req, window


@dataclass(frozen=True)
class RateLimitPolicy:
    namespace: str
    env_prefix: str
    default_limit: int
    default_window: int

    def limits(self) -> tuple[int, int]:
        return get_limits_from_env(self.env_prefix, self.default_limit, self.default_window)


RSVP_VALIDATE = RateLimitPolicy("rsvp-validate", "RL_RSVP_VALIDATE", 5, 60)  # Strictest: code guessing.
RSVP_SUBMIT = RateLimitPolicy("rsvp-submit", "RL_RSVP_SUBMIT", 20, 60)
INVITATION = RateLimitPolicy("invitation", "RL_INVITATION", 30, 60)
GENERAL = RateLimitPolicy("general", "RL_GENERAL", 60, 60)


# =================================================================================
# 🧩 FASTAPI GLUE
# =================================================================================
def rate_limit_headers(result: RateLimitResult) -> Dict[str, str]:
    return {
        "X-RateLimit-Limit": str(result.limit),
        "X-RateLimit-Remaining": str(result.remaining),
        "X-RateLimit-Reset": str(int(math.ceil(result.reset_at))),
    }


def retry_after_seconds(result: RateLimitResult, now: Optional[float] = None) -> int:
    now = time.time() if now is None else now
    return max(1, int(math.ceil(result.reset_at - now)))


class RateLimitExceeded(HTTPException):
    """Rendered by app/main.py as 429 {error, retryAfter} with the limit headers."""

    def __init__(self, result: RateLimitResult, retry_after: int):
        headers = {**rate_limit_headers(result), "Retry-After": str(retry_after)}
        super().__init__(status_code=status.HTTP_429_TOO_MANY_REQUESTS, detail=TOO_MANY_REQUESTS, headers=headers)
        self.result = result
        self.retry_after = retry_after


def get_rate_limiter(request: Request) -> RateLimiter:
    limiter = getattr(request.app.state, "rate_limiter", None)
    if limiter is None:
        # First request on an app that skipped startup wiring (e.g. a bare test app).
        limiter = RateLimiter()
        request.app.state.rate_limiter = limiter
    return limiter


def rate_limit(policy: RateLimitPolicy):
    """Builds a dependency that enforces `policy` for the calling endpoint."""

    def _dependency(
        request: Request,
        response: Response,
        limiter: RateLimiter = Depends(get_rate_limiter),
    ) -> RateLimitResult:
        limit, window = policy.limits()
        result = limiter.check(client_ip(request), limit, window, policy.namespace)
        if not result.allowed:
            raise RateLimitExceeded(result, retry_after_seconds(result, limiter.now()))
        request.state.rate_limit = result  # Re-applied by the domain error handler.
        response.headers.update(rate_limit_headers(result))
        return result

    return _dependency
