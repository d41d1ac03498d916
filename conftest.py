# conftest.py
# -------------------------------------------------------------------------------------
# Root pytest configuration.
# - Forces a throwaway environment BEFORE any `app.*` import (SQLite, DRY_RUN,
#   known admin key, no deadline, no maintenance mode).
# - Every test gets its own in-memory SQLite database (StaticPool so all
#   sessions share the one connection) and its own RateLimiter.
# - `make_invitation` seeds invitation + invitees + empty RSVP through the CRUD.
# -------------------------------------------------------------------------------------

import os

os.environ["FORCE_DB"] = "sqlite"
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["DRY_RUN"] = "1"
os.environ["ADMIN_API_KEY"] = "test-admin-key"
os.environ["MAINTENANCE_MODE"] = "0"
os.environ.pop("RSVP_DEADLINE", None)

from dataclasses import dataclass
from typing import List

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.crud import rsvp_crud
from app.db import Base, build_engine, get_db
from app.rate_limit import RateLimiter


@dataclass
class SeededInvitation:
    invitation_id: int
    code: str
    invitee_ids: List[int]


# =======================
# ⚙️ ENVIRONMENT
# =======================
@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    """Deadline and rate-limit overrides from a developer's shell never leak in."""
    monkeypatch.delenv("RSVP_DEADLINE", raising=False)
    for prefix in ("RL_RSVP_VALIDATE", "RL_RSVP_SUBMIT", "RL_INVITATION", "RL_GENERAL"):
        monkeypatch.delenv(f"{prefix}_MAX", raising=False)
        monkeypatch.delenv(f"{prefix}_WINDOW", raising=False)
    monkeypatch.setenv("DRY_RUN", "1")


# =======================
# 🗄️ DATABASE
# =======================
@pytest.fixture()
def engine():
    eng = build_engine("sqlite://", poolclass=StaticPool)
    Base.metadata.create_all(bind=eng)
    yield eng
    Base.metadata.drop_all(bind=eng)
    eng.dispose()


@pytest.fixture()
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture()
def db_session(session_factory):
    db = session_factory()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture()
def make_invitation(db_session):
    """Factory: make_invitation(["John Smith", "Jane Smith"], code="TEST01", villa_offered=True)."""

    def _make(names, code=None, villa_offered=True, primary_index=0, side=None) -> SeededInvitation:
        invitees = []
        for idx, full in enumerate(names):
            first, _, last = full.partition(" ")
            invitees.append({"first_name": first, "last_name": last, "is_primary": idx == primary_index})
        invitation = rsvp_crud.create_invitation(
            db_session, invitees, side=side, villa_offered=villa_offered, code=code
        )
        return SeededInvitation(
            invitation_id=invitation.id,
            code=invitation.rsvp.short_url,
            invitee_ids=[inv.id for inv in invitation.invitees],
        )

    return _make


# =======================
# 🌐 API CLIENT
# =======================
@pytest.fixture()
def client(session_factory):
    from app.main import app

    def _override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = _override_get_db
    app.state.rate_limiter = RateLimiter()
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
