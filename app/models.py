# app/models.py  # ORM models for invitations, invitees and RSVPs.

# =================================================================================
# 🏛️ DATABASE MODELS (ORM)
# ---------------------------------------------------------------------------------
# Table layout of the RSVP backend using SQLAlchemy ORM.
# Implements:
# - Enums for consistency (wedding side, tri-state answers).
# - 'invitation' owns its 'invitees' and exactly one 'rsvp' row.
# - 'rsvp.short_url' is the public 6-character code (stored upper-case, unique).
# - 'rsvp.updated_at' stays NULL until the first guest submission.
# =================================================================================

# 🐍 Python and SQLAlchemy imports
# ---------------------------------------------------------------------------------
from datetime import datetime, timezone
import enum
from typing import Optional

from sqlalchemy import (
    Column,
    Integer,
    String,
    Boolean,
    DateTime,
    ForeignKey,
    func,
    Enum as SQLAlchemyEnum,
)
from sqlalchemy.orm import relationship as orm_relationship

from app.db import Base

# 🗂️ ENUMS
# ---------------------------------------------------------------------------------
class SideEnum(str, enum.Enum):  # Which side of the family the invitation belongs to.
    bride = "bride"
    groom = "groom"


class Answer(str, enum.Enum):
    """Tri-state answer: 'not answered yet' is observably different from 'no'."""
    unknown = "unknown"
    yes = "yes"
    no = "no"

    @classmethod
    def from_db(cls, value: Optional[bool]) -> "Answer":
        if value is None:
            return cls.unknown
        return cls.yes if value else cls.no

    def to_db(self) -> Optional[bool]:
        if self is Answer.unknown:
            return None
        return self is Answer.yes

    @property
    def is_yes(self) -> bool:
        return self is Answer.yes


# 💌 INVITATIONS (TABLE 'invitation')
# ---------------------------------------------------------------------------------
class Invitation(Base):
    __tablename__ = "invitation"

    id = Column(Integer, primary_key=True, index=True)
    side = Column(SQLAlchemyEnum(SideEnum), nullable=True)
    created_at = Column(DateTime, server_default=func.now())

    # --- Owned rows ---
    invitees = orm_relationship(
        "Invitee",
        cascade="all, delete-orphan",
        back_populates="invitation",
        order_by="Invitee.id",
        lazy="selectin",
    )
    rsvp = orm_relationship(
        "RSVP",
        cascade="all, delete-orphan",
        back_populates="invitation",
        uselist=False,
        lazy="selectin",
    )


# 👥 INVITEES (TABLE 'invitees')
# ---------------------------------------------------------------------------------
class Invitee(Base):
    __tablename__ = "invitees"

    id = Column(Integer, primary_key=True, index=True)
    invitation_id = Column(Integer, ForeignKey("invitation.id", ondelete="CASCADE"), index=True, nullable=False)
    first_name = Column(String(80), nullable=False)
    last_name = Column(String(80), nullable=False, default="")
    is_primary = Column(Boolean, default=False, nullable=False)  # Display ordering only.
    coming = Column(Boolean, nullable=True)                       # NULL = not answered yet.
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, nullable=True)

    invitation = orm_relationship("Invitation", back_populates="invitees")

    @property
    def attendance(self) -> Answer:
        return Answer.from_db(self.coming)


# 📝 RSVP (TABLE 'rsvp')
# ---------------------------------------------------------------------------------
class RSVP(Base):
    __tablename__ = "rsvp"

    id = Column(Integer, primary_key=True, index=True)
    invitation_id = Column(Integer, ForeignKey("invitation.id", ondelete="CASCADE"), unique=True, nullable=False)
    short_url = Column(String(6), unique=True, index=True, nullable=False)

    # --- Guest answers ---
    accepted = Column(Boolean, nullable=True)          # NULL = not responded yet.
    staying_villa = Column(Boolean, nullable=True)
    dietary_restrictions = Column(String(500), nullable=True)
    song_request = Column(String(200), nullable=True)
    travel_plans = Column(String(500), nullable=True)
    message = Column(String(1000), nullable=True)

    # --- Admin-set ---
    villa_offered = Column(Boolean, nullable=True, default=True)

    # --- Audit ---
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, nullable=True)  # Set only by guest submissions (amendment signal).

    invitation = orm_relationship("Invitation", back_populates="rsvp")

    @property
    def acceptance(self) -> Answer:
        return Answer.from_db(self.accepted)

    @property
    def villa_is_offered(self) -> bool:
        return True if self.villa_offered is None else bool(self.villa_offered)

    @property
    def is_amendment(self) -> bool:
        return self.updated_at is not None


def utcnow() -> datetime:
    """Naive UTC timestamp, as stored in the DateTime columns."""
    return datetime.now(timezone.utc).replace(tzinfo=None)
