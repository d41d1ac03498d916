# app/schemas.py  # Pydantic schemas for requests, responses and the form snapshot.

# =================================================================================
# 📦 SCHEMAS (Pydantic DATA MODELS)
# ---------------------------------------------------------------------------------
# Data models used by the API, built on Pydantic v2.
# - Validate incoming payloads (types, length caps, business shapes).
# - Serialise ORM objects and service results to JSON (from_attributes=True).
# - Public responses use camelCase keys (alias_generator); invitee rows and the
#   form snapshot keep snake_case so a snapshot can be posted back unchanged.
# =================================================================================

from datetime import datetime
from typing import Optional, List

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
    model_validator,
)
from pydantic.alias_generators import to_camel

from app.models import SideEnum

# Free-text caps shared by the request schema and the guest client.
MAX_DIETARY = 500
MAX_SONG = 200
MAX_TRAVEL = 500
MAX_MESSAGE = 1000


class CamelModel(BaseModel):
    """Base for public responses: snake_case in Python, camelCase on the wire."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class ErrorResponse(BaseModel):
    error: str


# =================================================================================
# 📝 FORM SNAPSHOT (original / current)
# =================================================================================
class InviteeSnapshot(BaseModel):
    id: int
    name: str = ""
    coming: bool = False


class FormSnapshot(BaseModel):
    """Every guest-editable field plus per-invitee attendance. Texts are never None."""
    accepted: bool = True
    invitees: List[InviteeSnapshot] = Field(default_factory=list)
    staying_villa: bool = False
    dietary_restrictions: str = ""
    song_request: str = ""
    travel_plans: str = ""
    message: str = ""

    model_config = ConfigDict(validate_assignment=True)

    def to_submission(self) -> dict:
        """Body for POST /api/rsvp/{code} built from this snapshot."""
        return {
            "accepted": self.accepted,
            "staying_villa": self.staying_villa if self.accepted else None,
            "dietary_restrictions": self.dietary_restrictions,
            "song_request": self.song_request,
            "travel_plans": self.travel_plans,
            "message": self.message,
            "invitees": [{"id": i.id, "coming": i.coming} for i in self.invitees],
        }


# =================================================================================
# 📥 RSVP SUBMISSION (guest → API)
# =================================================================================
class InviteeAttendanceIn(BaseModel):
    id: int
    coming: bool


class RSVPSubmitRequest(BaseModel):
    accepted: bool
    staying_villa: Optional[bool] = None
    dietary_restrictions: Optional[str] = Field(default=None, max_length=MAX_DIETARY)
    song_request: Optional[str] = Field(default=None, max_length=MAX_SONG)
    travel_plans: Optional[str] = Field(default=None, max_length=MAX_TRAVEL)
    message: Optional[str] = Field(default=None, max_length=MAX_MESSAGE)
    invitees: List[InviteeAttendanceIn] = Field(default_factory=list)

    @field_validator("staying_villa", mode="before")
    @classmethod
    def _yes_no_to_bool(cls, v):
        # Older clients send the villa radio value as "yes"/"no".
        if isinstance(v, str):
            value = v.strip().lower()
            if value == "":
                return None
            if value == "yes":
                return True
            if value == "no":
                return False
        return v

    @property
    def any_coming(self) -> bool:
        return any(i.coming for i in self.invitees)


# =================================================================================
# 🔎 LOOKUP / VALIDATE RESPONSES
# =================================================================================
class InvitationLookupResponse(CamelModel):
    valid: bool = True
    code: str
    guest_names: List[str]
    invitation_id: int


class ValidateCodeResponse(CamelModel):
    valid: bool = True
    rsvp_id: int
    code: str


class CodeNotFoundResponse(BaseModel):
    error: str
    suggestion: str


# =================================================================================
# 📋 RSVP DETAILS / FORM RESPONSES
# =================================================================================
class InviteeOut(BaseModel):
    id: int
    first_name: str
    last_name: str
    is_primary: bool
    coming: Optional[bool] = None

    model_config = ConfigDict(from_attributes=True)


class RSVPDetailsResponse(CamelModel):
    rsvp_id: int
    invitation_id: int
    accepted: Optional[bool] = None
    staying_villa: Optional[bool] = None
    dietary_restrictions: Optional[str] = None
    song_request: Optional[str] = None
    travel_plans: Optional[str] = None
    message: Optional[str] = None
    updated_at: Optional[datetime] = None
    villa_offered: bool = True
    invitees: List[InviteeOut] = Field(default_factory=list)


class RSVPFormResponse(CamelModel):
    guest_names: str
    villa_offered: bool
    is_amendment: bool
    info_text: Optional[str] = None
    rsvp_closed: bool = False
    form: FormSnapshot
    original: Optional[FormSnapshot] = None


class SubmitSuccessResponse(BaseModel):
    success: bool = True
    message: str


class PartialFailureResponse(CamelModel):
    warning: str
    failed_invitee_ids: List[int]


# =================================================================================
# 🛠️ ADMIN
# =================================================================================
class InviteeCreate(BaseModel):
    first_name: str = Field(..., min_length=1, max_length=80)
    last_name: str = Field(default="", max_length=80)
    is_primary: bool = False

    @field_validator("first_name", "last_name")
    @classmethod
    def _strip(cls, v: str) -> str:
        return (v or "").strip()


class InvitationCreate(BaseModel):
    side: Optional[SideEnum] = None
    villa_offered: bool = True
    invitees: List[InviteeCreate] = Field(..., min_length=1)

    @model_validator(mode="after")
    def _names_present(self):
        if any(not i.first_name for i in self.invitees):
            raise ValueError("Every invitee needs a first name.")
        return self


class InvitationAdminOut(CamelModel):
    id: int
    side: Optional[SideEnum] = None
    code: str
    villa_offered: bool
    accepted: Optional[bool] = None
    staying_villa: Optional[bool] = None
    updated_at: Optional[datetime] = None
    link: str
    invitees: List[InviteeOut] = Field(default_factory=list)

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, use_enum_values=True)


class AdminSummary(CamelModel):
    invitations: int = 0
    responded: int = 0
    accepted: int = 0
    declined: int = 0
    pending: int = 0
    invitees: int = 0
    attending_invitees: int = 0
    villa_yes: int = 0
    villa_no: int = 0
    villa_undecided: int = 0


# =================================================================================
# 💒 WEDDING META
# =================================================================================
class WeddingMeta(CamelModel):
    title: str
    location: str
    start_date: str
    end_date: str
    rsvp_deadline: Optional[datetime] = None
    rsvp_closed: bool = False
