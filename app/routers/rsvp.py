# app/routers/rsvp.py
# =============================================================================
# 📋 RSVP endpoints keyed by the 6-character code
# - GET  /api/rsvp/validate/{code}  → does the code exist? (strictest limit)
# - GET  /api/rsvp/{code}           → stored answers + invitee attendance
# - GET  /api/rsvp/{code}/form      → ready-to-edit form state (+ original)
# - POST /api/rsvp/{code}           → submit; 200 / 207 partial / 4xx / 500
# Domain errors (app/errors.py) are rendered by the handler in app/main.py.
# =============================================================================

from fastapi import APIRouter, BackgroundTasks, Depends, status
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

import app.schemas as schemas
from app.crud import rsvp_crud
from app.db import get_db
from app.errors import FormatError
from app.mailer import notify_rsvp_submitted
from app.rate_limit import RSVP_SUBMIT, RSVP_VALIDATE, RateLimitResult, rate_limit, rate_limit_headers
from app.services.rsvp_loader import CODE_LENGTH, get_rsvp_details, load_rsvp_form
from app.services.rsvp_submission import PARTIAL_WARNING, SUCCESS_MESSAGE, submit_rsvp

router = APIRouter(prefix="/api/rsvp", tags=["rsvp"])

CODE_NOT_FOUND = "RSVP code not found"
CODE_SUGGESTION = "Double-check that you've entered all characters correctly."


@router.get(
    "/validate/{code}",
    response_model=schemas.ValidateCodeResponse,
    responses={400: {"model": schemas.ErrorResponse}, 404: {"model": schemas.CodeNotFoundResponse}},
)
def validate_code(code: str,
                  db: Session = Depends(get_db),
                  rl: RateLimitResult = Depends(rate_limit(RSVP_VALIDATE))):
    if len(code) != CODE_LENGTH:
        raise FormatError()
    rsvp = rsvp_crud.get_rsvp_by_code(db, code)
    if rsvp is None:
        return JSONResponse(
            status_code=status.HTTP_404_NOT_FOUND,
            content={"error": CODE_NOT_FOUND, "suggestion": CODE_SUGGESTION},
            headers=rate_limit_headers(rl),
        )
    return schemas.ValidateCodeResponse(rsvp_id=rsvp.id, code=rsvp.short_url)


@router.get(
    "/{code}",
    response_model=schemas.RSVPDetailsResponse,
    dependencies=[Depends(rate_limit(RSVP_SUBMIT))],
)
def get_rsvp(code: str, db: Session = Depends(get_db)):
    return schemas.RSVPDetailsResponse(**get_rsvp_details(db, code))


@router.get(
    "/{code}/form",
    response_model=schemas.RSVPFormResponse,
    dependencies=[Depends(rate_limit(RSVP_SUBMIT))],
)
def get_rsvp_form(code: str, db: Session = Depends(get_db)):
    state = load_rsvp_form(db, code)
    return schemas.RSVPFormResponse(
        guest_names=state.guest_names,
        villa_offered=state.villa_offered,
        is_amendment=state.is_amendment,
        info_text=state.info_text,
        rsvp_closed=state.rsvp_closed,
        form=state.initial,
        original=state.original,
    )


@router.post(
    "/{code}",
    response_model=schemas.SubmitSuccessResponse,
    responses={207: {"model": schemas.PartialFailureResponse}},
)
def post_rsvp(code: str,
              payload: schemas.RSVPSubmitRequest,
              background_tasks: BackgroundTasks,
              db: Session = Depends(get_db),
              rl: RateLimitResult = Depends(rate_limit(RSVP_SUBMIT))):
    outcome = submit_rsvp(db, code, payload)

    if outcome.partial:
        body = schemas.PartialFailureResponse(warning=PARTIAL_WARNING, failed_invitee_ids=outcome.failed_invitee_ids)
        return JSONResponse(
            status_code=status.HTTP_207_MULTI_STATUS,
            content=body.model_dump(by_alias=True),
            headers=rate_limit_headers(rl),
        )

    if outcome.notification is not None:
        background_tasks.add_task(notify_rsvp_submitted, outcome.notification)
    return schemas.SubmitSuccessResponse(message=SUCCESS_MESSAGE)
