# app/main.py  # FastAPI application entry point.

# ================================================================
# 🧱 MAINTENANCE MODE (toggled from the environment)
# ================================================================

import os

# MAINTENANCE_MODE=1 builds a minimal app that answers 503 everywhere.
if os.getenv("MAINTENANCE_MODE") == "1":
    from fastapi import FastAPI
    from fastapi.responses import JSONResponse
    from loguru import logger

    app = FastAPI(title="Wedding RSVP API (maintenance)")

    @app.api_route("/{path:path}", methods=["GET", "POST", "PUT", "DELETE", "PATCH", "OPTIONS"])
    async def maintenance_page(path: str):
        """Answers every route and method with a neutral maintenance message."""
        return JSONResponse(
            status_code=503,
            content={
                "status": "offline",
                "message": "🌙 The site is under maintenance. Please come back later.",
            },
        )

    logger.warning("🚧 API started in MAINTENANCE MODE. Every real endpoint is disabled.")
else:
    # =================================================================================
    # 🧠 API CORE (FastAPI)
    # ---------------------------------------------------------------------------------
    # - Creates the FastAPI instance and the per-app rate limiter
    # - Configures CORS from CORS_ORIGINS
    # - Renders domain errors as {"error": message}
    # - Registers the routers (invitation, rsvp, calendar, meta, admin)
    # =================================================================================

    from pathlib import Path

    from dotenv import load_dotenv
    from fastapi import FastAPI, Request
    from fastapi.middleware.cors import CORSMiddleware
    from fastapi.responses import JSONResponse
    from loguru import logger
    from starlette.exceptions import HTTPException as StarletteHTTPException

    env_path = Path(".") / ".env"
    load_dotenv(dotenv_path=env_path)

    logger.info(
        "[BOOT] DRY_RUN={} | EMAIL_FROM={} | SG_KEY_SET={} | RSVP_DEADLINE={}",
        os.getenv("DRY_RUN", "1"),
        os.getenv("EMAIL_FROM"),
        "yes" if os.getenv("SENDGRID_API_KEY") else "no",
        os.getenv("RSVP_DEADLINE") or "<open>",
    )

    from app import meta
    from app.db import log_db_path_on_startup
    from app.errors import RSVPError
    from app.rate_limit import RateLimiter, RateLimitExceeded, rate_limit_headers
    from app.routers import admin, calendar, invitation, rsvp

    DEFAULT_CORS_ORIGINS = "http://localhost:3000,http://127.0.0.1:3000"

    app = FastAPI(
        title="Wedding RSVP API",
        description="Invitation lookup, RSVP form and submission, calendar download and admin.",
        version="1.0.0",
    )
    app.state.rate_limiter = RateLimiter()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=[o.strip() for o in os.getenv("CORS_ORIGINS", DEFAULT_CORS_ORIGINS).split(",") if o.strip()],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # =================================================================================
    # 🚨 ERROR RENDERING
    # =================================================================================
    @app.exception_handler(RSVPError)
    async def _rsvp_error_handler(request: Request, exc: RSVPError):
        result = getattr(request.state, "rate_limit", None)
        headers = rate_limit_headers(result) if result is not None else None
        return JSONResponse(status_code=exc.status_code, content=exc.to_payload(), headers=headers)

    @app.exception_handler(StarletteHTTPException)
    async def _http_error_handler(request: Request, exc: StarletteHTTPException):
        content = {"error": exc.detail}
        if isinstance(exc, RateLimitExceeded):
            content["retryAfter"] = exc.retry_after
        return JSONResponse(status_code=exc.status_code, content=content, headers=getattr(exc, "headers", None))

    @app.exception_handler(Exception)
    async def _unhandled_error_handler(request: Request, exc: Exception):
        logger.exception("Unhandled error on {} {}", request.method, request.url.path)
        return JSONResponse(status_code=500, content={"error": "Internal server error"})

    @app.on_event("startup")
    def _startup_db_trace() -> None:
        log_db_path_on_startup()

    @app.get("/health", tags=["meta"])
    def health():
        return {"status": "ok"}

    app.include_router(invitation.router)
    app.include_router(rsvp.router)
    app.include_router(calendar.router)
    app.include_router(meta.router)
    app.include_router(admin.router)
