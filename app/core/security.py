# app/core/security.py
import os
import secrets

from fastapi import Depends, HTTPException, status
from fastapi.security.api_key import APIKeyHeader
from loguru import logger

_api_key_header = APIKeyHeader(name="x-admin-key", auto_error=False)


def require_admin(api_key: str = Depends(_api_key_header)) -> None:
    admin_key = os.getenv("ADMIN_API_KEY", "")
    if not admin_key or not api_key or not secrets.compare_digest(api_key, admin_key):
        logger.warning("Admin access denied (key {})", "missing" if not api_key else "mismatch")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or missing admin key",
        )
