from __future__ import annotations

import hmac

from fastapi import HTTPException, status

from app.core.config import settings

AUTH_ERROR_MESSAGE = "Please provide a valid API key."


def check_api_key(x_api_key: str | None) -> None:
    """No-op when API_KEY is unset; otherwise the X-API-Key header must match."""
    if not settings.api_key:
        return
    if not x_api_key or not hmac.compare_digest(x_api_key, settings.api_key):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=AUTH_ERROR_MESSAGE,
        )
