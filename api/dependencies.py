from __future__ import annotations

from fastapi import Depends, HTTPException, Request, status

from core.config import Settings, get_settings
from core.db import get_session
from core.security import SessionSigner, get_session_signer

__all__ = ["get_session", "get_app_settings", "current_admin", "require_admin"]


def get_app_settings() -> Settings:
    return get_settings()


def current_admin(
    request: Request,
    settings: Settings = Depends(get_app_settings),
    signer: SessionSigner = Depends(get_session_signer),
) -> str | None:
    token = request.cookies.get(settings.admin_cookie_name)
    return signer.verify(token, max_age=settings.admin_session_seconds)


def require_admin(admin: str | None = Depends(current_admin)) -> str:
    if not admin:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Admin login required")
    return admin
