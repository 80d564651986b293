from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Response, status

from core.config import Settings
from core.logging import logger
from core.schemas import AdminSessionRead, LoginRequest
from core.security import SessionSigner, credentials_match, get_session_signer

from .dependencies import current_admin, get_app_settings

router = APIRouter(prefix="/admin", tags=["admin"])


def _set_cookie(response: Response, settings: Settings, value: str, max_age: int) -> None:
    response.set_cookie(
        settings.admin_cookie_name,
        value,
        max_age=max_age,
        path="/",
        httponly=True,
        samesite="lax",
        secure=settings.environment == "production",
    )


@router.post("/login")
async def login(
    payload: LoginRequest,
    response: Response,
    settings: Settings = Depends(get_app_settings),
    signer: SessionSigner = Depends(get_session_signer),
) -> dict[str, bool]:
    if not settings.admin_password:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="ADMIN_PASSWORD env var not set",
        )
    if not credentials_match(payload.username, payload.password, settings.admin_username, settings.admin_password):
        logger.warning("Rejected admin login for {}", payload.username)
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid login")

    _set_cookie(response, settings, signer.issue(payload.username), settings.admin_session_seconds)
    logger.info("Admin {} logged in", payload.username)
    return {"ok": True}


@router.post("/logout")
async def logout(response: Response, settings: Settings = Depends(get_app_settings)) -> dict[str, bool]:
    _set_cookie(response, settings, "", 0)
    return {"ok": True}


@router.get("/session", response_model=AdminSessionRead)
async def admin_session(admin: str | None = Depends(current_admin)) -> AdminSessionRead:
    return AdminSessionRead(authenticated=bool(admin))
