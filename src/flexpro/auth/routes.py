# src/flexpro/auth/routes.py
from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from flexpro.app_logger import get_logger
from flexpro.auth.deps import AuthError, require_user
from flexpro.auth.passwords import verify_password
from flexpro.auth.tokens import sign_token
from flexpro.core.config import settings
from flexpro.db.models import User, ROLE_ADMIN
from flexpro.db.session import get_db
from flexpro.errors import ServiceUnavailableError
from flexpro.schemas.auth import LoginRequest, LoginResponse, SessionResponse
from flexpro.schemas.base import Message
from flexpro.schemas.users import UserOut
from flexpro.services.portal_settings import PortalSettingsService, get_portal_settings_service

router = APIRouter(prefix="/auth", tags=["auth"])
log = get_logger("auth.routes")


@router.post("/login", response_model=LoginResponse)
async def login(
    payload: LoginRequest,
    response: Response,
    session: AsyncSession = Depends(get_db),
    portal: PortalSettingsService = Depends(get_portal_settings_service),
) -> LoginResponse:
    """
    Exchange an email or student id plus password for a session token.

    The token is returned in the body and also set as an http-only cookie whose
    lifetime follows the portal's session timeout.
    """
    ident = payload.identifier.strip()
    user = await session.scalar(
        select(User).where(or_(User.email == ident.lower(), User.student_id == ident)).limit(1)
    )

    if user is None or not user.is_active:
        log.info("login rejected for identifier=%r (unknown or inactive)", ident)
        raise AuthError("Invalid credentials")

    if not user.password_hash:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Account requires external authentication.",
        )

    if not verify_password(payload.password, user.password_hash):
        log.info("login rejected for user=%s (bad password)", user.id)
        raise AuthError("Invalid credentials")

    current = await portal.get(session)
    if current.maintenance_mode and user.role != ROLE_ADMIN:
        raise ServiceUnavailableError("The portal is under maintenance. Please try again later.")

    ttl = current.session_timeout_minutes * 60
    token = sign_token(str(user.id), ttl)
    response.set_cookie(
        key=settings.AUTH_COOKIE_NAME,
        value=token,
        max_age=ttl,
        httponly=True,
        secure=settings.COOKIE_SECURE,
        samesite=settings.COOKIE_SAMESITE,
        path="/",
    )
    log.info("login ok user=%s role=%s", user.id, user.role)
    return LoginResponse(token=token, user=UserOut.model_validate(user))


@router.post("/logout", response_model=Message)
async def logout(response: Response) -> Message:
    response.delete_cookie(settings.AUTH_COOKIE_NAME, path="/")
    return Message(message="Logged out")


@router.get("/session", response_model=SessionResponse)
async def current_session(user: User = Depends(require_user)) -> SessionResponse:
    return SessionResponse(user=UserOut.model_validate(user))
