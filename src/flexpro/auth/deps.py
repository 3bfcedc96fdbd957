# src/flexpro/auth/deps.py
from __future__ import annotations

import uuid
from typing import Callable, Optional

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from flexpro.app_logger import get_logger
from flexpro.auth.tokens import TokenError, verify_token
from flexpro.core.config import settings
from flexpro.db.models import User, ROLE_ADMIN, ROLE_FACULTY, ROLE_STUDENT
from flexpro.db.session import get_db

log = get_logger("auth.deps")


# ------------------------------------------------------------------------------
# Errors
# ------------------------------------------------------------------------------
class AuthError(HTTPException):
    def __init__(self, detail: str = "Not authenticated", code: int = status.HTTP_401_UNAUTHORIZED):
        super().__init__(status_code=code, detail=detail)


# ------------------------------------------------------------------------------
# Token extraction: Authorization header first, then the session cookie
# ------------------------------------------------------------------------------
bearer_scheme = HTTPBearer(auto_error=False)


def extract_token(request: Request, creds: Optional[HTTPAuthorizationCredentials]) -> Optional[str]:
    if creds and creds.scheme.lower() == "bearer" and creds.credentials:
        return creds.credentials.strip()
    cookie = request.cookies.get(settings.AUTH_COOKIE_NAME)
    return cookie or None


async def get_current_user(
    request: Request,
    creds: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    session: AsyncSession = Depends(get_db),
) -> Optional[User]:
    """Resolve the request's token to an active user, or None."""
    token = extract_token(request, creds)
    if not token:
        return None

    try:
        claims = verify_token(token)
        user_id = uuid.UUID(str(claims["sub"]))
    except (TokenError, ValueError) as e:
        log.info("rejected session token: %s", e)
        return None

    user = await session.get(User, user_id)
    if user is None or not user.is_active:
        log.info("token subject %s is missing or inactive", user_id)
        return None
    return user


# ------------------------------------------------------------------------------
# Gates
# ------------------------------------------------------------------------------
async def require_user(user: Optional[User] = Depends(get_current_user)) -> User:
    if user is None:
        raise AuthError("Not authenticated")
    return user


def require_role(*roles: str) -> Callable[..., object]:
    """
    Dependency factory: the user must hold one of `roles`.
    Admins satisfy every gate.
    """
    allowed = set(roles)

    async def _dep(user: User = Depends(require_user)) -> User:
        if user.role == ROLE_ADMIN or user.role in allowed:
            return user
        log.warning("forbidden: user=%s role=%s needs one of %s", user.id, user.role, sorted(allowed))
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Forbidden")

    return _dep


require_student = require_role(ROLE_STUDENT)
require_faculty = require_role(ROLE_FACULTY)
require_admin = require_role(ROLE_ADMIN)


__all__ = [
    "AuthError",
    "bearer_scheme",
    "extract_token",
    "get_current_user",
    "require_user",
    "require_role",
    "require_student",
    "require_faculty",
    "require_admin",
]
