from __future__ import annotations

import time
from typing import Optional

from jose import jwt, JWTError, ExpiredSignatureError

from flexpro.core.config import settings
from flexpro.app_logger import get_logger

log = get_logger("auth.tokens")

DEFAULT_TTL_SECONDS = settings.SESSION_TIMEOUT_MINUTES * 60


class TokenError(Exception):
    """The token could not be trusted (bad signature, malformed, expired, no subject)."""


def sign_token(user_id: str, ttl_seconds: int = DEFAULT_TTL_SECONDS, *, now: Optional[int] = None) -> str:
    issued_at = int(now if now is not None else time.time())
    payload = {"sub": str(user_id), "iat": issued_at, "exp": issued_at + int(ttl_seconds)}
    return jwt.encode(payload, settings.AUTH_SECRET, algorithm=settings.JWT_ALGORITHM)


def verify_token(token: str) -> dict:
    """Decode and validate a session token; raises TokenError on any failure."""
    try:
        claims = jwt.decode(token, settings.AUTH_SECRET, algorithms=[settings.JWT_ALGORITHM])
    except ExpiredSignatureError as e:
        raise TokenError("Token expired") from e
    except JWTError as e:
        raise TokenError("Invalid token") from e

    if not claims.get("sub"):
        raise TokenError("Token has no subject")
    return claims
