from __future__ import annotations

from pydantic import Field

from .base import APIModel
from .users import UserOut


class LoginRequest(APIModel):
    identifier: str = Field(..., min_length=1, max_length=100, description="Email or student id")
    password: str


class LoginResponse(APIModel):
    message: str = "Login successful"
    token: str
    user: UserOut


class SessionResponse(APIModel):
    user: UserOut
