from __future__ import annotations

from typing import Literal, Optional

from pydantic import EmailStr, Field

from .base import APIModel

EnrollmentStatus = Literal["open", "closed", "waitlist"]

MIN_SESSION_TIMEOUT = 5
MAX_SESSION_TIMEOUT = 240


class PortalSettings(APIModel):
    maintenance_mode: bool = False
    enrollment_status: EnrollmentStatus = "open"
    support_email: str
    broadcast_message: str = ""
    session_timeout_minutes: int = Field(default=60, ge=MIN_SESSION_TIMEOUT, le=MAX_SESSION_TIMEOUT)


class PortalSettingsUpdate(APIModel):
    """Partial update; omitted fields keep their current value."""

    maintenance_mode: Optional[bool] = None
    enrollment_status: Optional[EnrollmentStatus] = None
    support_email: Optional[EmailStr] = None
    broadcast_message: Optional[str] = Field(default=None, max_length=2000)
    # rounded and clamped into range rather than rejected
    session_timeout_minutes: Optional[float] = Field(default=None, gt=0, allow_inf_nan=False)


class PortalSettingsSaved(APIModel):
    message: str
    settings: PortalSettings
