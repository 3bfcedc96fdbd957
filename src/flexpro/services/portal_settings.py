# src/flexpro/services/portal_settings.py
from __future__ import annotations

from fastapi import Request
from sqlalchemy.ext.asyncio import AsyncSession

from flexpro.app_logger import get_logger
from flexpro.core.config import Settings, settings as app_settings
from flexpro.db.models import PortalSettingsRow, SETTINGS_ROW_ID
from flexpro.schemas.portal_settings import (
    MAX_SESSION_TIMEOUT,
    MIN_SESSION_TIMEOUT,
    PortalSettings,
    PortalSettingsUpdate,
)

log = get_logger("services.portal_settings")


def clamp_timeout(minutes: float) -> int:
    return min(max(int(round(minutes)), MIN_SESSION_TIMEOUT), MAX_SESSION_TIMEOUT)


class PortalSettingsService:
    """
    Operational settings admins change at runtime (maintenance mode, enrollment
    window, support contact, broadcast banner, session timeout).

    One instance lives on `app.state`; values are persisted in the single-row
    `portal_settings` table so every worker sees the same thing. Concurrent
    saves are last-writer-wins.
    """

    def __init__(self, config: Settings = app_settings):
        self._defaults = PortalSettings(
            support_email=config.SUPPORT_EMAIL,
            session_timeout_minutes=clamp_timeout(config.SESSION_TIMEOUT_MINUTES),
        )

    @property
    def defaults(self) -> PortalSettings:
        return self._defaults.model_copy()

    async def get(self, session: AsyncSession) -> PortalSettings:
        row = await session.get(PortalSettingsRow, SETTINGS_ROW_ID)
        if row is None:
            return self.defaults
        return PortalSettings.model_validate(row)

    async def update(self, session: AsyncSession, patch: PortalSettingsUpdate) -> PortalSettings:
        current = await self.get(session)
        merged = current.model_copy(
            update={
                k: v
                for k, v in {
                    "maintenance_mode": patch.maintenance_mode,
                    "enrollment_status": patch.enrollment_status,
                    "support_email": patch.support_email.strip() if patch.support_email else None,
                    "broadcast_message": patch.broadcast_message,
                    "session_timeout_minutes": (
                        clamp_timeout(patch.session_timeout_minutes)
                        if patch.session_timeout_minutes is not None
                        else None
                    ),
                }.items()
                if v is not None
            }
        )

        row = await session.get(PortalSettingsRow, SETTINGS_ROW_ID)
        if row is None:
            row = PortalSettingsRow(id=SETTINGS_ROW_ID)
            session.add(row)
        for field, value in merged.model_dump().items():
            setattr(row, field, value)

        await session.commit()
        log.info(
            "portal settings saved maintenance=%s enrollment=%s timeout=%s",
            merged.maintenance_mode, merged.enrollment_status, merged.session_timeout_minutes,
        )
        return merged


def get_portal_settings_service(request: Request) -> PortalSettingsService:
    """FastAPI dependency: the service instance attached by the app factory."""
    return request.app.state.portal_settings
