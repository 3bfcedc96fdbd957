# src/flexpro/api/routers/admin_settings.py
from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from flexpro.auth.deps import require_admin
from flexpro.db.models import User
from flexpro.db.session import get_db
from flexpro.schemas.portal_settings import PortalSettings, PortalSettingsSaved, PortalSettingsUpdate
from flexpro.services.portal_settings import PortalSettingsService, get_portal_settings_service

router = APIRouter(prefix="/admin/settings", tags=["admin"])


@router.get("", response_model=PortalSettings)
async def read_settings(
    _admin: User = Depends(require_admin),
    session: AsyncSession = Depends(get_db),
    portal: PortalSettingsService = Depends(get_portal_settings_service),
) -> PortalSettings:
    return await portal.get(session)


@router.post("", response_model=PortalSettingsSaved)
async def save_settings(
    payload: PortalSettingsUpdate,
    _admin: User = Depends(require_admin),
    session: AsyncSession = Depends(get_db),
    portal: PortalSettingsService = Depends(get_portal_settings_service),
) -> PortalSettingsSaved:
    saved = await portal.update(session, payload)
    return PortalSettingsSaved(message="Settings saved", settings=saved)
