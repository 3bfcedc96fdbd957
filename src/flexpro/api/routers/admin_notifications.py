# src/flexpro/api/routers/admin_notifications.py
from __future__ import annotations

from fastapi import APIRouter, Depends, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from flexpro.app_logger import get_logger
from flexpro.auth.deps import require_admin
from flexpro.db.models import Notification, User, ROLE_FACULTY, ROLE_STUDENT
from flexpro.db.session import get_db
from flexpro.errors import NotFoundError
from flexpro.schemas.notifications import BroadcastRequest, BroadcastResponse

router = APIRouter(prefix="/admin/notifications", tags=["admin"])
log = get_logger("routers.admin_notifications")

AUDIENCE_ROLES = {
    "students": (ROLE_STUDENT,),
    "faculty": (ROLE_FACULTY,),
    "all": (ROLE_STUDENT, ROLE_FACULTY),
}


@router.post("", response_model=BroadcastResponse, status_code=status.HTTP_201_CREATED)
async def broadcast(
    payload: BroadcastRequest,
    _admin: User = Depends(require_admin),
    session: AsyncSession = Depends(get_db),
) -> BroadcastResponse:
    """One notification row per active recipient in the audience."""
    recipients = (
        await session.execute(
            select(User.id).where(User.is_active.is_(True), User.role.in_(AUDIENCE_ROLES[payload.audience]))
        )
    ).scalars().all()
    if not recipients:
        raise NotFoundError("Active recipients for the selected audience")

    session.add_all(
        Notification(user_id=uid, is_global=False, title=payload.title, message=payload.message, type=payload.type)
        for uid in recipients
    )
    await session.commit()

    label = "users" if payload.audience == "all" else payload.audience
    log.info("broadcast %r to %d %s", payload.title, len(recipients), label)
    return BroadcastResponse(message=f"Notification sent to {len(recipients)} {label}", recipients=len(recipients))
