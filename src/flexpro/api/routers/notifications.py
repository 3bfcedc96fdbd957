# src/flexpro/api/routers/notifications.py
from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from sqlalchemy import or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from flexpro.auth.deps import require_user
from flexpro.db.models import Notification, User
from flexpro.db.session import get_db
from flexpro.schemas.notifications import MarkRead, MarkReadResponse, NotificationList

router = APIRouter(prefix="/notifications", tags=["notifications"])


def _visible_to(user: User):
    return or_(Notification.user_id == user.id, Notification.is_global.is_(True))


@router.get("", response_model=NotificationList)
async def list_notifications(
    take: int = Query(default=25, ge=1, le=100),
    user: User = Depends(require_user),
    session: AsyncSession = Depends(get_db),
) -> NotificationList:
    rows = (
        await session.execute(
            select(Notification)
            .where(_visible_to(user))
            .order_by(Notification.created_at.desc())
            .limit(take)
        )
    ).scalars().all()
    return NotificationList(notifications=list(rows))


@router.patch("/read", response_model=MarkReadResponse)
async def mark_read(
    payload: MarkRead,
    user: User = Depends(require_user),
    session: AsyncSession = Depends(get_db),
) -> MarkReadResponse:
    result = await session.execute(
        update(Notification)
        .where(Notification.id.in_(payload.notification_ids), _visible_to(user))
        .values(is_read=True)
        .execution_options(synchronize_session=False)
    )
    await session.commit()
    return MarkReadResponse(updated=result.rowcount or 0)
