from __future__ import annotations

from datetime import datetime
from typing import Literal, Optional
from uuid import UUID

from pydantic import Field

from .base import APIModel

NotificationType = Literal["info", "success", "warning", "error"]


class NotificationOut(APIModel):
    id: UUID
    user_id: Optional[UUID] = None
    is_global: bool
    title: str
    message: str
    type: str
    is_read: bool
    created_at: Optional[datetime] = None


class NotificationList(APIModel):
    notifications: list[NotificationOut]


class MarkRead(APIModel):
    notification_ids: list[UUID] = Field(..., min_length=1)


class MarkReadResponse(APIModel):
    updated: int


class BroadcastRequest(APIModel):
    audience: Literal["students", "faculty", "all"]
    title: str = Field(..., min_length=3, max_length=120)
    message: str = Field(..., min_length=5, max_length=2000)
    type: NotificationType = "info"


class BroadcastResponse(APIModel):
    message: str
    recipients: int
