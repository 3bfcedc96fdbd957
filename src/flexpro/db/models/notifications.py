from __future__ import annotations

import uuid
from typing import Optional

import sqlalchemy as sa
from sqlalchemy import ForeignKey
from sqlalchemy.orm import Mapped, mapped_column

from flexpro.db.base import Base, UUIDMixin, GUID

NOTIFICATION_TYPES = ("info", "success", "warning", "error")


class Notification(UUIDMixin, Base):
    __tablename__ = "notifications"

    user_id: Mapped[Optional[uuid.UUID]] = mapped_column(GUID(), ForeignKey("users.id", ondelete="CASCADE"), index=True)
    is_global: Mapped[bool] = mapped_column(sa.Boolean, nullable=False, default=False)
    title: Mapped[str] = mapped_column(sa.String(120), nullable=False)
    message: Mapped[str] = mapped_column(sa.Text, nullable=False)
    type: Mapped[str] = mapped_column(sa.String(16), nullable=False, default="info")
    is_read: Mapped[bool] = mapped_column(sa.Boolean, nullable=False, default=False)
