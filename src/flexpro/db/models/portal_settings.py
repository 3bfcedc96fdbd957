from __future__ import annotations

import sqlalchemy as sa
from sqlalchemy.orm import Mapped, mapped_column

from flexpro.db.base import Base, TimestampMixin

SETTINGS_ROW_ID = 1


class PortalSettingsRow(TimestampMixin, Base):
    """Single-row table holding the operational settings admins can change at runtime."""

    __tablename__ = "portal_settings"

    id: Mapped[int] = mapped_column(sa.Integer, primary_key=True, default=SETTINGS_ROW_ID)
    maintenance_mode: Mapped[bool] = mapped_column(sa.Boolean, nullable=False, default=False)
    enrollment_status: Mapped[str] = mapped_column(sa.String(16), nullable=False, default="open")
    support_email: Mapped[str] = mapped_column(sa.String(255), nullable=False)
    broadcast_message: Mapped[str] = mapped_column(sa.Text, nullable=False, default="")
    session_timeout_minutes: Mapped[int] = mapped_column(sa.Integer, nullable=False, default=60)
