from __future__ import annotations

import uuid
import datetime as dt
from typing import Optional

import sqlalchemy as sa
from sqlalchemy import ForeignKey, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from flexpro.db.base import Base, UUIDMixin, GUID
from flexpro.db.models.courses import Course

ATTENDANCE_STATUSES = ("present", "absent", "late")


class Attendance(UUIDMixin, Base):
    __tablename__ = "attendance"
    __table_args__ = (
        UniqueConstraint("user_id", "course_id", "term_id", "date", name="uq_attendance_user_course_term_date"),
    )

    user_id: Mapped[uuid.UUID] = mapped_column(GUID(), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    course_id: Mapped[uuid.UUID] = mapped_column(GUID(), ForeignKey("courses.id", ondelete="CASCADE"), nullable=False)
    term_id: Mapped[uuid.UUID] = mapped_column(GUID(), ForeignKey("terms.id", ondelete="CASCADE"), nullable=False)
    date: Mapped[dt.date] = mapped_column(sa.Date, nullable=False)
    status: Mapped[str] = mapped_column(sa.String(16), nullable=False)
    marked_by: Mapped[Optional[uuid.UUID]] = mapped_column(GUID(), ForeignKey("users.id", ondelete="SET NULL"))

    course: Mapped[Course] = relationship()
