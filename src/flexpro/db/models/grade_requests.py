from __future__ import annotations

import uuid
from datetime import datetime
from typing import Optional

import sqlalchemy as sa
from sqlalchemy import ForeignKey
from sqlalchemy.orm import Mapped, mapped_column, relationship

from flexpro.db.base import Base, UUIDMixin, GUID
from flexpro.db.models.courses import Course
from flexpro.db.models.terms import Term
from flexpro.db.models.users import User

REQUEST_PENDING = "pending"
REQUEST_APPROVED = "approved"
REQUEST_REJECTED = "rejected"
REQUEST_STATUSES = (REQUEST_PENDING, REQUEST_APPROVED, REQUEST_REJECTED)


class GradeRequest(UUIDMixin, Base):
    __tablename__ = "grade_requests"
    __table_args__ = {"comment": "A student's request to change a final grade; approval rewrites the transcript."}

    user_id: Mapped[uuid.UUID] = mapped_column(
        GUID(), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    course_id: Mapped[uuid.UUID] = mapped_column(GUID(), ForeignKey("courses.id", ondelete="CASCADE"), nullable=False)
    term_id: Mapped[uuid.UUID] = mapped_column(GUID(), ForeignKey("terms.id", ondelete="CASCADE"), nullable=False)
    current_grade: Mapped[str] = mapped_column(sa.String(4), nullable=False)
    requested_grade: Mapped[str] = mapped_column(sa.String(4), nullable=False)
    reason: Mapped[str] = mapped_column(sa.Text, nullable=False)
    status: Mapped[str] = mapped_column(sa.String(16), nullable=False, default=REQUEST_PENDING)
    notes: Mapped[Optional[str]] = mapped_column(sa.Text)
    reviewed_at: Mapped[Optional[datetime]] = mapped_column(sa.DateTime(timezone=True))
    reviewed_by: Mapped[Optional[uuid.UUID]] = mapped_column(GUID(), ForeignKey("users.id", ondelete="SET NULL"))

    user: Mapped[User] = relationship(foreign_keys=[user_id])
    course: Mapped[Course] = relationship()
    term: Mapped[Term] = relationship()
