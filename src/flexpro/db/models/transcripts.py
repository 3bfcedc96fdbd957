from __future__ import annotations

import uuid

import sqlalchemy as sa
from sqlalchemy import ForeignKey, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from flexpro.db.base import Base, UUIDMixin, GUID
from flexpro.db.models.courses import Course
from flexpro.db.models.terms import Term

TRANSCRIPT_FINAL = "final"


class Transcript(UUIDMixin, Base):
    __tablename__ = "transcripts"
    __table_args__ = (
        UniqueConstraint(
            "user_id", "course_id", "term_id", "status",
            name="uq_transcripts_user_course_term_status",
        ),
        {"comment": "Finalized letter grades; quality points = grade_points x course credit hours."},
    )

    user_id: Mapped[uuid.UUID] = mapped_column(GUID(), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    course_id: Mapped[uuid.UUID] = mapped_column(GUID(), ForeignKey("courses.id", ondelete="CASCADE"), nullable=False)
    term_id: Mapped[uuid.UUID] = mapped_column(GUID(), ForeignKey("terms.id", ondelete="CASCADE"), nullable=False)
    grade: Mapped[str] = mapped_column(sa.String(4), nullable=False)
    grade_points: Mapped[float] = mapped_column(sa.Float, nullable=False)
    status: Mapped[str] = mapped_column(sa.String(16), nullable=False, default=TRANSCRIPT_FINAL)

    course: Mapped[Course] = relationship()
    term: Mapped[Term] = relationship()
