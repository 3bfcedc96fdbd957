from __future__ import annotations

import uuid
from typing import Optional

import sqlalchemy as sa
from sqlalchemy import ForeignKey, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from flexpro.db.base import Base, UUIDMixin, GUID
from flexpro.db.models.courses import Course
from flexpro.db.models.terms import Term
from flexpro.db.models.users import User
from flexpro.grading.gradebook import MARK_COMPONENTS

STATUS_ENROLLED = "enrolled"
STATUS_COMPLETED = "completed"
STATUS_DROPPED = "dropped"
ENROLLMENT_STATUSES = (STATUS_ENROLLED, STATUS_COMPLETED, STATUS_DROPPED)


class Enrollment(UUIDMixin, Base):
    __tablename__ = "enrollments"
    __table_args__ = (
        UniqueConstraint("user_id", "course_id", "term_id", name="uq_enrollments_user_course_term"),
        {"comment": "A student's registration in a course for one term."},
    )

    user_id: Mapped[uuid.UUID] = mapped_column(GUID(), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    course_id: Mapped[uuid.UUID] = mapped_column(GUID(), ForeignKey("courses.id", ondelete="CASCADE"), nullable=False)
    term_id: Mapped[uuid.UUID] = mapped_column(GUID(), ForeignKey("terms.id", ondelete="CASCADE"), nullable=False)
    status: Mapped[str] = mapped_column(sa.String(16), nullable=False, default=STATUS_ENROLLED)

    user: Mapped[User] = relationship()
    course: Mapped[Course] = relationship()
    term: Mapped[Term] = relationship()
    mark: Mapped[Optional["StudentMark"]] = relationship(
        back_populates="enrollment",
        uselist=False,
        cascade="all, delete-orphan",
    )


class StudentMark(UUIDMixin, Base):
    __tablename__ = "student_marks"
    __table_args__ = {"comment": "Raw assessment scores for one enrollment; total is the sum of the components."}

    enrollment_id: Mapped[uuid.UUID] = mapped_column(
        GUID(), ForeignKey("enrollments.id", ondelete="CASCADE"), unique=True, nullable=False
    )
    assignment1: Mapped[float] = mapped_column(sa.Float, nullable=False, default=0.0)
    assignment2: Mapped[float] = mapped_column(sa.Float, nullable=False, default=0.0)
    quiz1: Mapped[float] = mapped_column(sa.Float, nullable=False, default=0.0)
    quiz2: Mapped[float] = mapped_column(sa.Float, nullable=False, default=0.0)
    quiz3: Mapped[float] = mapped_column(sa.Float, nullable=False, default=0.0)
    quiz4: Mapped[float] = mapped_column(sa.Float, nullable=False, default=0.0)
    mid1: Mapped[float] = mapped_column(sa.Float, nullable=False, default=0.0)
    mid2: Mapped[float] = mapped_column(sa.Float, nullable=False, default=0.0)
    final_exam: Mapped[float] = mapped_column(sa.Float, nullable=False, default=0.0)
    grace_marks: Mapped[float] = mapped_column(sa.Float, nullable=False, default=0.0)
    total: Mapped[Optional[float]] = mapped_column(sa.Float)

    enrollment: Mapped[Enrollment] = relationship(back_populates="mark")

    def recompute_total(self) -> float:
        self.total = sum(float(getattr(self, name) or 0.0) for name in MARK_COMPONENTS)
        return self.total
