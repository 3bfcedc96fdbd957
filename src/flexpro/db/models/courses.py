from __future__ import annotations

import uuid
from typing import Optional, List

import sqlalchemy as sa
from sqlalchemy import ForeignKey, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from flexpro.db.base import Base, UUIDMixin, GUID
from flexpro.db.models.users import User


class Course(UUIDMixin, Base):
    __tablename__ = "courses"
    __table_args__ = {"comment": "Course catalog. Credit hours drive GPA weighting and credit limits."}

    code: Mapped[str] = mapped_column(sa.String(32), unique=True, nullable=False)
    title: Mapped[str] = mapped_column(sa.String(255), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(sa.Text)
    credit_hours: Mapped[int] = mapped_column(sa.Integer, nullable=False)
    department: Mapped[str] = mapped_column(sa.String(120), nullable=False)
    semester: Mapped[int] = mapped_column(sa.Integer, nullable=False)
    prerequisite: Mapped[Optional[str]] = mapped_column(sa.String(255))
    max_capacity: Mapped[int] = mapped_column(sa.Integer, nullable=False, default=40)
    is_active: Mapped[bool] = mapped_column(sa.Boolean, nullable=False, default=True)

    sections: Mapped[List["CourseSection"]] = relationship(
        back_populates="course",
        cascade="all, delete-orphan",
        order_by="CourseSection.name",
    )


class CourseSection(UUIDMixin, Base):
    __tablename__ = "course_sections"
    __table_args__ = (
        UniqueConstraint("course_id", "name", name="uq_course_sections_course_name"),
        {"comment": "Named subgroups of a course, each optionally taught by one instructor."},
    )

    course_id: Mapped[uuid.UUID] = mapped_column(GUID(), ForeignKey("courses.id", ondelete="CASCADE"), nullable=False)
    name: Mapped[str] = mapped_column(sa.String(32), nullable=False)
    instructor_id: Mapped[Optional[uuid.UUID]] = mapped_column(GUID(), ForeignKey("users.id", ondelete="SET NULL"))

    course: Mapped[Course] = relationship(back_populates="sections")
    instructor: Mapped[Optional[User]] = relationship()
