from __future__ import annotations

from typing import Optional

import sqlalchemy as sa
from sqlalchemy.orm import Mapped, mapped_column

from flexpro.db.base import Base, UUIDMixin

ROLE_STUDENT = "student"
ROLE_FACULTY = "faculty"
ROLE_ADMIN = "admin"
ROLES = (ROLE_STUDENT, ROLE_FACULTY, ROLE_ADMIN)


class User(UUIDMixin, Base):
    __tablename__ = "users"
    __table_args__ = {"comment": "Portal accounts for students, faculty and administrators."}

    email: Mapped[str] = mapped_column(sa.String(255), unique=True, nullable=False)
    password_hash: Mapped[Optional[str]] = mapped_column(sa.String(255))
    first_name: Mapped[str] = mapped_column(sa.String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(sa.String(100), nullable=False)
    role: Mapped[str] = mapped_column(sa.String(16), nullable=False, default=ROLE_STUDENT)

    student_id: Mapped[Optional[str]] = mapped_column(sa.String(32), unique=True)
    employee_id: Mapped[Optional[str]] = mapped_column(sa.String(32), unique=True)

    program: Mapped[Optional[str]] = mapped_column(sa.String(120))
    department: Mapped[Optional[str]] = mapped_column(sa.String(120))
    semester: Mapped[Optional[int]] = mapped_column(sa.Integer)
    section: Mapped[Optional[str]] = mapped_column(sa.String(32))
    cgpa: Mapped[float] = mapped_column(sa.Float, nullable=False, default=0.0)

    phone: Mapped[Optional[str]] = mapped_column(sa.String(40))
    address: Mapped[Optional[str]] = mapped_column(sa.Text)
    bio: Mapped[Optional[str]] = mapped_column(sa.Text)

    is_active: Mapped[bool] = mapped_column(sa.Boolean, nullable=False, default=True)

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    def __repr__(self) -> str:  # pragma: no cover
        return f"<User {self.email} role={self.role}>"
