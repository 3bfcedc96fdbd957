from __future__ import annotations

from datetime import date
from typing import Optional

import sqlalchemy as sa
from sqlalchemy.orm import Mapped, mapped_column

from flexpro.db.base import Base, UUIDMixin


class Term(UUIDMixin, Base):
    __tablename__ = "terms"
    __table_args__ = {"comment": "Academic periods; at most one is active at a time."}

    name: Mapped[str] = mapped_column(sa.String(64), unique=True, nullable=False)
    season: Mapped[Optional[str]] = mapped_column(sa.String(16))
    year: Mapped[Optional[int]] = mapped_column(sa.Integer)
    start_date: Mapped[date] = mapped_column(sa.Date, nullable=False)
    end_date: Mapped[date] = mapped_column(sa.Date, nullable=False)
    is_active: Mapped[bool] = mapped_column(sa.Boolean, nullable=False, default=False)
