from __future__ import annotations

import uuid
import datetime as dt
from typing import List, Optional

import sqlalchemy as sa
from sqlalchemy import ForeignKey
from sqlalchemy.orm import Mapped, mapped_column, relationship

from flexpro.db.base import Base, UUIDMixin, GUID
from flexpro.db.models.terms import Term

INVOICE_PENDING = "pending"
INVOICE_PAID = "paid"
INVOICE_OVERDUE = "overdue"
INVOICE_STATUSES = (INVOICE_PENDING, INVOICE_PAID, INVOICE_OVERDUE)
OUTSTANDING_STATUSES = (INVOICE_PENDING, INVOICE_OVERDUE)

TUITION_FEE = "Tuition Fee"


class FeeInvoice(UUIDMixin, Base):
    __tablename__ = "fee_invoices"
    __table_args__ = {"comment": "Amounts billed to a student for a term; a negative amount is a credit."}

    user_id: Mapped[uuid.UUID] = mapped_column(
        GUID(), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    term_id: Mapped[Optional[uuid.UUID]] = mapped_column(GUID(), ForeignKey("terms.id", ondelete="SET NULL"))
    description: Mapped[str] = mapped_column(sa.String(120), nullable=False)
    amount: Mapped[float] = mapped_column(sa.Float, nullable=False)
    due_date: Mapped[dt.date] = mapped_column(sa.Date, nullable=False)
    status: Mapped[str] = mapped_column(sa.String(16), nullable=False, default=INVOICE_PENDING)

    term: Mapped[Optional[Term]] = relationship()
    payments: Mapped[List["FeePayment"]] = relationship(
        back_populates="invoice",
        cascade="all, delete-orphan",
        order_by="FeePayment.created_at",
    )

    @property
    def amount_paid(self) -> float:
        return sum(p.amount for p in self.payments)


class FeePayment(UUIDMixin, Base):
    __tablename__ = "fee_payments"
    __table_args__ = {"comment": "Money received against one invoice."}

    user_id: Mapped[uuid.UUID] = mapped_column(GUID(), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    invoice_id: Mapped[uuid.UUID] = mapped_column(
        GUID(), ForeignKey("fee_invoices.id", ondelete="CASCADE"), nullable=False, index=True
    )
    amount: Mapped[float] = mapped_column(sa.Float, nullable=False)
    method: Mapped[str] = mapped_column(sa.String(32), nullable=False, default="online")
    reference: Mapped[str] = mapped_column(sa.String(64), unique=True, nullable=False)

    invoice: Mapped[FeeInvoice] = relationship(back_populates="payments")
