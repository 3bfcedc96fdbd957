# src/flexpro/services/fees.py
"""
Tuition billing against the active term.

Tuition is `enrolled` credit hours x the per-credit rate. One pending
"Tuition Fee" invoice per student and term carries whatever is still owed
after fully paid tuition invoices; it is created, resized or removed every
time the student's fees are read, so it follows enrollment changes.
"""
from __future__ import annotations

import datetime as dt
import re
import secrets
import uuid
from typing import Optional, Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from flexpro.app_logger import get_logger
from flexpro.core.config import Settings, settings as app_settings
from flexpro.db.models import (
    Enrollment,
    FeeInvoice,
    FeePayment,
    Term,
    User,
    INVOICE_PAID,
    INVOICE_PENDING,
    OUTSTANDING_STATUSES,
    STATUS_ENROLLED,
    TUITION_FEE,
)
from flexpro.errors import BadRequestError, ConflictError, NotFoundError

log = get_logger("services.fees")


# ------------------------
# Tuition sync
# ------------------------
async def tuition_due(session: AsyncSession, user_id: uuid.UUID, term: Term, rate: float) -> float:
    enrollments = (
        await session.execute(
            select(Enrollment)
            .where(
                Enrollment.user_id == user_id,
                Enrollment.term_id == term.id,
                Enrollment.status == STATUS_ENROLLED,
            )
            .options(selectinload(Enrollment.course))
        )
    ).scalars().all()
    return sum(en.course.credit_hours for en in enrollments) * rate


async def sync_tuition_invoice(
    session: AsyncSession,
    user_id: uuid.UUID,
    term: Term,
    rate: float,
) -> Optional[FeeInvoice]:
    """
    Bring the pending tuition invoice for (user, term) in line with the net
    balance. A negative balance is kept as a credit; a zero balance removes the
    pending invoice. Returns the pending invoice, if any. Does not commit.
    """
    invoices = (
        await session.execute(
            select(FeeInvoice)
            .where(
                FeeInvoice.user_id == user_id,
                FeeInvoice.term_id == term.id,
                FeeInvoice.description == TUITION_FEE,
            )
            .options(selectinload(FeeInvoice.payments))
            .order_by(FeeInvoice.created_at.desc())
        )
    ).scalars().all()

    paid = sum(inv.amount for inv in invoices if inv.status == INVOICE_PAID)
    balance = await tuition_due(session, user_id, term, rate) - paid

    pending = [inv for inv in invoices if inv.status == INVOICE_PENDING]
    current = pending[0] if pending else None
    for extra in pending[1:]:
        await session.delete(extra)

    if balance == 0:
        if current is not None:
            await session.delete(current)
        return None

    if current is None:
        current = FeeInvoice(
            user_id=user_id,
            term_id=term.id,
            description=TUITION_FEE,
            amount=balance,
            due_date=term.end_date,
            status=INVOICE_PENDING,
        )
        session.add(current)
    elif current.amount != balance:
        current.amount = balance
    return current


# ------------------------
# Read models
# ------------------------
async def user_invoices(session: AsyncSession, user_id: uuid.UUID, term_id: Optional[uuid.UUID] = None) -> list[FeeInvoice]:
    stmt = (
        select(FeeInvoice)
        .where(FeeInvoice.user_id == user_id)
        .options(selectinload(FeeInvoice.term), selectinload(FeeInvoice.payments))
        .execution_options(populate_existing=True)
    )
    if term_id is not None:
        stmt = stmt.where(FeeInvoice.term_id == term_id)
    return list((await session.execute(stmt)).scalars().all())


def summarize(invoices: Sequence[FeeInvoice]) -> dict:
    """Paid invoices count in full; anything else counts what has been paid on it so far."""
    outstanding = [inv for inv in invoices if inv.status in OUTSTANDING_STATUSES]
    upcoming = min(outstanding, key=lambda inv: inv.due_date, default=None)
    return {
        "total_paid": sum(inv.amount if inv.status == INVOICE_PAID else inv.amount_paid for inv in invoices),
        "total_pending": sum(inv.amount for inv in outstanding),
        "next_due_date": upcoming.due_date if upcoming else None,
        "pending_count": sum(1 for inv in invoices if inv.status == INVOICE_PENDING),
        "paid_count": sum(1 for inv in invoices if inv.status == INVOICE_PAID),
    }


async def fee_overview(session: AsyncSession, user: User, term: Term, config: Settings = app_settings) -> dict:
    await sync_tuition_invoice(session, user.id, term, config.TUITION_PER_CREDIT_HOUR)
    await session.commit()

    invoices = await user_invoices(session, user.id)
    invoices.sort(key=lambda inv: inv.due_date, reverse=True)
    return {
        "invoices": [invoice_row(inv) for inv in invoices],
        "summary": summarize(invoices),
    }


def invoice_row(inv: FeeInvoice) -> dict:
    return {
        "id": inv.id,
        "description": inv.description,
        "amount": inv.amount,
        "amount_paid": inv.amount_paid,
        "due_date": inv.due_date,
        "status": inv.status,
        "term": inv.term.name if inv.term else None,
        "created_at": inv.created_at,
    }


def challan_number(user: User, term: Optional[Term]) -> str:
    digits = re.sub(r"[^0-9A-Za-z]", "", user.student_id or "")[-4:] or "0000"
    year = term.year if term and term.year else dt.date.today().year
    return f"FP-{year}-{digits}"


async def build_challan(
    session: AsyncSession,
    user: User,
    term: Optional[Term],
    config: Settings = app_settings,
) -> dict:
    """
    Bank deposit slip for the active term's invoices (every invoice when no term
    is active). Every invoice is listed; the total and due date cover only what
    is still outstanding.
    """
    if term is not None:
        await sync_tuition_invoice(session, user.id, term, config.TUITION_PER_CREDIT_HOUR)
        await session.commit()

    invoices = await user_invoices(session, user.id, term.id if term else None)
    if not invoices:
        raise NotFoundError("Invoices")
    invoices.sort(key=lambda inv: inv.due_date)
    outstanding = [inv for inv in invoices if inv.status in OUTSTANDING_STATUSES]

    return {
        "student_name": user.full_name,
        "student_id": user.student_id,
        "program": user.program,
        "semester": user.semester,
        "term": term.name if term else None,
        "total_amount": sum(inv.amount for inv in outstanding),
        "due_date": (outstanding or invoices)[0].due_date,
        "challan_number": challan_number(user, term),
        "fees": [
            {"id": inv.id, "description": inv.description, "amount": inv.amount, "status": inv.status}
            for inv in invoices
        ],
        "bank_details": {
            "bank_name": config.BANK_NAME,
            "account_title": config.BANK_ACCOUNT_TITLE,
            "account_number": config.BANK_ACCOUNT_NUMBER,
            "branch_code": config.BANK_BRANCH_CODE,
        },
    }


# ------------------------
# Payment
# ------------------------
def new_reference() -> str:
    return f"TXN-{secrets.token_hex(5).upper()}"


async def pay_invoice(
    session: AsyncSession,
    user: User,
    invoice_id: uuid.UUID,
    amount: float,
    method: str = "online",
) -> tuple[FeePayment, FeeInvoice]:
    """Pay one of the user's own invoices in full; the invoice is marked paid."""
    invoice = await session.scalar(
        select(FeeInvoice)
        .where(FeeInvoice.id == invoice_id, FeeInvoice.user_id == user.id)
        .options(selectinload(FeeInvoice.payments), selectinload(FeeInvoice.term))
    )
    if invoice is None:
        raise NotFoundError("Invoice")
    if invoice.status == INVOICE_PAID:
        raise ConflictError("Invoice is already paid")
    if invoice.amount <= 0:
        raise ConflictError("Nothing is due on this invoice")
    if abs(amount - (invoice.amount - invoice.amount_paid)) > 0.005:
        raise BadRequestError("Payment must cover the outstanding amount")

    payment = FeePayment(
        user_id=user.id,
        invoice_id=invoice.id,
        amount=amount,
        method=method,
        reference=new_reference(),
    )
    invoice.payments.append(payment)
    invoice.status = INVOICE_PAID

    await session.commit()
    log.info("payment %s user=%s invoice=%s amount=%.2f status=%s", payment.reference, user.id, invoice.id, amount, invoice.status)
    return payment, invoice
