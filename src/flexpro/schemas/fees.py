from __future__ import annotations

import datetime as dt
from typing import Optional
from uuid import UUID

from pydantic import Field

from .base import APIModel


class InvoiceOut(APIModel):
    id: UUID
    description: str
    amount: float
    amount_paid: float = 0.0
    due_date: dt.date
    status: str
    term: Optional[str] = None
    created_at: Optional[dt.datetime] = None


class FeeSummary(APIModel):
    total_paid: float
    total_pending: float
    next_due_date: Optional[dt.date] = None
    pending_count: int
    paid_count: int


class FeesResponse(APIModel):
    invoices: list[InvoiceOut]
    summary: FeeSummary


class ChallanFee(APIModel):
    id: UUID
    description: str
    amount: float
    status: str


class BankDetails(APIModel):
    bank_name: str
    account_title: str
    account_number: str
    branch_code: str


class Challan(APIModel):
    student_name: str
    student_id: Optional[str] = None
    program: Optional[str] = None
    semester: Optional[int] = None
    term: Optional[str] = None
    total_amount: float
    due_date: dt.date
    challan_number: str
    fees: list[ChallanFee]
    bank_details: BankDetails


class ChallanResponse(APIModel):
    challan: Challan


class PaymentRequest(APIModel):
    invoice_id: UUID
    amount: float = Field(..., gt=0, allow_inf_nan=False)


class PaymentOut(APIModel):
    id: UUID
    invoice_id: UUID
    amount: float
    method: str
    reference: str
    created_at: Optional[dt.datetime] = None


class PaymentResponse(APIModel):
    message: str
    payment: PaymentOut
    invoice: InvoiceOut
