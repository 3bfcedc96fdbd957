# src/flexpro/api/routers/fees.py
from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from flexpro.auth.deps import require_student
from flexpro.db.models import User
from flexpro.db.session import get_db
from flexpro.schemas.fees import ChallanResponse, FeesResponse, PaymentRequest, PaymentResponse
from flexpro.services import fees as billing
from flexpro.services.enrollment import get_active_term, require_active_term

router = APIRouter(prefix="/fees", tags=["fees"])


@router.get("", response_model=FeesResponse)
async def my_fees(
    user: User = Depends(require_student),
    session: AsyncSession = Depends(get_db),
) -> FeesResponse:
    """The caller's invoices, after the active term's tuition invoice is brought up to date."""
    term = await require_active_term(session)
    return FeesResponse.model_validate(await billing.fee_overview(session, user, term))


@router.get("/challan", response_model=ChallanResponse)
async def challan(
    user: User = Depends(require_student),
    session: AsyncSession = Depends(get_db),
) -> ChallanResponse:
    term = await get_active_term(session)
    return ChallanResponse.model_validate({"challan": await billing.build_challan(session, user, term)})


@router.post("/payment", response_model=PaymentResponse)
async def pay(
    payload: PaymentRequest,
    user: User = Depends(require_student),
    session: AsyncSession = Depends(get_db),
) -> PaymentResponse:
    payment, invoice = await billing.pay_invoice(session, user, payload.invoice_id, payload.amount)
    return PaymentResponse.model_validate(
        {
            "message": "Payment successful",
            "payment": payment,
            "invoice": billing.invoice_row(invoice),
        }
    )
