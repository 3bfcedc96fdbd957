import pytest
from sqlalchemy import select

from flexpro.core.config import settings
from flexpro.db.models import FeeInvoice, FeePayment

from .conftest import auth, fetch_all

pytestmark = pytest.mark.anyio

RATE = settings.TUITION_PER_CREDIT_HOUR


@pytest.fixture
async def billed(factory):
    """A student enrolled in a 3- and a 4-credit course of the active term."""
    term = await factory.term()
    student = await factory.student()
    small = await factory.course(credit_hours=3)
    large = await factory.course(credit_hours=4)
    await factory.enrollment(student, small, term)
    big = await factory.enrollment(student, large, term)
    return student, term, big


async def test_tuition_invoice_follows_enrollment(client, db, billed):
    student, term, big = billed

    r = await client.get("/fees", headers=auth(student))
    assert r.status_code == 200, r.text
    body = r.json()
    [invoice] = body["invoices"]
    assert invoice["description"] == "Tuition Fee"
    assert invoice["amount"] == 7 * RATE
    assert invoice["status"] == "pending"
    assert invoice["due_date"] == term.end_date.isoformat()
    assert invoice["term"] == term.name
    assert body["summary"] == {
        "total_paid": 0,
        "total_pending": 7 * RATE,
        "next_due_date": term.end_date.isoformat(),
        "pending_count": 1,
        "paid_count": 0,
    }

    big.status = "dropped"
    await db.commit()
    [resized] = (await client.get("/fees", headers=auth(student))).json()["invoices"]
    assert resized["id"] == invoice["id"]
    assert resized["amount"] == 3 * RATE


async def test_zero_balance_removes_the_pending_invoice(client, factory):
    await factory.term()
    student = await factory.student()
    r = await client.get("/fees", headers=auth(student))
    assert r.json()["invoices"] == []
    assert r.json()["summary"]["next_due_date"] is None
    assert await fetch_all(select(FeeInvoice)) == []


async def test_pay_invoice_then_bill_only_new_enrollments(client, factory, billed):
    student, term, _ = billed
    [invoice] = (await client.get("/fees", headers=auth(student))).json()["invoices"]

    r = await client.post(
        "/fees/payment", headers=auth(student), json={"invoice_id": invoice["id"], "amount": 7 * RATE}
    )
    assert r.status_code == 200, r.text
    body = r.json()
    assert body["message"] == "Payment successful"
    assert body["invoice"]["status"] == "paid"
    assert body["invoice"]["amount_paid"] == 7 * RATE
    assert body["payment"]["reference"].startswith("TXN-")
    assert body["payment"]["method"] == "online"

    r = await client.post(
        "/fees/payment", headers=auth(student), json={"invoice_id": invoice["id"], "amount": 7 * RATE}
    )
    assert r.status_code == 409
    assert len(await fetch_all(select(FeePayment))) == 1

    # nothing more is owed, so no new pending invoice appears
    body = (await client.get("/fees", headers=auth(student))).json()
    assert [i["status"] for i in body["invoices"]] == ["paid"]
    assert body["summary"]["total_paid"] == 7 * RATE
    assert body["summary"]["pending_count"] == 0

    await factory.enrollment(student, await factory.course(credit_hours=2), term)
    body = (await client.get("/fees", headers=auth(student))).json()
    pending = [i for i in body["invoices"] if i["status"] == "pending"]
    assert [i["amount"] for i in pending] == [2 * RATE]
    assert body["summary"]["total_pending"] == 2 * RATE


async def test_payment_must_match_the_outstanding_amount(client, factory, billed):
    student, _, _ = billed
    [invoice] = (await client.get("/fees", headers=auth(student))).json()["invoices"]

    r = await client.post("/fees/payment", headers=auth(student), json={"invoice_id": invoice["id"], "amount": 100})
    assert r.status_code == 400
    r = await client.post("/fees/payment", headers=auth(student), json={"invoice_id": invoice["id"], "amount": 0})
    assert r.status_code == 422

    stranger = await factory.student()
    r = await client.post(
        "/fees/payment", headers=auth(stranger), json={"invoice_id": invoice["id"], "amount": 7 * RATE}
    )
    assert r.status_code == 404
    assert r.json()["detail"] == "Invoice not found"
    assert await fetch_all(select(FeePayment)) == []


async def test_challan(client, billed):
    student, term, _ = billed

    r = await client.get("/fees/challan", headers=auth(student))
    assert r.status_code == 200, r.text
    challan = r.json()["challan"]
    assert challan["challan_number"] == f"FP-{term.year}-{student.student_id[-4:]}"
    assert challan["student_id"] == student.student_id
    assert challan["term"] == term.name
    assert challan["total_amount"] == 7 * RATE
    assert challan["due_date"] == term.end_date.isoformat()
    assert [f["status"] for f in challan["fees"]] == ["pending"]
    assert challan["bank_details"]["account_number"] == settings.BANK_ACCOUNT_NUMBER

    invoice_id = challan["fees"][0]["id"]
    await client.post("/fees/payment", headers=auth(student), json={"invoice_id": invoice_id, "amount": 7 * RATE})
    challan = (await client.get("/fees/challan", headers=auth(student))).json()["challan"]
    assert challan["total_amount"] == 0
    assert [f["status"] for f in challan["fees"]] == ["paid"]


async def test_challan_without_invoices_is_404(client, factory):
    await factory.term()
    student = await factory.student()
    r = await client.get("/fees/challan", headers=auth(student))
    assert r.status_code == 404
    assert r.json()["detail"] == "Invoices not found"


async def test_fees_need_an_active_term(client, factory):
    await factory.term(is_active=False)
    student = await factory.student()
    r = await client.get("/fees", headers=auth(student))
    assert r.status_code == 404
    assert r.json()["detail"] == "Active term not found"


async def test_fees_are_for_students(client, factory):
    await factory.term()
    r = await client.get("/fees", headers=auth(await factory.faculty()))
    assert r.status_code == 403
