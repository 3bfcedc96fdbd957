import pytest

from .conftest import auth

pytestmark = pytest.mark.anyio


async def test_read_profile(client, factory):
    student = await factory.student()
    r = await client.get("/profile", headers=auth(student))
    assert r.status_code == 200
    assert r.json()["student_id"] == student.student_id
    assert "password_hash" not in r.json()


async def test_update_contact_details_only(client, factory):
    student = await factory.student()
    r = await client.patch(
        "/profile",
        headers=auth(student),
        json={"phone": " 0300-1234567 ", "bio": "   ", "role": "admin", "cgpa": 4.0},
    )
    assert r.status_code == 200
    body = r.json()
    assert body["phone"] == "0300-1234567"
    assert body["bio"] is None
    assert body["role"] == "student"
    assert body["cgpa"] == 0.0
