import time

import pytest

from flexpro.auth.tokens import TokenError, sign_token, verify_token
from flexpro.core.config import settings

from .conftest import DEFAULT_PASSWORD, auth

pytestmark = pytest.mark.anyio


def test_token_round_trip_carries_subject():
    token = sign_token("abc", 60)
    claims = verify_token(token)
    assert claims["sub"] == "abc"
    assert claims["exp"] - claims["iat"] == 60


def test_expired_token_is_rejected():
    token = sign_token("abc", 10, now=int(time.time()) - 3600)
    with pytest.raises(TokenError):
        verify_token(token)


def test_garbage_token_is_rejected():
    with pytest.raises(TokenError):
        verify_token("not-a-jwt")


async def test_missing_token_is_401(client):
    r = await client.get("/auth/session")
    assert r.status_code == 401
    assert r.json()["detail"] == "Not authenticated"


async def test_invalid_and_expired_tokens_are_401(client, factory):
    student = await factory.student()
    expired = sign_token(str(student.id), 10, now=int(time.time()) - 3600)

    for token in ("garbage", expired, sign_token("not-a-uuid", 60)):
        r = await client.get("/auth/session", headers={"Authorization": f"Bearer {token}"})
        assert r.status_code == 401


async def test_inactive_user_token_is_401(client, factory):
    student = await factory.student(is_active=False)
    r = await client.get("/auth/session", headers=auth(student))
    assert r.status_code == 401


async def test_wrong_role_is_403(client, factory):
    student = await factory.student()
    r = await client.get("/faculty/teaching", headers=auth(student))
    assert r.status_code == 403
    assert r.json()["detail"] == "Forbidden"


async def test_faculty_cannot_use_student_routes(client, factory):
    lecturer = await factory.faculty()
    r = await client.get("/student/marks", headers=auth(lecturer))
    assert r.status_code == 403


async def test_admin_passes_every_gate(client, factory):
    admin = await factory.admin()
    assert (await client.get("/faculty/teaching", headers=auth(admin))).status_code == 200
    assert (await client.get("/student/marks", headers=auth(admin))).status_code == 200
    assert (await client.get("/admin/settings", headers=auth(admin))).status_code == 200


async def test_login_by_email_sets_cookie(client, factory):
    student = await factory.student()
    r = await client.post(
        "/auth/login",
        json={"identifier": student.email.upper(), "password": DEFAULT_PASSWORD},
    )
    assert r.status_code == 200
    body = r.json()
    assert body["user"]["id"] == str(student.id)
    assert "password_hash" not in body["user"]
    assert r.cookies.get(settings.AUTH_COOKIE_NAME) == body["token"]

    # the cookie alone authenticates follow-up requests
    r = await client.get("/auth/session")
    assert r.status_code == 200
    assert r.json()["user"]["email"] == student.email


async def test_login_by_student_id(client, factory):
    student = await factory.student()
    r = await client.post("/auth/login", json={"identifier": student.student_id, "password": DEFAULT_PASSWORD})
    assert r.status_code == 200
    assert verify_token(r.json()["token"])["sub"] == str(student.id)


async def test_login_rejects_bad_password_and_unknown_user(client, factory):
    student = await factory.student()
    r = await client.post("/auth/login", json={"identifier": student.email, "password": "wrong-one"})
    assert r.status_code == 401
    assert r.json()["detail"] == "Invalid credentials"

    r = await client.post("/auth/login", json={"identifier": "ghost@flexpro.edu", "password": "whatever"})
    assert r.status_code == 401


async def test_login_without_local_password(client, factory):
    student = await factory.student(password=None)
    r = await client.post("/auth/login", json={"identifier": student.email, "password": "anything"})
    assert r.status_code == 403


async def test_token_lifetime_follows_session_timeout(client, factory):
    admin = await factory.admin()
    r = await client.post("/admin/settings", headers=auth(admin), json={"session_timeout_minutes": 15})
    assert r.status_code == 200

    r = await client.post("/auth/login", json={"identifier": admin.email, "password": DEFAULT_PASSWORD})
    claims = verify_token(r.json()["token"])
    assert claims["exp"] - claims["iat"] == 15 * 60


async def test_maintenance_mode_blocks_non_admin_login(client, factory):
    admin = await factory.admin()
    student = await factory.student()
    r = await client.post("/admin/settings", headers=auth(admin), json={"maintenance_mode": True})
    assert r.status_code == 200

    r = await client.post("/auth/login", json={"identifier": student.email, "password": DEFAULT_PASSWORD})
    assert r.status_code == 503

    r = await client.post("/auth/login", json={"identifier": admin.email, "password": DEFAULT_PASSWORD})
    assert r.status_code == 200


async def test_logout_clears_cookie(client, factory):
    student = await factory.student()
    await client.post("/auth/login", json={"identifier": student.email, "password": DEFAULT_PASSWORD})
    r = await client.post("/auth/logout")
    assert r.status_code == 200
    assert (await client.get("/auth/session")).status_code == 401


async def test_healthz(client):
    r = await client.get("/healthz")
    assert r.status_code == 200
    assert r.json() == {"status": "ok"}
