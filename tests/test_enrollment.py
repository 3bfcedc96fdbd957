import pytest
from sqlalchemy import select

from flexpro.db.models import Enrollment

from .conftest import auth, fetch_all

pytestmark = pytest.mark.anyio


async def enroll(client, user, course):
    return await client.post("/enroll", headers=auth(user), json={"course_id": str(course.id)})


async def test_enroll_and_list(client, factory):
    term = await factory.term()
    course = await factory.course()
    student = await factory.student()

    r = await enroll(client, student, course)
    assert r.status_code == 201, r.text
    assert r.json()["enrollment"]["status"] == "enrolled"
    assert r.json()["enrollment"]["term_id"] == str(term.id)

    r = await client.get("/courses", headers=auth(student))
    assert r.status_code == 200
    [mine] = r.json()
    assert mine["code"] == course.code
    assert mine["section"] == "A"


async def test_duplicate_enrollment_is_409_and_leaves_one_row(client, factory):
    await factory.term()
    course = await factory.course()
    student = await factory.student()

    assert (await enroll(client, student, course)).status_code == 201
    r = await enroll(client, student, course)
    assert r.status_code == 409
    assert "Already enrolled" in r.json()["detail"]

    rows = await fetch_all(select(Enrollment).where(Enrollment.user_id == student.id))
    assert len(rows) == 1


async def test_capacity_is_enforced(client, factory):
    term = await factory.term()
    course = await factory.course(max_capacity=1)
    first, second = await factory.student(), await factory.student()
    await factory.enrollment(first, course, term)

    r = await enroll(client, second, course)
    assert r.status_code == 409
    assert "capacity" in r.json()["detail"]


async def test_dropped_seats_do_not_count_toward_capacity(client, factory):
    term = await factory.term()
    course = await factory.course(max_capacity=1)
    first, second = await factory.student(), await factory.student()
    await factory.enrollment(first, course, term, status="dropped")

    assert (await enroll(client, second, course)).status_code == 201


async def test_credit_limit(client, factory):
    term = await factory.term()
    student = await factory.student()
    for _ in range(3):
        await factory.enrollment(student, await factory.course(credit_hours=6), term)
    extra = await factory.course(credit_hours=4)

    r = await enroll(client, student, extra)
    assert r.status_code == 409
    assert "credit" in r.json()["detail"]


async def test_section_mismatch(client, factory):
    await factory.term()
    course = await factory.course(sections=("B",))
    student = await factory.student(section="A")

    r = await enroll(client, student, course)
    assert r.status_code == 409


async def test_student_without_section_may_enroll_anywhere(client, factory):
    await factory.term()
    course = await factory.course(sections=("B",))
    student = await factory.student(section=None)

    assert (await enroll(client, student, course)).status_code == 201


async def test_closed_enrollment(client, factory):
    await factory.term()
    course = await factory.course()
    student = await factory.student()
    admin = await factory.admin()
    await client.post("/admin/settings", headers=auth(admin), json={"enrollment_status": "closed"})

    r = await enroll(client, student, course)
    assert r.status_code == 409
    assert r.json()["detail"] == "Enrollment is currently closed"


async def test_no_active_term(client, factory):
    await factory.term(is_active=False)
    course = await factory.course()
    student = await factory.student()

    r = await enroll(client, student, course)
    assert r.status_code == 404
    assert r.json()["detail"] == "Active term not found"


async def test_inactive_course_is_404(client, factory):
    await factory.term()
    course = await factory.course(is_active=False)
    student = await factory.student()

    assert (await enroll(client, student, course)).status_code == 404


async def test_drop_then_reenroll_reuses_row(client, factory):
    await factory.term()
    course = await factory.course()
    student = await factory.student()

    assert (await enroll(client, student, course)).status_code == 201
    r = await client.delete(f"/enroll/{course.id}", headers=auth(student))
    assert r.status_code == 200
    assert (await client.delete(f"/enroll/{course.id}", headers=auth(student))).status_code == 404

    assert (await enroll(client, student, course)).status_code == 201
    rows = await fetch_all(select(Enrollment).where(Enrollment.user_id == student.id))
    assert [e.status for e in rows] == ["enrolled"]


async def test_completed_course_cannot_be_dropped(client, factory):
    term = await factory.term()
    course = await factory.course()
    student = await factory.student()
    await factory.enrollment(student, course, term, status="completed")

    r = await client.delete(f"/enroll/{course.id}", headers=auth(student))
    assert r.status_code == 409


async def test_catalog(client, factory):
    term = await factory.term()
    student = await factory.student(section="A")
    taken = await factory.course(credit_hours=3)
    full = await factory.course(max_capacity=1)
    other_section = await factory.course(sections=("C",))
    await factory.enrollment(student, taken, term)
    await factory.enrollment(await factory.student(), full, term)

    r = await client.get("/enroll", headers=auth(student))
    assert r.status_code == 200
    body = r.json()
    courses = {c["code"]: c for c in body["courses"]}

    assert courses[taken.code]["already_enrolled"] is True
    assert courses[taken.code]["available"] is False
    assert courses[full.code]["enrolled"] == 1
    assert courses[full.code]["available"] is False
    assert courses[other_section.code]["matches_student_section"] is False
    assert body["summary"]["current_credits"] == 3
    assert body["summary"]["enrolled_count"] == 1
    assert body["summary"]["available_count"] == 0
    assert body["term"]["id"] == str(term.id)
