import pytest
from sqlalchemy import select

from flexpro.db.models import GradeRequest, Transcript

from .conftest import auth, fetch_all

pytestmark = pytest.mark.anyio

REASON = "My final exam total was added up incorrectly."


@pytest.fixture
async def graded(db, factory):
    """One course split between two instructors; a student per section with a final grade of C."""
    lecturer_a = await factory.faculty()
    lecturer_b = await factory.faculty()
    term = await factory.term()
    course = await factory.course(instructor=lecturer_a, sections=("A", "B"))
    next(s for s in course.sections if s.name == "B").instructor_id = lecturer_b.id
    await db.commit()

    a = await factory.student(section="A")
    b = await factory.student(section="B")
    for student in (a, b):
        await factory.enrollment(student, course, term, status="completed")
        db.add(Transcript(user_id=student.id, course_id=course.id, term_id=term.id, grade="C", grade_points=2.0))
    await db.commit()
    return term, course, (lecturer_a, lecturer_b), (a, b)


def request_body(course, term, grade="B", reason=REASON):
    return {"course_id": str(course.id), "term_id": str(term.id), "requested_grade": grade, "reason": reason}


async def test_student_files_a_request(client, graded):
    term, course, _, (a, _) = graded

    r = await client.post("/grade-requests", headers=auth(a), json=request_body(course, term, grade=" b+ "))
    assert r.status_code == 201, r.text
    saved = r.json()
    assert saved["message"] == "Grade request submitted"
    req = saved["grade_request"]
    assert (req["current_grade"], req["requested_grade"], req["status"]) == ("C", "B+", "pending")
    assert req["course_code"] == course.code
    assert req["reviewed_at"] is None

    r = await client.get("/grade-requests", headers=auth(a))
    body = r.json()
    assert [g["id"] for g in body["grade_requests"]] == [req["id"]]
    assert body["summary"] == {"total": 1, "pending": 1, "approved": 0, "rejected": 0}


async def test_only_one_pending_request_per_course(client, graded):
    term, course, _, (a, _) = graded
    assert (await client.post("/grade-requests", headers=auth(a), json=request_body(course, term))).status_code == 201
    r = await client.post("/grade-requests", headers=auth(a), json=request_body(course, term, grade="A"))
    assert r.status_code == 409
    assert r.json()["detail"] == "A grade request for this course is already pending"


async def test_request_needs_a_final_grade_that_differs(client, factory, graded):
    term, course, _, (a, _) = graded
    r = await client.post("/grade-requests", headers=auth(a), json=request_body(course, term, grade="C"))
    assert r.status_code == 400

    ungraded = await factory.student(section="A")
    r = await client.post("/grade-requests", headers=auth(ungraded), json=request_body(course, term))
    assert r.status_code == 409
    assert r.json()["detail"] == "No final grade has been recorded for this course"
    assert await fetch_all(select(GradeRequest)) == []


@pytest.mark.parametrize("changes", [{"requested_grade": "Z"}, {"requested_grade": " "}, {"reason": "   too short "}])
async def test_request_validation(client, graded, changes):
    term, course, _, (a, _) = graded
    r = await client.post("/grade-requests", headers=auth(a), json={**request_body(course, term), **changes})
    assert r.status_code == 422


async def test_faculty_see_requests_from_their_sections(client, graded):
    term, course, (lecturer_a, lecturer_b), (a, b) = graded
    for student in (a, b):
        await client.post("/grade-requests", headers=auth(student), json=request_body(course, term))

    r = await client.get("/faculty/grade-requests", headers=auth(lecturer_a))
    assert r.status_code == 200
    assert [g["user_id"] for g in r.json()["grade_requests"]] == [str(a.id)]

    r = await client.get("/faculty/grade-requests", headers=auth(lecturer_b), params={"status": "approved"})
    assert r.json()["grade_requests"] == []


async def test_approval_rewrites_the_transcript(client, graded):
    term, course, (lecturer_a, _), (a, _) = graded
    req = (await client.post("/grade-requests", headers=auth(a), json=request_body(course, term, grade="B+"))).json()

    r = await client.patch(
        f"/faculty/grade-requests/{req['grade_request']['id']}",
        headers=auth(lecturer_a),
        json={"status": "approved", "notes": " Recounted. "},
    )
    assert r.status_code == 200, r.text
    updated = r.json()["grade_request"]
    assert updated["status"] == "approved"
    assert updated["notes"] == "Recounted."
    assert updated["reviewed_at"] is not None

    rows = {t.user_id: t for t in await fetch_all(select(Transcript))}
    assert (rows[a.id].grade, rows[a.id].grade_points) == ("B+", 3.33)
    assert len(rows) == 2


async def test_rejection_leaves_the_transcript(client, graded):
    term, course, (lecturer_a, _), (a, _) = graded
    req = (await client.post("/grade-requests", headers=auth(a), json=request_body(course, term))).json()

    r = await client.patch(
        f"/faculty/grade-requests/{req['grade_request']['id']}", headers=auth(lecturer_a), json={"status": "rejected"}
    )
    assert r.json()["grade_request"]["status"] == "rejected"
    [row] = [t for t in await fetch_all(select(Transcript)) if t.user_id == a.id]
    assert row.grade == "C"

    # a settled request no longer blocks a new one
    r = await client.post("/grade-requests", headers=auth(a), json=request_body(course, term, grade="C+"))
    assert r.status_code == 201


async def test_review_permissions(client, factory, graded):
    term, course, (_, lecturer_b), (a, _) = graded
    req = (await client.post("/grade-requests", headers=auth(a), json=request_body(course, term))).json()
    url = f"/faculty/grade-requests/{req['grade_request']['id']}"

    r = await client.patch(url, headers=auth(lecturer_b), json={"status": "approved"})
    assert r.status_code == 403
    assert r.json()["detail"] == "This student is not in a section you teach"

    r = await client.patch(url, headers=auth(await factory.faculty()), json={"status": "approved"})
    assert r.status_code == 403

    r = await client.patch(url, headers=auth(a), json={"status": "approved"})
    assert r.status_code == 403

    r = await client.patch(url, headers=auth(await factory.admin()), json={"status": "rejected"})
    assert r.status_code == 200

    [row] = [t for t in await fetch_all(select(Transcript)) if t.user_id == a.id]
    assert row.grade == "C"
