import datetime as dt

import pytest

from .conftest import auth

pytestmark = pytest.mark.anyio


@pytest.fixture
async def roster(factory):
    lecturer = await factory.faculty()
    term = await factory.term()
    course = await factory.course(instructor=lecturer, sections=("A", "B"))
    a = await factory.student(section="A")
    b = await factory.student(section="B")
    await factory.enrollment(a, course, term)
    await factory.enrollment(b, course, term)
    return lecturer, term, course, a, b


def mark_body(course, term, day, entries, section_id=None):
    body = {
        "course_id": str(course.id),
        "term_id": str(term.id),
        "date": day.isoformat(),
        "entries": [{"user_id": str(u.id), "status": s} for u, s in entries],
    }
    if section_id:
        body["section_id"] = section_id
    return body


async def test_mark_and_read_attendance(client, roster):
    lecturer, term, course, a, b = roster
    day1, day2, day3 = dt.date(2026, 3, 2), dt.date(2026, 3, 4), dt.date(2026, 3, 6)

    for day, status in ((day1, "present"), (day2, "absent"), (day3, "late")):
        r = await client.post(
            "/faculty/attendance", headers=auth(lecturer), json=mark_body(course, term, day, [(a, status)])
        )
        assert r.status_code == 200, r.text
        assert r.json()["saved"] == 1

    r = await client.get("/attendance", headers=auth(a))
    assert r.status_code == 200
    body = r.json()
    assert [rec["date"] for rec in body["records"]] == [day3.isoformat(), day2.isoformat(), day1.isoformat()]
    [stat] = body["course_stats"]
    assert stat["present"] == 1
    assert stat["total"] == 3
    assert stat["percentage"] == 33.3
    assert body["summary"]["overall_attendance"] == 33.3

    empty = (await client.get("/attendance", headers=auth(b))).json()
    assert empty["course_stats"][0]["percentage"] is None
    assert empty["summary"]["overall_attendance"] is None


async def test_remarking_a_day_overwrites(client, roster):
    lecturer, term, course, a, _ = roster
    day = dt.date(2026, 3, 2)
    await client.post("/faculty/attendance", headers=auth(lecturer), json=mark_body(course, term, day, [(a, "absent")]))
    await client.post("/faculty/attendance", headers=auth(lecturer), json=mark_body(course, term, day, [(a, "present")]))

    r = await client.get(
        "/faculty/attendance",
        headers=auth(lecturer),
        params={"course_id": str(course.id), "term_id": str(term.id), "date": day.isoformat()},
    )
    assert r.json()["records"] == [{"user_id": str(a.id), "status": "present"}]


async def test_section_scoped_marking_ignores_other_sections(client, roster):
    lecturer, term, course, a, b = roster
    section_a = next(s for s in course.sections if s.name == "A")

    r = await client.post(
        "/faculty/attendance",
        headers=auth(lecturer),
        json=mark_body(course, term, dt.date(2026, 3, 2), [(a, "present"), (b, "present")], str(section_a.id)),
    )
    assert r.json()["saved"] == 1
    assert r.json()["ignored"] == 1


async def test_invalid_status_is_422(client, roster):
    lecturer, term, course, a, _ = roster
    r = await client.post(
        "/faculty/attendance", headers=auth(lecturer), json=mark_body(course, term, dt.date(2026, 3, 2), [(a, "asleep")])
    )
    assert r.status_code == 422


async def test_other_faculty_cannot_mark(client, factory, roster):
    _, term, course, a, _ = roster
    stranger = await factory.faculty()
    r = await client.post(
        "/faculty/attendance",
        headers=auth(stranger),
        json=mark_body(course, term, dt.date(2026, 3, 2), [(a, "present")]),
    )
    assert r.status_code == 403


async def test_low_attendance_report(client, factory, roster):
    lecturer, term, course, a, b = roster
    never = await factory.student(section="A")
    await factory.enrollment(never, course, term)
    days = [dt.date(2026, 3, d) for d in (2, 4, 6, 9, 11)]

    for day, status in zip(days, ("present", "present", "late", "present", "absent")):
        entries = [(a, status)]
        if day in days[:2]:
            entries.append((b, "present" if day == days[0] else "absent"))
        r = await client.post("/faculty/attendance", headers=auth(lecturer), json=mark_body(course, term, day, entries))
        assert r.status_code == 200, r.text

    params = {"course_id": str(course.id), "term_id": str(term.id)}
    r = await client.get("/faculty/attendance/low-attendance", headers=auth(lecturer), params=params)
    assert r.status_code == 200, r.text
    body = r.json()
    assert body["threshold"] == 80.0
    # a attended 4 of 5 (late counts), which is not below the threshold
    assert [s["user_id"] for s in body["students"]] == [str(never.id), str(b.id)]
    silent, sparse = body["students"]
    assert (silent["attended_sessions"], silent["total_sessions"], silent["percentage"]) == (0, 5, 0.0)
    assert silent["history"] == []
    assert (sparse["attended_sessions"], sparse["percentage"]) == (1, 20.0)
    assert [h["status"] for h in sparse["history"]] == ["absent", "present"]

    section_a = next(s for s in course.sections if s.name == "A")
    r = await client.get(
        "/faculty/attendance/low-attendance", headers=auth(lecturer), params={**params, "section_id": str(section_a.id)}
    )
    assert [s["user_id"] for s in r.json()["students"]] == [str(never.id)]

    r = await client.get(
        "/faculty/attendance/low-attendance", headers=auth(lecturer), params={**params, "section_id": "nope"}
    )
    assert r.status_code == 404


async def test_low_attendance_without_sessions_is_empty(client, roster):
    lecturer, term, course, _, _ = roster
    r = await client.get(
        "/faculty/attendance/low-attendance",
        headers=auth(lecturer),
        params={"course_id": str(course.id), "term_id": str(term.id)},
    )
    assert r.json()["students"] == []


async def test_low_attendance_needs_the_instructor(client, factory, roster):
    _, term, course, a, _ = roster
    params = {"course_id": str(course.id), "term_id": str(term.id)}
    other = await factory.faculty()
    r = await client.get("/faculty/attendance/low-attendance", headers=auth(other), params=params)
    assert r.status_code == 403
    r = await client.get("/faculty/attendance/low-attendance", headers=auth(a), params=params)
    assert r.status_code == 403
