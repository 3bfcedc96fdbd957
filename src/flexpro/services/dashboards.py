# src/flexpro/services/dashboards.py
"""
Read-only landing-page aggregates for each role. Nothing here writes; the
tuition invoice is only brought up to date by the fees endpoints.
"""
from __future__ import annotations

import datetime as dt
from typing import Optional

import sqlalchemy as sa
from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from flexpro.db.models import (
    Attendance,
    Course,
    CourseSection,
    Enrollment,
    FeeInvoice,
    GradeRequest,
    Notification,
    Transcript,
    User,
    OUTSTANDING_STATUSES,
    REQUEST_PENDING,
    ROLE_ADMIN,
    ROLE_FACULTY,
    ROLE_STUDENT,
    STATUS_DROPPED,
    TRANSCRIPT_FINAL,
)
from flexpro.grading.gpa import GradedCredit, compute_cgpa, total_credits
from flexpro.services.attendance import course_stats, percentage
from flexpro.services.enrollment import get_active_term

RECENT = 5
# A course with no attendance taken for this many days counts as pending.
ATTENDANCE_STALE_DAYS = 7


def _term_ref(term) -> Optional[dict]:
    return {"id": term.id, "name": term.name} if term else None


# ------------------------
# Student
# ------------------------
async def student_dashboard(session: AsyncSession, user: User, today: Optional[dt.date] = None) -> dict:
    today = today or dt.date.today()
    term = await get_active_term(session)

    enrollments = (
        await session.execute(
            select(Enrollment)
            .where(Enrollment.user_id == user.id, Enrollment.status != STATUS_DROPPED)
            .options(selectinload(Enrollment.course), selectinload(Enrollment.term))
            .order_by(Enrollment.created_at.desc())
        )
    ).scalars().all()
    current = [en for en in enrollments if term is not None and en.term_id == term.id]

    transcripts = (
        await session.execute(
            select(Transcript)
            .where(Transcript.user_id == user.id, Transcript.status == TRANSCRIPT_FINAL)
            .options(selectinload(Transcript.course), selectinload(Transcript.term))
            .order_by(Transcript.created_at.desc())
        )
    ).scalars().all()
    credits = [
        GradedCredit(term_id=t.term_id, grade_points=t.grade_points, credit_hours=t.course.credit_hours)
        for t in transcripts
    ]

    records = (
        await session.execute(select(Attendance).where(Attendance.user_id == user.id))
    ).scalars().all()
    present = sum(1 for r in records if r.status == "present")

    invoices = (
        await session.execute(
            select(FeeInvoice).where(FeeInvoice.user_id == user.id, FeeInvoice.status.in_(OUTSTANDING_STATUSES))
        )
    ).scalars().all()
    deadlines = [
        {"title": inv.description, "date": inv.due_date, "type": "payment"}
        for inv in invoices
        if inv.amount > 0
    ]
    if term is not None:
        deadlines.append({"title": f"{term.name} classes start", "date": term.start_date, "type": "registration"})
        deadlines.append({"title": f"{term.name} finals", "date": term.end_date, "type": "exam"})
    deadlines = sorted((d for d in deadlines if d["date"] >= today), key=lambda d: d["date"])

    visible = or_(Notification.user_id == user.id, Notification.is_global.is_(True))
    notifications = (
        await session.execute(
            select(Notification).where(visible).order_by(Notification.created_at.desc()).limit(RECENT)
        )
    ).scalars().all()
    unread = await session.scalar(
        select(sa.func.count(Notification.id)).where(visible, Notification.is_read.is_(False))
    )

    return {
        "term": _term_ref(term),
        "current_courses": [
            {
                "course_id": en.course_id,
                "code": en.course.code,
                "title": en.course.title,
                "credit_hours": en.course.credit_hours,
                "department": en.course.department,
                "status": en.status,
            }
            for en in current
        ],
        "current_credit_hours": sum(en.course.credit_hours for en in current),
        "cgpa": compute_cgpa(credits),
        "completed_credit_hours": total_credits(credits),
        "recent_grades": [
            {
                "course_code": t.course.code,
                "course_title": t.course.title,
                "grade": t.grade,
                "grade_points": t.grade_points,
                "term": t.term.name if t.term else None,
                "created_at": t.created_at,
            }
            for t in transcripts[:RECENT]
        ],
        "attendance_rate": percentage(present, len(records)),
        "attendance_by_course": course_stats(current, records),
        "deadlines": deadlines,
        "notifications": list(notifications),
        "unread_notifications": unread or 0,
    }


# ------------------------
# Faculty
# ------------------------
async def faculty_dashboard(session: AsyncSession, user: User, today: Optional[dt.date] = None) -> dict:
    """
    Per-course overview for the courses `user` teaches (every course for admins):
    students, enrollments still waiting for a final grade, and courses whose
    attendance has not been taken recently.
    """
    today = today or dt.date.today()
    stmt = select(Course).order_by(Course.code.asc())
    if user.role != ROLE_ADMIN:
        stmt = stmt.where(Course.sections.any(CourseSection.instructor_id == user.id))
    courses = (await session.execute(stmt)).scalars().all()
    course_ids = [c.id for c in courses]

    enrollments = (
        await session.execute(
            select(Enrollment)
            .where(Enrollment.course_id.in_(course_ids), Enrollment.status != STATUS_DROPPED)
            .options(selectinload(Enrollment.term))
        )
    ).scalars().all()
    attendance = (
        await session.execute(
            select(Attendance).where(Attendance.course_id.in_(course_ids)).order_by(Attendance.date.desc())
        )
    ).scalars().all()
    finals = (
        await session.execute(
            select(Transcript)
            .where(Transcript.course_id.in_(course_ids), Transcript.status == TRANSCRIPT_FINAL)
            .order_by(Transcript.created_at.desc())
        )
    ).scalars().all()
    graded = {(t.user_id, t.course_id, t.term_id) for t in finals}
    codes = {c.id: c.code for c in courses}

    students = set()
    pending_grades = 0
    pending_attendance = 0
    course_rows = []
    for course in courses:
        mine = [en for en in enrollments if en.course_id == course.id]
        taken = [a for a in attendance if a.course_id == course.id]
        grades = [t for t in finals if t.course_id == course.id]

        students.update(en.user_id for en in mine)
        pending_grades += sum(1 for en in mine if (en.user_id, en.course_id, en.term_id) not in graded)
        if not taken or (today - taken[0].date).days >= ATTENDANCE_STALE_DAYS:
            pending_attendance += 1

        latest_term = max((en.term for en in mine), key=lambda t: t.start_date, default=None)
        course_rows.append(
            {
                "course_id": course.id,
                "code": course.code,
                "title": course.title,
                "term": latest_term.name if latest_term else None,
                "students": len({en.user_id for en in mine}),
                "attendance_rate": percentage(sum(1 for a in taken if a.status == "present"), len(taken)),
                "average_grade_points": (
                    round(sum(t.grade_points for t in grades) / len(grades), 2) if grades else None
                ),
            }
        )

    activity = [
        {
            "type": "attendance",
            "title": f"{codes[a.course_id]} attendance updated",
            "description": f"{a.status.upper()} marked on {a.date.isoformat()}",
            "timestamp": a.updated_at,
        }
        for a in attendance[:10]
    ] + [
        {
            "type": "grade",
            "title": f"{codes[t.course_id]} grade submitted",
            "description": f"Grade {t.grade} recorded",
            "timestamp": t.created_at,
        }
        for t in finals[:10]
    ]
    activity.sort(key=lambda a: a["timestamp"], reverse=True)

    return {
        "summary": {
            "total_courses": len(courses),
            "total_students": len(students),
            "pending_attendance": pending_attendance,
            "pending_grades": pending_grades,
        },
        "courses": course_rows,
        "recent_activity": activity[:8],
    }


# ------------------------
# Admin
# ------------------------
async def admin_dashboard(session: AsyncSession) -> dict:
    role_counts = dict(
        (await session.execute(select(User.role, sa.func.count(User.id)).group_by(User.role))).all()
    )
    term = await get_active_term(session)
    total_courses = await session.scalar(select(sa.func.count(Course.id)))
    total_enrollments = await session.scalar(
        select(sa.func.count(Enrollment.id)).where(Enrollment.status != STATUS_DROPPED)
    )
    active_term_enrollments = (
        await session.scalar(
            select(sa.func.count(Enrollment.id)).where(
                Enrollment.term_id == term.id, Enrollment.status != STATUS_DROPPED
            )
        )
        if term is not None
        else 0
    )
    pending_requests = await session.scalar(
        select(sa.func.count(GradeRequest.id)).where(GradeRequest.status == REQUEST_PENDING)
    )

    recent_courses = (
        await session.execute(select(Course).order_by(Course.created_at.desc()).limit(6))
    ).scalars().all()
    latest_enrollments = (
        await session.execute(
            select(Enrollment)
            .options(selectinload(Enrollment.user), selectinload(Enrollment.course))
            .order_by(Enrollment.created_at.desc())
            .limit(6)
        )
    ).scalars().all()
    latest_requests = (
        await session.execute(
            select(GradeRequest)
            .options(selectinload(GradeRequest.user), selectinload(GradeRequest.course))
            .order_by(GradeRequest.created_at.desc())
            .limit(6)
        )
    ).scalars().all()

    activity = [
        {
            "type": "enrollment",
            "title": f"{en.user.full_name} enrolled in {en.course.code}",
            "description": f"{en.course.title} ({en.user.student_id or en.user.email})",
            "timestamp": en.created_at,
        }
        for en in latest_enrollments
    ] + [
        {
            "type": "grade",
            "title": f"{req.user.full_name} submitted a grade review",
            "description": f"{req.course.code}: {req.current_grade} -> {req.requested_grade}",
            "timestamp": req.created_at,
        }
        for req in latest_requests
    ]
    activity.sort(key=lambda a: a["timestamp"], reverse=True)

    return {
        "summary": {
            "total_students": role_counts.get(ROLE_STUDENT, 0),
            "total_faculty": role_counts.get(ROLE_FACULTY, 0),
            "total_admins": role_counts.get(ROLE_ADMIN, 0),
            "total_courses": total_courses or 0,
            "total_enrollments": total_enrollments or 0,
            "active_term_enrollments": active_term_enrollments or 0,
            "pending_grade_requests": pending_requests or 0,
        },
        "active_term": _term_ref(term),
        "recent_courses": [
            {"id": c.id, "code": c.code, "title": c.title, "department": c.department, "created_at": c.created_at}
            for c in recent_courses
        ],
        "recent_activity": activity[:10],
    }
