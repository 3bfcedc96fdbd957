# src/flexpro/services/grade_requests.py
from __future__ import annotations

import uuid
from typing import Optional, Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from flexpro.app_logger import get_logger
from flexpro.db.base import utcnow
from flexpro.db.models import (
    Course,
    CourseSection,
    GradeRequest,
    Term,
    Transcript,
    User,
    ROLE_ADMIN,
    REQUEST_APPROVED,
    REQUEST_PENDING,
    REQUEST_STATUSES,
    TRANSCRIPT_FINAL,
)
from flexpro.errors import BadRequestError, ConflictError, ForbiddenError, NotFoundError
from flexpro.grading import finalize as finalizer
from flexpro.grading.gradebook import normalize_section
from flexpro.grading.scale import points_for_letter
from flexpro.schemas.grade_requests import GradeRequestCreate
from flexpro.services.teaching import load_owned_course

log = get_logger("services.grade_requests")


def _with_relations(stmt):
    return stmt.options(
        selectinload(GradeRequest.user),
        selectinload(GradeRequest.course),
        selectinload(GradeRequest.term),
    )


def request_row(req: GradeRequest) -> dict:
    return {
        "id": req.id,
        "user_id": req.user_id,
        "student_id": req.user.student_id,
        "student_name": req.user.full_name,
        "student_section": req.user.section,
        "course_id": req.course_id,
        "course_code": req.course.code,
        "course_title": req.course.title,
        "term_id": req.term_id,
        "term": req.term.name if req.term else None,
        "current_grade": req.current_grade,
        "requested_grade": req.requested_grade,
        "reason": req.reason,
        "status": req.status,
        "notes": req.notes,
        "submitted_at": req.created_at,
        "reviewed_at": req.reviewed_at,
    }


def listing(requests: Sequence[GradeRequest]) -> dict:
    summary = {status: sum(1 for r in requests if r.status == status) for status in REQUEST_STATUSES}
    summary["total"] = len(requests)
    return {"grade_requests": [request_row(r) for r in requests], "summary": summary}


def instructor_section_names(course: Course, user: User) -> set[str]:
    return {normalize_section(s.name) for s in course.sections if s.instructor_id == user.id} - {""}


def may_review(user: User, course: Course, student: User) -> bool:
    """Admins review anything; faculty review students in the sections they teach (or sectionless students)."""
    if user.role == ROLE_ADMIN:
        return True
    mine = instructor_section_names(course, user)
    wanted = normalize_section(student.section)
    return not mine or not wanted or wanted in mine


# ------------------------
# Student side
# ------------------------
async def submit(session: AsyncSession, user: User, payload: GradeRequestCreate) -> GradeRequest:
    """
    File a change request against the caller's final grade for a course/term.

    The current grade is read from the transcript; there must be one, it must
    differ from the requested grade, and only one request per course/term may
    be pending at a time.
    """
    if await session.get(Course, payload.course_id) is None:
        raise NotFoundError("Course")
    if await session.get(Term, payload.term_id) is None:
        raise NotFoundError("Term")

    final = await session.scalar(
        select(Transcript).where(
            Transcript.user_id == user.id,
            Transcript.course_id == payload.course_id,
            Transcript.term_id == payload.term_id,
            Transcript.status == TRANSCRIPT_FINAL,
        )
    )
    if final is None:
        raise ConflictError("No final grade has been recorded for this course")
    if final.grade == payload.requested_grade:
        raise BadRequestError("Requested grade matches the current grade")

    pending = await session.scalar(
        select(GradeRequest.id).where(
            GradeRequest.user_id == user.id,
            GradeRequest.course_id == payload.course_id,
            GradeRequest.term_id == payload.term_id,
            GradeRequest.status == REQUEST_PENDING,
        )
    )
    if pending is not None:
        raise ConflictError("A grade request for this course is already pending")

    req = GradeRequest(
        user_id=user.id,
        course_id=payload.course_id,
        term_id=payload.term_id,
        current_grade=final.grade,
        requested_grade=payload.requested_grade,
        reason=payload.reason,
        status=REQUEST_PENDING,
    )
    session.add(req)
    await session.commit()
    log.info("grade request %s filed user=%s course=%s %s->%s", req.id, user.id, payload.course_id, final.grade, req.requested_grade)
    return await load_request(session, req.id)


async def student_requests(session: AsyncSession, user: User) -> list[GradeRequest]:
    rows = await session.execute(
        _with_relations(select(GradeRequest))
        .where(GradeRequest.user_id == user.id)
        .order_by(GradeRequest.created_at.desc())
    )
    return list(rows.scalars().all())


# ------------------------
# Faculty side
# ------------------------
async def load_request(session: AsyncSession, request_id: uuid.UUID) -> GradeRequest:
    req = await session.scalar(
        _with_relations(select(GradeRequest))
        .where(GradeRequest.id == request_id)
        .execution_options(populate_existing=True)
    )
    if req is None:
        raise NotFoundError("Grade request")
    return req


async def reviewable_requests(session: AsyncSession, user: User, status: Optional[str] = None) -> list[GradeRequest]:
    """Requests on courses `user` teaches, limited to students in their sections; everything for admins."""
    stmt = (
        _with_relations(select(GradeRequest))
        .join(GradeRequest.course)
        .options(selectinload(GradeRequest.course).selectinload(Course.sections))
        .order_by(GradeRequest.created_at.desc())
    )
    if user.role != ROLE_ADMIN:
        stmt = stmt.where(Course.sections.any(CourseSection.instructor_id == user.id))
    if status is not None:
        stmt = stmt.where(GradeRequest.status == status)
    rows = (await session.execute(stmt)).scalars().all()
    return [r for r in rows if may_review(user, r.course, r.user)]


async def review(
    session: AsyncSession,
    user: User,
    request_id: uuid.UUID,
    status: str,
    notes: Optional[str],
) -> GradeRequest:
    """
    Set a request's status. Approving writes the requested grade to the
    student's final transcript in the same commit.
    """
    req = await load_request(session, request_id)
    course = await load_owned_course(session, user, req.course_id)
    if not may_review(user, course, req.user):
        raise ForbiddenError("This student is not in a section you teach")

    req.status = status
    req.notes = notes
    req.reviewed_at = None if status == REQUEST_PENDING else utcnow()
    req.reviewed_by = None if status == REQUEST_PENDING else user.id

    if status == REQUEST_APPROVED:
        await finalizer.upsert_final_transcript(
            session,
            user_id=req.user_id,
            course_id=req.course_id,
            term_id=req.term_id,
            grade=req.requested_grade,
            grade_points=points_for_letter(req.requested_grade),
        )

    await session.commit()
    log.info("grade request %s set to %s by %s", req.id, status, user.id)
    return await load_request(session, req.id)
