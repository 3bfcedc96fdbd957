# src/flexpro/services/enrollment.py
from __future__ import annotations

import uuid
from typing import Optional, Sequence

import sqlalchemy as sa
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from flexpro.app_logger import get_logger
from flexpro.core.config import settings
from flexpro.db.models import (
    Course,
    CourseSection,
    Enrollment,
    Term,
    User,
    STATUS_DROPPED,
    STATUS_ENROLLED,
)
from flexpro.errors import ConflictError, NotFoundError
from flexpro.grading.gradebook import normalize_section
from flexpro.schemas.portal_settings import PortalSettings

log = get_logger("services.enrollment")


# ------------------------
# Lookups
# ------------------------
async def get_active_term(session: AsyncSession) -> Optional[Term]:
    return await session.scalar(select(Term).where(Term.is_active.is_(True)).limit(1))


async def require_active_term(session: AsyncSession) -> Term:
    term = await get_active_term(session)
    if term is None:
        raise NotFoundError("Active term")
    return term


async def enrolled_counts(session: AsyncSession, term_id: uuid.UUID) -> dict[uuid.UUID, int]:
    """Live (non-dropped) enrollment count per course for a term."""
    rows = await session.execute(
        select(Enrollment.course_id, sa.func.count(Enrollment.id))
        .where(Enrollment.term_id == term_id, Enrollment.status != STATUS_DROPPED)
        .group_by(Enrollment.course_id)
    )
    return {course_id: count for course_id, count in rows.all()}


async def term_enrollments(session: AsyncSession, user_id: uuid.UUID, term_id: uuid.UUID) -> list[Enrollment]:
    rows = await session.execute(
        select(Enrollment)
        .where(Enrollment.user_id == user_id, Enrollment.term_id == term_id)
        .options(selectinload(Enrollment.course))
    )
    return list(rows.scalars().all())


def section_matches(student_section: Optional[str], sections: Sequence[CourseSection]) -> bool:
    """A course with no sections, or a student with none, matches anything."""
    wanted = normalize_section(student_section)
    if not sections or not wanted:
        return True
    return any(normalize_section(s.name) == wanted for s in sections)


def live_credits(enrollments: Sequence[Enrollment]) -> int:
    return sum(e.course.credit_hours for e in enrollments if e.status != STATUS_DROPPED)


# ------------------------
# Catalog
# ------------------------
async def build_catalog(session: AsyncSession, user: User, term: Term) -> dict:
    courses = (
        await session.execute(
            select(Course)
            .where(Course.is_active.is_(True))
            .options(selectinload(Course.sections).selectinload(CourseSection.instructor))
            .order_by(Course.semester.asc(), Course.code.asc())
        )
    ).scalars().all()
    counts = await enrolled_counts(session, term.id)
    mine = await term_enrollments(session, user.id, term.id)
    mine_live = {e.course_id for e in mine if e.status != STATUS_DROPPED}
    student_section = (user.section or "").strip() or None

    items = []
    for course in courses:
        enrolled = counts.get(course.id, 0)
        already = course.id in mine_live
        matches = section_matches(user.section, course.sections)
        items.append(
            {
                "id": course.id,
                "code": course.code,
                "title": course.title,
                "credit_hours": course.credit_hours,
                "prerequisite": course.prerequisite,
                "department": course.department,
                "semester": course.semester,
                "enrolled": enrolled,
                "capacity": course.max_capacity,
                "available": enrolled < course.max_capacity and not already and matches,
                "already_enrolled": already,
                "matches_student_section": matches,
                "student_section": student_section,
                "sections": course.sections,
            }
        )

    return {
        "term": term,
        "courses": items,
        "departments": sorted({c.department for c in courses}),
        "summary": {
            "available_count": sum(1 for c in items if c["available"]),
            "current_credits": live_credits(mine),
            "credit_limit": settings.CREDIT_LIMIT,
            "enrolled_count": len(mine_live),
        },
    }


# ------------------------
# Enroll / drop
# ------------------------
async def enroll(
    session: AsyncSession,
    user: User,
    course_id: uuid.UUID,
    portal: PortalSettings,
    credit_limit: int = settings.CREDIT_LIMIT,
) -> Enrollment:
    """
    Enroll `user` in a course for the active term.

    Conflicts: enrollment closed, section mismatch, already enrolled, course
    full, credit limit exceeded. A dropped enrollment for the same course and
    term is reactivated instead of inserting a second row.
    """
    if portal.enrollment_status == "closed":
        raise ConflictError("Enrollment is currently closed")

    term = await require_active_term(session)
    course = await session.scalar(
        select(Course).where(Course.id == course_id).options(selectinload(Course.sections))
    )
    if course is None or not course.is_active:
        raise NotFoundError("Course")

    if not section_matches(user.section, course.sections):
        raise ConflictError("This course is not available for your section")

    existing = await session.scalar(
        select(Enrollment).where(
            Enrollment.user_id == user.id,
            Enrollment.course_id == course.id,
            Enrollment.term_id == term.id,
        )
    )
    if existing is not None and existing.status != STATUS_DROPPED:
        raise ConflictError("Already enrolled in this course for the active term")

    counts = await enrolled_counts(session, term.id)
    if counts.get(course.id, 0) >= course.max_capacity:
        raise ConflictError("Course capacity has been reached")

    current = live_credits(await term_enrollments(session, user.id, term.id))
    if current + course.credit_hours > credit_limit:
        raise ConflictError("Enrolling would exceed the credit hour limit for the term")

    if existing is not None:
        existing.status = STATUS_ENROLLED
        enrollment = existing
    else:
        enrollment = Enrollment(user_id=user.id, course_id=course.id, term_id=term.id, status=STATUS_ENROLLED)
        session.add(enrollment)

    await session.commit()
    log.info("user=%s enrolled course=%s term=%s", user.id, course.code, term.name)
    return enrollment


async def drop(session: AsyncSession, user: User, course_id: uuid.UUID) -> Enrollment:
    term = await require_active_term(session)
    enrollment = await session.scalar(
        select(Enrollment).where(
            Enrollment.user_id == user.id,
            Enrollment.course_id == course_id,
            Enrollment.term_id == term.id,
        )
    )
    if enrollment is None or enrollment.status == STATUS_DROPPED:
        raise NotFoundError("Enrollment")
    if enrollment.status != STATUS_ENROLLED:
        raise ConflictError("Completed courses cannot be dropped")

    enrollment.status = STATUS_DROPPED
    await session.commit()
    log.info("user=%s dropped course=%s term=%s", user.id, course_id, term.name)
    return enrollment
