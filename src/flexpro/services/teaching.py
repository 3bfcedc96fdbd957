# src/flexpro/services/teaching.py
from __future__ import annotations

import uuid

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from flexpro.db.models import Course, CourseSection, Enrollment, User, ROLE_ADMIN, STATUS_DROPPED
from flexpro.errors import ForbiddenError, NotFoundError


async def load_owned_course(session: AsyncSession, user: User, course_id: uuid.UUID) -> Course:
    """
    Course (sections loaded) that `user` may grade or mark attendance for.

    Faculty must instruct at least one of its sections; admins may act on any course.
    """
    course = await session.scalar(
        select(Course)
        .where(Course.id == course_id)
        .options(selectinload(Course.sections).selectinload(CourseSection.instructor))
    )
    if course is None:
        raise NotFoundError("Course")
    if user.role != ROLE_ADMIN and not any(s.instructor_id == user.id for s in course.sections):
        raise ForbiddenError("You do not teach this course")
    return course


async def course_enrollments(
    session: AsyncSession,
    course_id: uuid.UUID,
    term_id: uuid.UUID,
    *,
    include_dropped: bool = False,
) -> list[Enrollment]:
    """Enrollments of a course/term with student and marks loaded, ordered by student name."""
    stmt = (
        select(Enrollment)
        .join(Enrollment.user)
        .where(Enrollment.course_id == course_id, Enrollment.term_id == term_id)
        .options(selectinload(Enrollment.user), selectinload(Enrollment.mark))
        .order_by(User.last_name, User.first_name)
    )
    if not include_dropped:
        stmt = stmt.where(Enrollment.status != STATUS_DROPPED)
    return list((await session.execute(stmt)).scalars().all())
