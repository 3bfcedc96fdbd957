# src/flexpro/api/routers/student_marks.py
from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from flexpro.auth.deps import require_student
from flexpro.db.models import Enrollment, StudentMark, Term, User, STATUS_DROPPED
from flexpro.db.session import get_db
from flexpro.grading.gradebook import classmates, compute_field_stats, empty_stats
from flexpro.schemas.marks import StudentCourseMarks, StudentMarksResponse

router = APIRouter(prefix="/student", tags=["marks"])


async def class_marks(session: AsyncSession, enrollment: Enrollment, section: str | None) -> list[StudentMark]:
    """Marks of every student in the same course/term whose section matches `section`."""
    peers = (
        await session.execute(
            select(Enrollment)
            .where(
                Enrollment.course_id == enrollment.course_id,
                Enrollment.term_id == enrollment.term_id,
                Enrollment.status != STATUS_DROPPED,
            )
            .options(selectinload(Enrollment.user), selectinload(Enrollment.mark))
        )
    ).scalars().all()
    return [p.mark for p in classmates(peers, section) if p.mark is not None]


@router.get("/marks", response_model=StudentMarksResponse)
async def my_marks(
    user: User = Depends(require_student),
    session: AsyncSession = Depends(get_db),
) -> StudentMarksResponse:
    """
    The caller's own marks per enrollment, each with min/max/avg for every
    field across classmates in the same section. Only the enrolled student's
    rows are ever returned.
    """
    enrollments = (
        await session.execute(
            select(Enrollment)
            .join(Enrollment.term)
            .where(Enrollment.user_id == user.id, Enrollment.status != STATUS_DROPPED)
            .options(
                selectinload(Enrollment.course),
                selectinload(Enrollment.term),
                selectinload(Enrollment.mark),
            )
            .order_by(Term.start_date.desc())
        )
    ).scalars().all()

    out: list[StudentCourseMarks] = []
    for en in enrollments:
        peers = await class_marks(session, en, user.section)
        stats = compute_field_stats(peers) if peers else empty_stats()
        out.append(
            StudentCourseMarks(
                enrollment_id=en.id,
                course_code=en.course.code,
                course_title=en.course.title,
                term_name=en.term.name,
                marks=en.mark,
                stats={k: v.as_dict() for k, v in stats.items()},
            )
        )
    return StudentMarksResponse(marks=out)
