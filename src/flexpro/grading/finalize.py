from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from flexpro.app_logger import get_logger
from flexpro.db.models import (
    Course,
    Enrollment,
    Transcript,
    STATUS_COMPLETED,
    STATUS_DROPPED,
    TRANSCRIPT_FINAL,
)
from flexpro.grading import scale
from flexpro.grading.gradebook import select_population

log = get_logger("grading.finalize")


@dataclass
class FinalizeResult:
    processed: int = 0
    skipped: int = 0
    details: list[dict] = field(default_factory=list)


async def upsert_final_transcript(
    session: AsyncSession,
    *,
    user_id: uuid.UUID,
    course_id: uuid.UUID,
    term_id: uuid.UUID,
    grade: str,
    grade_points: float,
) -> tuple[Transcript, bool]:
    """Create or overwrite the final transcript row; returns (row, created)."""
    row = (
        await session.execute(
            select(Transcript).where(
                Transcript.user_id == user_id,
                Transcript.course_id == course_id,
                Transcript.term_id == term_id,
                Transcript.status == TRANSCRIPT_FINAL,
            )
        )
    ).scalar_one_or_none()

    if row is None:
        row = Transcript(
            user_id=user_id,
            course_id=course_id,
            term_id=term_id,
            grade=grade,
            grade_points=grade_points,
            status=TRANSCRIPT_FINAL,
        )
        session.add(row)
        return row, True

    row.grade = grade
    row.grade_points = grade_points
    return row, False


async def finalize_grades(
    session: AsyncSession,
    course: Course,
    term_id: uuid.UUID,
    section_id: Optional[str] = None,
) -> FinalizeResult:
    """
    Turn mark totals into final transcript grades for one course/term.

    Every selected (non-dropped) enrollment with a total gets a letter grade and
    is marked completed; enrollments without a total are counted as skipped.
    The whole run commits once. Any failure rolls everything back and re-raises.

    `course` must have its sections loaded.
    """
    enrollments = (
        await session.execute(
            select(Enrollment)
            .where(
                Enrollment.course_id == course.id,
                Enrollment.term_id == term_id,
                Enrollment.status != STATUS_DROPPED,
            )
            .options(selectinload(Enrollment.user), selectinload(Enrollment.mark))
            .order_by(Enrollment.created_at)
        )
    ).scalars().all()

    selected = select_population(enrollments, course.sections, section_id)
    result = FinalizeResult()

    try:
        for en in selected:
            if en.mark is None or en.mark.total is None:
                result.skipped += 1
                continue

            graded = scale.score_to_grade(en.mark.total)
            _, created = await upsert_final_transcript(
                session,
                user_id=en.user_id,
                course_id=course.id,
                term_id=term_id,
                grade=graded.grade,
                grade_points=graded.grade_points,
            )
            en.status = STATUS_COMPLETED
            result.processed += 1
            result.details.append(
                {"user_id": str(en.user_id), "created": created, "grade": graded.grade}
            )

        await session.commit()
    except Exception:
        await session.rollback()
        log.exception("finalize failed course=%s term=%s; rolled back", course.id, term_id)
        raise

    log.info(
        "finalized course=%s term=%s section=%s processed=%d skipped=%d",
        course.code, term_id, section_id or "ALL", result.processed, result.skipped,
    )
    return result
