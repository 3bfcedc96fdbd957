# src/flexpro/api/routers/faculty_marks.py
from __future__ import annotations

from typing import Optional, Sequence
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from flexpro.app_logger import get_logger
from flexpro.auth.deps import require_faculty
from flexpro.db.models import (
    Course,
    CourseSection,
    Enrollment,
    StudentMark,
    Transcript,
    User,
    ROLE_ADMIN,
    STATUS_DROPPED,
    TRANSCRIPT_FINAL,
)
from flexpro.db.session import get_db
from flexpro.errors import NotFoundError
from flexpro.grading import finalize as finalizer
from flexpro.grading.gradebook import (
    MARK_COMPONENTS,
    SectionNotFound,
    compute_field_stats,
    select_population,
)
from flexpro.grading.scale import points_for_letter
from flexpro.schemas.marks import (
    FinalizeRequest,
    FinalizeResponse,
    GradebookResponse,
    GradesSubmit,
    GradesSubmitResponse,
    MarksUpsert,
    MarksUpsertResponse,
)
from flexpro.services.teaching import course_enrollments, load_owned_course

router = APIRouter(prefix="/faculty", tags=["faculty"])
log = get_logger("routers.faculty_marks")


def population_or_404(enrollments: Sequence[Enrollment], course: Course, section_id: Optional[str]) -> list[Enrollment]:
    try:
        return select_population(enrollments, course.sections, section_id)
    except SectionNotFound:
        raise NotFoundError("Section")


# ---------- Teaching overview ----------

@router.get("/teaching")
async def teaching(
    user: User = Depends(require_faculty),
    session: AsyncSession = Depends(get_db),
):
    """Courses the caller instructs, with their sections and enrolled students grouped by term."""
    stmt = (
        select(Course)
        .options(selectinload(Course.sections))
        .order_by(Course.code.asc())
    )
    if user.role != ROLE_ADMIN:
        stmt = stmt.where(Course.sections.any(CourseSection.instructor_id == user.id))
    courses = (await session.execute(stmt)).scalars().all()

    payload = []
    for course in courses:
        enrollments = (
            await session.execute(
                select(Enrollment)
                .where(Enrollment.course_id == course.id, Enrollment.status != STATUS_DROPPED)
                .options(selectinload(Enrollment.user), selectinload(Enrollment.term))
            )
        ).scalars().all()

        terms: dict[UUID, dict] = {}
        for en in enrollments:
            bucket = terms.setdefault(
                en.term_id, {"term_id": str(en.term_id), "term_name": en.term.name, "students": []}
            )
            bucket["students"].append(
                {
                    "user_id": str(en.user_id),
                    "student_id": en.user.student_id,
                    "first_name": en.user.first_name,
                    "last_name": en.user.last_name,
                    "email": en.user.email,
                    "section": en.user.section,
                }
            )
        for bucket in terms.values():
            bucket["students"].sort(key=lambda s: (s["last_name"], s["first_name"]))

        payload.append(
            {
                "course_id": str(course.id),
                "code": course.code,
                "title": course.title,
                "sections": [
                    {"id": str(s.id), "name": s.name}
                    for s in course.sections
                    if user.role == ROLE_ADMIN or s.instructor_id == user.id
                ],
                "terms": sorted(terms.values(), key=lambda t: t["term_name"]),
            }
        )
    return {"courses": payload}


# ---------- Gradebook ----------

@router.get("/marks", response_model=GradebookResponse)
async def gradebook(
    course_id: UUID = Query(...),
    term_id: UUID = Query(...),
    section_id: Optional[str] = Query(default=None),
    user: User = Depends(require_faculty),
    session: AsyncSession = Depends(get_db),
) -> GradebookResponse:
    course = await load_owned_course(session, user, course_id)
    population = population_or_404(await course_enrollments(session, course.id, term_id), course, section_id)

    finals = {
        t.user_id: t
        for t in (
            await session.execute(
                select(Transcript).where(
                    Transcript.course_id == course.id,
                    Transcript.term_id == term_id,
                    Transcript.status == TRANSCRIPT_FINAL,
                )
            )
        ).scalars().all()
    }

    rows = []
    for en in population:
        final = finals.get(en.user_id)
        rows.append(
            {
                "enrollment_id": en.id,
                "user_id": en.user_id,
                "student_id": en.user.student_id,
                "first_name": en.user.first_name,
                "last_name": en.user.last_name,
                "section": en.user.section,
                "status": en.status,
                "marks": en.mark,
                "grade": final.grade if final else None,
                "grade_points": final.grade_points if final else None,
            }
        )

    stats = compute_field_stats([en.mark for en in population if en.mark is not None])
    return GradebookResponse.model_validate(
        {
            "course_id": course.id,
            "term_id": term_id,
            "section_id": section_id,
            "rows": rows,
            "stats": {k: v.as_dict() for k, v in stats.items()},
        }
    )


@router.put("/marks", response_model=MarksUpsertResponse)
async def save_marks(
    payload: MarksUpsert,
    user: User = Depends(require_faculty),
    session: AsyncSession = Depends(get_db),
) -> MarksUpsertResponse:
    """
    Upsert component marks for students in the selected population and
    recompute their totals. Entries for anyone outside it are ignored.
    """
    course = await load_owned_course(session, user, payload.course_id)
    population = population_or_404(
        await course_enrollments(session, course.id, payload.term_id), course, payload.section_id
    )
    by_user = {en.user_id: en for en in population}

    updated = 0
    for entry in payload.entries:
        en = by_user.get(entry.user_id)
        if en is None:
            continue
        mark = en.mark
        if mark is None:
            mark = StudentMark(enrollment_id=en.id)
            for name in MARK_COMPONENTS:
                setattr(mark, name, 0.0)
            en.mark = mark
            session.add(mark)
        for name in MARK_COMPONENTS:
            value = getattr(entry, name)
            if value is not None:
                setattr(mark, name, value)
        mark.recompute_total()
        updated += 1

    await session.commit()
    log.info("marks saved course=%s term=%s updated=%d", course.code, payload.term_id, updated)
    return MarksUpsertResponse(message="Marks saved", updated=updated, ignored=len(payload.entries) - updated)


@router.post("/marks/grades", response_model=GradesSubmitResponse)
async def save_grades(
    payload: GradesSubmit,
    user: User = Depends(require_faculty),
    session: AsyncSession = Depends(get_db),
) -> GradesSubmitResponse:
    """Record manually entered letter grades as final transcript entries."""
    course = await load_owned_course(session, user, payload.course_id)
    enrolled = {en.user_id for en in await course_enrollments(session, course.id, payload.term_id)}

    saved = 0
    for entry in payload.entries:
        if entry.user_id not in enrolled:
            continue
        await finalizer.upsert_final_transcript(
            session,
            user_id=entry.user_id,
            course_id=course.id,
            term_id=payload.term_id,
            grade=entry.grade,
            grade_points=points_for_letter(entry.grade, entry.grade_points),
        )
        saved += 1

    await session.commit()
    return GradesSubmitResponse(message="Grades saved", saved=saved)


@router.post("/marks/finalize", response_model=FinalizeResponse)
async def finalize(
    payload: FinalizeRequest,
    user: User = Depends(require_faculty),
    session: AsyncSession = Depends(get_db),
) -> FinalizeResponse:
    course = await load_owned_course(session, user, payload.course_id)
    try:
        result = await finalizer.finalize_grades(session, course, payload.term_id, payload.section_id)
    except SectionNotFound:
        raise NotFoundError("Section")
    return FinalizeResponse(
        message="Finalization completed",
        processed=result.processed,
        skipped=result.skipped,
        details=result.details,
    )
