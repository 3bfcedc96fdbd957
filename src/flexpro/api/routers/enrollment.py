# src/flexpro/api/routers/enrollment.py
from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from flexpro.auth.deps import require_student
from flexpro.db.models import Course, CourseSection, Enrollment, Term, User
from flexpro.db.session import get_db
from flexpro.grading.gradebook import normalize_section
from flexpro.schemas.base import Message
from flexpro.schemas.enrollment import (
    CatalogResponse,
    EnrollRequest,
    EnrollResponse,
    EnrollmentOut,
    MyCourse,
)
from flexpro.services import enrollment as enrollment_service
from flexpro.services.portal_settings import PortalSettingsService, get_portal_settings_service

router = APIRouter(tags=["enrollment"])


@router.get("/courses", response_model=list[MyCourse])
async def my_courses(
    user: User = Depends(require_student),
    session: AsyncSession = Depends(get_db),
) -> list[MyCourse]:
    """The caller's enrollments, newest term first, with the section they sit in and its instructor."""
    rows = (
        await session.execute(
            select(Enrollment)
            .join(Enrollment.term)
            .where(Enrollment.user_id == user.id)
            .options(
                selectinload(Enrollment.term),
                selectinload(Enrollment.course)
                .selectinload(Course.sections)
                .selectinload(CourseSection.instructor),
            )
            .order_by(Term.start_date.desc())
        )
    ).scalars().all()

    wanted = normalize_section(user.section)
    out: list[MyCourse] = []
    for en in rows:
        section = next((s for s in en.course.sections if wanted and normalize_section(s.name) == wanted), None)
        out.append(
            MyCourse(
                enrollment_id=en.id,
                status=en.status,
                course_id=en.course.id,
                code=en.course.code,
                title=en.course.title,
                credit_hours=en.course.credit_hours,
                department=en.course.department,
                term=en.term,
                section=section.name if section else None,
                instructor=section.instructor if section else None,
            )
        )
    return out


@router.get("/enroll", response_model=CatalogResponse)
async def enrollment_catalog(
    user: User = Depends(require_student),
    session: AsyncSession = Depends(get_db),
) -> CatalogResponse:
    term = await enrollment_service.require_active_term(session)
    catalog = await enrollment_service.build_catalog(session, user, term)
    return CatalogResponse.model_validate(catalog)


@router.post("/enroll", response_model=EnrollResponse, status_code=status.HTTP_201_CREATED)
async def enroll(
    payload: EnrollRequest,
    user: User = Depends(require_student),
    session: AsyncSession = Depends(get_db),
    portal: PortalSettingsService = Depends(get_portal_settings_service),
) -> EnrollResponse:
    current = await portal.get(session)
    enrollment = await enrollment_service.enroll(session, user, payload.course_id, current)
    return EnrollResponse(message="Enrollment successful", enrollment=EnrollmentOut.model_validate(enrollment))


@router.delete("/enroll/{course_id}", response_model=Message)
async def drop_course(
    course_id: UUID,
    user: User = Depends(require_student),
    session: AsyncSession = Depends(get_db),
) -> Message:
    await enrollment_service.drop(session, user, course_id)
    return Message(message="Course dropped successfully")
