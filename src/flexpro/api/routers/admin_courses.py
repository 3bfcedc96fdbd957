# src/flexpro/api/routers/admin_courses.py
from __future__ import annotations

from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from flexpro.auth.deps import require_admin
from flexpro.db.models import Course, CourseSection, User, ROLE_FACULTY
from flexpro.db.session import get_db
from flexpro.errors import BadRequestError, ConflictError, NotFoundError
from flexpro.grading.gradebook import normalize_section
from flexpro.schemas.base import Message
from flexpro.schemas.courses import CourseCreate, CourseOut, CourseUpdate, SectionCreate, SectionOut, SectionUpdate

router = APIRouter(prefix="/admin/courses", tags=["admin"])


async def _load_course(session: AsyncSession, course_id: UUID) -> Course:
    course = await session.scalar(
        select(Course)
        .where(Course.id == course_id)
        .options(selectinload(Course.sections).selectinload(CourseSection.instructor))
        .execution_options(populate_existing=True)
    )
    if course is None:
        raise NotFoundError("Course")
    return course


async def _check_instructor(session: AsyncSession, instructor_id: Optional[UUID]) -> None:
    if instructor_id is None:
        return
    instructor = await session.get(User, instructor_id)
    if instructor is None or instructor.role != ROLE_FACULTY or not instructor.is_active:
        raise BadRequestError("Instructor not found")


def _name_taken(course: Course, name: str, *, ignore: Optional[UUID] = None) -> bool:
    wanted = normalize_section(name)
    return any(normalize_section(s.name) == wanted and s.id != ignore for s in course.sections)


@router.get("", response_model=list[CourseOut])
async def list_courses(
    _admin: User = Depends(require_admin),
    session: AsyncSession = Depends(get_db),
) -> list[CourseOut]:
    rows = (
        await session.execute(
            select(Course)
            .options(selectinload(Course.sections).selectinload(CourseSection.instructor))
            .order_by(Course.code.asc())
        )
    ).scalars().all()
    return [CourseOut.model_validate(c) for c in rows]


@router.post("", response_model=CourseOut, status_code=status.HTTP_201_CREATED)
async def create_course(
    payload: CourseCreate,
    _admin: User = Depends(require_admin),
    session: AsyncSession = Depends(get_db),
) -> CourseOut:
    if await session.scalar(select(Course.id).where(Course.code == payload.code)):
        raise ConflictError("Course code already exists")

    seen: set[str] = set()
    for s in payload.sections:
        key = normalize_section(s.name)
        if key in seen:
            raise ConflictError("Section name already exists for this course")
        seen.add(key)
        await _check_instructor(session, s.instructor_id)

    course = Course(**payload.model_dump(exclude={"sections"}))
    course.sections = [CourseSection(name=s.name, instructor_id=s.instructor_id) for s in payload.sections]
    session.add(course)
    await session.commit()
    return CourseOut.model_validate(await _load_course(session, course.id))


@router.patch("/{course_id}", response_model=CourseOut)
async def update_course(
    course_id: UUID,
    payload: CourseUpdate,
    _admin: User = Depends(require_admin),
    session: AsyncSession = Depends(get_db),
) -> CourseOut:
    course = await _load_course(session, course_id)
    for field in payload.model_fields_set:
        setattr(course, field, getattr(payload, field))
    await session.commit()
    return CourseOut.model_validate(await _load_course(session, course_id))


@router.delete("/{course_id}", response_model=Message)
async def delete_course(
    course_id: UUID,
    _admin: User = Depends(require_admin),
    session: AsyncSession = Depends(get_db),
) -> Message:
    course = await _load_course(session, course_id)
    await session.delete(course)
    await session.commit()
    return Message(message="Course deleted")


# ---------- Sections ----------

@router.post("/{course_id}/sections", response_model=SectionOut, status_code=status.HTTP_201_CREATED)
async def add_section(
    course_id: UUID,
    payload: SectionCreate,
    _admin: User = Depends(require_admin),
    session: AsyncSession = Depends(get_db),
) -> SectionOut:
    course = await _load_course(session, course_id)
    if _name_taken(course, payload.name):
        raise ConflictError("Section name already exists for this course")
    await _check_instructor(session, payload.instructor_id)

    section = CourseSection(course_id=course.id, name=payload.name, instructor_id=payload.instructor_id)
    session.add(section)
    await session.commit()

    course = await _load_course(session, course_id)
    return SectionOut.model_validate(next(s for s in course.sections if s.id == section.id))


@router.patch("/{course_id}/sections/{section_id}", response_model=SectionOut)
async def update_section(
    course_id: UUID,
    section_id: UUID,
    payload: SectionUpdate,
    _admin: User = Depends(require_admin),
    session: AsyncSession = Depends(get_db),
) -> SectionOut:
    course = await _load_course(session, course_id)
    section = next((s for s in course.sections if s.id == section_id), None)
    if section is None:
        raise NotFoundError("Section")

    if "name" in payload.model_fields_set and payload.name is not None:
        if _name_taken(course, payload.name, ignore=section.id):
            raise ConflictError("Section name already exists for this course")
        section.name = payload.name
    if "instructor_id" in payload.model_fields_set:
        await _check_instructor(session, payload.instructor_id)
        section.instructor_id = payload.instructor_id

    await session.commit()
    course = await _load_course(session, course_id)
    return SectionOut.model_validate(next(s for s in course.sections if s.id == section_id))


@router.delete("/{course_id}/sections/{section_id}", response_model=Message)
async def remove_section(
    course_id: UUID,
    section_id: UUID,
    _admin: User = Depends(require_admin),
    session: AsyncSession = Depends(get_db),
) -> Message:
    course = await _load_course(session, course_id)
    section = next((s for s in course.sections if s.id == section_id), None)
    if section is None:
        raise NotFoundError("Section")
    course.sections.remove(section)
    await session.commit()
    return Message(message="Section removed")
