# src/flexpro/api/routers/faculty_attendance.py
from __future__ import annotations

import datetime as dt
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from flexpro.app_logger import get_logger
from flexpro.auth.deps import require_faculty
from flexpro.core.config import settings
from flexpro.db.models import Attendance, User
from flexpro.db.session import get_db
from flexpro.errors import NotFoundError
from flexpro.grading.gradebook import SectionNotFound, select_population
from flexpro.schemas.attendance import (
    AttendanceMark,
    AttendanceMarkResponse,
    LowAttendanceResponse,
    SessionAttendanceResponse,
)
from flexpro.services.attendance import course_attendance, low_attendance
from flexpro.services.teaching import course_enrollments, load_owned_course

router = APIRouter(prefix="/faculty/attendance", tags=["faculty"])
log = get_logger("routers.faculty_attendance")


@router.get("", response_model=SessionAttendanceResponse)
async def attendance_for_date(
    course_id: UUID = Query(...),
    term_id: UUID = Query(...),
    date: Optional[dt.date] = Query(default=None, description="Defaults to today"),
    section_id: Optional[str] = Query(default=None),
    user: User = Depends(require_faculty),
    session: AsyncSession = Depends(get_db),
) -> SessionAttendanceResponse:
    course = await load_owned_course(session, user, course_id)
    day = date or dt.date.today()
    try:
        population = select_population(await course_enrollments(session, course.id, term_id), course.sections, section_id)
    except SectionNotFound:
        raise NotFoundError("Section")
    students = {en.user_id for en in population}

    rows = (
        await session.execute(
            select(Attendance).where(
                Attendance.course_id == course.id,
                Attendance.term_id == term_id,
                Attendance.date == day,
            )
        )
    ).scalars().all()
    return SessionAttendanceResponse(
        date=day,
        records=[{"user_id": r.user_id, "status": r.status} for r in rows if r.user_id in students],
    )


@router.post("", response_model=AttendanceMarkResponse)
async def mark_attendance(
    payload: AttendanceMark,
    user: User = Depends(require_faculty),
    session: AsyncSession = Depends(get_db),
) -> AttendanceMarkResponse:
    """Upsert one date's attendance; entries for students outside the selected population are ignored."""
    course = await load_owned_course(session, user, payload.course_id)
    try:
        population = select_population(
            await course_enrollments(session, course.id, payload.term_id), course.sections, payload.section_id
        )
    except SectionNotFound:
        raise NotFoundError("Section")
    students = {en.user_id for en in population}

    existing = {
        r.user_id: r
        for r in (
            await session.execute(
                select(Attendance).where(
                    Attendance.course_id == course.id,
                    Attendance.term_id == payload.term_id,
                    Attendance.date == payload.date,
                )
            )
        ).scalars().all()
    }

    saved = 0
    for entry in payload.entries:
        if entry.user_id not in students:
            continue
        row = existing.get(entry.user_id)
        if row is None:
            row = Attendance(
                user_id=entry.user_id,
                course_id=course.id,
                term_id=payload.term_id,
                date=payload.date,
                status=entry.status,
                marked_by=user.id,
            )
            session.add(row)
            existing[entry.user_id] = row
        else:
            row.status = entry.status
            row.marked_by = user.id
        saved += 1

    await session.commit()
    log.info("attendance saved course=%s date=%s saved=%d", course.code, payload.date, saved)
    return AttendanceMarkResponse(message="Attendance saved", saved=saved, ignored=len(payload.entries) - saved)


@router.get("/low-attendance", response_model=LowAttendanceResponse)
async def low_attendance_report(
    course_id: UUID = Query(...),
    term_id: UUID = Query(...),
    section_id: Optional[str] = Query(default=None),
    user: User = Depends(require_faculty),
    session: AsyncSession = Depends(get_db),
) -> LowAttendanceResponse:
    """Students in the selected population attending less than the configured threshold of sessions."""
    course = await load_owned_course(session, user, course_id)
    try:
        population = select_population(await course_enrollments(session, course.id, term_id), course.sections, section_id)
    except SectionNotFound:
        raise NotFoundError("Section")

    threshold = settings.LOW_ATTENDANCE_THRESHOLD
    students = low_attendance(population, await course_attendance(session, course.id, term_id), threshold)
    return LowAttendanceResponse.model_validate({"threshold": threshold, "students": students})
