# src/flexpro/api/routers/attendance.py
from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from flexpro.auth.deps import require_student
from flexpro.db.models import Attendance, Enrollment, User, STATUS_DROPPED
from flexpro.db.session import get_db
from flexpro.schemas.attendance import AttendanceResponse
from flexpro.services.attendance import course_stats, overall_percentage

router = APIRouter(tags=["attendance"])


@router.get("/attendance", response_model=AttendanceResponse)
async def my_attendance(
    user: User = Depends(require_student),
    session: AsyncSession = Depends(get_db),
) -> AttendanceResponse:
    enrollments = (
        await session.execute(
            select(Enrollment)
            .where(Enrollment.user_id == user.id, Enrollment.status != STATUS_DROPPED)
            .options(selectinload(Enrollment.course))
        )
    ).scalars().all()
    records = (
        await session.execute(
            select(Attendance)
            .where(Attendance.user_id == user.id)
            .options(selectinload(Attendance.course))
            .order_by(Attendance.date.desc())
        )
    ).scalars().all()

    stats = course_stats(enrollments, records)

    return AttendanceResponse.model_validate(
        {
            "records": [
                {
                    "id": r.id,
                    "course_id": r.course_id,
                    "course_code": r.course.code,
                    "course_title": r.course.title,
                    "date": r.date,
                    "status": r.status,
                    "marked_by": r.marked_by,
                }
                for r in records
            ],
            "course_stats": stats,
            "summary": {
                "total_present": sum(s["present"] for s in stats),
                "total_classes": sum(s["total"] for s in stats),
                "overall_attendance": overall_percentage(stats),
            },
        }
    )
