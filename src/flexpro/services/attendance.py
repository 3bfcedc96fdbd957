# src/flexpro/services/attendance.py
from __future__ import annotations

import uuid
from typing import Iterable, Optional, Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from flexpro.db.models import Attendance, Enrollment

ATTENDED = ("present", "late")


def percentage(present: int, total: int) -> Optional[float]:
    # one decimal place, None when nothing was recorded
    return round(present / total * 100, 1) if total else None


async def course_attendance(session: AsyncSession, course_id: uuid.UUID, term_id: uuid.UUID) -> list[Attendance]:
    rows = await session.execute(
        select(Attendance)
        .where(Attendance.course_id == course_id, Attendance.term_id == term_id)
        .order_by(Attendance.date.desc())
    )
    return list(rows.scalars().all())


def course_stats(enrollments: Iterable[Enrollment], records: Sequence[Attendance]) -> list[dict]:
    """Present/total per enrolled course (each course once), from one student's records."""
    stats = []
    seen = set()
    for en in enrollments:
        if en.course_id in seen:
            continue
        seen.add(en.course_id)
        entries = [r for r in records if r.course_id == en.course_id]
        present = sum(1 for r in entries if r.status == "present")
        stats.append(
            {
                "course_id": en.course_id,
                "course_code": en.course.code,
                "present": present,
                "total": len(entries),
                "percentage": percentage(present, len(entries)),
            }
        )
    return stats


def overall_percentage(stats: Iterable[dict]) -> Optional[float]:
    stats = list(stats)
    return percentage(sum(s["present"] for s in stats), sum(s["total"] for s in stats))


def low_attendance(
    population: Sequence[Enrollment],
    records: Iterable[Attendance],
    threshold: float,
) -> list[dict]:
    """
    Students in `population` whose attended share is below `threshold` percent.

    A class session is any date with at least one record for the course/term,
    so a student with no record on a session date counts as absent for it.
    Present and late both count as attended. Lowest percentage first.
    """
    records = list(records)
    sessions = {r.date for r in records}
    if not sessions:
        return []

    by_user: dict[uuid.UUID, list[Attendance]] = {}
    for r in records:
        by_user.setdefault(r.user_id, []).append(r)

    out = []
    for en in population:
        history = sorted(by_user.get(en.user_id, []), key=lambda r: r.date, reverse=True)
        attended = sum(1 for r in history if r.status in ATTENDED)
        pct = percentage(attended, len(sessions))
        if pct >= threshold:
            continue
        out.append(
            {
                "user_id": en.user_id,
                "student_id": en.user.student_id,
                "first_name": en.user.first_name,
                "last_name": en.user.last_name,
                "email": en.user.email,
                "section": en.user.section,
                "attended_sessions": attended,
                "total_sessions": len(sessions),
                "percentage": pct,
                "history": [{"date": r.date, "status": r.status} for r in history],
            }
        )
    out.sort(key=lambda s: s["percentage"])
    return out
