# src/flexpro/api/routers/transcript.py
from __future__ import annotations

from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from flexpro.auth.deps import require_student
from flexpro.db.models import Transcript, User, ROLE_ADMIN
from flexpro.db.session import get_db
from flexpro.errors import ForbiddenError, NotFoundError
from flexpro.grading.gpa import GradedCredit, compute_cgpa, summarize_terms, total_credits
from flexpro.schemas.transcript import TranscriptResponse

router = APIRouter(tags=["transcript"])


@router.get("/transcript", response_model=TranscriptResponse)
async def get_transcript(
    user_id: Optional[UUID] = Query(default=None, description="Admins only: whose transcript to load"),
    user: User = Depends(require_student),
    session: AsyncSession = Depends(get_db),
) -> TranscriptResponse:
    target_id = user.id
    if user_id is not None and user_id != user.id:
        if user.role != ROLE_ADMIN:
            raise ForbiddenError()
        if await session.get(User, user_id) is None:
            raise NotFoundError("Student")
        target_id = user_id

    rows = (
        await session.execute(
            select(Transcript)
            .where(Transcript.user_id == target_id)
            .options(selectinload(Transcript.course), selectinload(Transcript.term))
            .order_by(Transcript.created_at.desc())
        )
    ).scalars().all()

    records = [
        {
            "id": t.id,
            "course_code": t.course.code,
            "course_title": t.course.title,
            "credit_hours": t.course.credit_hours,
            "grade": t.grade,
            "grade_points": t.grade_points,
            "term_id": t.term_id,
            "term": t.term.name if t.term else None,
            "created_at": t.created_at,
        }
        for t in rows
    ]
    credits = [
        GradedCredit(
            term_id=r["term_id"],
            term_name=r["term"],
            grade_points=r["grade_points"],
            credit_hours=r["credit_hours"],
        )
        for r in records
    ]
    term_names: list[str] = []
    for r in records:
        if r["term"] and r["term"] not in term_names:
            term_names.append(r["term"])

    return TranscriptResponse.model_validate(
        {
            "records": records,
            "summary": {
                "cgpa": compute_cgpa(credits),
                "total_credit_hours": total_credits(credits),
                "courses_completed": len(records),
                "term_count": len(term_names),
            },
            "terms": term_names,
            "term_stats": [
                {"term_id": s.term_id, "term": s.term_name, "credits": s.credits, "gpa": s.gpa}
                for s in summarize_terms(credits)
            ],
        }
    )
