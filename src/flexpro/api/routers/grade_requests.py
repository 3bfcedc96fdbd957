# src/flexpro/api/routers/grade_requests.py
from __future__ import annotations

from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from flexpro.auth.deps import require_faculty, require_student
from flexpro.db.models import User
from flexpro.db.session import get_db
from flexpro.schemas.grade_requests import (
    GradeRequestCreate,
    GradeRequestList,
    GradeRequestReview,
    GradeRequestSaved,
    ReviewStatus,
)
from flexpro.services import grade_requests as requests_svc

router = APIRouter(tags=["grade-requests"])


# ---------- Student ----------

@router.get("/grade-requests", response_model=GradeRequestList)
async def my_grade_requests(
    user: User = Depends(require_student),
    session: AsyncSession = Depends(get_db),
) -> GradeRequestList:
    return GradeRequestList.model_validate(requests_svc.listing(await requests_svc.student_requests(session, user)))


@router.post("/grade-requests", response_model=GradeRequestSaved, status_code=status.HTTP_201_CREATED)
async def file_grade_request(
    payload: GradeRequestCreate,
    user: User = Depends(require_student),
    session: AsyncSession = Depends(get_db),
) -> GradeRequestSaved:
    req = await requests_svc.submit(session, user, payload)
    return GradeRequestSaved.model_validate(
        {"message": "Grade request submitted", "grade_request": requests_svc.request_row(req)}
    )


# ---------- Faculty ----------

@router.get("/faculty/grade-requests", response_model=GradeRequestList, tags=["faculty"])
async def grade_requests_to_review(
    status_filter: Optional[ReviewStatus] = Query(default=None, alias="status"),
    user: User = Depends(require_faculty),
    session: AsyncSession = Depends(get_db),
) -> GradeRequestList:
    rows = await requests_svc.reviewable_requests(session, user, status_filter)
    return GradeRequestList.model_validate(requests_svc.listing(rows))


@router.patch("/faculty/grade-requests/{request_id}", response_model=GradeRequestSaved, tags=["faculty"])
async def review_grade_request(
    request_id: UUID,
    payload: GradeRequestReview,
    user: User = Depends(require_faculty),
    session: AsyncSession = Depends(get_db),
) -> GradeRequestSaved:
    req = await requests_svc.review(session, user, request_id, payload.status, payload.notes)
    return GradeRequestSaved.model_validate(
        {"message": "Grade request updated", "grade_request": requests_svc.request_row(req)}
    )
