from __future__ import annotations

from datetime import datetime
from typing import Literal, Optional
from uuid import UUID

from pydantic import Field, field_validator

from flexpro.grading.scale import DEFAULT_GRADE_POINTS, normalize_letter

from .base import APIModel

ReviewStatus = Literal["pending", "approved", "rejected"]


class GradeRequestCreate(APIModel):
    course_id: UUID
    term_id: UUID
    requested_grade: str = Field(..., max_length=4)
    reason: str = Field(..., min_length=10, max_length=2000)

    @field_validator("requested_grade")
    @classmethod
    def known_letter(cls, v: str) -> str:
        letter = normalize_letter(v)
        if letter not in DEFAULT_GRADE_POINTS:
            raise ValueError(f"Unknown grade {letter!r}")
        return letter

    @field_validator("reason")
    @classmethod
    def strip_reason(cls, v: str) -> str:
        v = v.strip()
        if len(v) < 10:
            raise ValueError("Please explain the request in at least 10 characters")
        return v


class GradeRequestReview(APIModel):
    status: ReviewStatus
    notes: Optional[str] = Field(default=None, max_length=2000)

    @field_validator("notes")
    @classmethod
    def blank_notes(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        return v.strip() or None


class GradeRequestOut(APIModel):
    id: UUID
    user_id: UUID
    student_id: Optional[str] = None
    student_name: Optional[str] = None
    student_section: Optional[str] = None
    course_id: UUID
    course_code: str
    course_title: str
    term_id: UUID
    term: Optional[str] = None
    current_grade: str
    requested_grade: str
    reason: str
    status: str
    notes: Optional[str] = None
    submitted_at: datetime
    reviewed_at: Optional[datetime] = None


class GradeRequestSummary(APIModel):
    total: int
    pending: int
    approved: int
    rejected: int


class GradeRequestList(APIModel):
    grade_requests: list[GradeRequestOut]
    summary: GradeRequestSummary


class GradeRequestSaved(APIModel):
    message: str
    grade_request: GradeRequestOut
