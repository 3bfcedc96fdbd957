from __future__ import annotations

from datetime import datetime
from typing import Optional
from uuid import UUID

from .base import APIModel


class TranscriptRecord(APIModel):
    id: UUID
    course_code: str
    course_title: str
    credit_hours: int
    grade: str
    grade_points: float
    term_id: UUID
    term: Optional[str] = None
    created_at: Optional[datetime] = None


class TranscriptSummary(APIModel):
    cgpa: Optional[float] = None
    total_credit_hours: float
    courses_completed: int
    term_count: int


class TermStat(APIModel):
    term_id: UUID
    term: Optional[str] = None
    credits: float
    gpa: float


class TranscriptResponse(APIModel):
    records: list[TranscriptRecord]
    summary: TranscriptSummary
    terms: list[str]
    term_stats: list[TermStat]
