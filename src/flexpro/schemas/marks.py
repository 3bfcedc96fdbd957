from __future__ import annotations

from typing import Optional
from uuid import UUID

from pydantic import Field, field_validator, model_validator

from flexpro.grading.scale import DEFAULT_GRADE_POINTS, normalize_letter

from .base import APIModel


class Stat(APIModel):
    min: float = 0.0
    max: float = 0.0
    avg: float = 0.0


class MarksOut(APIModel):
    assignment1: float = 0.0
    assignment2: float = 0.0
    quiz1: float = 0.0
    quiz2: float = 0.0
    quiz3: float = 0.0
    quiz4: float = 0.0
    mid1: float = 0.0
    mid2: float = 0.0
    final_exam: float = 0.0
    grace_marks: float = 0.0
    total: Optional[float] = None


class StudentCourseMarks(APIModel):
    enrollment_id: UUID
    course_code: str
    course_title: str
    term_name: str
    marks: Optional[MarksOut] = None
    stats: dict[str, Stat]


class StudentMarksResponse(APIModel):
    marks: list[StudentCourseMarks]


class GradebookRow(APIModel):
    enrollment_id: UUID
    user_id: UUID
    student_id: Optional[str] = None
    first_name: str
    last_name: str
    section: Optional[str] = None
    status: str
    marks: Optional[MarksOut] = None
    grade: Optional[str] = None
    grade_points: Optional[float] = None


class GradebookResponse(APIModel):
    course_id: UUID
    term_id: UUID
    section_id: Optional[str] = None
    rows: list[GradebookRow]
    stats: dict[str, Stat]


class MarkEntry(APIModel):
    user_id: UUID
    assignment1: Optional[float] = Field(default=None, ge=0)
    assignment2: Optional[float] = Field(default=None, ge=0)
    quiz1: Optional[float] = Field(default=None, ge=0)
    quiz2: Optional[float] = Field(default=None, ge=0)
    quiz3: Optional[float] = Field(default=None, ge=0)
    quiz4: Optional[float] = Field(default=None, ge=0)
    mid1: Optional[float] = Field(default=None, ge=0)
    mid2: Optional[float] = Field(default=None, ge=0)
    final_exam: Optional[float] = Field(default=None, ge=0)
    grace_marks: Optional[float] = Field(default=None, ge=0)


class MarksUpsert(APIModel):
    course_id: UUID
    term_id: UUID
    section_id: Optional[str] = None
    entries: list[MarkEntry] = Field(default_factory=list)


class MarksUpsertResponse(APIModel):
    message: str
    updated: int
    ignored: int


class GradeEntry(APIModel):
    user_id: UUID
    grade: str = Field(..., min_length=1, max_length=4)
    grade_points: Optional[float] = Field(default=None, ge=0, le=4)

    @field_validator("grade")
    @classmethod
    def normalize_grade(cls, v: str) -> str:
        return normalize_letter(v)

    @model_validator(mode="after")
    def known_letter_or_points(self):
        if self.grade_points is None and self.grade not in DEFAULT_GRADE_POINTS:
            raise ValueError(f"Unknown grade {self.grade!r}; provide grade_points for it")
        return self


class GradesSubmit(APIModel):
    course_id: UUID
    term_id: UUID
    entries: list[GradeEntry] = Field(default_factory=list)


class GradesSubmitResponse(APIModel):
    message: str
    saved: int


class FinalizeRequest(APIModel):
    course_id: UUID
    term_id: UUID
    section_id: Optional[str] = None


class FinalizeDetail(APIModel):
    user_id: str
    created: bool
    grade: str


class FinalizeResponse(APIModel):
    message: str
    processed: int
    skipped: int
    details: list[FinalizeDetail]
