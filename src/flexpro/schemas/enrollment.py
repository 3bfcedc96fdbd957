from __future__ import annotations

from typing import Optional
from uuid import UUID

from .base import APIModel
from .courses import SectionOut, InstructorOut
from .terms import TermOut


class EnrollRequest(APIModel):
    course_id: UUID


class CatalogCourse(APIModel):
    id: UUID
    code: str
    title: str
    credit_hours: int
    prerequisite: Optional[str] = None
    department: str
    semester: int
    enrolled: int
    capacity: int
    available: bool
    already_enrolled: bool
    matches_student_section: bool
    student_section: Optional[str] = None
    sections: list[SectionOut]


class CatalogSummary(APIModel):
    available_count: int
    current_credits: int
    credit_limit: int
    enrolled_count: int


class CatalogResponse(APIModel):
    term: TermOut
    courses: list[CatalogCourse]
    departments: list[str]
    summary: CatalogSummary


class EnrollmentOut(APIModel):
    id: UUID
    course_id: UUID
    term_id: UUID
    status: str


class EnrollResponse(APIModel):
    message: str
    enrollment: EnrollmentOut


class MyCourse(APIModel):
    enrollment_id: UUID
    status: str
    course_id: UUID
    code: str
    title: str
    credit_hours: int
    department: str
    term: TermOut
    section: Optional[str] = None
    instructor: Optional[InstructorOut] = None
