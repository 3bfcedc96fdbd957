from __future__ import annotations

import datetime as dt
from typing import Literal, Optional
from uuid import UUID

from pydantic import Field

from .base import APIModel

AttendanceStatus = Literal["present", "absent", "late"]


class AttendanceRecord(APIModel):
    id: UUID
    course_id: UUID
    course_code: str
    course_title: str
    date: dt.date
    status: str
    marked_by: Optional[UUID] = None


class CourseAttendanceStat(APIModel):
    course_id: UUID
    course_code: str
    present: int
    total: int
    percentage: Optional[float] = None


class AttendanceSummary(APIModel):
    total_present: int
    total_classes: int
    overall_attendance: Optional[float] = None


class AttendanceResponse(APIModel):
    records: list[AttendanceRecord]
    course_stats: list[CourseAttendanceStat]
    summary: AttendanceSummary


class AttendanceEntry(APIModel):
    user_id: UUID
    status: AttendanceStatus


class AttendanceMark(APIModel):
    course_id: UUID
    term_id: UUID
    date: dt.date
    section_id: Optional[str] = None
    entries: list[AttendanceEntry] = Field(default_factory=list)


class AttendanceMarkResponse(APIModel):
    message: str
    saved: int
    ignored: int


class SessionAttendance(APIModel):
    user_id: UUID
    status: str


class SessionAttendanceResponse(APIModel):
    date: dt.date
    records: list[SessionAttendance]


class AttendanceHistoryItem(APIModel):
    date: dt.date
    status: str


class LowAttendanceStudent(APIModel):
    user_id: UUID
    student_id: Optional[str] = None
    first_name: str
    last_name: str
    email: str
    section: Optional[str] = None
    attended_sessions: int
    total_sessions: int
    percentage: float
    history: list[AttendanceHistoryItem]


class LowAttendanceResponse(APIModel):
    threshold: float
    students: list[LowAttendanceStudent]
