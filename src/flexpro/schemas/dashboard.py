from __future__ import annotations

import datetime as dt
from typing import Optional
from uuid import UUID

from .attendance import CourseAttendanceStat
from .base import APIModel
from .notifications import NotificationOut


class TermRef(APIModel):
    id: UUID
    name: str


class Activity(APIModel):
    type: str
    title: str
    description: str
    timestamp: dt.datetime


# ---------- Student ----------

class CurrentCourse(APIModel):
    course_id: UUID
    code: str
    title: str
    credit_hours: int
    department: str
    status: str


class RecentGrade(APIModel):
    course_code: str
    course_title: str
    grade: str
    grade_points: float
    term: Optional[str] = None
    created_at: Optional[dt.datetime] = None


class Deadline(APIModel):
    title: str
    date: dt.date
    type: str


class StudentDashboard(APIModel):
    term: Optional[TermRef] = None
    current_courses: list[CurrentCourse]
    current_credit_hours: int
    cgpa: Optional[float] = None
    completed_credit_hours: float
    recent_grades: list[RecentGrade]
    attendance_rate: Optional[float] = None
    attendance_by_course: list[CourseAttendanceStat]
    deadlines: list[Deadline]
    notifications: list[NotificationOut]
    unread_notifications: int


# ---------- Faculty ----------

class FacultySummary(APIModel):
    total_courses: int
    total_students: int
    pending_attendance: int
    pending_grades: int


class FacultyCourseStat(APIModel):
    course_id: UUID
    code: str
    title: str
    term: Optional[str] = None
    students: int
    attendance_rate: Optional[float] = None
    average_grade_points: Optional[float] = None


class FacultyDashboard(APIModel):
    summary: FacultySummary
    courses: list[FacultyCourseStat]
    recent_activity: list[Activity]


# ---------- Admin ----------

class AdminSummary(APIModel):
    total_students: int
    total_faculty: int
    total_admins: int
    total_courses: int
    total_enrollments: int
    active_term_enrollments: int
    pending_grade_requests: int


class RecentCourse(APIModel):
    id: UUID
    code: str
    title: str
    department: str
    created_at: Optional[dt.datetime] = None


class AdminDashboard(APIModel):
    summary: AdminSummary
    active_term: Optional[TermRef] = None
    recent_courses: list[RecentCourse]
    recent_activity: list[Activity]
