# src/flexpro/api/routers/__init__.py
from . import (
    admin_courses,
    admin_notifications,
    admin_settings,
    admin_terms,
    admin_users,
    attendance,
    dashboard,
    enrollment,
    faculty_attendance,
    faculty_marks,
    fees,
    grade_requests,
    health,
    notifications,
    profile,
    student_marks,
    transcript,
)

ALL_ROUTERS = [
    health.router,
    dashboard.router,
    profile.router,
    enrollment.router,
    student_marks.router,
    transcript.router,
    attendance.router,
    fees.router,
    grade_requests.router,
    notifications.router,
    faculty_marks.router,
    faculty_attendance.router,
    admin_terms.router,
    admin_courses.router,
    admin_users.router,
    admin_settings.router,
    admin_notifications.router,
]
