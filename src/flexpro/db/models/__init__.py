# src/flexpro/db/models/__init__.py
# Importing this package registers every mapped class on Base.metadata.
from .users import User, ROLES, ROLE_ADMIN, ROLE_FACULTY, ROLE_STUDENT
from .terms import Term
from .courses import Course, CourseSection
from .enrollments import (
    Enrollment,
    StudentMark,
    ENROLLMENT_STATUSES,
    STATUS_COMPLETED,
    STATUS_DROPPED,
    STATUS_ENROLLED,
)
from .transcripts import Transcript, TRANSCRIPT_FINAL
from .attendance import Attendance, ATTENDANCE_STATUSES
from .notifications import Notification, NOTIFICATION_TYPES
from .fees import (
    FeeInvoice,
    FeePayment,
    INVOICE_PAID,
    INVOICE_PENDING,
    INVOICE_STATUSES,
    OUTSTANDING_STATUSES,
    TUITION_FEE,
)
from .grade_requests import GradeRequest, REQUEST_PENDING, REQUEST_APPROVED, REQUEST_REJECTED, REQUEST_STATUSES
from .portal_settings import PortalSettingsRow, SETTINGS_ROW_ID

__all__ = [
    "User", "ROLES", "ROLE_ADMIN", "ROLE_FACULTY", "ROLE_STUDENT",
    "Term",
    "Course", "CourseSection",
    "Enrollment", "StudentMark", "ENROLLMENT_STATUSES", "STATUS_COMPLETED", "STATUS_DROPPED", "STATUS_ENROLLED",
    "Transcript", "TRANSCRIPT_FINAL",
    "Attendance", "ATTENDANCE_STATUSES",
    "Notification", "NOTIFICATION_TYPES",
    "FeeInvoice", "FeePayment", "INVOICE_PAID", "INVOICE_PENDING", "INVOICE_STATUSES", "OUTSTANDING_STATUSES", "TUITION_FEE",
    "GradeRequest", "REQUEST_PENDING", "REQUEST_APPROVED", "REQUEST_REJECTED", "REQUEST_STATUSES",
    "PortalSettingsRow", "SETTINGS_ROW_ID",
]
