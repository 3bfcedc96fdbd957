"""Initial portal schema

Revision ID: 0001_initial_schema
Revises:
Create Date: 2026-10-19
"""
from __future__ import annotations

from alembic import op
import sqlalchemy as sa

from flexpro.db.base import GUID

# ---- Alembic identifiers ----
revision = "0001_initial_schema"
down_revision = None
branch_labels = None
depends_on = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    ]


def _id() -> sa.Column:
    return sa.Column("id", GUID(), primary_key=True)


def _fk(column: str, target: str, *, nullable: bool = False, ondelete: str = "CASCADE") -> sa.Column:
    return sa.Column(column, GUID(), sa.ForeignKey(target, ondelete=ondelete), nullable=nullable)


def upgrade() -> None:
    op.create_table(
        "users",
        _id(),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("password_hash", sa.String(255)),
        sa.Column("first_name", sa.String(100), nullable=False),
        sa.Column("last_name", sa.String(100), nullable=False),
        sa.Column("role", sa.String(16), nullable=False),
        sa.Column("student_id", sa.String(32)),
        sa.Column("employee_id", sa.String(32)),
        sa.Column("program", sa.String(120)),
        sa.Column("department", sa.String(120)),
        sa.Column("semester", sa.Integer),
        sa.Column("section", sa.String(32)),
        sa.Column("cgpa", sa.Float, nullable=False),
        sa.Column("phone", sa.String(40)),
        sa.Column("address", sa.Text),
        sa.Column("bio", sa.Text),
        sa.Column("is_active", sa.Boolean, nullable=False),
        *_timestamps(),
        sa.UniqueConstraint("email", name="uq_users_email"),
        sa.UniqueConstraint("student_id", name="uq_users_student_id"),
        sa.UniqueConstraint("employee_id", name="uq_users_employee_id"),
    )

    op.create_table(
        "terms",
        _id(),
        sa.Column("name", sa.String(64), nullable=False),
        sa.Column("season", sa.String(16)),
        sa.Column("year", sa.Integer),
        sa.Column("start_date", sa.Date, nullable=False),
        sa.Column("end_date", sa.Date, nullable=False),
        sa.Column("is_active", sa.Boolean, nullable=False),
        *_timestamps(),
        sa.UniqueConstraint("name", name="uq_terms_name"),
    )

    op.create_table(
        "courses",
        _id(),
        sa.Column("code", sa.String(32), nullable=False),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("description", sa.Text),
        sa.Column("credit_hours", sa.Integer, nullable=False),
        sa.Column("department", sa.String(120), nullable=False),
        sa.Column("semester", sa.Integer, nullable=False),
        sa.Column("prerequisite", sa.String(255)),
        sa.Column("max_capacity", sa.Integer, nullable=False),
        sa.Column("is_active", sa.Boolean, nullable=False),
        *_timestamps(),
        sa.UniqueConstraint("code", name="uq_courses_code"),
    )

    op.create_table(
        "course_sections",
        _id(),
        _fk("course_id", "courses.id"),
        sa.Column("name", sa.String(32), nullable=False),
        _fk("instructor_id", "users.id", nullable=True, ondelete="SET NULL"),
        *_timestamps(),
        sa.UniqueConstraint("course_id", "name", name="uq_course_sections_course_name"),
    )

    op.create_table(
        "enrollments",
        _id(),
        _fk("user_id", "users.id"),
        _fk("course_id", "courses.id"),
        _fk("term_id", "terms.id"),
        sa.Column("status", sa.String(16), nullable=False),
        *_timestamps(),
        sa.UniqueConstraint("user_id", "course_id", "term_id", name="uq_enrollments_user_course_term"),
    )

    op.create_table(
        "student_marks",
        _id(),
        _fk("enrollment_id", "enrollments.id"),
        *[
            sa.Column(name, sa.Float, nullable=False)
            for name in (
                "assignment1", "assignment2",
                "quiz1", "quiz2", "quiz3", "quiz4",
                "mid1", "mid2", "final_exam", "grace_marks",
            )
        ],
        sa.Column("total", sa.Float),
        *_timestamps(),
        sa.UniqueConstraint("enrollment_id", name="uq_student_marks_enrollment_id"),
    )

    op.create_table(
        "transcripts",
        _id(),
        _fk("user_id", "users.id"),
        _fk("course_id", "courses.id"),
        _fk("term_id", "terms.id"),
        sa.Column("grade", sa.String(4), nullable=False),
        sa.Column("grade_points", sa.Float, nullable=False),
        sa.Column("status", sa.String(16), nullable=False),
        *_timestamps(),
        sa.UniqueConstraint(
            "user_id", "course_id", "term_id", "status",
            name="uq_transcripts_user_course_term_status",
        ),
    )

    op.create_table(
        "attendance",
        _id(),
        _fk("user_id", "users.id"),
        _fk("course_id", "courses.id"),
        _fk("term_id", "terms.id"),
        sa.Column("date", sa.Date, nullable=False),
        sa.Column("status", sa.String(16), nullable=False),
        _fk("marked_by", "users.id", nullable=True, ondelete="SET NULL"),
        *_timestamps(),
        sa.UniqueConstraint("user_id", "course_id", "term_id", "date", name="uq_attendance_user_course_term_date"),
    )

    op.create_table(
        "notifications",
        _id(),
        _fk("user_id", "users.id", nullable=True),
        sa.Column("is_global", sa.Boolean, nullable=False),
        sa.Column("title", sa.String(120), nullable=False),
        sa.Column("message", sa.Text, nullable=False),
        sa.Column("type", sa.String(16), nullable=False),
        sa.Column("is_read", sa.Boolean, nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_notifications_user_id", "notifications", ["user_id"])

    op.create_table(
        "portal_settings",
        sa.Column("id", sa.Integer, primary_key=True),
        sa.Column("maintenance_mode", sa.Boolean, nullable=False),
        sa.Column("enrollment_status", sa.String(16), nullable=False),
        sa.Column("support_email", sa.String(255), nullable=False),
        sa.Column("broadcast_message", sa.Text, nullable=False),
        sa.Column("session_timeout_minutes", sa.Integer, nullable=False),
        *_timestamps(),
    )


def downgrade() -> None:
    op.drop_table("portal_settings")
    op.drop_index("ix_notifications_user_id", table_name="notifications")
    op.drop_table("notifications")
    op.drop_table("attendance")
    op.drop_table("transcripts")
    op.drop_table("student_marks")
    op.drop_table("enrollments")
    op.drop_table("course_sections")
    op.drop_table("courses")
    op.drop_table("terms")
    op.drop_table("users")
