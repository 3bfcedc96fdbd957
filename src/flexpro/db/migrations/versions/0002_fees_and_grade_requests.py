"""Fee invoices, fee payments and grade-change requests

Revision ID: 0002_fees_and_grade_requests
Revises: 0001_initial_schema
Create Date: 2026-10-19
"""
from __future__ import annotations

from alembic import op
import sqlalchemy as sa

from flexpro.db.base import GUID

# ---- Alembic identifiers ----
revision = "0002_fees_and_grade_requests"
down_revision = "0001_initial_schema"
branch_labels = None
depends_on = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    ]


def _fk(column: str, target: str, *, nullable: bool = False, ondelete: str = "CASCADE") -> sa.Column:
    return sa.Column(column, GUID(), sa.ForeignKey(target, ondelete=ondelete), nullable=nullable)


def upgrade() -> None:
    op.create_table(
        "fee_invoices",
        sa.Column("id", GUID(), primary_key=True),
        _fk("user_id", "users.id"),
        _fk("term_id", "terms.id", nullable=True, ondelete="SET NULL"),
        sa.Column("description", sa.String(120), nullable=False),
        sa.Column("amount", sa.Float, nullable=False),
        sa.Column("due_date", sa.Date, nullable=False),
        sa.Column("status", sa.String(16), nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_fee_invoices_user_id", "fee_invoices", ["user_id"])

    op.create_table(
        "fee_payments",
        sa.Column("id", GUID(), primary_key=True),
        _fk("user_id", "users.id"),
        _fk("invoice_id", "fee_invoices.id"),
        sa.Column("amount", sa.Float, nullable=False),
        sa.Column("method", sa.String(32), nullable=False),
        sa.Column("reference", sa.String(64), nullable=False),
        *_timestamps(),
        sa.UniqueConstraint("reference", name="uq_fee_payments_reference"),
    )
    op.create_index("ix_fee_payments_invoice_id", "fee_payments", ["invoice_id"])

    op.create_table(
        "grade_requests",
        sa.Column("id", GUID(), primary_key=True),
        _fk("user_id", "users.id"),
        _fk("course_id", "courses.id"),
        _fk("term_id", "terms.id"),
        sa.Column("current_grade", sa.String(4), nullable=False),
        sa.Column("requested_grade", sa.String(4), nullable=False),
        sa.Column("reason", sa.Text, nullable=False),
        sa.Column("status", sa.String(16), nullable=False),
        sa.Column("notes", sa.Text),
        sa.Column("reviewed_at", sa.DateTime(timezone=True)),
        _fk("reviewed_by", "users.id", nullable=True, ondelete="SET NULL"),
        *_timestamps(),
    )
    op.create_index("ix_grade_requests_user_id", "grade_requests", ["user_id"])


def downgrade() -> None:
    op.drop_index("ix_grade_requests_user_id", table_name="grade_requests")
    op.drop_table("grade_requests")
    op.drop_index("ix_fee_payments_invoice_id", table_name="fee_payments")
    op.drop_table("fee_payments")
    op.drop_index("ix_fee_invoices_user_id", table_name="fee_invoices")
    op.drop_table("fee_invoices")
