# migrations/versions/20261019_0001_financial_reports.py
"""Create financial_reports and financial_report_lines tables."""

from __future__ import annotations

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

# Revision identifiers, used by Alembic.
revision = "20261019_0001_financial_reports"
down_revision = None
branch_labels = None
depends_on = None

_JSON = sa.JSON().with_variant(postgresql.JSONB(astext_type=sa.Text()), "postgresql")


def upgrade() -> None:
    op.create_table(
        "financial_reports",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("cooperative_id", sa.Integer(), nullable=False),
        sa.Column("report_type", sa.String(length=64), nullable=False),
        sa.Column("reporting_year", sa.Integer(), nullable=False),
        sa.Column("reporting_period", sa.String(length=16), nullable=False),
        sa.Column("status", sa.String(length=16), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("attributes", _JSON, nullable=False),
        sa.Column("created_by", sa.Integer(), nullable=False),
        sa.Column("submitted_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("submitted_by", sa.Integer(), nullable=True),
        sa.Column("approved_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("approved_by", sa.Integer(), nullable=True),
        sa.Column("rejected_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("rejected_by", sa.Integer(), nullable=True),
        sa.Column("rejection_reason", sa.Text(), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.Column("version", sa.Integer(), nullable=False, server_default="1"),
        sa.PrimaryKeyConstraint("id", name="pk_financial_reports"),
        sa.UniqueConstraint(
            "cooperative_id",
            "report_type",
            "reporting_year",
            name="uq_financial_reports_cooperative_type_year",
        ),
        sa.CheckConstraint(
            "status IN ('draft', 'submitted', 'approved', 'rejected')",
            name="ck_financial_reports_status_valid",
        ),
    )
    op.create_index(
        "ix_financial_reports_cooperative_id",
        "financial_reports",
        ["cooperative_id"],
    )
    op.create_index(
        "ix_financial_reports_cooperative_status",
        "financial_reports",
        ["cooperative_id", "status"],
    )

    op.create_table(
        "financial_report_lines",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("report_id", sa.Integer(), nullable=False),
        sa.Column("line_no", sa.Integer(), nullable=False),
        sa.Column("data", _JSON, nullable=False),
        sa.PrimaryKeyConstraint("id", name="pk_financial_report_lines"),
        sa.ForeignKeyConstraint(
            ["report_id"],
            ["financial_reports.id"],
            name="fk_financial_report_lines_report_id_financial_reports",
            ondelete="CASCADE",
        ),
        sa.UniqueConstraint(
            "report_id", "line_no", name="uq_financial_report_lines_report_line"
        ),
    )
    op.create_index(
        "ix_financial_report_lines_report_id",
        "financial_report_lines",
        ["report_id"],
    )


def downgrade() -> None:
    op.drop_index("ix_financial_report_lines_report_id", table_name="financial_report_lines")
    op.drop_table("financial_report_lines")
    op.drop_index("ix_financial_reports_cooperative_status", table_name="financial_reports")
    op.drop_index("ix_financial_reports_cooperative_id", table_name="financial_reports")
    op.drop_table("financial_reports")
