# src/coopledger/infrastructure/database/models/financial_reports.py
# Copyright (c)
# SPDX-License-Identifier: MIT
"""Financial report models.

Purpose:
    Persistence shape for report headers and their line items.

Layer:
    infrastructure

Notes:
    - One header row per (cooperative_id, report_type, reporting_year),
      enforced by ``uq_financial_reports_cooperative_type_year``.
    - Payload-level scalars (beginning cash, total SHU, budget type, ...)
      live in the header's ``attributes`` JSON document; each line item is
      one row whose ``data`` JSON document holds the line's fields.
    - Lines are deleted with their header (``ON DELETE CASCADE``).
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from sqlalchemy import (
    CheckConstraint,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.types import DateTime

from coopledger.infrastructure.database.models.base import (
    Base,
    JSONDocument,
    OptimisticLockingMixin,
    TimestampMixin,
)


class FinancialReportModel(Base, TimestampMixin, OptimisticLockingMixin):
    """Report header row.

    Attributes:
        id: Surrogate primary key.
        cooperative_id: Owning cooperative.
        report_type: Report kind (enum value).
        reporting_year: Fiscal year covered.
        reporting_period: ``Q1``..``Q4`` or ``annual``.
        status: Lifecycle status (enum value).
        notes: Free-form notes.
        attributes: Payload-level scalar fields as a JSON object.
        created_by: Creating actor.
        submitted_at/submitted_by: Submission stamp.
        approved_at/approved_by: Approval stamp.
        rejected_at/rejected_by/rejection_reason: Rejection stamp.
    """

    __tablename__ = "financial_reports"
    __table_args__ = (
        UniqueConstraint(
            "cooperative_id",
            "report_type",
            "reporting_year",
            name="uq_financial_reports_cooperative_type_year",
        ),
        CheckConstraint(
            "status IN ('draft', 'submitted', 'approved', 'rejected')",
            name="status_valid",
        ),
        Index("ix_financial_reports_cooperative_status", "cooperative_id", "status"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    cooperative_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    report_type: Mapped[str] = mapped_column(String(length=64), nullable=False)
    reporting_year: Mapped[int] = mapped_column(Integer, nullable=False)
    reporting_period: Mapped[str] = mapped_column(String(length=16), nullable=False)
    status: Mapped[str] = mapped_column(String(length=16), nullable=False, default="draft")
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    attributes: Mapped[dict[str, Any]] = mapped_column(JSONDocument, nullable=False, default=dict)

    created_by: Mapped[int] = mapped_column(Integer, nullable=False)
    submitted_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    submitted_by: Mapped[int | None] = mapped_column(Integer, nullable=True)
    approved_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    approved_by: Mapped[int | None] = mapped_column(Integer, nullable=True)
    rejected_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    rejected_by: Mapped[int | None] = mapped_column(Integer, nullable=True)
    rejection_reason: Mapped[str | None] = mapped_column(Text, nullable=True)

    lines: Mapped[list[FinancialReportLineModel]] = relationship(
        back_populates="report",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="FinancialReportLineModel.line_no",
    )


class FinancialReportLineModel(Base):
    """One line item of a report payload, in payload order."""

    __tablename__ = "financial_report_lines"
    __table_args__ = (
        UniqueConstraint("report_id", "line_no", name="uq_financial_report_lines_report_line"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    report_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("financial_reports.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    line_no: Mapped[int] = mapped_column(Integer, nullable=False)
    data: Mapped[dict[str, Any]] = mapped_column(JSONDocument, nullable=False)

    report: Mapped[FinancialReportModel] = relationship(back_populates="lines")


__all__ = ["FinancialReportLineModel", "FinancialReportModel"]
