# src/coopledger/domain/entities/financial_report.py
# Copyright (c)
# SPDX-License-Identifier: MIT
"""Financial report header and aggregate.

Purpose:
    The header identifies one report instance per (cooperative, report type,
    reporting year) and owns its lifecycle status and audit stamps. The
    aggregate pairs a header with its typed payload.

Layer:
    domain/entities

Notes:
    - Headers are immutable; lifecycle transitions produce new instances via
      :func:`dataclasses.replace`.
    - ``version`` is the optimistic-concurrency counter. It starts at 1 and is
      bumped by every persisted change.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from coopledger.domain.entities.report_payloads import ReportPayload
from coopledger.domain.entities.violation import Violation
from coopledger.domain.enums.financial_report import ReportingPeriod, ReportStatus, ReportType


@dataclass(frozen=True, slots=True)
class FinancialReport:
    """Report header.

    Attributes:
        id: Persistence identifier; ``None`` until inserted.
        cooperative_id: Owning cooperative.
        report_type: Report kind.
        reporting_year: Fiscal year covered by the report.
        reporting_period: Quarter or full year.
        status: Lifecycle status.
        created_by: Actor that created the report.
        notes: Free-form notes.
        created_at: Creation timestamp (UTC).
        updated_at: Last modification timestamp (UTC).
        submitted_at: Submission timestamp.
        submitted_by: Submitting actor.
        approved_at: Approval timestamp.
        approved_by: Approving actor.
        rejected_at: Rejection timestamp.
        rejected_by: Rejecting actor.
        rejection_reason: Mandatory reason recorded on rejection.
        version: Optimistic-concurrency counter.
    """

    cooperative_id: int
    report_type: ReportType
    reporting_year: int
    reporting_period: ReportingPeriod
    status: ReportStatus
    created_by: int
    id: int | None = None
    notes: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    submitted_at: datetime | None = None
    submitted_by: int | None = None
    approved_at: datetime | None = None
    approved_by: int | None = None
    rejected_at: datetime | None = None
    rejected_by: int | None = None
    rejection_reason: str | None = None
    version: int = 1

    @property
    def is_draft(self) -> bool:
        return self.status is ReportStatus.DRAFT

    def natural_key(self) -> tuple[int, ReportType, int]:
        """Return the (cooperative, type, year) uniqueness key."""
        return (self.cooperative_id, self.report_type, self.reporting_year)


@dataclass(frozen=True, slots=True)
class FinancialReportAggregate:
    """Header plus payload, as stored and returned by the persistence port."""

    report: FinancialReport
    payload: ReportPayload


@dataclass(frozen=True, slots=True)
class ReportWriteResult:
    """Outcome of a create or update.

    Attributes:
        report: Persisted header.
        payload: Persisted payload.
        warnings: Non-blocking violations collected during validation.
    """

    report: FinancialReport
    payload: ReportPayload
    warnings: tuple[Violation, ...] = ()


__all__ = ["FinancialReport", "FinancialReportAggregate", "ReportWriteResult"]
