# src/coopledger/domain/interfaces/repositories/financial_reports_repository.py
# Copyright (c)
# SPDX-License-Identifier: MIT
"""Financial reports repository interface.

Purpose:
    Define persistence operations for report headers and their line items.
    Every read is scoped to a cooperative; the caller has already resolved
    and authorized that scope.

Layer:
    domain/interfaces/repositories

Notes:
    Implementations run inside the caller's unit of work and must:
        - Write a header and its line items in the same transaction.
        - Enforce uniqueness of (cooperative_id, report_type, reporting_year)
          under concurrent inserts and surface clashes as
          ``ReportConflictError``.
        - Apply status/version check-and-set on every write to an existing
          report and raise ``ReportConflictError`` when nothing matched.
        - Translate driver failures into ``ReportPersistenceError``.
"""

from __future__ import annotations

from typing import Protocol

from coopledger.domain.entities.financial_report import FinancialReport, FinancialReportAggregate
from coopledger.domain.entities.report_payloads import ReportPayload
from coopledger.domain.enums.financial_report import ReportStatus, ReportType


class FinancialReportsRepository(Protocol):
    """Protocol for repositories managing financial reports."""

    async def get_header(self, report_id: int, *, cooperative_id: int) -> FinancialReport | None:
        """Return the header of a report, or None when it is not visible."""
        ...

    async def get(self, report_id: int, *, cooperative_id: int) -> FinancialReportAggregate | None:
        """Return the header plus payload, or None when it is not visible."""
        ...

    async def get_by_natural_key(
        self,
        *,
        cooperative_id: int,
        report_type: ReportType,
        reporting_year: int,
    ) -> FinancialReport | None:
        """Return the report for (cooperative, type, year), if any."""
        ...

    async def find_prior_period(
        self,
        *,
        cooperative_id: int,
        report_type: ReportType,
        reporting_year: int,
    ) -> FinancialReportAggregate | None:
        """Return the approved report of the same type for ``reporting_year - 1``."""
        ...

    async def find_approved_siblings(
        self,
        *,
        cooperative_id: int,
        reporting_year: int,
        exclude_report_id: int | None = None,
    ) -> list[FinancialReportAggregate]:
        """Return the approved reports of ``reporting_year``, ordered by type.

        ``exclude_report_id`` leaves out the report under validation.
        """
        ...

    async def add(self, report: FinancialReport, payload: ReportPayload) -> FinancialReport:
        """Insert a header and its line items.

        Returns:
            The header with its assigned ``id``.

        Raises:
            ReportConflictError: On a (cooperative, type, year) clash.
        """
        ...

    async def replace_payload(
        self,
        report: FinancialReport,
        payload: ReportPayload,
        *,
        expected_version: int,
    ) -> FinancialReport:
        """Replace all line items and header fields of a draft report.

        Returns:
            The header with its bumped ``version``.

        Raises:
            ReportConflictError: If the stored report is no longer a draft at
                ``expected_version``.
        """
        ...

    async def save_transition(
        self,
        report: FinancialReport,
        *,
        expected_status: ReportStatus,
        expected_version: int,
    ) -> FinancialReport:
        """Persist a lifecycle transition with status/version check-and-set.

        Returns:
            The header with its bumped ``version``.

        Raises:
            ReportConflictError: If the stored status or version changed.
        """
        ...

    async def delete(self, report_id: int, *, cooperative_id: int, expected_version: int) -> None:
        """Delete a draft report and its line items.

        Raises:
            ReportConflictError: If the stored report is no longer a draft at
                ``expected_version``.
        """
        ...
