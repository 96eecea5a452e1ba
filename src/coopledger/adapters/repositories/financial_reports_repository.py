# src/coopledger/adapters/repositories/financial_reports_repository.py
# Copyright (c)
# SPDX-License-Identifier: MIT
"""Financial reports repository (SQLAlchemy).

Purpose:
    Concrete implementation of the ``FinancialReportsRepository`` port over
    the ``financial_reports`` and ``financial_report_lines`` tables.

Layer:
    adapters/repositories

Notes:
    - Every read filters on ``cooperative_id``.
    - Writes to existing reports are single UPDATE/DELETE statements whose
      WHERE clause carries the observed status and version; zero matched
      rows means another writer won and surfaces as ``ReportConflictError``.
    - A unique-constraint violation on insert is also a conflict. Any other
      driver failure becomes ``ReportPersistenceError``.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import replace
from typing import Any

from sqlalchemy import delete, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from coopledger.adapters.mappers.report_payload_mapper import payload_to_rows, rows_to_payload
from coopledger.adapters.repositories.base_repository import BaseRepository
from coopledger.domain.entities.financial_report import FinancialReport, FinancialReportAggregate
from coopledger.domain.entities.report_payloads import ReportPayload
from coopledger.domain.enums.financial_report import ReportingPeriod, ReportStatus, ReportType
from coopledger.domain.exceptions.reports import ReportConflictError, ReportPersistenceError
from coopledger.infrastructure.database.models.financial_reports import (
    FinancialReportLineModel,
    FinancialReportModel,
)


class SqlAlchemyFinancialReportsRepository(BaseRepository[FinancialReportModel]):
    """SQLAlchemy-backed financial reports repository."""

    _MODEL_NAME = "financial_reports"

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session=session)

    @asynccontextmanager
    async def _operation(self, operation: str) -> AsyncIterator[None]:
        try:
            async with self._instrumented(operation):
                yield
        except IntegrityError as exc:
            raise ReportConflictError(
                "Financial report conflicts with an existing report.",
                details={"operation": operation, "constraint": _constraint_name(exc)},
            ) from exc
        except SQLAlchemyError as exc:
            raise ReportPersistenceError(
                "Financial report storage failed.",
                details={"operation": operation, "error_type": type(exc).__name__},
            ) from exc

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def get_header(self, report_id: int, *, cooperative_id: int) -> FinancialReport | None:
        async with self._operation("get_header"):
            row = await self.fetch_optional(
                select(FinancialReportModel).where(
                    FinancialReportModel.id == report_id,
                    FinancialReportModel.cooperative_id == cooperative_id,
                )
            )
            return _to_header(row) if row is not None else None

    async def get(self, report_id: int, *, cooperative_id: int) -> FinancialReportAggregate | None:
        async with self._operation("get"):
            row = await self.fetch_optional(
                select(FinancialReportModel)
                .options(selectinload(FinancialReportModel.lines))
                .where(
                    FinancialReportModel.id == report_id,
                    FinancialReportModel.cooperative_id == cooperative_id,
                )
            )
            return _to_aggregate(row) if row is not None else None

    async def get_by_natural_key(
        self,
        *,
        cooperative_id: int,
        report_type: ReportType,
        reporting_year: int,
    ) -> FinancialReport | None:
        async with self._operation("get_by_natural_key"):
            row = await self.fetch_optional(
                select(FinancialReportModel).where(
                    FinancialReportModel.cooperative_id == cooperative_id,
                    FinancialReportModel.report_type == report_type.value,
                    FinancialReportModel.reporting_year == reporting_year,
                )
            )
            return _to_header(row) if row is not None else None

    async def find_prior_period(
        self,
        *,
        cooperative_id: int,
        report_type: ReportType,
        reporting_year: int,
    ) -> FinancialReportAggregate | None:
        """Return the approved report for the previous year, if any."""
        async with self._operation("find_prior_period"):
            row = await self.fetch_optional(
                select(FinancialReportModel)
                .options(selectinload(FinancialReportModel.lines))
                .where(
                    FinancialReportModel.cooperative_id == cooperative_id,
                    FinancialReportModel.report_type == report_type.value,
                    FinancialReportModel.reporting_year == reporting_year - 1,
                    FinancialReportModel.status == ReportStatus.APPROVED.value,
                )
            )
            return _to_aggregate(row) if row is not None else None

    async def find_approved_siblings(
        self,
        *,
        cooperative_id: int,
        reporting_year: int,
        exclude_report_id: int | None = None,
    ) -> list[FinancialReportAggregate]:
        """Return the approved reports filed for the same year."""
        async with self._operation("find_approved_siblings"):
            stmt = (
                select(FinancialReportModel)
                .options(selectinload(FinancialReportModel.lines))
                .where(
                    FinancialReportModel.cooperative_id == cooperative_id,
                    FinancialReportModel.reporting_year == reporting_year,
                    FinancialReportModel.status == ReportStatus.APPROVED.value,
                )
                .order_by(FinancialReportModel.report_type)
            )
            if exclude_report_id is not None:
                stmt = stmt.where(FinancialReportModel.id != exclude_report_id)
            rows = await self.fetch_all(stmt)
            return [_to_aggregate(row) for row in rows]

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    async def add(self, report: FinancialReport, payload: ReportPayload) -> FinancialReport:
        """Insert the header and its lines, returning the header with its id."""
        attributes, lines = payload_to_rows(payload)
        async with self._operation("add"):
            row = FinancialReportModel(
                cooperative_id=report.cooperative_id,
                report_type=report.report_type.value,
                reporting_year=report.reporting_year,
                reporting_period=report.reporting_period.value,
                status=report.status.value,
                notes=report.notes,
                attributes=attributes,
                created_by=report.created_by,
                created_at=report.created_at or self.utc_now(),
                updated_at=report.updated_at or self.utc_now(),
                version=report.version,
            )
            row.lines = [
                FinancialReportLineModel(line_no=index, data=data)
                for index, data in enumerate(lines, start=1)
            ]
            self._session.add(row)
            await self._session.flush()
            return replace(report, id=row.id)

    async def replace_payload(
        self,
        report: FinancialReport,
        payload: ReportPayload,
        *,
        expected_version: int,
    ) -> FinancialReport:
        """Swap the draft's lines and header fields in one check-and-set."""
        if report.id is None:
            raise ValueError("replace_payload() requires a persisted report.")
        attributes, lines = payload_to_rows(payload)
        updated_at = report.updated_at or self.utc_now()

        async with self._operation("replace_payload"):
            matched = await self.execute_rowcount(
                update(FinancialReportModel)
                .where(
                    FinancialReportModel.id == report.id,
                    FinancialReportModel.cooperative_id == report.cooperative_id,
                    FinancialReportModel.status == ReportStatus.DRAFT.value,
                    FinancialReportModel.version == expected_version,
                )
                .values(
                    reporting_period=report.reporting_period.value,
                    notes=report.notes,
                    attributes=attributes,
                    updated_at=updated_at,
                    version=FinancialReportModel.version + 1,
                )
                .execution_options(synchronize_session=False)
            )
            if matched == 0:
                raise _stale(report.id, expected_version)

            await self._session.execute(
                delete(FinancialReportLineModel)
                .where(FinancialReportLineModel.report_id == report.id)
                .execution_options(synchronize_session=False)
            )
            if lines:
                self._session.add_all(
                    FinancialReportLineModel(report_id=report.id, line_no=index, data=data)
                    for index, data in enumerate(lines, start=1)
                )
            await self._session.flush()

        return replace(report, updated_at=updated_at, version=expected_version + 1)

    async def save_transition(
        self,
        report: FinancialReport,
        *,
        expected_status: ReportStatus,
        expected_version: int,
    ) -> FinancialReport:
        """Persist status and audit stamps if status and version still match."""
        if report.id is None:
            raise ValueError("save_transition() requires a persisted report.")

        async with self._operation("save_transition"):
            matched = await self.execute_rowcount(
                update(FinancialReportModel)
                .where(
                    FinancialReportModel.id == report.id,
                    FinancialReportModel.cooperative_id == report.cooperative_id,
                    FinancialReportModel.status == expected_status.value,
                    FinancialReportModel.version == expected_version,
                )
                .values(
                    status=report.status.value,
                    updated_at=report.updated_at or self.utc_now(),
                    submitted_at=report.submitted_at,
                    submitted_by=report.submitted_by,
                    approved_at=report.approved_at,
                    approved_by=report.approved_by,
                    rejected_at=report.rejected_at,
                    rejected_by=report.rejected_by,
                    rejection_reason=report.rejection_reason,
                    version=FinancialReportModel.version + 1,
                )
                .execution_options(synchronize_session=False)
            )
            if matched == 0:
                raise _stale(report.id, expected_version)

        return replace(report, version=expected_version + 1)

    async def delete(self, report_id: int, *, cooperative_id: int, expected_version: int) -> None:
        """Delete a draft header, then its lines."""
        async with self._operation("delete"):
            matched = await self.execute_rowcount(
                delete(FinancialReportModel)
                .where(
                    FinancialReportModel.id == report_id,
                    FinancialReportModel.cooperative_id == cooperative_id,
                    FinancialReportModel.status == ReportStatus.DRAFT.value,
                    FinancialReportModel.version == expected_version,
                )
                .execution_options(synchronize_session=False)
            )
            if matched == 0:
                raise _stale(report_id, expected_version)

            # No-op where the foreign key cascade already removed them.
            await self._session.execute(
                delete(FinancialReportLineModel)
                .where(FinancialReportLineModel.report_id == report_id)
                .execution_options(synchronize_session=False)
            )


# ---------------------------------------------------------------------------
# Mapping helpers
# ---------------------------------------------------------------------------


def _to_header(row: FinancialReportModel) -> FinancialReport:
    return FinancialReport(
        id=row.id,
        cooperative_id=row.cooperative_id,
        report_type=ReportType(row.report_type),
        reporting_year=row.reporting_year,
        reporting_period=ReportingPeriod(row.reporting_period),
        status=ReportStatus(row.status),
        created_by=row.created_by,
        notes=row.notes,
        created_at=row.created_at,
        updated_at=row.updated_at,
        submitted_at=row.submitted_at,
        submitted_by=row.submitted_by,
        approved_at=row.approved_at,
        approved_by=row.approved_by,
        rejected_at=row.rejected_at,
        rejected_by=row.rejected_by,
        rejection_reason=row.rejection_reason,
        version=row.version,
    )


def _to_aggregate(row: FinancialReportModel) -> FinancialReportAggregate:
    header = _to_header(row)
    ordered = sorted(row.lines, key=lambda line: line.line_no)
    payload = rows_to_payload(header.report_type, row.attributes, (line.data for line in ordered))
    return FinancialReportAggregate(report=header, payload=payload)


def _stale(report_id: int, expected_version: int) -> ReportConflictError:
    return ReportConflictError(
        "Financial report was modified concurrently or is no longer in the expected status.",
        details={"report_id": report_id, "expected_version": expected_version},
    )


def _constraint_name(exc: IntegrityError) -> Any:
    diag = getattr(getattr(exc, "orig", None), "diag", None)
    return getattr(diag, "constraint_name", None)


__all__ = ["SqlAlchemyFinancialReportsRepository"]
