# src/coopledger/application/use_cases/reports/common.py
# Copyright (c)
# SPDX-License-Identifier: MIT
"""Helpers shared by the financial report use cases.

Layer:
    application/use_cases/reports
"""

from __future__ import annotations

from collections.abc import Mapping
from datetime import UTC, datetime
from typing import Any, cast

from coopledger.application.services.report_validation import ReportValidationService
from coopledger.application.uow import UnitOfWork
from coopledger.domain.entities.financial_report import FinancialReport
from coopledger.domain.entities.report_payloads import ReportPayload
from coopledger.domain.entities.violation import Violation
from coopledger.domain.enums.financial_report import ReportType
from coopledger.domain.exceptions.reports import (
    ReportConflictError,
    ReportNotFoundError,
    ReportValidationError,
)
from coopledger.domain.interfaces.repositories.financial_reports_repository import (
    FinancialReportsRepository,
)


def utc_now() -> datetime:
    return datetime.now(tz=UTC)


def get_reports_repository(tx: UnitOfWork) -> FinancialReportsRepository:
    """Resolve the reports repository from the active unit of work."""
    return cast(FinancialReportsRepository, tx.get_repository(FinancialReportsRepository))


def parse_or_raise(
    validation: ReportValidationService,
    report_type: ReportType,
    payload: ReportPayload | Mapping[str, Any],
    *,
    extra: list[Violation] | None = None,
) -> ReportPayload:
    """Return a typed payload or raise with every structural violation found.

    Only a payload that cannot be parsed raises here. ``extra`` carries
    violations already found elsewhere (header rules); they are added to the
    parse failures, and otherwise left for the caller to combine with the
    content rules.
    """
    pending: list[Violation] = []
    if isinstance(payload, Mapping):
        typed, violations = validation.parse_payload(report_type, payload)
        pending.extend(violations)
    else:
        typed = payload
        if typed.report_type is not report_type:
            pending.append(
                Violation(
                    "payload",
                    f"Payload is a {typed.report_type.value} document, "
                    f"expected {report_type.value}.",
                    code="PAYLOAD_TYPE_MISMATCH",
                )
            )
    if typed is None or any(v.is_blocking for v in pending):
        raise ReportValidationError(
            violations=[*(extra or []), *pending],
            details={"report_type": report_type.value},
        )
    return typed


async def load_related_payloads(
    repo: FinancialReportsRepository,
    *,
    cooperative_id: int,
    reporting_year: int,
    exclude_report_id: int | None = None,
) -> dict[ReportType, ReportPayload]:
    """Approved payloads of the same cooperative and year, keyed by report type."""
    siblings = await repo.find_approved_siblings(
        cooperative_id=cooperative_id,
        reporting_year=reporting_year,
        exclude_report_id=exclude_report_id,
    )
    return {sibling.report.report_type: sibling.payload for sibling in siblings}


def require_report(
    report: FinancialReport | None, *, report_id: int, cooperative_id: int
) -> FinancialReport:
    if report is None:
        raise ReportNotFoundError(
            "Financial report not found.",
            details={"report_id": report_id, "cooperative_id": cooperative_id},
        )
    return report


def check_expected_version(report: FinancialReport, expected_version: int | None) -> None:
    """Raise when the caller observed a different version than the stored one."""
    if expected_version is not None and expected_version != report.version:
        raise ReportConflictError(
            "Financial report was modified concurrently.",
            details={
                "report_id": report.id,
                "expected_version": expected_version,
                "actual_version": report.version,
            },
        )


__all__ = [
    "check_expected_version",
    "get_reports_repository",
    "load_related_payloads",
    "parse_or_raise",
    "require_report",
    "utc_now",
]
