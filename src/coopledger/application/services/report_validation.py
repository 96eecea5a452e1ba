# src/coopledger/application/services/report_validation.py
# Copyright (c)
# SPDX-License-Identifier: MIT
"""Report validation service (application layer).

Purpose:
    Single entry point for validating a report document, with or without
    persisting it. Used directly for pre-submission previews and internally
    by the create/update/submit use cases.

    Flow:
        raw mapping --(payload DTO)--> typed payload --(validator)--> violations

Layer:
    application/services

Notes:
    - Synchronous and side-effect free apart from optional metrics.
    - When the raw document does not parse, the parse violations are
      returned alone since cross-field rules need a typed payload.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass
from datetime import UTC, date, datetime
from typing import Any

from pydantic import ValidationError

from coopledger.application.interfaces.report_metrics_port import (
    NullReportMetrics,
    ReportMetricsPort,
)
from coopledger.application.schemas.dto.report_payloads import payload_dto_for
from coopledger.domain.entities.report_payloads import PriorPeriodBaseline, ReportPayload
from coopledger.domain.entities.violation import (
    ValidationSummary,
    Violation,
    summarize_violations,
)
from coopledger.domain.enums.financial_report import ReportType
from coopledger.domain.services.report_validators import get_report_validator
from coopledger.domain.services.report_validators.cross_report import (
    check_cross_report_consistency,
)


def _today_utc() -> date:
    return datetime.now(tz=UTC).date()


def _loc_to_field(loc: tuple[int | str, ...]) -> str:
    return ".".join(str(part) for part in loc) or "payload"


def violations_from_pydantic(exc: ValidationError) -> list[Violation]:
    """Map pydantic errors to blocking violations with dotted field paths."""
    return [
        Violation(
            field=_loc_to_field(tuple(err.get("loc", ()))),
            message=str(err.get("msg", "Invalid value.")),
            code=f"STRUCTURE_{str(err.get('type', 'invalid')).upper()}",
        )
        for err in exc.errors()
    ]


@dataclass(frozen=True, slots=True)
class ValidationReport:
    """Preview result: every violation plus the aggregate summary."""

    report_type: ReportType
    violations: tuple[Violation, ...]
    summary: ValidationSummary


class ReportValidationService:
    """Parse and validate report documents.

    Args:
        today: Clock returning the as-of date for date rules.
        metrics: Optional metrics sink.
    """

    def __init__(
        self,
        *,
        today: Callable[[], date] | None = None,
        metrics: ReportMetricsPort | None = None,
    ) -> None:
        self._today = today or _today_utc
        self._metrics = metrics or NullReportMetrics()

    def parse_payload(
        self, report_type: ReportType, raw: Mapping[str, Any]
    ) -> tuple[ReportPayload | None, list[Violation]]:
        """Parse a raw document into a typed payload.

        Returns:
            ``(payload, [])`` on success, ``(None, violations)`` otherwise.
        """
        dto_type = payload_dto_for(report_type)
        try:
            dto = dto_type.model_validate(raw)
        except ValidationError as exc:
            return None, violations_from_pydantic(exc)
        return dto.to_domain(), []

    def validate(
        self,
        report_type: ReportType,
        payload: ReportPayload | Mapping[str, Any],
        baseline: PriorPeriodBaseline | None = None,
        *,
        as_of: date | None = None,
        related: Mapping[ReportType, ReportPayload] | None = None,
    ) -> list[Violation]:
        """Return all violations for ``payload``; an empty list means it is valid.

        Args:
            report_type: Report kind selecting the validator.
            payload: Typed payload, or a raw mapping to be parsed first.
            baseline: Optional prior-period report for comparative checks.
            as_of: Date for date rules; defaults to today (UTC).
            related: Approved reports of other kinds for the same cooperative
                and year, keyed by type, for cross-report checks.
        """
        if isinstance(payload, Mapping):
            typed, violations = self.parse_payload(report_type, payload)
            if typed is None:
                self._record(report_type, violations)
                return violations
            payload = typed

        validator = get_report_validator(report_type)
        violations = validator.validate(payload, baseline, as_of=as_of or self._today())
        if related:
            violations.extend(check_cross_report_consistency(payload, related))
        self._record(report_type, violations)
        return violations

    def preview(
        self,
        report_type: ReportType,
        payload: ReportPayload | Mapping[str, Any],
        baseline: PriorPeriodBaseline | None = None,
        *,
        as_of: date | None = None,
        related: Mapping[ReportType, ReportPayload] | None = None,
    ) -> ValidationReport:
        violations = self.validate(report_type, payload, baseline, as_of=as_of, related=related)
        return ValidationReport(
            report_type=report_type,
            violations=tuple(violations),
            summary=summarize_violations(violations),
        )

    def _record(self, report_type: ReportType, violations: list[Violation]) -> None:
        blocking = sum(1 for v in violations if v.is_blocking)
        self._metrics.record_violations(
            report_type=report_type.value,
            blocking=blocking,
            warnings=len(violations) - blocking,
        )


__all__ = ["ReportValidationService", "ValidationReport", "violations_from_pydantic"]
