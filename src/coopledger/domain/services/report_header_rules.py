# src/coopledger/domain/services/report_header_rules.py
# Copyright (c)
# SPDX-License-Identifier: MIT
"""Structural rules for the report header.

Checks the reporting year window, period restrictions per report type, and
note lengths. Uniqueness of (cooperative, type, year) is a persistence
concern and is enforced by the orchestrator and the repository.
"""

from __future__ import annotations

from datetime import date
from typing import Final

from coopledger.domain.entities.violation import Violation
from coopledger.domain.enums.financial_report import ReportingPeriod, ReportType

MIN_REPORTING_YEAR: Final[int] = 2020
MAX_YEARS_AHEAD: Final[int] = 1
BUDGET_MAX_YEARS_AHEAD: Final[int] = 5
NOTES_MAX_LENGTH: Final[int] = 5000
BALANCE_SHEET_NOTES_MAX_LENGTH: Final[int] = 2000

ANNUAL_ONLY_REPORT_TYPES: Final[frozenset[ReportType]] = frozenset(
    {ReportType.SHU_DISTRIBUTION, ReportType.BUDGET_PLAN}
)


def max_reporting_year(report_type: ReportType, *, as_of: date) -> int:
    ahead = BUDGET_MAX_YEARS_AHEAD if report_type is ReportType.BUDGET_PLAN else MAX_YEARS_AHEAD
    return as_of.year + ahead


def validate_report_header(
    *,
    report_type: ReportType,
    reporting_year: int,
    reporting_period: ReportingPeriod,
    notes: str | None,
    as_of: date,
) -> list[Violation]:
    """Return header violations; an empty list means the header is acceptable."""
    violations: list[Violation] = []

    upper = max_reporting_year(report_type, as_of=as_of)
    if reporting_year < MIN_REPORTING_YEAR or reporting_year > upper:
        violations.append(
            Violation(
                "reporting_year",
                f"Reporting year must be between {MIN_REPORTING_YEAR} and {upper}.",
                code="OUT_OF_RANGE",
            )
        )

    if report_type in ANNUAL_ONLY_REPORT_TYPES and reporting_period is not ReportingPeriod.ANNUAL:
        violations.append(
            Violation(
                "reporting_period",
                f"{report_type.value} reports cover the full year only.",
                code="ANNUAL_ONLY",
            )
        )

    limit = (
        BALANCE_SHEET_NOTES_MAX_LENGTH
        if report_type is ReportType.BALANCE_SHEET
        else NOTES_MAX_LENGTH
    )
    if notes is not None and len(notes) > limit:
        violations.append(
            Violation("notes", f"Notes must be at most {limit} characters.", code="TOO_LONG")
        )

    return violations


__all__ = [
    "ANNUAL_ONLY_REPORT_TYPES",
    "MIN_REPORTING_YEAR",
    "max_reporting_year",
    "validate_report_header",
]
