# tests/unit/domain/services/test_report_header_rules.py
from __future__ import annotations

from datetime import date

import pytest

from coopledger.domain.enums.financial_report import ReportingPeriod, ReportType
from coopledger.domain.services.report_header_rules import validate_report_header

AS_OF = date(2025, 3, 1)


def _fields(**kwargs) -> list[str]:
    params = {
        "report_type": ReportType.BALANCE_SHEET,
        "reporting_year": 2024,
        "reporting_period": ReportingPeriod.ANNUAL,
        "notes": None,
        "as_of": AS_OF,
    }
    params.update(kwargs)
    return [v.field for v in validate_report_header(**params)]


def test_valid_header_has_no_violations() -> None:
    assert _fields() == []


@pytest.mark.parametrize("year", [2019, 2027])
def test_reporting_year_window(year: int) -> None:
    assert _fields(reporting_year=year) == ["reporting_year"]


def test_budget_plans_may_be_filed_years_ahead() -> None:
    assert _fields(report_type=ReportType.BUDGET_PLAN, reporting_year=2030) == []
    assert _fields(report_type=ReportType.BUDGET_PLAN, reporting_year=2031) == ["reporting_year"]


def test_shu_distribution_is_annual_only() -> None:
    assert _fields(
        report_type=ReportType.SHU_DISTRIBUTION, reporting_period=ReportingPeriod.Q1
    ) == ["reporting_period"]
    assert _fields(report_type=ReportType.CASH_FLOW, reporting_period=ReportingPeriod.Q1) == []


def test_balance_sheet_notes_limit_is_stricter() -> None:
    assert _fields(notes="x" * 2001) == ["notes"]
    assert _fields(report_type=ReportType.CASH_FLOW, notes="x" * 2001) == []
    assert _fields(report_type=ReportType.CASH_FLOW, notes="x" * 5001) == ["notes"]
