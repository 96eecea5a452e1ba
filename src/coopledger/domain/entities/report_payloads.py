# src/coopledger/domain/entities/report_payloads.py
# Copyright (c)
# SPDX-License-Identifier: MIT
"""Typed report payloads and the prior-period baseline.

Purpose:
    Bundle each report kind's report-level fields with its single line
    collection. A payload is what a validator consumes and what the
    persistence port stores next to the report header.

Layer:
    domain/entities
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import ClassVar, TypeAlias

from coopledger.domain.entities.line_items import (
    AccountLine,
    BudgetLine,
    CashFlowActivity,
    EquityComponent,
    MemberReceivableLine,
    MemberSavingsLine,
    NoteSection,
    NplReceivableLine,
    ShuDistributionLine,
)
from coopledger.domain.enums.financial_report import ReportType
from coopledger.domain.enums.line_items import BudgetType


@dataclass(frozen=True, slots=True)
class BalanceSheetPayload:
    report_type: ClassVar[ReportType] = ReportType.BALANCE_SHEET
    line_field: ClassVar[str] = "accounts"

    accounts: tuple[AccountLine, ...]


@dataclass(frozen=True, slots=True)
class IncomeStatementPayload:
    report_type: ClassVar[ReportType] = ReportType.INCOME_STATEMENT
    line_field: ClassVar[str] = "accounts"

    accounts: tuple[AccountLine, ...]


@dataclass(frozen=True, slots=True)
class CashFlowPayload:
    report_type: ClassVar[ReportType] = ReportType.CASH_FLOW
    line_field: ClassVar[str] = "activities"

    beginning_cash_balance: Decimal
    ending_cash_balance: Decimal
    activities: tuple[CashFlowActivity, ...]


@dataclass(frozen=True, slots=True)
class EquityChangesPayload:
    report_type: ClassVar[ReportType] = ReportType.EQUITY_CHANGES
    line_field: ClassVar[str] = "components"

    components: tuple[EquityComponent, ...]


@dataclass(frozen=True, slots=True)
class BudgetPlanPayload:
    report_type: ClassVar[ReportType] = ReportType.BUDGET_PLAN
    line_field: ClassVar[str] = "lines"

    budget_type: BudgetType
    lines: tuple[BudgetLine, ...]


@dataclass(frozen=True, slots=True)
class MemberSavingsPayload:
    report_type: ClassVar[ReportType] = ReportType.MEMBER_SAVINGS
    line_field: ClassVar[str] = "lines"

    lines: tuple[MemberSavingsLine, ...]


@dataclass(frozen=True, slots=True)
class MemberReceivablesPayload:
    report_type: ClassVar[ReportType] = ReportType.MEMBER_RECEIVABLES
    line_field: ClassVar[str] = "lines"

    lines: tuple[MemberReceivableLine, ...]


@dataclass(frozen=True, slots=True)
class NplReceivablesPayload:
    report_type: ClassVar[ReportType] = ReportType.NPL_RECEIVABLES
    line_field: ClassVar[str] = "lines"

    lines: tuple[NplReceivableLine, ...]


@dataclass(frozen=True, slots=True)
class ShuDistributionPayload:
    """SHU distribution; ``total_shu`` is the surplus declared for allocation."""

    report_type: ClassVar[ReportType] = ReportType.SHU_DISTRIBUTION
    line_field: ClassVar[str] = "lines"

    total_shu: Decimal
    lines: tuple[ShuDistributionLine, ...]
    distribution_date: date | None = None


@dataclass(frozen=True, slots=True)
class NotesToFinancialPayload:
    report_type: ClassVar[ReportType] = ReportType.NOTES_TO_FINANCIAL
    line_field: ClassVar[str] = "sections"

    sections: tuple[NoteSection, ...]


ReportPayload: TypeAlias = (
    BalanceSheetPayload
    | IncomeStatementPayload
    | CashFlowPayload
    | EquityChangesPayload
    | BudgetPlanPayload
    | MemberSavingsPayload
    | MemberReceivablesPayload
    | NplReceivablesPayload
    | ShuDistributionPayload
    | NotesToFinancialPayload
)


PAYLOAD_TYPES: dict[ReportType, type] = {
    cls.report_type: cls
    for cls in (
        BalanceSheetPayload,
        IncomeStatementPayload,
        CashFlowPayload,
        EquityChangesPayload,
        BudgetPlanPayload,
        MemberSavingsPayload,
        MemberReceivablesPayload,
        NplReceivablesPayload,
        ShuDistributionPayload,
        NotesToFinancialPayload,
    )
}


@dataclass(frozen=True, slots=True)
class PriorPeriodBaseline:
    """Approved report of the same kind for the previous reporting year.

    Attributes:
        reporting_year: Year of the baseline report.
        payload: Payload of the baseline report; its type must match the
            payload under validation, otherwise it is ignored.
    """

    reporting_year: int
    payload: ReportPayload


__all__ = [
    "PAYLOAD_TYPES",
    "BalanceSheetPayload",
    "BudgetPlanPayload",
    "CashFlowPayload",
    "EquityChangesPayload",
    "IncomeStatementPayload",
    "MemberReceivablesPayload",
    "MemberSavingsPayload",
    "NotesToFinancialPayload",
    "NplReceivablesPayload",
    "PriorPeriodBaseline",
    "ReportPayload",
    "ShuDistributionPayload",
]
