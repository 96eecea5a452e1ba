# src/coopledger/domain/services/report_validators/cross_report.py
# Copyright (c)
# SPDX-License-Identifier: MIT
"""Cross-report consistency rules.

Purpose:
    Compare a report against the approved reports of other kinds filed by
    the same cooperative for the same reporting year:

        * cash flow ending_cash_balance ~= balance sheet cash accounts
          (blocking, tolerance 1)
        * balance sheet retained earnings ~= income statement net income
          (warning, tolerance 1,000,000)

Layer:
    domain/services/report_validators

Notes:
    - Each rule runs in both directions, so the result does not depend on
      which of the two reports was approved first.
    - A rule is skipped when the balance sheet has no matching account
      lines; account names are free text and a missing line is not a
      contradiction.
    - Retained earnings also carry prior-year balances, so that comparison
      is a coarse warning only.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Mapping
from decimal import Decimal
from typing import Final

from coopledger.domain.entities.line_items import AccountLine
from coopledger.domain.entities.report_payloads import (
    BalanceSheetPayload,
    CashFlowPayload,
    IncomeStatementPayload,
    ReportPayload,
)
from coopledger.domain.entities.violation import Violation
from coopledger.domain.enums.financial_report import ReportType
from coopledger.domain.enums.line_items import AccountCategory, AccountSubcategory
from coopledger.domain.services.numeric_reconciliation import (
    LINE_TOLERANCE,
    ZERO,
    reconciles,
    sum_amounts,
)
from coopledger.domain.services.report_validators.base import ViolationCollector

RETAINED_EARNINGS_TOLERANCE: Final[Decimal] = Decimal("1000000")

_CASH_ACCOUNT_NAME: Final[re.Pattern[str]] = re.compile(r"\bkas\b", re.IGNORECASE)
_RETAINED_EARNINGS_NAME: Final[re.Pattern[str]] = re.compile(r"laba.*ditahan", re.IGNORECASE)


def _leaf_accounts(accounts: Iterable[AccountLine]) -> list[AccountLine]:
    return [line for line in accounts if not line.is_subtotal]


def cash_on_balance_sheet(payload: BalanceSheetPayload) -> Decimal | None:
    """Sum of asset accounts named as cash ("kas"), or None when there are none."""
    lines = [
        line
        for line in _leaf_accounts(payload.accounts)
        if line.category is AccountCategory.ASSET and _CASH_ACCOUNT_NAME.search(line.name)
    ]
    if not lines:
        return None
    return sum_amounts(line.current_amount for line in lines)


def retained_earnings_on_balance_sheet(payload: BalanceSheetPayload) -> Decimal | None:
    """Sum of retained-earnings equity accounts, or None when there are none."""
    lines = [
        line
        for line in _leaf_accounts(payload.accounts)
        if line.category is AccountCategory.EQUITY
        and (
            line.subcategory is AccountSubcategory.RETAINED_EARNINGS
            or _RETAINED_EARNINGS_NAME.search(line.name)
        )
    ]
    if not lines:
        return None
    return sum_amounts(line.current_amount for line in lines)


def net_income_of(payload: IncomeStatementPayload) -> Decimal:
    """Revenue plus other income, less expense and other expense."""
    totals: dict[AccountCategory, Decimal] = {}
    for line in _leaf_accounts(payload.accounts):
        totals[line.category] = totals.get(line.category, ZERO) + line.current_amount
    return (
        totals.get(AccountCategory.REVENUE, ZERO)
        + totals.get(AccountCategory.OTHER_INCOME, ZERO)
        - totals.get(AccountCategory.EXPENSE, ZERO)
        - totals.get(AccountCategory.OTHER_EXPENSE, ZERO)
    )


def _check_cash(
    cash_flow: CashFlowPayload,
    balance_sheet: BalanceSheetPayload,
    *,
    field: str,
    out: ViolationCollector,
) -> None:
    cash = cash_on_balance_sheet(balance_sheet)
    if cash is None:
        return
    if not reconciles(cash_flow.ending_cash_balance, cash, LINE_TOLERANCE):
        out.blocking(
            field,
            f"Cash flow ending balance {cash_flow.ending_cash_balance} does not match the "
            f"balance sheet cash accounts {cash} "
            f"(difference {abs(cash_flow.ending_cash_balance - cash)}).",
            code="CROSS_REPORT_CASH_MISMATCH",
        )


def _check_retained_earnings(
    balance_sheet: BalanceSheetPayload,
    income_statement: IncomeStatementPayload,
    *,
    field: str,
    out: ViolationCollector,
) -> None:
    retained = retained_earnings_on_balance_sheet(balance_sheet)
    if retained is None:
        return
    net_income = net_income_of(income_statement)
    if not reconciles(retained, net_income, RETAINED_EARNINGS_TOLERANCE):
        out.warning(
            field,
            f"Balance sheet retained earnings {retained} are not consistent with "
            f"income statement net income {net_income}.",
            code="CROSS_REPORT_RETAINED_EARNINGS",
        )


def check_cross_report_consistency(
    payload: ReportPayload,
    related: Mapping[ReportType, ReportPayload],
) -> list[Violation]:
    """Return violations of ``payload`` against approved reports of other kinds.

    Args:
        payload: Report under validation.
        related: Approved payloads for the same cooperative and year, keyed by
            report type. Entries of the payload's own type are ignored.
    """
    out = ViolationCollector()
    balance_sheet = related.get(ReportType.BALANCE_SHEET)
    cash_flow = related.get(ReportType.CASH_FLOW)
    income_statement = related.get(ReportType.INCOME_STATEMENT)

    if isinstance(payload, CashFlowPayload) and isinstance(balance_sheet, BalanceSheetPayload):
        _check_cash(payload, balance_sheet, field="ending_cash_balance", out=out)

    elif isinstance(payload, BalanceSheetPayload):
        if isinstance(cash_flow, CashFlowPayload):
            _check_cash(cash_flow, payload, field="accounts", out=out)
        if isinstance(income_statement, IncomeStatementPayload):
            _check_retained_earnings(payload, income_statement, field="accounts", out=out)

    elif isinstance(payload, IncomeStatementPayload) and isinstance(
        balance_sheet, BalanceSheetPayload
    ):
        _check_retained_earnings(balance_sheet, payload, field="accounts", out=out)

    return out.violations


__all__ = [
    "RETAINED_EARNINGS_TOLERANCE",
    "cash_on_balance_sheet",
    "check_cross_report_consistency",
    "net_income_of",
    "retained_earnings_on_balance_sheet",
]
