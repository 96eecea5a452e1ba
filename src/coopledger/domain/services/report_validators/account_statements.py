# src/coopledger/domain/services/report_validators/account_statements.py
# Copyright (c)
# SPDX-License-Identifier: MIT
"""Balance-sheet and income-statement validators.

Purpose:
    Both statements are trees of account lines. They share code format,
    uniqueness, and parent-reference rules. Each adds its own
    statement-level identity:

        * Balance sheet: assets equal liabilities plus equity.
        * Income statement: revenue and expense lines are both present.

Layer:
    domain/services/report_validators

Notes:
    - Subtotal lines never enter a sum.
    - Baseline rules compare comparative amounts with the prior period and
      emit warnings only.
"""

from __future__ import annotations

import re
from collections.abc import Sequence
from datetime import date
from decimal import Decimal
from typing import Final

from coopledger.domain.entities.line_items import AccountLine
from coopledger.domain.entities.report_payloads import BalanceSheetPayload, IncomeStatementPayload
from coopledger.domain.enums.financial_report import ReportType
from coopledger.domain.enums.line_items import AccountCategory, AccountSubcategory
from coopledger.domain.services.numeric_reconciliation import (
    LINE_TOLERANCE,
    ZERO,
    percentage_change,
    percentage_of,
    reconciles,
    sum_amounts,
)
from coopledger.domain.services.report_validators.base import (
    BaseReportValidator,
    ViolationCollector,
)

# Growth above this percentage over the prior period is flagged for review.
MAX_AMOUNT_INCREASE_PERCENTAGE: Final[Decimal] = Decimal("1000")
EXPENSE_RATIO_WARNING_PERCENTAGE: Final[Decimal] = Decimal("90")

_SUBCATEGORIES: Final[dict[AccountCategory, frozenset[AccountSubcategory]]] = {
    AccountCategory.ASSET: frozenset(
        {
            AccountSubcategory.CURRENT_ASSET,
            AccountSubcategory.FIXED_ASSET,
            AccountSubcategory.OTHER_ASSET,
        }
    ),
    AccountCategory.LIABILITY: frozenset(
        {AccountSubcategory.CURRENT_LIABILITY, AccountSubcategory.LONG_TERM_LIABILITY}
    ),
    AccountCategory.EQUITY: frozenset(
        {
            AccountSubcategory.MEMBER_EQUITY,
            AccountSubcategory.RETAINED_EARNINGS,
            AccountSubcategory.OTHER_EQUITY,
        }
    ),
}


def _field(index: int, name: str) -> str:
    return f"accounts.{index}.{name}"


def _category_total(lines: Sequence[AccountLine], *categories: AccountCategory) -> Decimal:
    return sum_amounts(
        line.current_amount
        for line in lines
        if line.category in categories and not line.is_subtotal
    )


class _AccountStatementValidator(BaseReportValidator):
    """Rules shared by statements made of account lines."""

    allowed_categories: frozenset[AccountCategory]
    code_pattern: re.Pattern[str]
    code_max_length: int
    code_format_hint: str

    def _check_structure(self, payload, out: ViolationCollector, *, as_of: date) -> None:
        accounts: Sequence[AccountLine] = payload.accounts
        out.require_min_count("accounts", accounts, 1, "account line is")

        for i, line in enumerate(accounts):
            self._check_code(_field(i, "code"), line.code, out)
            out.require_text(_field(i, "name"), line.name, max_length=255)
            if line.category not in self.allowed_categories:
                out.blocking(
                    _field(i, "category"),
                    f"Category '{line.category.value}' is not valid for this statement.",
                    code="INVALID_CATEGORY",
                )
            self._check_subcategory(i, line, out)
            out.require_amount(_field(i, "current_amount"), line.current_amount, allow_negative=True)
            out.require_amount(
                _field(i, "previous_amount"), line.previous_amount, allow_negative=True
            )
            out.require_range(_field(i, "sort_order"), line.sort_order, minimum=0, maximum=999)
            if line.parent_code is not None:
                self._check_code(_field(i, "parent_code"), line.parent_code, out)

    def _check_code(self, field: str, code: str, out: ViolationCollector) -> None:
        if not code:
            out.blocking(field, "Account code is required.", code="REQUIRED")
        elif len(code) > self.code_max_length:
            out.blocking(
                field,
                f"Account code must be at most {self.code_max_length} characters.",
                code="TOO_LONG",
            )
        elif not self.code_pattern.fullmatch(code):
            out.blocking(
                field,
                f"Account code may only contain {self.code_format_hint}.",
                code="INVALID_CODE",
            )

    def _check_subcategory(self, index: int, line: AccountLine, out: ViolationCollector) -> None:
        return None

    def _check_consistency(self, payload, out: ViolationCollector) -> None:
        accounts: Sequence[AccountLine] = payload.accounts
        out.require_unique(
            accounts,
            key=lambda line: line.code,
            field=lambda i: _field(i, "code"),
            describe=lambda line: f"account code '{line.code}'",
        )
        self._check_parents(accounts, out)
        self._check_statement_identity(accounts, out)

    def _check_parents(self, accounts: Sequence[AccountLine], out: ViolationCollector) -> None:
        parents: dict[str, str | None] = {}
        for line in accounts:
            parents.setdefault(line.code, line.parent_code)

        for i, line in enumerate(accounts):
            parent = line.parent_code
            if parent is None:
                continue
            if parent == line.code:
                out.blocking(
                    _field(i, "parent_code"),
                    "An account cannot be its own parent.",
                    code="SELF_PARENT",
                )
                continue
            if parent not in parents:
                out.blocking(
                    _field(i, "parent_code"),
                    f"Parent account '{parent}' does not exist in this report.",
                    code="PARENT_NOT_FOUND",
                )
                continue

            visited = {line.code}
            current: str | None = parent
            while current is not None and current not in visited:
                visited.add(current)
                current = parents.get(current)
            if current == line.code:
                out.blocking(
                    _field(i, "parent_code"),
                    f"Parent chain of account '{line.code}' forms a cycle.",
                    code="PARENT_CYCLE",
                )

    def _check_statement_identity(
        self, accounts: Sequence[AccountLine], out: ViolationCollector
    ) -> None:
        raise NotImplementedError

    def _check_baseline(self, payload, baseline, out: ViolationCollector) -> None:
        prior: dict[str, Decimal] = {}
        for line in baseline.accounts:
            prior.setdefault(line.code, line.current_amount)

        for i, line in enumerate(payload.accounts):
            if line.code not in prior:
                continue
            prior_amount = prior[line.code]
            if not reconciles(line.previous_amount, prior_amount, LINE_TOLERANCE):
                out.warning(
                    _field(i, "previous_amount"),
                    f"Comparative amount {line.previous_amount} differs from the prior "
                    f"period's reported {prior_amount}.",
                    code="BASELINE_MISMATCH",
                )
            change = percentage_change(line.current_amount, prior_amount)
            if change is not None and change > MAX_AMOUNT_INCREASE_PERCENTAGE:
                out.warning(
                    _field(i, "current_amount"),
                    f"Amount grew more than {MAX_AMOUNT_INCREASE_PERCENTAGE}% over the "
                    "prior period.",
                    code="UNUSUAL_INCREASE",
                )


class BalanceSheetValidator(_AccountStatementValidator):
    """Validator for the balance sheet (statement of financial position)."""

    report_type = ReportType.BALANCE_SHEET
    payload_type = BalanceSheetPayload
    allowed_categories = frozenset(
        {AccountCategory.ASSET, AccountCategory.LIABILITY, AccountCategory.EQUITY}
    )
    code_pattern = re.compile(r"[A-Z0-9]+")
    code_max_length = 10
    code_format_hint = "uppercase letters and digits"

    def _check_structure(self, payload, out: ViolationCollector, *, as_of: date) -> None:
        super()._check_structure(payload, out, as_of=as_of)
        for category, what in (
            (AccountCategory.ASSET, "asset"),
            (AccountCategory.LIABILITY, "liability"),
            (AccountCategory.EQUITY, "equity"),
        ):
            if not any(line.category is category for line in payload.accounts):
                out.blocking(
                    "accounts",
                    f"At least one {what} account is required.",
                    code="TOO_FEW_LINES",
                )

    def _check_subcategory(self, index: int, line: AccountLine, out: ViolationCollector) -> None:
        if line.subcategory is None or line.category not in _SUBCATEGORIES:
            return
        if line.subcategory not in _SUBCATEGORIES[line.category]:
            out.blocking(
                _field(index, "subcategory"),
                f"Subcategory '{line.subcategory.value}' does not belong to category "
                f"'{line.category.value}'.",
                code="INVALID_SUBCATEGORY",
            )

    def _check_statement_identity(
        self, accounts: Sequence[AccountLine], out: ViolationCollector
    ) -> None:
        assets = _category_total(accounts, AccountCategory.ASSET)
        liabilities = _category_total(accounts, AccountCategory.LIABILITY)
        equity = _category_total(accounts, AccountCategory.EQUITY)

        if not reconciles(assets, liabilities + equity, LINE_TOLERANCE):
            out.blocking(
                "accounts",
                f"Balance sheet does not balance: total assets {assets} differ from "
                f"liabilities plus equity {liabilities + equity}.",
                code="BALANCE_EQUATION",
            )

        for i, line in enumerate(accounts):
            if (
                line.category is AccountCategory.ASSET
                and not line.is_subtotal
                and line.current_amount < ZERO
            ):
                out.warning(
                    _field(i, "current_amount"),
                    f"Asset account '{line.code}' has a negative amount.",
                    code="NEGATIVE_ASSET",
                )


class IncomeStatementValidator(_AccountStatementValidator):
    """Validator for the income statement (statement of comprehensive income)."""

    report_type = ReportType.INCOME_STATEMENT
    payload_type = IncomeStatementPayload
    allowed_categories = frozenset(
        {
            AccountCategory.REVENUE,
            AccountCategory.EXPENSE,
            AccountCategory.OTHER_INCOME,
            AccountCategory.OTHER_EXPENSE,
        }
    )
    code_pattern = re.compile(r"[A-Z0-9\-.]+")
    code_max_length = 20
    code_format_hint = "uppercase letters, digits, hyphens and dots"

    def _check_subcategory(self, index: int, line: AccountLine, out: ViolationCollector) -> None:
        if line.subcategory is not None:
            out.blocking(
                _field(index, "subcategory"),
                "Subcategories apply to balance-sheet accounts only.",
                code="INVALID_SUBCATEGORY",
            )

    def _check_statement_identity(
        self, accounts: Sequence[AccountLine], out: ViolationCollector
    ) -> None:
        has_revenue = any(
            line.category is AccountCategory.REVENUE and not line.is_subtotal for line in accounts
        )
        has_expense = any(
            line.category is AccountCategory.EXPENSE and not line.is_subtotal for line in accounts
        )
        if not has_revenue:
            out.blocking(
                "accounts",
                "At least one revenue line is required.",
                code="MISSING_REVENUE",
            )
        if not has_expense:
            out.blocking(
                "accounts",
                "At least one expense line is required.",
                code="MISSING_EXPENSE",
            )
        if not (has_revenue and has_expense):
            return

        revenue = _category_total(accounts, AccountCategory.REVENUE)
        expense = _category_total(accounts, AccountCategory.EXPENSE)
        other_income = _category_total(accounts, AccountCategory.OTHER_INCOME)
        other_expense = _category_total(accounts, AccountCategory.OTHER_EXPENSE)
        net_income = revenue + other_income - expense - other_expense

        if revenue <= ZERO:
            out.warning("accounts", "Total revenue is zero or negative.", code="NO_REVENUE")
        else:
            ratio = percentage_of(expense, revenue) or ZERO
            if ratio > EXPENSE_RATIO_WARNING_PERCENTAGE:
                out.warning(
                    "accounts",
                    f"Expenses are {ratio.quantize(Decimal('0.01'))}% of revenue.",
                    code="HIGH_EXPENSE_RATIO",
                )
        if net_income < ZERO:
            out.warning(
                "accounts",
                f"The statement reports a net loss of {abs(net_income)}.",
                code="NET_LOSS",
            )


__all__ = [
    "EXPENSE_RATIO_WARNING_PERCENTAGE",
    "MAX_AMOUNT_INCREASE_PERCENTAGE",
    "BalanceSheetValidator",
    "IncomeStatementValidator",
]
