# src/coopledger/domain/entities/line_items.py
# Copyright (c)
# SPDX-License-Identifier: MIT
"""Line-item variants for cooperative financial reports.

Purpose:
    One immutable shape per report kind. Variants are independent value
    objects rather than a class hierarchy; report payloads hold a tuple of
    exactly one variant.

Layer:
    domain/entities

Notes:
    - All monetary values are :class:`decimal.Decimal`.
    - Values are taken as supplied; bounds and consistency are enforced by
      the report validators so that every violation can be reported at once.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal

from coopledger.domain.enums.line_items import (
    AccountCategory,
    AccountSubcategory,
    BudgetCategory,
    BudgetPriority,
    CashFlowCategory,
    EquityComponentKind,
    LoanType,
    NplClassification,
    ReceivablePaymentStatus,
    RestructuringStatus,
    SavingsType,
    ShuMemberType,
    ShuPaymentMethod,
    ShuPaymentStatus,
    WriteOffStatus,
)

ZERO = Decimal("0")


@dataclass(frozen=True, slots=True)
class AccountLine:
    """Balance-sheet or income-statement account line.

    Attributes:
        code: Account code, unique within the report.
        name: Account display name.
        category: Account category.
        subcategory: Optional subcategory (balance sheet only).
        current_amount: Amount for the reporting period (may be negative).
        previous_amount: Comparative amount for the prior period.
        parent_code: Optional code of the parent account in the same report.
        is_subtotal: Subtotal lines are excluded from every sum.
        sort_order: Display ordering, 0 to 999.
        note_reference: Optional pointer into the notes to financial statements.
    """

    code: str
    name: str
    category: AccountCategory
    current_amount: Decimal
    previous_amount: Decimal = ZERO
    subcategory: AccountSubcategory | None = None
    parent_code: str | None = None
    is_subtotal: bool = False
    sort_order: int = 0
    note_reference: str | None = None


@dataclass(frozen=True, slots=True)
class CashFlowActivity:
    """Single cash-flow activity line; amounts are signed."""

    category: CashFlowCategory
    current_amount: Decimal
    description: str = ""
    previous_amount: Decimal = ZERO
    is_subtotal: bool = False
    sort_order: int = 0


@dataclass(frozen=True, slots=True)
class EquityComponent:
    """Roll-forward of one equity component over the period."""

    component: EquityComponentKind
    beginning_balance: Decimal
    additions: Decimal
    reductions: Decimal
    ending_balance: Decimal
    description: str | None = None


@dataclass(frozen=True, slots=True)
class BudgetLine:
    """Planned budget line with optional quarterly allocation percentages.

    Attributes:
        previous_year_actual: Realized amount for the prior year, if known.
        variance_percentage: Declared planned-vs-actual change in percent.
        q1_allocation: Share of ``planned_amount`` for Q1, in percent.
    """

    category: BudgetCategory
    item_name: str
    planned_amount: Decimal
    priority: BudgetPriority = BudgetPriority.MEDIUM
    subcategory: str | None = None
    description: str | None = None
    previous_year_actual: Decimal | None = None
    variance_percentage: Decimal | None = None
    q1_allocation: Decimal = ZERO
    q2_allocation: Decimal = ZERO
    q3_allocation: Decimal = ZERO
    q4_allocation: Decimal = ZERO

    @property
    def quarterly_allocations(self) -> tuple[Decimal, Decimal, Decimal, Decimal]:
        return (self.q1_allocation, self.q2_allocation, self.q3_allocation, self.q4_allocation)


@dataclass(frozen=True, slots=True)
class MemberSavingsLine:
    """Savings roll-forward for one member and savings product."""

    member_id: int
    savings_type: SavingsType
    beginning_balance: Decimal
    deposits: Decimal
    withdrawals: Decimal
    interest_earned: Decimal
    ending_balance: Decimal


@dataclass(frozen=True, slots=True)
class MemberReceivableLine:
    """Outstanding member loan."""

    member_id: int
    loan_number: str
    loan_type: LoanType
    loan_amount: Decimal
    outstanding_balance: Decimal
    interest_rate: Decimal
    loan_term_months: int
    disbursement_date: date
    maturity_date: date
    payment_status: ReceivablePaymentStatus = ReceivablePaymentStatus.CURRENT
    collateral_type: str | None = None
    collateral_value: Decimal | None = None


@dataclass(frozen=True, slots=True)
class NplReceivableLine:
    """Non-performing loan with its classification and loss provision."""

    member_id: int
    loan_number: str
    original_loan_amount: Decimal
    outstanding_balance: Decimal
    days_past_due: int
    classification: NplClassification
    provision_percentage: Decimal
    provision_amount: Decimal
    collateral_type: str | None = None
    collateral_value: Decimal | None = None
    restructuring_status: RestructuringStatus = RestructuringStatus.NONE
    write_off_status: WriteOffStatus = WriteOffStatus.NONE
    last_payment_date: date | None = None


@dataclass(frozen=True, slots=True)
class ShuDistributionLine:
    """Member-level SHU allocation."""

    member_id: int
    savings_contribution: Decimal
    transaction_contribution: Decimal
    shu_from_savings: Decimal
    shu_from_transactions: Decimal
    total_shu_received: Decimal
    tax_deduction: Decimal
    net_shu_received: Decimal
    member_type: ShuMemberType = ShuMemberType.ACTIVE
    payment_method: ShuPaymentMethod = ShuPaymentMethod.CASH
    payment_status: ShuPaymentStatus = ShuPaymentStatus.PENDING


@dataclass(frozen=True, slots=True)
class NoteSection:
    """One section of the notes to the financial statements."""

    section_code: str
    title: str
    content: str
    sort_order: int = 0


__all__ = [
    "AccountLine",
    "BudgetLine",
    "CashFlowActivity",
    "EquityComponent",
    "MemberReceivableLine",
    "MemberSavingsLine",
    "NoteSection",
    "NplReceivableLine",
    "ShuDistributionLine",
]
