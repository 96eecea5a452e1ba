# src/coopledger/domain/enums/line_items.py
# Copyright (c)
# SPDX-License-Identifier: MIT
"""Line-item vocabularies for cooperative financial reports.

Layer:
    domain/enums
"""

from __future__ import annotations

from enum import Enum


class AccountCategory(str, Enum):
    """Account categories for balance-sheet and income-statement lines."""

    ASSET = "asset"
    LIABILITY = "liability"
    EQUITY = "equity"
    REVENUE = "revenue"
    EXPENSE = "expense"
    OTHER_INCOME = "other_income"
    OTHER_EXPENSE = "other_expense"


class AccountSubcategory(str, Enum):
    """Balance-sheet account subcategories."""

    CURRENT_ASSET = "current_asset"
    FIXED_ASSET = "fixed_asset"
    OTHER_ASSET = "other_asset"
    CURRENT_LIABILITY = "current_liability"
    LONG_TERM_LIABILITY = "long_term_liability"
    MEMBER_EQUITY = "member_equity"
    RETAINED_EARNINGS = "retained_earnings"
    OTHER_EQUITY = "other_equity"


class CashFlowCategory(str, Enum):
    """Cash-flow activity categories."""

    OPERATING = "operating"
    INVESTING = "investing"
    FINANCING = "financing"


class EquityComponentKind(str, Enum):
    """Fixed equity components tracked by the statement of changes in equity."""

    SIMPANAN_POKOK = "simpanan_pokok"
    SIMPANAN_WAJIB = "simpanan_wajib"
    SIMPANAN_SUKARELA = "simpanan_sukarela"
    CADANGAN = "cadangan"
    SHU_BELUM_DIBAGI = "shu_belum_dibagi"
    LABA_DITAHAN = "laba_ditahan"


class BudgetType(str, Enum):
    """Budget plan kinds."""

    OPERATIONAL = "operational"
    CAPITAL = "capital"
    STRATEGIC = "strategic"


class BudgetCategory(str, Enum):
    """Budget line categories."""

    REVENUE = "revenue"
    EXPENSE = "expense"
    INVESTMENT = "investment"
    FINANCING = "financing"


class BudgetPriority(str, Enum):
    """Budget line priority."""

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class SavingsType(str, Enum):
    """Member savings products."""

    SIMPANAN_POKOK = "simpanan_pokok"
    SIMPANAN_WAJIB = "simpanan_wajib"
    SIMPANAN_SUKARELA = "simpanan_sukarela"


class LoanType(str, Enum):
    """Member loan products."""

    KREDIT_KONSUMSI = "kredit_konsumsi"
    KREDIT_PRODUKTIF = "kredit_produktif"
    KREDIT_MODAL_KERJA = "kredit_modal_kerja"
    KREDIT_INVESTASI = "kredit_investasi"


class ReceivablePaymentStatus(str, Enum):
    """Repayment status buckets for performing receivables."""

    CURRENT = "current"
    PAST_DUE_30 = "past_due_30"
    PAST_DUE_60 = "past_due_60"
    PAST_DUE_90 = "past_due_90"
    PAST_DUE_OVER_90 = "past_due_over_90"


class NplClassification(str, Enum):
    """Regulatory classification of non-performing loans.

    Attributes:
        KURANG_LANCAR: Substandard, 91 to 120 days past due.
        DIRAGUKAN: Doubtful, 121 to 180 days past due.
        MACET: Loss, more than 180 days past due.
    """

    KURANG_LANCAR = "kurang_lancar"
    DIRAGUKAN = "diragukan"
    MACET = "macet"


class RestructuringStatus(str, Enum):
    """Restructuring treatment applied to a non-performing loan."""

    NONE = "none"
    RESCHEDULING = "rescheduling"
    RECONDITIONING = "reconditioning"
    RESTRUCTURING = "restructuring"


class WriteOffStatus(str, Enum):
    """Write-off treatment applied to a non-performing loan."""

    NONE = "none"
    PARTIAL = "partial"
    FULL = "full"


class ShuMemberType(str, Enum):
    """Member standing used in SHU distribution."""

    ACTIVE = "active"
    INACTIVE = "inactive"
    NEW = "new"


class ShuPaymentMethod(str, Enum):
    """How a member's SHU share is paid out."""

    CASH = "cash"
    TRANSFER = "transfer"
    SAVINGS_ACCOUNT = "savings_account"


class ShuPaymentStatus(str, Enum):
    """Payout status of a member's SHU share."""

    PENDING = "pending"
    PAID = "paid"
    CANCELLED = "cancelled"


__all__ = [
    "AccountCategory",
    "AccountSubcategory",
    "BudgetCategory",
    "BudgetPriority",
    "BudgetType",
    "CashFlowCategory",
    "EquityComponentKind",
    "LoanType",
    "NplClassification",
    "ReceivablePaymentStatus",
    "RestructuringStatus",
    "SavingsType",
    "ShuMemberType",
    "ShuPaymentMethod",
    "ShuPaymentStatus",
    "WriteOffStatus",
]
