# src/coopledger/domain/enums/financial_report.py
# Copyright (c)
# SPDX-License-Identifier: MIT
"""Report-level enums for cooperative financial reporting.

Purpose:
    Define the closed vocabularies shared by every financial report kind:
    report types, reporting periods, lifecycle statuses and actions, actor
    roles, and violation severities.

Layer:
    domain/enums

Notes:
    - Pure domain types:
        * No logging.
        * No persistence or transport concerns.
"""

from __future__ import annotations

from enum import Enum


class ReportType(str, Enum):
    """Statutory cooperative financial report kinds."""

    BALANCE_SHEET = "balance_sheet"
    INCOME_STATEMENT = "income_statement"
    EQUITY_CHANGES = "equity_changes"
    CASH_FLOW = "cash_flow"
    MEMBER_SAVINGS = "member_savings"
    MEMBER_RECEIVABLES = "member_receivables"
    NPL_RECEIVABLES = "npl_receivables"
    SHU_DISTRIBUTION = "shu_distribution"
    BUDGET_PLAN = "budget_plan"
    NOTES_TO_FINANCIAL = "notes_to_financial"


class ReportingPeriod(str, Enum):
    """Reporting period within a reporting year."""

    Q1 = "Q1"
    Q2 = "Q2"
    Q3 = "Q3"
    Q4 = "Q4"
    ANNUAL = "annual"


class ReportStatus(str, Enum):
    """Approval status of one report instance."""

    DRAFT = "draft"
    SUBMITTED = "submitted"
    APPROVED = "approved"
    REJECTED = "rejected"


class LifecycleAction(str, Enum):
    """Caller-driven actions applied to a report instance."""

    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"
    SUBMIT = "submit"
    APPROVE = "approve"
    REJECT = "reject"


class LifecycleEffect(str, Enum):
    """Side effect emitted after a committed lifecycle transition."""

    NONE = "none"
    NOTIFY_SUBMITTED = "notify_submitted"
    NOTIFY_APPROVED = "notify_approved"
    NOTIFY_REJECTED = "notify_rejected"


class ActorRole(str, Enum):
    """Roles relevant to report lifecycle authorization.

    Attributes:
        ADMIN_KOPERASI: Cooperative administrator; prepares and submits reports.
        ADMIN_DINAS: Supervising agency officer; approves or rejects reports.
    """

    ADMIN_KOPERASI = "admin_koperasi"
    ADMIN_DINAS = "admin_dinas"


class ViolationSeverity(str, Enum):
    """Severity attached to a validation violation.

    Attributes:
        BLOCKING: Prevents persistence and submission.
        WARNING: Informational; reported back to the caller but never blocks.
    """

    BLOCKING = "blocking"
    WARNING = "warning"


class ValidationSeverityLevel(str, Enum):
    """Aggregate severity of a full validation run."""

    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"
    NONE = "none"


__all__ = [
    "ActorRole",
    "LifecycleAction",
    "LifecycleEffect",
    "ReportStatus",
    "ReportType",
    "ReportingPeriod",
    "ValidationSeverityLevel",
    "ViolationSeverity",
]
