# src/coopledger/domain/services/report_validators/member_receivables.py
# Copyright (c)
# SPDX-License-Identifier: MIT
"""Member receivables (performing loans) validator.

Purpose:
    Check loan terms, date ordering, outstanding-vs-principal, and the
    collateral requirement for large or productive/investment loans.

Layer:
    domain/services/report_validators

Notes:
    - ``disbursement_date`` is compared against the caller-supplied ``as_of``.
    - Loans reported as more than 90 days past due are flagged so they are
      carried on the NPL receivables report instead.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Final

from coopledger.domain.entities.line_items import MemberReceivableLine
from coopledger.domain.entities.report_payloads import MemberReceivablesPayload
from coopledger.domain.enums.financial_report import ReportType
from coopledger.domain.enums.line_items import LoanType, ReceivablePaymentStatus
from coopledger.domain.services.numeric_reconciliation import ONE_HUNDRED, ZERO
from coopledger.domain.services.report_validators.base import (
    BaseReportValidator,
    ViolationCollector,
)

COLLATERAL_REQUIRED_ABOVE: Final[Decimal] = Decimal("50000000")
COLLATERAL_REQUIRED_LOAN_TYPES: Final[frozenset[LoanType]] = frozenset(
    {LoanType.KREDIT_PRODUKTIF, LoanType.KREDIT_INVESTASI}
)
MIN_TERM_MONTHS: Final[int] = 1
MAX_TERM_MONTHS: Final[int] = 360


def _field(index: int, name: str) -> str:
    return f"lines.{index}.{name}"


def requires_collateral(line: MemberReceivableLine) -> bool:
    """Return True when the loan must be secured by collateral."""
    return (
        line.loan_amount > COLLATERAL_REQUIRED_ABOVE
        or line.loan_type in COLLATERAL_REQUIRED_LOAN_TYPES
    )


class MemberReceivablesValidator(BaseReportValidator[MemberReceivablesPayload]):
    report_type = ReportType.MEMBER_RECEIVABLES
    payload_type = MemberReceivablesPayload

    def _check_structure(
        self, payload: MemberReceivablesPayload, out: ViolationCollector, *, as_of: date
    ) -> None:
        out.require_min_count("lines", payload.lines, 1, "receivable line is")
        for i, line in enumerate(payload.lines):
            if line.member_id <= 0:
                out.blocking(_field(i, "member_id"), "Member id must be positive.", code="INVALID")
            out.require_text(_field(i, "loan_number"), line.loan_number, max_length=50)
            out.require_amount(_field(i, "loan_amount"), line.loan_amount, strictly_positive=True)
            out.require_amount(_field(i, "outstanding_balance"), line.outstanding_balance)
            out.require_range(
                _field(i, "interest_rate"), line.interest_rate, minimum=ZERO, maximum=ONE_HUNDRED
            )
            out.require_range(
                _field(i, "loan_term_months"),
                line.loan_term_months,
                minimum=MIN_TERM_MONTHS,
                maximum=MAX_TERM_MONTHS,
            )
            out.require_amount(_field(i, "collateral_value"), line.collateral_value)
            if line.disbursement_date > as_of:
                out.blocking(
                    _field(i, "disbursement_date"),
                    "Disbursement date cannot be in the future.",
                    code="DATE_IN_FUTURE",
                )
            if line.maturity_date <= line.disbursement_date:
                out.blocking(
                    _field(i, "maturity_date"),
                    "Maturity date must be after the disbursement date.",
                    code="DATE_ORDER",
                )
            elif line.maturity_date < as_of and line.outstanding_balance > ZERO:
                out.warning(
                    _field(i, "maturity_date"),
                    f"Loan '{line.loan_number}' is past maturity with an outstanding balance.",
                    code="OVERDUE_LOAN",
                )

    def _check_consistency(
        self, payload: MemberReceivablesPayload, out: ViolationCollector
    ) -> None:
        out.require_unique(
            payload.lines,
            key=lambda line: line.loan_number,
            field=lambda i: _field(i, "loan_number"),
            describe=lambda line: f"loan number '{line.loan_number}'",
        )
        for i, line in enumerate(payload.lines):
            if line.outstanding_balance > line.loan_amount:
                out.blocking(
                    _field(i, "outstanding_balance"),
                    f"Outstanding balance {line.outstanding_balance} exceeds the loan amount "
                    f"{line.loan_amount}.",
                    code="OUTSTANDING_EXCEEDS_PRINCIPAL",
                )

            if requires_collateral(line):
                if not (line.collateral_type and line.collateral_type.strip()):
                    out.blocking(
                        _field(i, "collateral_type"),
                        "Collateral type is required for this loan.",
                        code="COLLATERAL_REQUIRED",
                    )
                if line.collateral_value is None or line.collateral_value <= ZERO:
                    out.blocking(
                        _field(i, "collateral_value"),
                        "A positive collateral value is required for this loan.",
                        code="COLLATERAL_REQUIRED",
                    )

            if line.payment_status is ReceivablePaymentStatus.PAST_DUE_OVER_90:
                out.warning(
                    _field(i, "payment_status"),
                    f"Loan '{line.loan_number}' is more than 90 days past due and belongs on "
                    "the NPL receivables report.",
                    code="NON_PERFORMING_LOAN",
                )


__all__ = [
    "COLLATERAL_REQUIRED_ABOVE",
    "COLLATERAL_REQUIRED_LOAN_TYPES",
    "MemberReceivablesValidator",
    "requires_collateral",
]
