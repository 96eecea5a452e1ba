# src/coopledger/domain/services/report_validators/npl_receivables.py
# Copyright (c)
# SPDX-License-Identifier: MIT
"""NPL receivables validator.

Purpose:
    Apply the delinquency classification engine to every non-performing
    loan. The declared classification must match the bucket implied by
    ``days_past_due``, and the declared provision must meet the bucket
    minimum and agree with the outstanding balance.

Layer:
    domain/services/report_validators
"""

from __future__ import annotations

from datetime import date

from coopledger.domain.entities.report_payloads import NplReceivablesPayload
from coopledger.domain.enums.financial_report import ReportType
from coopledger.domain.services.delinquency_classification import (
    NPL_MIN_DAYS_PAST_DUE,
    classify_delinquency,
    required_provision_amount,
)
from coopledger.domain.services.numeric_reconciliation import (
    LINE_TOLERANCE,
    ONE_HUNDRED,
    ZERO,
    reconciles,
)
from coopledger.domain.services.report_validators.base import (
    BaseReportValidator,
    ViolationCollector,
)


def _field(index: int, name: str) -> str:
    return f"lines.{index}.{name}"


class NplReceivablesValidator(BaseReportValidator[NplReceivablesPayload]):
    report_type = ReportType.NPL_RECEIVABLES
    payload_type = NplReceivablesPayload

    def _check_structure(
        self, payload: NplReceivablesPayload, out: ViolationCollector, *, as_of: date
    ) -> None:
        out.require_min_count("lines", payload.lines, 1, "NPL line is")
        for i, line in enumerate(payload.lines):
            if line.member_id <= 0:
                out.blocking(_field(i, "member_id"), "Member id must be positive.", code="INVALID")
            out.require_text(_field(i, "loan_number"), line.loan_number, max_length=50)
            out.require_amount(
                _field(i, "original_loan_amount"), line.original_loan_amount, strictly_positive=True
            )
            out.require_amount(_field(i, "outstanding_balance"), line.outstanding_balance)
            out.require_amount(_field(i, "provision_amount"), line.provision_amount)
            out.require_amount(_field(i, "collateral_value"), line.collateral_value)
            out.require_range(
                _field(i, "provision_percentage"),
                line.provision_percentage,
                minimum=ZERO,
                maximum=ONE_HUNDRED,
            )
            if line.days_past_due < NPL_MIN_DAYS_PAST_DUE:
                out.blocking(
                    _field(i, "days_past_due"),
                    f"Non-performing loans must be at least {NPL_MIN_DAYS_PAST_DUE} days "
                    "past due.",
                    code="NOT_NON_PERFORMING",
                )
            if line.last_payment_date is not None and line.last_payment_date > as_of:
                out.blocking(
                    _field(i, "last_payment_date"),
                    "Last payment date cannot be in the future.",
                    code="DATE_IN_FUTURE",
                )

    def _check_consistency(self, payload: NplReceivablesPayload, out: ViolationCollector) -> None:
        out.require_unique(
            payload.lines,
            key=lambda line: line.loan_number,
            field=lambda i: _field(i, "loan_number"),
            describe=lambda line: f"loan number '{line.loan_number}'",
        )
        for i, line in enumerate(payload.lines):
            if line.outstanding_balance > line.original_loan_amount:
                out.blocking(
                    _field(i, "outstanding_balance"),
                    f"Outstanding balance {line.outstanding_balance} exceeds the original loan "
                    f"amount {line.original_loan_amount}.",
                    code="OUTSTANDING_EXCEEDS_PRINCIPAL",
                )

            if line.days_past_due >= NPL_MIN_DAYS_PAST_DUE:
                bucket = classify_delinquency(line.days_past_due)
                if line.classification is not bucket.classification:
                    out.blocking(
                        _field(i, "classification"),
                        f"{line.days_past_due} days past due classifies as "
                        f"'{bucket.classification.value}', not "
                        f"'{line.classification.value}'.",
                        code="CLASSIFICATION_MISMATCH",
                    )
                if line.provision_percentage < bucket.minimum_provision_percentage:
                    out.blocking(
                        _field(i, "provision_percentage"),
                        f"Provision of {line.provision_percentage}% is below the "
                        f"{bucket.minimum_provision_percentage}% minimum for "
                        f"'{bucket.classification.value}'.",
                        code="PROVISION_BELOW_MINIMUM",
                    )

            expected = required_provision_amount(line.outstanding_balance, line.provision_percentage)
            if not reconciles(line.provision_amount, expected, LINE_TOLERANCE):
                out.blocking(
                    _field(i, "provision_amount"),
                    f"Provision amount {line.provision_amount} does not equal outstanding "
                    f"balance times provision percentage (expected {expected}).",
                    code="PROVISION_AMOUNT_MISMATCH",
                )


__all__ = ["NplReceivablesValidator"]
