# src/coopledger/domain/services/report_validators/member_savings.py
# Copyright (c)
# SPDX-License-Identifier: MIT
"""Member savings validator.

Identity checked per line:
    ending_balance ~= beginning_balance + deposits - withdrawals + interest_earned
"""

from __future__ import annotations

from datetime import date

from coopledger.domain.entities.report_payloads import MemberSavingsPayload
from coopledger.domain.enums.financial_report import ReportType
from coopledger.domain.services.numeric_reconciliation import LINE_TOLERANCE, reconciles
from coopledger.domain.services.report_validators.base import (
    BaseReportValidator,
    ViolationCollector,
)


def _field(index: int, name: str) -> str:
    return f"lines.{index}.{name}"


class MemberSavingsValidator(BaseReportValidator[MemberSavingsPayload]):
    report_type = ReportType.MEMBER_SAVINGS
    payload_type = MemberSavingsPayload

    def _check_structure(
        self, payload: MemberSavingsPayload, out: ViolationCollector, *, as_of: date
    ) -> None:
        out.require_min_count("lines", payload.lines, 1, "savings line is")
        for i, line in enumerate(payload.lines):
            if line.member_id <= 0:
                out.blocking(_field(i, "member_id"), "Member id must be positive.", code="INVALID")
            for name in (
                "beginning_balance",
                "deposits",
                "withdrawals",
                "interest_earned",
                "ending_balance",
            ):
                out.require_amount(_field(i, name), getattr(line, name))

    def _check_consistency(self, payload: MemberSavingsPayload, out: ViolationCollector) -> None:
        out.require_unique(
            payload.lines,
            key=lambda line: (line.member_id, line.savings_type),
            field=lambda i: _field(i, "member_id"),
            describe=lambda line: (
                f"savings line for member {line.member_id} ({line.savings_type.value})"
            ),
        )
        for i, line in enumerate(payload.lines):
            expected = (
                line.beginning_balance + line.deposits - line.withdrawals + line.interest_earned
            )
            if not reconciles(line.ending_balance, expected, LINE_TOLERANCE):
                out.blocking(
                    _field(i, "ending_balance"),
                    f"Ending balance {line.ending_balance} does not equal beginning balance "
                    f"plus deposits minus withdrawals plus interest (expected {expected}).",
                    code="ENDING_BALANCE_MISMATCH",
                )

    def _check_baseline(
        self,
        payload: MemberSavingsPayload,
        baseline: MemberSavingsPayload,
        out: ViolationCollector,
    ) -> None:
        prior = {(line.member_id, line.savings_type): line.ending_balance for line in baseline.lines}
        for i, line in enumerate(payload.lines):
            prior_ending = prior.get((line.member_id, line.savings_type))
            if prior_ending is None:
                continue
            if not reconciles(line.beginning_balance, prior_ending, LINE_TOLERANCE):
                out.warning(
                    _field(i, "beginning_balance"),
                    f"Beginning balance differs from the prior period's ending balance "
                    f"{prior_ending}.",
                    code="BASELINE_MISMATCH",
                )


__all__ = ["MemberSavingsValidator"]
