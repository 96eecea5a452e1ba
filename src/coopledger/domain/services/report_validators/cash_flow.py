# src/coopledger/domain/services/report_validators/cash_flow.py
# Copyright (c)
# SPDX-License-Identifier: MIT
"""Cash-flow statement validator.

Identity checked:
    ending_cash_balance ~= beginning_cash_balance + sum(non-subtotal activities)
"""

from __future__ import annotations

from datetime import date

from coopledger.domain.entities.report_payloads import CashFlowPayload
from coopledger.domain.enums.financial_report import ReportType
from coopledger.domain.enums.line_items import CashFlowCategory
from coopledger.domain.services.numeric_reconciliation import (
    LINE_TOLERANCE,
    ZERO,
    reconciles,
    sum_amounts,
)
from coopledger.domain.services.report_validators.base import (
    BaseReportValidator,
    ViolationCollector,
)


def _field(index: int, name: str) -> str:
    return f"activities.{index}.{name}"


class CashFlowValidator(BaseReportValidator[CashFlowPayload]):
    report_type = ReportType.CASH_FLOW
    payload_type = CashFlowPayload

    def _check_structure(
        self, payload: CashFlowPayload, out: ViolationCollector, *, as_of: date
    ) -> None:
        out.require_amount("beginning_cash_balance", payload.beginning_cash_balance)
        out.require_amount("ending_cash_balance", payload.ending_cash_balance)
        out.require_min_count("activities", payload.activities, 1, "cash-flow activity is")

        for i, activity in enumerate(payload.activities):
            if len(activity.description) > 255:
                out.blocking(
                    _field(i, "description"),
                    "Value must be at most 255 characters.",
                    code="TOO_LONG",
                )
            out.require_amount(
                _field(i, "current_amount"), activity.current_amount, allow_negative=True
            )
            out.require_amount(
                _field(i, "previous_amount"), activity.previous_amount, allow_negative=True
            )
            out.require_range(
                _field(i, "sort_order"), activity.sort_order, minimum=0, maximum=999
            )

    def _check_consistency(self, payload: CashFlowPayload, out: ViolationCollector) -> None:
        movements = [a for a in payload.activities if not a.is_subtotal]
        net_change = sum_amounts(a.current_amount for a in movements)
        expected_ending = payload.beginning_cash_balance + net_change

        if not reconciles(payload.ending_cash_balance, expected_ending, LINE_TOLERANCE):
            out.blocking(
                "ending_cash_balance",
                f"Ending cash {payload.ending_cash_balance} does not equal beginning cash "
                f"{payload.beginning_cash_balance} plus net cash flow {net_change} "
                f"(expected {expected_ending}).",
                code="ENDING_CASH_MISMATCH",
            )

        if not any(a.category is CashFlowCategory.OPERATING for a in payload.activities):
            out.blocking(
                "activities",
                "At least one operating activity is required.",
                code="MISSING_OPERATING_ACTIVITY",
            )
            return

        operating = sum_amounts(
            a.current_amount for a in movements if a.category is CashFlowCategory.OPERATING
        )
        if operating < ZERO:
            out.warning(
                "activities",
                f"Net cash from operating activities is negative ({operating}).",
                code="NEGATIVE_OPERATING_CASH_FLOW",
            )

    def _check_baseline(
        self, payload: CashFlowPayload, baseline: CashFlowPayload, out: ViolationCollector
    ) -> None:
        if not reconciles(
            payload.beginning_cash_balance, baseline.ending_cash_balance, LINE_TOLERANCE
        ):
            out.warning(
                "beginning_cash_balance",
                f"Beginning cash {payload.beginning_cash_balance} differs from the prior "
                f"period's ending cash {baseline.ending_cash_balance}.",
                code="BASELINE_MISMATCH",
            )


__all__ = ["CashFlowValidator"]
