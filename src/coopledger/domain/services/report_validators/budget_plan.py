# src/coopledger/domain/services/report_validators/budget_plan.py
# Copyright (c)
# SPDX-License-Identifier: MIT
"""Budget plan validator.

Purpose:
    Check the plan's internal arithmetic:

        * Quarterly allocations of a line, when used, add up to 100%.
        * Declared variance percentages match planned vs. prior-year actual.
        * Planned expenses stay within 120% of planned revenue (warning only).

Layer:
    domain/services/report_validators
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Final

from coopledger.domain.entities.report_payloads import BudgetPlanPayload
from coopledger.domain.enums.financial_report import ReportType
from coopledger.domain.enums.line_items import BudgetCategory
from coopledger.domain.services.numeric_reconciliation import (
    ALLOCATION_TOLERANCE,
    ONE_HUNDRED,
    PERCENTAGE_TOLERANCE,
    ZERO,
    percentage_change,
    reconciles,
    sum_amounts,
)
from coopledger.domain.services.report_validators.base import (
    BaseReportValidator,
    ViolationCollector,
)

EXPENSE_TO_REVENUE_WARNING_RATIO: Final[Decimal] = Decimal("1.2")
MIN_VARIANCE_PERCENTAGE: Final[Decimal] = Decimal("-100")
MAX_VARIANCE_PERCENTAGE: Final[Decimal] = Decimal("1000")


def _field(index: int, name: str) -> str:
    return f"lines.{index}.{name}"


class BudgetPlanValidator(BaseReportValidator[BudgetPlanPayload]):
    report_type = ReportType.BUDGET_PLAN
    payload_type = BudgetPlanPayload

    def _check_structure(
        self, payload: BudgetPlanPayload, out: ViolationCollector, *, as_of: date
    ) -> None:
        out.require_min_count("lines", payload.lines, 1, "budget line is")
        for i, line in enumerate(payload.lines):
            out.require_text(_field(i, "item_name"), line.item_name, max_length=255)
            out.require_amount(_field(i, "planned_amount"), line.planned_amount)
            out.require_amount(_field(i, "previous_year_actual"), line.previous_year_actual)
            out.require_range(
                _field(i, "variance_percentage"),
                line.variance_percentage,
                minimum=MIN_VARIANCE_PERCENTAGE,
                maximum=MAX_VARIANCE_PERCENTAGE,
            )
            for quarter, allocation in enumerate(line.quarterly_allocations, start=1):
                out.require_range(
                    _field(i, f"q{quarter}_allocation"),
                    allocation,
                    minimum=ZERO,
                    maximum=ONE_HUNDRED,
                )

    def _check_consistency(self, payload: BudgetPlanPayload, out: ViolationCollector) -> None:
        for i, line in enumerate(payload.lines):
            allocated = sum_amounts(line.quarterly_allocations)
            if allocated > ZERO and not reconciles(allocated, ONE_HUNDRED, ALLOCATION_TOLERANCE):
                out.blocking(
                    _field(i, "quarterly_allocation"),
                    f"Quarterly allocations of '{line.item_name}' add up to {allocated}%, "
                    "not 100%.",
                    code="ALLOCATION_NOT_100",
                )

            previous = line.previous_year_actual
            declared = line.variance_percentage
            if previous is None or declared is None or previous <= ZERO:
                continue
            expected = percentage_change(line.planned_amount, previous)
            if expected is not None and not reconciles(declared, expected, PERCENTAGE_TOLERANCE):
                out.blocking(
                    _field(i, "variance_percentage"),
                    f"Variance {declared}% does not match planned vs. prior-year actual "
                    f"({expected.quantize(Decimal('0.01'))}%).",
                    code="VARIANCE_MISMATCH",
                )

        revenue = sum_amounts(
            line.planned_amount for line in payload.lines if line.category is BudgetCategory.REVENUE
        )
        expense = sum_amounts(
            line.planned_amount for line in payload.lines if line.category is BudgetCategory.EXPENSE
        )
        if expense > revenue * EXPENSE_TO_REVENUE_WARNING_RATIO:
            out.warning(
                "lines",
                f"Planned expenses {expense} exceed 120% of planned revenue {revenue}.",
                code="EXPENSE_EXCEEDS_REVENUE",
            )


__all__ = [
    "EXPENSE_TO_REVENUE_WARNING_RATIO",
    "BudgetPlanValidator",
]
