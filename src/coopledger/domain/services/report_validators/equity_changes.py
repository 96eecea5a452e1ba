# src/coopledger/domain/services/report_validators/equity_changes.py
# Copyright (c)
# SPDX-License-Identifier: MIT
"""Statement of changes in equity validator.

Identity checked per component:
    ending_balance ~= beginning_balance + additions - reductions
"""

from __future__ import annotations

from datetime import date

from coopledger.domain.entities.report_payloads import EquityChangesPayload
from coopledger.domain.enums.financial_report import ReportType
from coopledger.domain.services.numeric_reconciliation import LINE_TOLERANCE, reconciles
from coopledger.domain.services.report_validators.base import (
    BaseReportValidator,
    ViolationCollector,
)


def _field(index: int, name: str) -> str:
    return f"components.{index}.{name}"


class EquityChangesValidator(BaseReportValidator[EquityChangesPayload]):
    report_type = ReportType.EQUITY_CHANGES
    payload_type = EquityChangesPayload

    def _check_structure(
        self, payload: EquityChangesPayload, out: ViolationCollector, *, as_of: date
    ) -> None:
        out.require_min_count("components", payload.components, 1, "equity component is")
        for i, component in enumerate(payload.components):
            out.require_amount(
                _field(i, "beginning_balance"), component.beginning_balance, allow_negative=True
            )
            out.require_amount(_field(i, "additions"), component.additions)
            out.require_amount(_field(i, "reductions"), component.reductions)
            out.require_amount(
                _field(i, "ending_balance"), component.ending_balance, allow_negative=True
            )
            if component.description is not None and len(component.description) > 500:
                out.blocking(
                    _field(i, "description"),
                    "Value must be at most 500 characters.",
                    code="TOO_LONG",
                )

    def _check_consistency(self, payload: EquityChangesPayload, out: ViolationCollector) -> None:
        out.require_unique(
            payload.components,
            key=lambda c: c.component,
            field=lambda i: _field(i, "component"),
            describe=lambda c: f"equity component '{c.component.value}'",
        )
        for i, component in enumerate(payload.components):
            expected = component.beginning_balance + component.additions - component.reductions
            if not reconciles(component.ending_balance, expected, LINE_TOLERANCE):
                out.blocking(
                    _field(i, "ending_balance"),
                    f"Ending balance {component.ending_balance} of "
                    f"'{component.component.value}' does not equal beginning balance plus "
                    f"additions minus reductions (expected {expected}).",
                    code="ENDING_BALANCE_MISMATCH",
                )

    def _check_baseline(
        self,
        payload: EquityChangesPayload,
        baseline: EquityChangesPayload,
        out: ViolationCollector,
    ) -> None:
        prior = {c.component: c.ending_balance for c in baseline.components}
        for i, component in enumerate(payload.components):
            prior_ending = prior.get(component.component)
            if prior_ending is None:
                continue
            if not reconciles(component.beginning_balance, prior_ending, LINE_TOLERANCE):
                out.warning(
                    _field(i, "beginning_balance"),
                    f"Beginning balance differs from the prior period's ending balance "
                    f"{prior_ending}.",
                    code="BASELINE_MISMATCH",
                )


__all__ = ["EquityChangesValidator"]
