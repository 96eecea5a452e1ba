# src/coopledger/domain/services/report_validators/shu_distribution.py
# Copyright (c)
# SPDX-License-Identifier: MIT
"""SHU distribution validator.

Purpose:
    Cross-check member-level surplus (SHU) allocation:

        * total_shu_received ~= shu_from_savings + shu_from_transactions
        * net_shu_received ~= total_shu_received - tax_deduction
        * tax_deduction <= total_shu_received, at an implied rate <= 25%
        * sum(total_shu_received) ~= report total_shu

Layer:
    domain/services/report_validators

Notes:
    - Member shares are each rounded to whole currency units, so a value
      derived from two rounded terms may drift by one unit per term.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Final

from coopledger.domain.entities.report_payloads import ShuDistributionPayload
from coopledger.domain.enums.financial_report import ReportType
from coopledger.domain.services.numeric_reconciliation import (
    AGGREGATE_TOLERANCE,
    percentage_of,
    reconciles,
    rounded_terms_tolerance,
    sum_amounts,
)
from coopledger.domain.services.report_validators.base import (
    BaseReportValidator,
    ViolationCollector,
)

MAX_TAX_RATE_PERCENTAGE: Final[Decimal] = Decimal("25")

_TWO_TERM_TOLERANCE: Final[Decimal] = rounded_terms_tolerance(2)
"""One unit per rounded share, so 2 for a value derived from two shares.

With savings 600000 and transactions 400000, a declared total of 999998
must be accepted and 999000 rejected. A flat tolerance of 1 rejects the
former, so do not lower this to 1.
"""

_AMOUNT_FIELDS: Final[tuple[str, ...]] = (
    "savings_contribution",
    "transaction_contribution",
    "shu_from_savings",
    "shu_from_transactions",
    "total_shu_received",
    "tax_deduction",
    "net_shu_received",
)


def _field(index: int, name: str) -> str:
    return f"lines.{index}.{name}"


class ShuDistributionValidator(BaseReportValidator[ShuDistributionPayload]):
    report_type = ReportType.SHU_DISTRIBUTION
    payload_type = ShuDistributionPayload

    def _check_structure(
        self, payload: ShuDistributionPayload, out: ViolationCollector, *, as_of: date
    ) -> None:
        out.require_amount("total_shu", payload.total_shu)
        out.require_min_count("lines", payload.lines, 1, "member distribution line is")
        for i, line in enumerate(payload.lines):
            if line.member_id <= 0:
                out.blocking(_field(i, "member_id"), "Member id must be positive.", code="INVALID")
            for name in _AMOUNT_FIELDS:
                out.require_amount(_field(i, name), getattr(line, name))

    def _check_consistency(
        self, payload: ShuDistributionPayload, out: ViolationCollector
    ) -> None:
        out.require_unique(
            payload.lines,
            key=lambda line: line.member_id,
            field=lambda i: _field(i, "member_id"),
            describe=lambda line: f"distribution line for member {line.member_id}",
        )

        for i, line in enumerate(payload.lines):
            expected_total = line.shu_from_savings + line.shu_from_transactions
            if not reconciles(line.total_shu_received, expected_total, _TWO_TERM_TOLERANCE):
                out.blocking(
                    _field(i, "total_shu_received"),
                    f"Total SHU received {line.total_shu_received} does not equal SHU from "
                    f"savings plus SHU from transactions (expected {expected_total}).",
                    code="SHU_TOTAL_MISMATCH",
                )

            expected_net = line.total_shu_received - line.tax_deduction
            if not reconciles(line.net_shu_received, expected_net, _TWO_TERM_TOLERANCE):
                out.blocking(
                    _field(i, "net_shu_received"),
                    f"Net SHU received {line.net_shu_received} does not equal total SHU "
                    f"minus tax (expected {expected_net}).",
                    code="SHU_NET_MISMATCH",
                )

            if line.tax_deduction > line.total_shu_received:
                out.blocking(
                    _field(i, "tax_deduction"),
                    "Tax deduction cannot exceed total SHU received.",
                    code="TAX_EXCEEDS_TOTAL",
                )
            rate = percentage_of(line.tax_deduction, line.total_shu_received)
            if rate is not None and rate > MAX_TAX_RATE_PERCENTAGE:
                out.blocking(
                    _field(i, "tax_deduction"),
                    f"Implied tax rate {rate.quantize(Decimal('0.01'))}% exceeds the "
                    f"{MAX_TAX_RATE_PERCENTAGE}% maximum.",
                    code="TAX_RATE_TOO_HIGH",
                )

        distributed = sum_amounts(line.total_shu_received for line in payload.lines)
        if not reconciles(distributed, payload.total_shu, AGGREGATE_TOLERANCE):
            out.blocking(
                "total_shu",
                f"Distributed SHU {distributed} does not equal the declared total SHU "
                f"{payload.total_shu}.",
                code="SHU_DISTRIBUTION_MISMATCH",
            )


__all__ = ["MAX_TAX_RATE_PERCENTAGE", "ShuDistributionValidator"]
