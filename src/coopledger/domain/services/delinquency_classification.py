# src/coopledger/domain/services/delinquency_classification.py
# Copyright (c)
# SPDX-License-Identifier: MIT
"""Delinquency classification for non-performing loans.

Purpose:
    Map a days-past-due count to its regulatory classification bucket and
    the minimum loss provision that bucket mandates.

Layer:
    domain/services

Notes:
    - Stateless: classification is recomputed from the caller-supplied
      ``days_past_due`` on every call. Elapsed time is not tracked here.
    - Loans below 91 days past due are still performing and are not valid
      input for this engine.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Final

from coopledger.domain.enums.line_items import NplClassification
from coopledger.domain.exceptions.reports import InvalidDelinquencyError
from coopledger.domain.services.numeric_reconciliation import amount_from_percentage

NPL_MIN_DAYS_PAST_DUE: Final[int] = 91


@dataclass(frozen=True, slots=True)
class DelinquencyBucket:
    """Classification bucket.

    Attributes:
        classification: Regulatory classification.
        min_days: Inclusive lower bound on days past due.
        max_days: Inclusive upper bound, or None when unbounded.
        minimum_provision_percentage: Minimum provision as a percent of the
            outstanding balance.
    """

    classification: NplClassification
    min_days: int
    max_days: int | None
    minimum_provision_percentage: Decimal

    def contains(self, days_past_due: int) -> bool:
        if days_past_due < self.min_days:
            return False
        return self.max_days is None or days_past_due <= self.max_days


# Ordered by increasing severity; minimum provisions are non-decreasing.
DELINQUENCY_BUCKETS: Final[tuple[DelinquencyBucket, ...]] = (
    DelinquencyBucket(NplClassification.KURANG_LANCAR, 91, 120, Decimal("10")),
    DelinquencyBucket(NplClassification.DIRAGUKAN, 121, 180, Decimal("50")),
    DelinquencyBucket(NplClassification.MACET, 181, None, Decimal("100")),
)


def classify_delinquency(days_past_due: int) -> DelinquencyBucket:
    """Return the bucket implied by ``days_past_due``.

    Raises:
        InvalidDelinquencyError: If ``days_past_due`` is below 91.
    """
    for bucket in DELINQUENCY_BUCKETS:
        if bucket.contains(days_past_due):
            return bucket
    raise InvalidDelinquencyError(
        f"Loans less than {NPL_MIN_DAYS_PAST_DUE} days past due are not non-performing.",
        details={"days_past_due": days_past_due},
    )


def bucket_for(classification: NplClassification) -> DelinquencyBucket:
    for bucket in DELINQUENCY_BUCKETS:
        if bucket.classification is classification:
            return bucket
    raise KeyError(classification)


def minimum_provision_percentage(classification: NplClassification) -> Decimal:
    return bucket_for(classification).minimum_provision_percentage


def required_provision_amount(outstanding_balance: Decimal, percentage: Decimal) -> Decimal:
    """Provision implied by an outstanding balance and a provision percentage."""
    return amount_from_percentage(outstanding_balance, percentage)


__all__ = [
    "DELINQUENCY_BUCKETS",
    "NPL_MIN_DAYS_PAST_DUE",
    "DelinquencyBucket",
    "bucket_for",
    "classify_delinquency",
    "minimum_provision_percentage",
    "required_provision_amount",
]
