# src/coopledger/domain/services/numeric_reconciliation.py
# Copyright (c)
# SPDX-License-Identifier: MIT
"""Tolerance-based numeric reconciliation helpers.

Purpose:
    Shared arithmetic for report validators: absolute-difference comparison
    with named tolerances, currency-safe summation, and percentage helpers.

Layer:
    domain/services

Notes:
    - Pure functions over :class:`decimal.Decimal`; no state, no logging.
    - Tolerances are absolute and inclusive: a difference equal to the
      tolerance still reconciles.
"""

from __future__ import annotations

from collections.abc import Iterable
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Final

# Per-line derived amounts (one minor currency unit).
LINE_TOLERANCE: Final[Decimal] = Decimal("1")
# Report-wide totals aggregated over many lines.
AGGREGATE_TOLERANCE: Final[Decimal] = Decimal("10")
# Percentage-point tolerance for declared variance percentages.
PERCENTAGE_TOLERANCE: Final[Decimal] = Decimal("0.1")
# Quarterly allocations must add up to 100 percent.
ALLOCATION_TOLERANCE: Final[Decimal] = Decimal("0.01")

MAX_AMOUNT: Final[Decimal] = Decimal("999999999999.99")
ONE_HUNDRED: Final[Decimal] = Decimal("100")
ZERO: Final[Decimal] = Decimal("0")

_CENT: Final[Decimal] = Decimal("0.01")


def to_decimal(value: Decimal | int | float | str) -> Decimal:
    """Coerce a numeric value to Decimal without binary float artefacts.

    Raises:
        ValueError: If the value is not a finite number.
    """
    if isinstance(value, Decimal):
        result = value
    else:
        try:
            result = Decimal(str(value))
        except InvalidOperation as exc:
            raise ValueError(f"Not a decimal number: {value!r}") from exc
    if not result.is_finite():
        raise ValueError(f"Not a finite decimal number: {value!r}")
    return result


def quantize_money(value: Decimal) -> Decimal:
    """Round to two decimal places, half-up."""
    return value.quantize(_CENT, rounding=ROUND_HALF_UP)


def reconciles(actual: Decimal, expected: Decimal, tolerance: Decimal) -> bool:
    """Return True when ``|actual - expected| <= tolerance``."""
    return abs(actual - expected) <= tolerance


def rounded_terms_tolerance(terms: int) -> Decimal:
    """Tolerance for an amount derived from independently rounded terms.

    Each rounded term may drift by one minor unit, so the allowed drift is
    one line tolerance per term.
    """
    return LINE_TOLERANCE * max(terms, 1)


def sum_amounts(values: Iterable[Decimal]) -> Decimal:
    total = ZERO
    for value in values:
        total += value
    return total


def within_amount_cap(value: Decimal, *, allow_negative: bool = False) -> bool:
    """Return True when a monetary value respects sign and magnitude limits."""
    if not allow_negative and value < ZERO:
        return False
    return abs(value) <= MAX_AMOUNT


def percentage_of(part: Decimal, whole: Decimal) -> Decimal | None:
    """Return ``part / whole * 100`` or None when ``whole`` is zero."""
    if whole == ZERO:
        return None
    return part / whole * ONE_HUNDRED


def percentage_change(current: Decimal, previous: Decimal) -> Decimal | None:
    """Return the percent change from ``previous`` to ``current``.

    None when ``previous`` is zero, since the change is undefined.
    """
    if previous == ZERO:
        return None
    return (current - previous) / previous * ONE_HUNDRED


def amount_from_percentage(base: Decimal, percentage: Decimal) -> Decimal:
    return base * percentage / ONE_HUNDRED


__all__ = [
    "AGGREGATE_TOLERANCE",
    "ALLOCATION_TOLERANCE",
    "LINE_TOLERANCE",
    "MAX_AMOUNT",
    "ONE_HUNDRED",
    "PERCENTAGE_TOLERANCE",
    "ZERO",
    "amount_from_percentage",
    "percentage_change",
    "percentage_of",
    "quantize_money",
    "reconciles",
    "rounded_terms_tolerance",
    "sum_amounts",
    "to_decimal",
    "within_amount_cap",
]
