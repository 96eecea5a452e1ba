# src/coopledger/domain/services/report_validators/base.py
# Copyright (c)
# SPDX-License-Identifier: MIT
"""Report validator contract and shared rule helpers.

Purpose:
    Define the :class:`ReportValidator` protocol implemented by every report
    kind, plus a small :class:`ViolationCollector` that accumulates
    violations across the structural and cross-field phases.

Layer:
    domain/services/report_validators

Notes:
    - Validators are pure: no logging, no I/O, no mutation of inputs.
    - ``as_of`` is supplied by the caller so date rules stay deterministic.
"""

from __future__ import annotations

from collections.abc import Callable, Hashable, Iterable, Sequence
from datetime import date
from decimal import Decimal
from typing import Any, Generic, Protocol, TypeVar, runtime_checkable

from coopledger.domain.entities.report_payloads import PriorPeriodBaseline
from coopledger.domain.entities.violation import Violation
from coopledger.domain.enums.financial_report import ReportType, ViolationSeverity
from coopledger.domain.services.numeric_reconciliation import MAX_AMOUNT, ZERO

PayloadT = TypeVar("PayloadT")
PayloadT_contra = TypeVar("PayloadT_contra", contravariant=True)
ItemT = TypeVar("ItemT")


@runtime_checkable
class ReportValidator(Protocol[PayloadT_contra]):
    """Validation strategy for one report kind."""

    report_type: ReportType

    def validate(
        self,
        payload: PayloadT_contra,
        baseline: PriorPeriodBaseline | None = None,
        *,
        as_of: date,
    ) -> list[Violation]:
        """Return every violation found in ``payload``, in rule order."""
        ...


class ViolationCollector:
    """Ordered accumulator for violations with bound-check shortcuts."""

    def __init__(self) -> None:
        self._items: list[Violation] = []

    @property
    def violations(self) -> list[Violation]:
        return list(self._items)

    def blocking(self, field: str, message: str, *, code: str = "INVALID") -> None:
        self._items.append(Violation(field, message, ViolationSeverity.BLOCKING, code))

    def warning(self, field: str, message: str, *, code: str = "WARNING") -> None:
        self._items.append(Violation(field, message, ViolationSeverity.WARNING, code))

    def has_blocking_for(self, prefix: str) -> bool:
        return any(v.is_blocking and v.field.startswith(prefix) for v in self._items)

    # ------------------------------------------------------------------ #
    # Structural shortcuts                                               #
    # ------------------------------------------------------------------ #

    def require_amount(
        self,
        field: str,
        value: Decimal | None,
        *,
        allow_negative: bool = False,
        strictly_positive: bool = False,
    ) -> None:
        """Check sign and the global monetary cap."""
        if value is None:
            return
        if strictly_positive and value <= ZERO:
            self.blocking(field, "Amount must be greater than zero.", code="AMOUNT_NOT_POSITIVE")
            return
        if not allow_negative and value < ZERO:
            self.blocking(field, "Amount must not be negative.", code="AMOUNT_NEGATIVE")
            return
        if abs(value) > MAX_AMOUNT:
            self.blocking(
                field,
                f"Amount exceeds the maximum of {MAX_AMOUNT}.",
                code="AMOUNT_TOO_LARGE",
            )

    def require_range(
        self,
        field: str,
        value: Decimal | int | None,
        *,
        minimum: Decimal | int,
        maximum: Decimal | int,
    ) -> None:
        if value is None:
            return
        if value < minimum or value > maximum:
            self.blocking(
                field,
                f"Value must be between {minimum} and {maximum}.",
                code="OUT_OF_RANGE",
            )

    def require_text(self, field: str, value: str | None, *, max_length: int) -> None:
        if value is None or not value.strip():
            self.blocking(field, "Value is required.", code="REQUIRED")
        elif len(value) > max_length:
            self.blocking(
                field,
                f"Value must be at most {max_length} characters.",
                code="TOO_LONG",
            )

    def require_min_count(self, field: str, items: Sequence[Any], minimum: int, what: str) -> None:
        if len(items) < minimum:
            self.blocking(
                field,
                f"At least {minimum} {what} required.",
                code="TOO_FEW_LINES",
            )

    def require_unique(
        self,
        items: Iterable[ItemT],
        key: Callable[[ItemT], Hashable],
        field: Callable[[int], str],
        describe: Callable[[ItemT], str],
    ) -> None:
        """Flag every repeated key after its first occurrence."""
        seen: set[Hashable] = set()
        for index, item in enumerate(items):
            k = key(item)
            if k in seen:
                self.blocking(
                    field(index),
                    f"Duplicate {describe(item)}.",
                    code="DUPLICATE",
                )
            else:
                seen.add(k)


class BaseReportValidator(Generic[PayloadT]):
    """Template for validators: structural phase, cross-field phase, baseline."""

    report_type: ReportType
    payload_type: type

    def validate(
        self,
        payload: PayloadT,
        baseline: PriorPeriodBaseline | None = None,
        *,
        as_of: date,
    ) -> list[Violation]:
        if not isinstance(payload, self.payload_type):
            raise TypeError(
                f"{type(self).__name__} expects {self.payload_type.__name__}, "
                f"got {type(payload).__name__}."
            )

        out = ViolationCollector()
        self._check_structure(payload, out, as_of=as_of)
        self._check_consistency(payload, out)
        if baseline is not None and isinstance(baseline.payload, self.payload_type):
            self._check_baseline(payload, baseline.payload, out)
        return out.violations

    def _check_structure(self, payload: PayloadT, out: ViolationCollector, *, as_of: date) -> None:
        raise NotImplementedError

    def _check_consistency(self, payload: PayloadT, out: ViolationCollector) -> None:
        raise NotImplementedError

    def _check_baseline(self, payload: PayloadT, baseline: Any, out: ViolationCollector) -> None:
        """Compare against the prior period. Default: nothing to compare."""
        return None


__all__ = ["BaseReportValidator", "ReportValidator", "ViolationCollector"]
