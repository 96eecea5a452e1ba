# src/coopledger/domain/entities/violation.py
# Copyright (c)
# SPDX-License-Identifier: MIT
"""Validation violations and their aggregate summary.

Purpose:
    Represent a single field-scoped rule failure produced by a report
    validator, plus a compact summary used by preview flows.

Layer:
    domain/entities

Notes:
    - Field paths are dotted, snake_case, and index line collections
      positionally (for example ``accounts.3.parent_code``).
    - Only ``BLOCKING`` violations gate persistence and submission.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from coopledger.domain.enums.financial_report import (
    ValidationSeverityLevel,
    ViolationSeverity,
)


@dataclass(frozen=True, slots=True)
class Violation:
    """Single rule failure.

    Attributes:
        field: Dotted path of the offending field.
        message: Human-readable explanation.
        severity: Whether the violation blocks persistence.
        code: Stable machine-readable rule code.
    """

    field: str
    message: str
    severity: ViolationSeverity = ViolationSeverity.BLOCKING
    code: str = "INVALID"

    @property
    def is_blocking(self) -> bool:
        return self.severity is ViolationSeverity.BLOCKING


@dataclass(frozen=True, slots=True)
class ValidationSummary:
    """Counts and aggregate severity of a validation run."""

    blocking_count: int
    warning_count: int
    level: ValidationSeverityLevel

    @property
    def is_valid(self) -> bool:
        return self.blocking_count == 0


def blocking_only(violations: Iterable[Violation]) -> list[Violation]:
    """Return the blocking subset, preserving order."""
    return [v for v in violations if v.is_blocking]


def warnings_only(violations: Iterable[Violation]) -> list[Violation]:
    """Return the warning subset, preserving order."""
    return [v for v in violations if not v.is_blocking]


def summarize_violations(violations: Iterable[Violation]) -> ValidationSummary:
    """Classify a violation list into an aggregate severity level.

    Levels:
        * critical: more than five blocking violations.
        * high: at least one blocking violation.
        * medium: more than ten warnings.
        * low: at least one warning.
        * none: clean.
    """
    items = list(violations)
    blocking = sum(1 for v in items if v.is_blocking)
    warnings = len(items) - blocking

    if blocking > 5:
        level = ValidationSeverityLevel.CRITICAL
    elif blocking > 0:
        level = ValidationSeverityLevel.HIGH
    elif warnings > 10:
        level = ValidationSeverityLevel.MEDIUM
    elif warnings > 0:
        level = ValidationSeverityLevel.LOW
    else:
        level = ValidationSeverityLevel.NONE

    return ValidationSummary(blocking_count=blocking, warning_count=warnings, level=level)


__all__ = [
    "ValidationSummary",
    "Violation",
    "blocking_only",
    "summarize_violations",
    "warnings_only",
]
