# src/coopledger/domain/exceptions/reports.py
# Copyright (c)
# SPDX-License-Identifier: MIT
"""Financial report domain exceptions.

Purpose:
    Typed failures raised by report validation, lifecycle, and persistence
    flows. Each class carries a stable ``code`` so callers can tell a data
    problem from a workflow, authorization, or infrastructure problem.

Layer:
    domain/exceptions
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from coopledger.domain.entities.violation import Violation
from coopledger.domain.exceptions.base import DomainError


class ReportError(DomainError):
    """Base class for financial report errors."""

    code = "REPORT_ERROR"


class ReportValidationError(ReportError):
    """Structural or cross-field validation failed.

    Attributes:
        violations: Every violation collected by the failed run, in rule order.
    """

    code = "REPORT_VALIDATION_FAILED"

    def __init__(
        self,
        message: str = "Report validation failed.",
        *,
        violations: Iterable[Violation] = (),
        details: dict[str, Any] | None = None,
    ) -> None:
        self.violations: tuple[Violation, ...] = tuple(violations)
        merged = {"violation_count": len(self.violations)}
        merged.update(details or {})
        super().__init__(message, details=merged)


class ReportStateError(ReportError):
    """Requested lifecycle action is illegal from the report's current status."""

    code = "REPORT_STATE_INVALID"


class ReportAuthorizationError(ReportError):
    """Actor lacks the role required for the requested action."""

    code = "REPORT_FORBIDDEN"


class ReportConflictError(ReportError):
    """Uniqueness clash or optimistic-concurrency mismatch."""

    code = "REPORT_CONFLICT"


class ReportNotFoundError(ReportError):
    """Report does not exist within the caller's cooperative scope."""

    code = "REPORT_NOT_FOUND"


class ReportDependencyError(ReportError):
    """An external collaborator failed."""

    code = "REPORT_DEPENDENCY_FAILED"


class ReportPersistenceError(ReportDependencyError):
    """The persistence collaborator failed; the unit of work is rolled back."""

    code = "REPORT_PERSISTENCE_FAILED"


class NotificationDeliveryError(ReportDependencyError):
    """The notification collaborator failed to accept a lifecycle event."""

    code = "REPORT_NOTIFICATION_FAILED"


class InvalidDelinquencyError(DomainError):
    """Days past due fall outside the non-performing range."""

    code = "INVALID_DELINQUENCY"


__all__ = [
    "InvalidDelinquencyError",
    "NotificationDeliveryError",
    "ReportAuthorizationError",
    "ReportConflictError",
    "ReportDependencyError",
    "ReportError",
    "ReportNotFoundError",
    "ReportPersistenceError",
    "ReportStateError",
    "ReportValidationError",
]
