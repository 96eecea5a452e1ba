# src/coopledger/domain/services/report_lifecycle.py
# Copyright (c)
# SPDX-License-Identifier: MIT
"""Report lifecycle state machine.

Purpose:
    Govern status transitions of a report instance through an explicit
    transition table ``(status, action) -> (roles, next status, effect)``.
    Anything absent from the table is rejected.

        draft --submit--> submitted --approve--> approved
                                    --reject---> rejected

Layer:
    domain/services

Notes:
    - Pure: the caller passes the actor, roles, and clock reading explicitly.
    - Status is checked before role, so an illegal action yields a state
      error regardless of who asked for it.
    - ``delete`` has no next status; the report ceases to exist.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, replace
from datetime import datetime
from types import MappingProxyType
from typing import Final

from coopledger.domain.entities.financial_report import FinancialReport
from coopledger.domain.entities.violation import Violation
from coopledger.domain.enums.financial_report import (
    ActorRole,
    LifecycleAction,
    LifecycleEffect,
    ReportStatus,
)
from coopledger.domain.exceptions.reports import (
    ReportAuthorizationError,
    ReportStateError,
    ReportValidationError,
)

REJECTION_REASON_MAX_LENGTH: Final[int] = 1000

PREPARER_ROLES: Final[frozenset[ActorRole]] = frozenset({ActorRole.ADMIN_KOPERASI})
APPROVER_ROLES: Final[frozenset[ActorRole]] = frozenset({ActorRole.ADMIN_DINAS})


@dataclass(frozen=True, slots=True)
class Transition:
    """Row of the transition table.

    Attributes:
        action: Requested action.
        from_status: Status the report must be in.
        allowed_roles: Roles permitted to perform the action.
        to_status: Resulting status, or None when the report is deleted.
        effect: Side effect to emit once the transition is committed.
    """

    action: LifecycleAction
    from_status: ReportStatus
    allowed_roles: frozenset[ActorRole]
    to_status: ReportStatus | None
    effect: LifecycleEffect = LifecycleEffect.NONE


TRANSITIONS: Final[Mapping[tuple[ReportStatus, LifecycleAction], Transition]] = MappingProxyType(
    {
        (t.from_status, t.action): t
        for t in (
            Transition(
                LifecycleAction.UPDATE, ReportStatus.DRAFT, PREPARER_ROLES, ReportStatus.DRAFT
            ),
            Transition(LifecycleAction.DELETE, ReportStatus.DRAFT, PREPARER_ROLES, None),
            Transition(
                LifecycleAction.SUBMIT,
                ReportStatus.DRAFT,
                PREPARER_ROLES,
                ReportStatus.SUBMITTED,
                LifecycleEffect.NOTIFY_SUBMITTED,
            ),
            Transition(
                LifecycleAction.APPROVE,
                ReportStatus.SUBMITTED,
                APPROVER_ROLES,
                ReportStatus.APPROVED,
                LifecycleEffect.NOTIFY_APPROVED,
            ),
            Transition(
                LifecycleAction.REJECT,
                ReportStatus.SUBMITTED,
                APPROVER_ROLES,
                ReportStatus.REJECTED,
                LifecycleEffect.NOTIFY_REJECTED,
            ),
        )
    }
)


def allowed_actions(status: ReportStatus) -> tuple[LifecycleAction, ...]:
    """Return the actions the table permits from ``status``."""
    return tuple(action for (from_status, action) in TRANSITIONS if from_status is status)


def authorize_create(roles: Iterable[ActorRole]) -> None:
    """Raise unless the actor may create reports.

    Raises:
        ReportAuthorizationError: If no preparer role is held.
    """
    held = frozenset(roles)
    if not held & PREPARER_ROLES:
        raise ReportAuthorizationError(
            "Actor is not allowed to create financial reports.",
            details={
                "action": LifecycleAction.CREATE.value,
                "roles": sorted(r.value for r in held),
            },
        )


def plan_transition(
    status: ReportStatus,
    action: LifecycleAction,
    roles: Iterable[ActorRole],
) -> Transition:
    """Look up and authorize a transition.

    Raises:
        ReportStateError: If ``action`` is not permitted from ``status``.
        ReportAuthorizationError: If none of ``roles`` may perform it.
    """
    transition = TRANSITIONS.get((status, action))
    if transition is None:
        raise ReportStateError(
            f"Cannot {action.value} a report in status '{status.value}'.",
            details={
                "status": status.value,
                "action": action.value,
                "allowed_actions": [a.value for a in allowed_actions(status)],
            },
        )

    held = frozenset(roles)
    if not held & transition.allowed_roles:
        raise ReportAuthorizationError(
            f"Actor is not allowed to {action.value} this report.",
            details={
                "action": action.value,
                "required_roles": sorted(r.value for r in transition.allowed_roles),
                "roles": sorted(r.value for r in held),
            },
        )
    return transition


def normalize_rejection_reason(
    reason: str | None, *, max_length: int = REJECTION_REASON_MAX_LENGTH
) -> str:
    """Return the trimmed rejection reason.

    Raises:
        ReportValidationError: If the reason is blank or too long.
    """
    text = (reason or "").strip()
    if not text:
        message = "A rejection reason is required."
    elif len(text) > max_length:
        message = f"Rejection reason must be at most {max_length} characters."
    else:
        return text
    raise ReportValidationError(
        message,
        violations=(Violation("rejection_reason", message, code="REJECTION_REASON"),),
    )


def apply_transition(
    report: FinancialReport,
    transition: Transition,
    *,
    actor_id: int,
    at: datetime,
    reason: str | None = None,
    reason_max_length: int = REJECTION_REASON_MAX_LENGTH,
) -> FinancialReport:
    """Return the header after ``transition``, with audit stamps set.

    The version is not bumped here; the persistence port does that when the
    check-and-set succeeds.

    Raises:
        ReportStateError: If the report is not in the transition's source
            status, or the transition deletes the report.
    """
    if report.status is not transition.from_status:
        raise ReportStateError(
            f"Report is '{report.status.value}', expected '{transition.from_status.value}'.",
            details={"report_id": report.id, "status": report.status.value},
        )
    if transition.to_status is None:
        raise ReportStateError(
            f"Action '{transition.action.value}' does not produce a new status.",
            details={"report_id": report.id},
        )

    changes: dict[str, object] = {"status": transition.to_status, "updated_at": at}
    if transition.action is LifecycleAction.SUBMIT:
        changes.update(submitted_at=at, submitted_by=actor_id)
    elif transition.action is LifecycleAction.APPROVE:
        changes.update(approved_at=at, approved_by=actor_id)
    elif transition.action is LifecycleAction.REJECT:
        changes.update(
            rejected_at=at,
            rejected_by=actor_id,
            rejection_reason=normalize_rejection_reason(reason, max_length=reason_max_length),
        )
    return replace(report, **changes)


__all__ = [
    "APPROVER_ROLES",
    "PREPARER_ROLES",
    "REJECTION_REASON_MAX_LENGTH",
    "TRANSITIONS",
    "Transition",
    "allowed_actions",
    "apply_transition",
    "authorize_create",
    "normalize_rejection_reason",
    "plan_transition",
]
