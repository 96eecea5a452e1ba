# src/coopledger/application/use_cases/reports/transition_financial_report.py
# Copyright (c)
# SPDX-License-Identifier: MIT
"""Use cases: Submit, approve, and reject financial reports.

Purpose:
    Drive a report through the review workflow. Each use case looks up the
    transition in the lifecycle table, stamps the header, persists it with a
    status/version check-and-set, and dispatches the notification only once
    the unit of work has committed.

Layer:
    application

Notes:
    - Submit re-validates the stored payload, including consistency with the
      approved reports of other kinds for the same year; a report that no
      longer passes (for example because of a date rule) cannot be submitted.
    - Notification failures are tolerated: the committed transition stands
      and the response reports ``notification_delivered=False``.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime

from coopledger.application.interfaces.report_metrics_port import (
    NullReportMetrics,
    ReportMetricsPort,
)
from coopledger.application.schemas.dto.financial_reports import (
    RejectFinancialReportRequestDTO,
    ReportActionRequestDTO,
    ReportTransitionResponseDTO,
)
from coopledger.application.services.lifecycle_events import LifecycleEventDispatcher
from coopledger.application.services.report_validation import ReportValidationService
from coopledger.application.uow import UnitOfWork, run_in_uow
from coopledger.application.use_cases.reports.common import (
    check_expected_version,
    get_reports_repository,
    load_related_payloads,
    require_report,
    utc_now,
)
from coopledger.domain.entities.financial_report import FinancialReport
from coopledger.domain.entities.violation import blocking_only
from coopledger.domain.enums.financial_report import ActorRole, LifecycleAction, LifecycleEffect
from coopledger.domain.exceptions.reports import (
    ReportError,
    ReportNotFoundError,
    ReportValidationError,
)
from coopledger.domain.interfaces.gateways.actor_directory import ActorDirectory
from coopledger.domain.services.report_lifecycle import (
    REJECTION_REASON_MAX_LENGTH,
    Transition,
    apply_transition,
    plan_transition,
)

logger = logging.getLogger(__name__)


class _ReportTransitionUseCase:
    """Shared flow for table-driven lifecycle transitions."""

    action: LifecycleAction

    def __init__(
        self,
        *,
        uow: UnitOfWork,
        actors: ActorDirectory,
        dispatcher: LifecycleEventDispatcher,
        clock: Callable[[], datetime] | None = None,
        metrics: ReportMetricsPort | None = None,
    ) -> None:
        self._uow = uow
        self._actors = actors
        self._dispatcher = dispatcher
        self._clock = clock or utc_now
        self._metrics = metrics or NullReportMetrics()

    async def _run(
        self,
        *,
        report_id: int,
        cooperative_id: int,
        actor_id: int,
        expected_version: int | None,
        reason: str | None = None,
        roles: frozenset[ActorRole] | None = None,
    ) -> ReportTransitionResponseDTO:
        event = f"financial_report.{self.action.value}"
        logger.info(
            f"{event}.start",
            extra={
                "report_id": report_id,
                "cooperative_id": cooperative_id,
                "actor_id": actor_id,
            },
        )
        if roles is None:
            roles = await self._actors.roles_for(actor_id, cooperative_id=cooperative_id)
        now = self._clock()

        async def _work(tx: UnitOfWork) -> tuple[FinancialReport, LifecycleEffect]:
            repo = get_reports_repository(tx)
            current = require_report(
                await repo.get_header(report_id, cooperative_id=cooperative_id),
                report_id=report_id,
                cooperative_id=cooperative_id,
            )
            try:
                transition = plan_transition(current.status, self.action, roles)
                check_expected_version(current, expected_version)
                await self._before_transition(tx, current, as_of=now)
                updated = self._apply(
                    current, transition, actor_id=actor_id, at=now, reason=reason
                )
                saved = await repo.save_transition(
                    updated,
                    expected_status=current.status,
                    expected_version=current.version,
                )
            except ReportError as exc:
                self._metrics.record_transition(
                    report_type=current.report_type.value,
                    action=self.action.value,
                    outcome=exc.code.lower(),
                )
                raise
            return saved, transition.effect

        saved, effect = await run_in_uow(self._uow, _work)
        self._metrics.record_transition(
            report_type=saved.report_type.value,
            action=self.action.value,
            outcome="success",
        )
        delivered = await self._dispatcher.dispatch(effect, saved)
        logger.info(
            f"{event}.success",
            extra={
                "report_id": saved.id,
                "cooperative_id": saved.cooperative_id,
                "status": saved.status.value,
                "version": saved.version,
                "notification_delivered": delivered,
            },
        )
        return ReportTransitionResponseDTO(report=saved, notification_delivered=delivered)

    async def _before_transition(
        self, tx: UnitOfWork, report: FinancialReport, *, as_of: datetime
    ) -> None:
        """Hook for checks that must pass before the header changes."""
        return None

    def _apply(
        self,
        report: FinancialReport,
        transition: Transition,
        *,
        actor_id: int,
        at: datetime,
        reason: str | None,
    ) -> FinancialReport:
        return apply_transition(report, transition, actor_id=actor_id, at=at, reason=reason)


class SubmitFinancialReportUseCase(_ReportTransitionUseCase):
    """Move a draft to ``submitted`` after re-validating its stored payload."""

    action = LifecycleAction.SUBMIT

    def __init__(
        self,
        *,
        uow: UnitOfWork,
        actors: ActorDirectory,
        dispatcher: LifecycleEventDispatcher,
        validation: ReportValidationService,
        clock: Callable[[], datetime] | None = None,
        metrics: ReportMetricsPort | None = None,
    ) -> None:
        super().__init__(
            uow=uow, actors=actors, dispatcher=dispatcher, clock=clock, metrics=metrics
        )
        self._validation = validation

    async def execute(self, req: ReportActionRequestDTO) -> ReportTransitionResponseDTO:
        """Submit the report for review.

        Raises:
            ReportNotFoundError: If the report is not visible to the cooperative.
            ReportStateError: If the report is not a draft.
            ReportAuthorizationError: If the actor is not a preparer.
            ReportValidationError: If the stored payload no longer validates.
            ReportConflictError: If the report changed concurrently.
        """
        return await self._run(
            report_id=req.report_id,
            cooperative_id=req.cooperative_id,
            actor_id=req.actor_id,
            expected_version=req.expected_version,
        )

    async def _before_transition(
        self, tx: UnitOfWork, report: FinancialReport, *, as_of: datetime
    ) -> None:
        repo = get_reports_repository(tx)
        stored = await repo.get(report.id or 0, cooperative_id=report.cooperative_id)
        if stored is None:
            raise ReportNotFoundError(
                "Financial report payload not found.",
                details={"report_id": report.id, "cooperative_id": report.cooperative_id},
            )
        related = await load_related_payloads(
            repo,
            cooperative_id=report.cooperative_id,
            reporting_year=report.reporting_year,
            exclude_report_id=report.id,
        )
        violations = self._validation.validate(
            report.report_type, stored.payload, as_of=as_of.date(), related=related
        )
        if blocking_only(violations):
            raise ReportValidationError(
                "Report cannot be submitted until its content validates.",
                violations=violations,
                details={"report_id": report.id},
            )


class ApproveFinancialReportUseCase(_ReportTransitionUseCase):
    """Move a submitted report to ``approved``."""

    action = LifecycleAction.APPROVE

    async def execute(
        self,
        req: ReportActionRequestDTO,
        *,
        roles: frozenset[ActorRole] | None = None,
    ) -> ReportTransitionResponseDTO:
        """Approve the report.

        Args:
            req: Report reference and acting user.
            roles: Pre-resolved roles of the actor, used by bulk approval.
        """
        return await self._run(
            report_id=req.report_id,
            cooperative_id=req.cooperative_id,
            actor_id=req.actor_id,
            expected_version=req.expected_version,
            roles=roles,
        )


class RejectFinancialReportUseCase(_ReportTransitionUseCase):
    """Move a submitted report to ``rejected`` with a mandatory reason."""

    action = LifecycleAction.REJECT

    def __init__(
        self,
        *,
        uow: UnitOfWork,
        actors: ActorDirectory,
        dispatcher: LifecycleEventDispatcher,
        clock: Callable[[], datetime] | None = None,
        metrics: ReportMetricsPort | None = None,
        reason_max_length: int = REJECTION_REASON_MAX_LENGTH,
    ) -> None:
        super().__init__(
            uow=uow, actors=actors, dispatcher=dispatcher, clock=clock, metrics=metrics
        )
        self._reason_max_length = reason_max_length

    async def execute(self, req: RejectFinancialReportRequestDTO) -> ReportTransitionResponseDTO:
        """Reject the report.

        Raises:
            ReportValidationError: If the reason is blank or too long.
        """
        return await self._run(
            report_id=req.report_id,
            cooperative_id=req.cooperative_id,
            actor_id=req.actor_id,
            expected_version=req.expected_version,
            reason=req.reason,
        )

    def _apply(
        self,
        report: FinancialReport,
        transition: Transition,
        *,
        actor_id: int,
        at: datetime,
        reason: str | None,
    ) -> FinancialReport:
        return apply_transition(
            report,
            transition,
            actor_id=actor_id,
            at=at,
            reason=reason,
            reason_max_length=self._reason_max_length,
        )


__all__ = [
    "ApproveFinancialReportUseCase",
    "RejectFinancialReportUseCase",
    "SubmitFinancialReportUseCase",
]
