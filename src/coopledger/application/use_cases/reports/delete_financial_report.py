# src/coopledger/application/use_cases/reports/delete_financial_report.py
# Copyright (c)
# SPDX-License-Identifier: MIT
"""Use case: Delete a draft financial report and its line items."""

from __future__ import annotations

import logging

from coopledger.application.interfaces.report_metrics_port import (
    NullReportMetrics,
    ReportMetricsPort,
)
from coopledger.application.schemas.dto.financial_reports import ReportActionRequestDTO
from coopledger.application.uow import UnitOfWork, run_in_uow
from coopledger.application.use_cases.reports.common import (
    check_expected_version,
    get_reports_repository,
    require_report,
)
from coopledger.domain.enums.financial_report import LifecycleAction, ReportType
from coopledger.domain.exceptions.reports import ReportError
from coopledger.domain.interfaces.gateways.actor_directory import ActorDirectory
from coopledger.domain.services.report_lifecycle import plan_transition

logger = logging.getLogger(__name__)


class DeleteFinancialReportUseCase:
    def __init__(
        self,
        *,
        uow: UnitOfWork,
        actors: ActorDirectory,
        metrics: ReportMetricsPort | None = None,
    ) -> None:
        self._uow = uow
        self._actors = actors
        self._metrics = metrics or NullReportMetrics()

    async def execute(self, req: ReportActionRequestDTO) -> None:
        """Delete the draft.

        Raises:
            ReportNotFoundError: If the report is not visible to the cooperative.
            ReportStateError: If the report is no longer a draft.
            ReportAuthorizationError: If the actor is not a preparer.
            ReportConflictError: If the report changed since it was read.
        """
        logger.info(
            "financial_report.delete.start",
            extra={
                "report_id": req.report_id,
                "cooperative_id": req.cooperative_id,
                "actor_id": req.actor_id,
            },
        )
        roles = await self._actors.roles_for(req.actor_id, cooperative_id=req.cooperative_id)

        async def _work(tx: UnitOfWork) -> ReportType:
            repo = get_reports_repository(tx)
            current = require_report(
                await repo.get_header(req.report_id, cooperative_id=req.cooperative_id),
                report_id=req.report_id,
                cooperative_id=req.cooperative_id,
            )
            try:
                plan_transition(current.status, LifecycleAction.DELETE, roles)
                check_expected_version(current, req.expected_version)
                await repo.delete(
                    req.report_id,
                    cooperative_id=req.cooperative_id,
                    expected_version=current.version,
                )
            except ReportError as exc:
                self._metrics.record_transition(
                    report_type=current.report_type.value,
                    action=LifecycleAction.DELETE.value,
                    outcome=exc.code.lower(),
                )
                raise
            return current.report_type

        report_type = await run_in_uow(self._uow, _work)
        self._metrics.record_transition(
            report_type=report_type.value,
            action=LifecycleAction.DELETE.value,
            outcome="success",
        )
        logger.info(
            "financial_report.delete.success",
            extra={"report_id": req.report_id, "cooperative_id": req.cooperative_id},
        )


__all__ = ["DeleteFinancialReportUseCase"]
