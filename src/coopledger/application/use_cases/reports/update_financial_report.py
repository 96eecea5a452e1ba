# src/coopledger/application/use_cases/reports/update_financial_report.py
# Copyright (c)
# SPDX-License-Identifier: MIT
"""Use case: Replace the content of a draft financial report.

Layer:
    application

Notes:
    - Only drafts are editable; status is checked before role.
    - The payload replaces every line item. Report type and reporting year
      are part of the natural key and cannot change.
    - The write is a version check-and-set, so two concurrent edits of the
      same draft cannot both succeed.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import replace
from datetime import datetime

from coopledger.application.interfaces.report_metrics_port import (
    NullReportMetrics,
    ReportMetricsPort,
)
from coopledger.application.schemas.dto.financial_reports import (
    UpdateFinancialReportRequestDTO,
)
from coopledger.application.services.report_validation import ReportValidationService
from coopledger.application.uow import UnitOfWork, run_in_uow
from coopledger.application.use_cases.reports.common import (
    check_expected_version,
    get_reports_repository,
    load_related_payloads,
    parse_or_raise,
    require_report,
    utc_now,
)
from coopledger.domain.entities.financial_report import ReportWriteResult
from coopledger.domain.entities.report_payloads import PriorPeriodBaseline
from coopledger.domain.entities.violation import blocking_only, warnings_only
from coopledger.domain.enums.financial_report import LifecycleAction
from coopledger.domain.exceptions.reports import ReportError, ReportValidationError
from coopledger.domain.interfaces.gateways.actor_directory import ActorDirectory
from coopledger.domain.services.report_header_rules import validate_report_header
from coopledger.domain.services.report_lifecycle import plan_transition

logger = logging.getLogger(__name__)


class UpdateFinancialReportUseCase:
    """Validate and store a replacement payload for a draft report."""

    def __init__(
        self,
        *,
        uow: UnitOfWork,
        actors: ActorDirectory,
        validation: ReportValidationService,
        clock: Callable[[], datetime] | None = None,
        metrics: ReportMetricsPort | None = None,
    ) -> None:
        self._uow = uow
        self._actors = actors
        self._validation = validation
        self._clock = clock or utc_now
        self._metrics = metrics or NullReportMetrics()

    async def execute(self, req: UpdateFinancialReportRequestDTO) -> ReportWriteResult:
        """Replace the draft's payload.

        Raises:
            ReportNotFoundError: If the report is not visible to the cooperative.
            ReportStateError: If the report is no longer a draft.
            ReportAuthorizationError: If the actor is not a preparer.
            ReportValidationError: If any blocking violation was found.
            ReportConflictError: If the report changed since it was read.
        """
        logger.info(
            "financial_report.update.start",
            extra={
                "report_id": req.report_id,
                "cooperative_id": req.cooperative_id,
                "actor_id": req.actor_id,
            },
        )
        roles = await self._actors.roles_for(req.actor_id, cooperative_id=req.cooperative_id)
        now = self._clock()
        as_of = now.date()

        async def _work(tx: UnitOfWork) -> ReportWriteResult:
            repo = get_reports_repository(tx)
            current = require_report(
                await repo.get_header(req.report_id, cooperative_id=req.cooperative_id),
                report_id=req.report_id,
                cooperative_id=req.cooperative_id,
            )
            try:
                plan_transition(current.status, LifecycleAction.UPDATE, roles)
                check_expected_version(current, req.expected_version)

                period = req.reporting_period or current.reporting_period
                notes = req.notes if req.notes is not None else current.notes
                header_violations = validate_report_header(
                    report_type=current.report_type,
                    reporting_year=current.reporting_year,
                    reporting_period=period,
                    notes=notes,
                    as_of=as_of,
                )
                payload = parse_or_raise(
                    self._validation, current.report_type, req.payload, extra=header_violations
                )

                prior = await repo.find_prior_period(
                    cooperative_id=current.cooperative_id,
                    report_type=current.report_type,
                    reporting_year=current.reporting_year,
                )
                baseline = (
                    PriorPeriodBaseline(prior.report.reporting_year, prior.payload)
                    if prior
                    else None
                )
                related = await load_related_payloads(
                    repo,
                    cooperative_id=current.cooperative_id,
                    reporting_year=current.reporting_year,
                    exclude_report_id=current.id,
                )
                violations = header_violations + self._validation.validate(
                    current.report_type, payload, baseline, as_of=as_of, related=related
                )
                if blocking_only(violations):
                    raise ReportValidationError(
                        violations=violations,
                        details={"report_id": current.id},
                    )

                saved = await repo.replace_payload(
                    replace(current, reporting_period=period, notes=notes, updated_at=now),
                    payload,
                    expected_version=current.version,
                )
            except ReportError as exc:
                self._metrics.record_transition(
                    report_type=current.report_type.value,
                    action=LifecycleAction.UPDATE.value,
                    outcome=exc.code.lower(),
                )
                raise

            return ReportWriteResult(
                report=saved, payload=payload, warnings=tuple(warnings_only(violations))
            )

        result = await run_in_uow(self._uow, _work)
        self._metrics.record_transition(
            report_type=result.report.report_type.value,
            action=LifecycleAction.UPDATE.value,
            outcome="success",
        )
        logger.info(
            "financial_report.update.success",
            extra={
                "report_id": result.report.id,
                "cooperative_id": req.cooperative_id,
                "version": result.report.version,
                "warnings": len(result.warnings),
            },
        )
        return result


__all__ = ["UpdateFinancialReportUseCase"]
