# src/coopledger/application/use_cases/reports/create_financial_report.py
# Copyright (c)
# SPDX-License-Identifier: MIT
"""Use case: Create a draft financial report.

Purpose:
    Validate a report document end to end and persist it as a new draft for
    (cooperative, report type, reporting year).

Layer:
    application

Notes:
    - Roles are resolved before any database work; only preparers may create.
    - Header rules, structural parsing, and content rules all run before the
      insert, so a rejected document never touches storage. Header and
      content violations are reported together; only a document that does
      not parse skips the content rules.
    - Content rules include consistency with the approved reports of other
      kinds for the same cooperative and year.
    - The prior-period baseline, the uniqueness pre-check, and the insert run
      in one unit of work. The repository still maps a concurrent duplicate
      insert to ``ReportConflictError``.
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
    CreateFinancialReportRequestDTO,
)
from coopledger.application.services.report_validation import ReportValidationService
from coopledger.application.uow import UnitOfWork, run_in_uow
from coopledger.application.use_cases.reports.common import (
    get_reports_repository,
    load_related_payloads,
    parse_or_raise,
    utc_now,
)
from coopledger.domain.entities.financial_report import FinancialReport, ReportWriteResult
from coopledger.domain.entities.report_payloads import PriorPeriodBaseline
from coopledger.domain.entities.violation import blocking_only, warnings_only
from coopledger.domain.enums.financial_report import LifecycleAction, ReportStatus
from coopledger.domain.exceptions.reports import (
    ReportConflictError,
    ReportError,
    ReportValidationError,
)
from coopledger.domain.interfaces.gateways.actor_directory import ActorDirectory
from coopledger.domain.services.report_header_rules import validate_report_header
from coopledger.domain.services.report_lifecycle import authorize_create

logger = logging.getLogger(__name__)


class CreateFinancialReportUseCase:
    """Create a draft report after validating header and content.

    Args:
        uow: Unit of work resolving the reports repository.
        actors: Directory resolving the acting user's roles.
        validation: Parser and content validator for report documents.
        clock: Returns the current UTC time; injected for tests.
        metrics: Optional lifecycle metrics sink.
    """

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

    async def execute(self, req: CreateFinancialReportRequestDTO) -> ReportWriteResult:
        """Create the report.

        Returns:
            The persisted header and payload plus any non-blocking warnings.

        Raises:
            ReportAuthorizationError: If the actor is not a preparer.
            ReportValidationError: If any blocking violation was found.
            ReportConflictError: If a report already exists for the natural key.
            ReportPersistenceError: If storage fails.
        """
        logger.info(
            "financial_report.create.start",
            extra={
                "cooperative_id": req.cooperative_id,
                "actor_id": req.actor_id,
                "report_type": req.report_type.value,
                "reporting_year": req.reporting_year,
            },
        )
        try:
            result = await self._create(req)
        except ReportError as exc:
            self._metrics.record_transition(
                report_type=req.report_type.value,
                action=LifecycleAction.CREATE.value,
                outcome=exc.code.lower(),
            )
            raise

        self._metrics.record_transition(
            report_type=req.report_type.value,
            action=LifecycleAction.CREATE.value,
            outcome="success",
        )
        logger.info(
            "financial_report.create.success",
            extra={
                "report_id": result.report.id,
                "cooperative_id": req.cooperative_id,
                "report_type": req.report_type.value,
                "reporting_year": req.reporting_year,
                "warnings": len(result.warnings),
            },
        )
        return result

    async def _create(self, req: CreateFinancialReportRequestDTO) -> ReportWriteResult:
        roles = await self._actors.roles_for(req.actor_id, cooperative_id=req.cooperative_id)
        authorize_create(roles)

        now = self._clock()
        as_of = now.date()
        header_violations = validate_report_header(
            report_type=req.report_type,
            reporting_year=req.reporting_year,
            reporting_period=req.reporting_period,
            notes=req.notes,
            as_of=as_of,
        )
        payload = parse_or_raise(
            self._validation, req.report_type, req.payload, extra=header_violations
        )

        async def _work(tx: UnitOfWork) -> ReportWriteResult:
            repo = get_reports_repository(tx)

            prior = await repo.find_prior_period(
                cooperative_id=req.cooperative_id,
                report_type=req.report_type,
                reporting_year=req.reporting_year,
            )
            baseline = (
                PriorPeriodBaseline(prior.report.reporting_year, prior.payload) if prior else None
            )
            related = await load_related_payloads(
                repo, cooperative_id=req.cooperative_id, reporting_year=req.reporting_year
            )
            violations = header_violations + self._validation.validate(
                req.report_type, payload, baseline, as_of=as_of, related=related
            )
            if blocking_only(violations):
                raise ReportValidationError(
                    violations=violations,
                    details={"report_type": req.report_type.value},
                )

            existing = await repo.get_by_natural_key(
                cooperative_id=req.cooperative_id,
                report_type=req.report_type,
                reporting_year=req.reporting_year,
            )
            if existing is not None:
                raise ReportConflictError(
                    "A report already exists for this cooperative, type, and year.",
                    details={
                        "cooperative_id": req.cooperative_id,
                        "report_type": req.report_type.value,
                        "reporting_year": req.reporting_year,
                        "existing_report_id": existing.id,
                    },
                )

            draft = FinancialReport(
                cooperative_id=req.cooperative_id,
                report_type=req.report_type,
                reporting_year=req.reporting_year,
                reporting_period=req.reporting_period,
                status=ReportStatus.DRAFT,
                created_by=req.actor_id,
                notes=req.notes,
                created_at=now,
                updated_at=now,
            )
            saved = await repo.add(draft, payload)
            return ReportWriteResult(
                report=saved, payload=payload, warnings=tuple(warnings_only(violations))
            )

        return await run_in_uow(self._uow, _work)


__all__ = ["CreateFinancialReportUseCase"]
