# src/coopledger/application/use_cases/reports/bulk_approve_financial_reports.py
# Copyright (c)
# SPDX-License-Identifier: MIT
"""Use case: Approve several submitted reports in one request.

Purpose:
    Let a supervising actor approve a batch of reports, possibly across
    cooperatives. Each report is approved in its own unit of work, so one
    stale or missing report does not undo the others.

Layer:
    application

Notes:
    - Roles are resolved per cooperative up front. If the actor lacks the
      approver role for any cooperative in the batch, nothing is written.
    - State, conflict, and not-found errors are collected per report.
      Validation and persistence errors propagate.
"""

from __future__ import annotations

import logging

from coopledger.application.schemas.dto.financial_reports import (
    BulkApproveFailureDTO,
    BulkApproveRequestDTO,
    BulkApproveResponseDTO,
    ReportActionRequestDTO,
)
from coopledger.application.use_cases.reports.transition_financial_report import (
    ApproveFinancialReportUseCase,
)
from coopledger.domain.entities.financial_report import FinancialReport
from coopledger.domain.enums.financial_report import ActorRole, LifecycleAction
from coopledger.domain.exceptions.reports import (
    ReportAuthorizationError,
    ReportConflictError,
    ReportNotFoundError,
    ReportStateError,
)
from coopledger.domain.interfaces.gateways.actor_directory import ActorDirectory
from coopledger.domain.services.report_lifecycle import APPROVER_ROLES

logger = logging.getLogger(__name__)

_COLLECTED_ERRORS = (ReportStateError, ReportConflictError, ReportNotFoundError)


class BulkApproveFinancialReportsUseCase:
    """Approve a batch of reports, collecting per-report failures.

    Args:
        approve: Single-report approval use case, reused for each item.
        actors: Directory resolving the acting user's roles.
    """

    def __init__(self, *, approve: ApproveFinancialReportUseCase, actors: ActorDirectory) -> None:
        self._approve = approve
        self._actors = actors

    async def execute(self, req: BulkApproveRequestDTO) -> BulkApproveResponseDTO:
        """Approve every referenced report that is still awaiting review.

        Raises:
            ReportAuthorizationError: If the actor may not approve for one of
                the cooperatives in the batch.
        """
        logger.info(
            "financial_report.bulk_approve.start",
            extra={"actor_id": req.actor_id, "count": len(req.reports)},
        )

        roles_by_cooperative: dict[int, frozenset[ActorRole]] = {}
        for ref in req.reports:
            if ref.cooperative_id in roles_by_cooperative:
                continue
            roles = await self._actors.roles_for(req.actor_id, cooperative_id=ref.cooperative_id)
            if not roles & APPROVER_ROLES:
                raise ReportAuthorizationError(
                    "Actor is not allowed to approve reports for this cooperative.",
                    details={
                        "action": LifecycleAction.APPROVE.value,
                        "cooperative_id": ref.cooperative_id,
                        "roles": sorted(r.value for r in roles),
                    },
                )
            roles_by_cooperative[ref.cooperative_id] = roles

        approved: list[FinancialReport] = []
        failures: list[BulkApproveFailureDTO] = []
        for ref in req.reports:
            try:
                result = await self._approve.execute(
                    ReportActionRequestDTO(
                        report_id=ref.report_id,
                        cooperative_id=ref.cooperative_id,
                        actor_id=req.actor_id,
                    ),
                    roles=roles_by_cooperative[ref.cooperative_id],
                )
            except _COLLECTED_ERRORS as exc:
                failures.append(
                    BulkApproveFailureDTO(
                        report_id=ref.report_id,
                        cooperative_id=ref.cooperative_id,
                        code=exc.code,
                        message=exc.message,
                    )
                )
                continue
            approved.append(result.report)

        logger.info(
            "financial_report.bulk_approve.success",
            extra={
                "actor_id": req.actor_id,
                "approved": len(approved),
                "failed": len(failures),
            },
        )
        return BulkApproveResponseDTO(approved=tuple(approved), failures=tuple(failures))


__all__ = ["BulkApproveFinancialReportsUseCase"]
