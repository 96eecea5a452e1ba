# src/coopledger/application/use_cases/reports/get_financial_report.py
# Copyright (c)
# SPDX-License-Identifier: MIT
"""Use case: Read one financial report within a cooperative's scope."""

from __future__ import annotations

import logging

from coopledger.application.schemas.dto.financial_reports import GetFinancialReportRequestDTO
from coopledger.application.uow import UnitOfWork
from coopledger.application.use_cases.reports.common import get_reports_repository
from coopledger.domain.entities.financial_report import FinancialReportAggregate
from coopledger.domain.exceptions.reports import ReportNotFoundError

logger = logging.getLogger(__name__)


class GetFinancialReportUseCase:
    """Return a report header with its payload.

    Args:
        uow: Unit of work resolving the reports repository.
    """

    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    async def execute(self, req: GetFinancialReportRequestDTO) -> FinancialReportAggregate:
        """Fetch the report.

        Raises:
            ReportNotFoundError: If the report does not exist for the
                requesting cooperative.
        """
        async with self._uow as tx:
            repo = get_reports_repository(tx)
            aggregate = await repo.get(req.report_id, cooperative_id=req.cooperative_id)

        if aggregate is None:
            logger.info(
                "financial_report.get.not_found",
                extra={"report_id": req.report_id, "cooperative_id": req.cooperative_id},
            )
            raise ReportNotFoundError(
                "Financial report not found.",
                details={"report_id": req.report_id, "cooperative_id": req.cooperative_id},
            )
        return aggregate


__all__ = ["GetFinancialReportUseCase"]
