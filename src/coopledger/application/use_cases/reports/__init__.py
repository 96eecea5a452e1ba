# src/coopledger/application/use_cases/reports/__init__.py
# Copyright (c)
# SPDX-License-Identifier: MIT
"""Financial report use cases."""

from __future__ import annotations

from coopledger.application.use_cases.reports.bulk_approve_financial_reports import (
    BulkApproveFinancialReportsUseCase,
)
from coopledger.application.use_cases.reports.create_financial_report import (
    CreateFinancialReportUseCase,
)
from coopledger.application.use_cases.reports.delete_financial_report import (
    DeleteFinancialReportUseCase,
)
from coopledger.application.use_cases.reports.get_financial_report import (
    GetFinancialReportUseCase,
)
from coopledger.application.use_cases.reports.transition_financial_report import (
    ApproveFinancialReportUseCase,
    RejectFinancialReportUseCase,
    SubmitFinancialReportUseCase,
)
from coopledger.application.use_cases.reports.update_financial_report import (
    UpdateFinancialReportUseCase,
)

__all__ = [
    "ApproveFinancialReportUseCase",
    "BulkApproveFinancialReportsUseCase",
    "CreateFinancialReportUseCase",
    "DeleteFinancialReportUseCase",
    "GetFinancialReportUseCase",
    "RejectFinancialReportUseCase",
    "SubmitFinancialReportUseCase",
    "UpdateFinancialReportUseCase",
]
