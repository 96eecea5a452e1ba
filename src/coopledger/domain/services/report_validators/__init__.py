# src/coopledger/domain/services/report_validators/__init__.py
# Copyright (c)
# SPDX-License-Identifier: MIT
"""Per-report-type validation strategies."""

from coopledger.domain.services.report_validators.base import (
    BaseReportValidator,
    ReportValidator,
    ViolationCollector,
)
from coopledger.domain.services.report_validators.registry import (
    get_report_validator,
    registered_report_types,
)

__all__ = [
    "BaseReportValidator",
    "ReportValidator",
    "ViolationCollector",
    "get_report_validator",
    "registered_report_types",
]
