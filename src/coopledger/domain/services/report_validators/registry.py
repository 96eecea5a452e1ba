# src/coopledger/domain/services/report_validators/registry.py
# Copyright (c)
# SPDX-License-Identifier: MIT
"""Report validator registry.

Purpose:
    Select the validation strategy for a report type. Validators are
    stateless, so a single shared instance per type is safe to use from
    concurrent callers.

Layer:
    domain/services/report_validators
"""

from __future__ import annotations

from collections.abc import Mapping
from types import MappingProxyType
from typing import Any, Final

from coopledger.domain.enums.financial_report import ReportType
from coopledger.domain.services.report_validators.account_statements import (
    BalanceSheetValidator,
    IncomeStatementValidator,
)
from coopledger.domain.services.report_validators.base import BaseReportValidator
from coopledger.domain.services.report_validators.budget_plan import BudgetPlanValidator
from coopledger.domain.services.report_validators.cash_flow import CashFlowValidator
from coopledger.domain.services.report_validators.equity_changes import EquityChangesValidator
from coopledger.domain.services.report_validators.member_receivables import (
    MemberReceivablesValidator,
)
from coopledger.domain.services.report_validators.member_savings import MemberSavingsValidator
from coopledger.domain.services.report_validators.notes_to_financial import (
    NotesToFinancialValidator,
)
from coopledger.domain.services.report_validators.npl_receivables import (
    NplReceivablesValidator,
)
from coopledger.domain.services.report_validators.shu_distribution import (
    ShuDistributionValidator,
)

_VALIDATORS: Final[Mapping[ReportType, BaseReportValidator[Any]]] = MappingProxyType(
    {
        validator.report_type: validator
        for validator in (
            BalanceSheetValidator(),
            IncomeStatementValidator(),
            CashFlowValidator(),
            EquityChangesValidator(),
            BudgetPlanValidator(),
            MemberSavingsValidator(),
            MemberReceivablesValidator(),
            NplReceivablesValidator(),
            ShuDistributionValidator(),
            NotesToFinancialValidator(),
        )
    }
)


def get_report_validator(report_type: ReportType) -> BaseReportValidator[Any]:
    """Return the validator registered for ``report_type``.

    Raises:
        KeyError: If no validator is registered for the type.
    """
    try:
        return _VALIDATORS[report_type]
    except KeyError as exc:
        raise KeyError(f"No validator registered for report type {report_type!r}.") from exc


def registered_report_types() -> tuple[ReportType, ...]:
    return tuple(_VALIDATORS)


__all__ = ["get_report_validator", "registered_report_types"]
