# src/coopledger/application/schemas/dto/report_payloads.py
# Copyright (c)
# SPDX-License-Identifier: MIT
"""Report payload DTOs.

Purpose:
    Parse caller-supplied report documents (JSON-like mappings) into typed
    domain payloads. Pydantic covers the structural basics: required keys,
    value types, and enum membership. Bounds and consistency rules belong to
    the domain validators.

    The same DTOs serialize domain payloads back to JSON-compatible dicts
    for persistence.

Layer:
    application/schemas/dto
"""

from __future__ import annotations

import dataclasses
from collections.abc import Mapping
from datetime import date
from decimal import Decimal
from typing import Any, ClassVar

from coopledger.application.schemas.dto.base import BaseDTO
from coopledger.domain.entities import line_items as li
from coopledger.domain.entities import report_payloads as rp
from coopledger.domain.enums.financial_report import ReportType
from coopledger.domain.enums.line_items import (
    AccountCategory,
    AccountSubcategory,
    BudgetCategory,
    BudgetPriority,
    BudgetType,
    CashFlowCategory,
    EquityComponentKind,
    LoanType,
    NplClassification,
    ReceivablePaymentStatus,
    RestructuringStatus,
    SavingsType,
    ShuMemberType,
    ShuPaymentMethod,
    ShuPaymentStatus,
    WriteOffStatus,
)


class _LineDTO(BaseDTO):
    """Line DTO whose fields mirror a domain line dataclass one-to-one."""

    domain_type: ClassVar[type]

    def to_domain(self) -> Any:
        return self.domain_type(**{name: getattr(self, name) for name in type(self).model_fields})


# --------------------------------------------------------------------------- #
# Line DTOs                                                                   #
# --------------------------------------------------------------------------- #


class AccountLineDTO(_LineDTO):
    domain_type = li.AccountLine

    code: str
    name: str
    category: AccountCategory
    current_amount: Decimal
    previous_amount: Decimal = Decimal("0")
    subcategory: AccountSubcategory | None = None
    parent_code: str | None = None
    is_subtotal: bool = False
    sort_order: int = 0
    note_reference: str | None = None


class CashFlowActivityDTO(_LineDTO):
    domain_type = li.CashFlowActivity

    category: CashFlowCategory
    current_amount: Decimal
    description: str = ""
    previous_amount: Decimal = Decimal("0")
    is_subtotal: bool = False
    sort_order: int = 0


class EquityComponentDTO(_LineDTO):
    domain_type = li.EquityComponent

    component: EquityComponentKind
    beginning_balance: Decimal
    additions: Decimal
    reductions: Decimal
    ending_balance: Decimal
    description: str | None = None


class BudgetLineDTO(_LineDTO):
    domain_type = li.BudgetLine

    category: BudgetCategory
    item_name: str
    planned_amount: Decimal
    priority: BudgetPriority = BudgetPriority.MEDIUM
    subcategory: str | None = None
    description: str | None = None
    previous_year_actual: Decimal | None = None
    variance_percentage: Decimal | None = None
    q1_allocation: Decimal = Decimal("0")
    q2_allocation: Decimal = Decimal("0")
    q3_allocation: Decimal = Decimal("0")
    q4_allocation: Decimal = Decimal("0")


class MemberSavingsLineDTO(_LineDTO):
    domain_type = li.MemberSavingsLine

    member_id: int
    savings_type: SavingsType
    beginning_balance: Decimal
    deposits: Decimal
    withdrawals: Decimal
    interest_earned: Decimal
    ending_balance: Decimal


class MemberReceivableLineDTO(_LineDTO):
    domain_type = li.MemberReceivableLine

    member_id: int
    loan_number: str
    loan_type: LoanType
    loan_amount: Decimal
    outstanding_balance: Decimal
    interest_rate: Decimal
    loan_term_months: int
    disbursement_date: date
    maturity_date: date
    payment_status: ReceivablePaymentStatus = ReceivablePaymentStatus.CURRENT
    collateral_type: str | None = None
    collateral_value: Decimal | None = None


class NplReceivableLineDTO(_LineDTO):
    domain_type = li.NplReceivableLine

    member_id: int
    loan_number: str
    original_loan_amount: Decimal
    outstanding_balance: Decimal
    days_past_due: int
    classification: NplClassification
    provision_percentage: Decimal
    provision_amount: Decimal
    collateral_type: str | None = None
    collateral_value: Decimal | None = None
    restructuring_status: RestructuringStatus = RestructuringStatus.NONE
    write_off_status: WriteOffStatus = WriteOffStatus.NONE
    last_payment_date: date | None = None


class ShuDistributionLineDTO(_LineDTO):
    domain_type = li.ShuDistributionLine

    member_id: int
    savings_contribution: Decimal
    transaction_contribution: Decimal
    shu_from_savings: Decimal
    shu_from_transactions: Decimal
    total_shu_received: Decimal
    tax_deduction: Decimal
    net_shu_received: Decimal
    member_type: ShuMemberType = ShuMemberType.ACTIVE
    payment_method: ShuPaymentMethod = ShuPaymentMethod.CASH
    payment_status: ShuPaymentStatus = ShuPaymentStatus.PENDING


class NoteSectionDTO(_LineDTO):
    domain_type = li.NoteSection

    section_code: str
    title: str
    content: str
    sort_order: int = 0


# --------------------------------------------------------------------------- #
# Payload DTOs                                                                #
# --------------------------------------------------------------------------- #


class ReportPayloadDTO(BaseDTO):
    """Payload DTO: report-level fields plus one list of line DTOs."""

    domain_type: ClassVar[type]

    @classmethod
    def line_field(cls) -> str:
        return str(cls.domain_type.line_field)

    def to_domain(self) -> rp.ReportPayload:
        values: dict[str, Any] = {}
        for name in type(self).model_fields:
            value = getattr(self, name)
            if name == self.line_field():
                value = tuple(line.to_domain() for line in value)
            values[name] = value
        return self.domain_type(**values)

    @classmethod
    def from_domain(cls, payload: rp.ReportPayload) -> ReportPayloadDTO:
        return cls.model_validate(dataclasses.asdict(payload))


class BalanceSheetPayloadDTO(ReportPayloadDTO):
    domain_type = rp.BalanceSheetPayload

    accounts: list[AccountLineDTO]


class IncomeStatementPayloadDTO(ReportPayloadDTO):
    domain_type = rp.IncomeStatementPayload

    accounts: list[AccountLineDTO]


class CashFlowPayloadDTO(ReportPayloadDTO):
    domain_type = rp.CashFlowPayload

    beginning_cash_balance: Decimal
    ending_cash_balance: Decimal
    activities: list[CashFlowActivityDTO]


class EquityChangesPayloadDTO(ReportPayloadDTO):
    domain_type = rp.EquityChangesPayload

    components: list[EquityComponentDTO]


class BudgetPlanPayloadDTO(ReportPayloadDTO):
    domain_type = rp.BudgetPlanPayload

    budget_type: BudgetType
    lines: list[BudgetLineDTO]


class MemberSavingsPayloadDTO(ReportPayloadDTO):
    domain_type = rp.MemberSavingsPayload

    lines: list[MemberSavingsLineDTO]


class MemberReceivablesPayloadDTO(ReportPayloadDTO):
    domain_type = rp.MemberReceivablesPayload

    lines: list[MemberReceivableLineDTO]


class NplReceivablesPayloadDTO(ReportPayloadDTO):
    domain_type = rp.NplReceivablesPayload

    lines: list[NplReceivableLineDTO]


class ShuDistributionPayloadDTO(ReportPayloadDTO):
    domain_type = rp.ShuDistributionPayload

    total_shu: Decimal
    lines: list[ShuDistributionLineDTO]
    distribution_date: date | None = None


class NotesToFinancialPayloadDTO(ReportPayloadDTO):
    domain_type = rp.NotesToFinancialPayload

    sections: list[NoteSectionDTO]


PAYLOAD_DTOS: Mapping[ReportType, type[ReportPayloadDTO]] = {
    dto.domain_type.report_type: dto
    for dto in (
        BalanceSheetPayloadDTO,
        IncomeStatementPayloadDTO,
        CashFlowPayloadDTO,
        EquityChangesPayloadDTO,
        BudgetPlanPayloadDTO,
        MemberSavingsPayloadDTO,
        MemberReceivablesPayloadDTO,
        NplReceivablesPayloadDTO,
        ShuDistributionPayloadDTO,
        NotesToFinancialPayloadDTO,
    )
}


def payload_dto_for(report_type: ReportType) -> type[ReportPayloadDTO]:
    return PAYLOAD_DTOS[report_type]


__all__ = [
    "PAYLOAD_DTOS",
    "AccountLineDTO",
    "BalanceSheetPayloadDTO",
    "BudgetLineDTO",
    "BudgetPlanPayloadDTO",
    "CashFlowActivityDTO",
    "CashFlowPayloadDTO",
    "EquityChangesPayloadDTO",
    "EquityComponentDTO",
    "IncomeStatementPayloadDTO",
    "MemberReceivableLineDTO",
    "MemberReceivablesPayloadDTO",
    "MemberSavingsLineDTO",
    "MemberSavingsPayloadDTO",
    "NoteSectionDTO",
    "NotesToFinancialPayloadDTO",
    "NplReceivableLineDTO",
    "NplReceivablesPayloadDTO",
    "ReportPayloadDTO",
    "ShuDistributionLineDTO",
    "ShuDistributionPayloadDTO",
    "payload_dto_for",
]
