# tests/unit/application/schemas/test_report_payload_dtos.py
from __future__ import annotations

from decimal import Decimal

import pytest
from pydantic import ValidationError

from coopledger.application.schemas.dto.report_payloads import (
    PAYLOAD_DTOS,
    CashFlowPayloadDTO,
    payload_dto_for,
)
from coopledger.application.services.report_validation import violations_from_pydantic
from coopledger.domain.entities.line_items import CashFlowActivity
from coopledger.domain.entities.report_payloads import PAYLOAD_TYPES, CashFlowPayload
from coopledger.domain.enums.financial_report import ReportType
from coopledger.domain.enums.line_items import CashFlowCategory

CASH_FLOW = {
    "beginning_cash_balance": "1000000",
    "ending_cash_balance": "1300000",
    "activities": [
        {"category": "operating", "description": "Sales", "current_amount": "500000"},
        {"category": "financing", "description": "Repayment", "current_amount": "-200000"},
    ],
}


def test_every_report_type_has_a_payload_dto() -> None:
    assert set(PAYLOAD_DTOS) == set(ReportType)
    for report_type, dto in PAYLOAD_DTOS.items():
        assert dto.domain_type is PAYLOAD_TYPES[report_type]


def test_to_domain_builds_typed_payload_with_tuples() -> None:
    payload = CashFlowPayloadDTO.model_validate(CASH_FLOW).to_domain()

    assert isinstance(payload, CashFlowPayload)
    assert isinstance(payload.activities, tuple)
    assert payload.activities[1] == CashFlowActivity(
        category=CashFlowCategory.FINANCING,
        current_amount=Decimal("-200000"),
        description="Repayment",
    )


def test_from_domain_preserves_decimal_precision() -> None:
    payload = CashFlowPayload(
        beginning_cash_balance=Decimal("10.05"),
        ending_cash_balance=Decimal("10.05"),
        activities=(CashFlowActivity(CashFlowCategory.OPERATING, Decimal("0.00")),),
    )

    dumped = payload_dto_for(ReportType.CASH_FLOW).from_domain(payload).model_dump(mode="json")

    assert dumped["beginning_cash_balance"] == "10.05"
    assert dumped["activities"][0]["category"] == "operating"


def test_unknown_keys_are_rejected() -> None:
    with pytest.raises(ValidationError):
        CashFlowPayloadDTO.model_validate(CASH_FLOW | {"closing_balance": "1"})


def test_pydantic_errors_become_dotted_blocking_violations() -> None:
    broken = {
        "beginning_cash_balance": "lots",
        "activities": [{"category": "speculation", "current_amount": "1"}],
    }

    with pytest.raises(ValidationError) as excinfo:
        CashFlowPayloadDTO.model_validate(broken)
    violations = violations_from_pydantic(excinfo.value)

    fields = {v.field for v in violations}
    assert fields == {
        "beginning_cash_balance",
        "ending_cash_balance",
        "activities.0.category",
    }
    assert all(v.is_blocking for v in violations)
    assert "STRUCTURE_MISSING" in {v.code for v in violations}
