# tests/unit/adapters/mappers/test_report_payload_mapper.py
from __future__ import annotations

from decimal import Decimal

import pytest
from pydantic import ValidationError

from coopledger.adapters.mappers.report_payload_mapper import payload_to_rows, rows_to_payload
from coopledger.domain.entities.line_items import BudgetLine
from coopledger.domain.entities.report_payloads import BudgetPlanPayload
from coopledger.domain.enums.financial_report import ReportType
from coopledger.domain.enums.line_items import BudgetCategory, BudgetType


def _budget() -> BudgetPlanPayload:
    return BudgetPlanPayload(
        budget_type=BudgetType.CAPITAL,
        lines=(
            BudgetLine(BudgetCategory.INVESTMENT, "Cold storage", Decimal("250000000.50")),
            BudgetLine(BudgetCategory.REVENUE, "Member fees", Decimal("12000000")),
        ),
    )


def test_payload_splits_into_attributes_and_ordered_lines() -> None:
    attributes, lines = payload_to_rows(_budget())

    assert attributes == {"budget_type": "capital"}
    assert [line["item_name"] for line in lines] == ["Cold storage", "Member fees"]
    assert lines[0]["planned_amount"] == "250000000.50"
    assert lines[0]["category"] == "investment"


def test_rows_rebuild_the_same_payload() -> None:
    attributes, lines = payload_to_rows(_budget())

    assert rows_to_payload(ReportType.BUDGET_PLAN, attributes, lines) == _budget()


def test_missing_attributes_document_is_treated_as_empty() -> None:
    payload = rows_to_payload(
        ReportType.NOTES_TO_FINANCIAL,
        None,
        [{"section_code": "1", "title": "Umum", "content": "Profil koperasi."}],
    )

    assert payload.sections[0].title == "Umum"


def test_drifted_stored_document_fails_loudly() -> None:
    with pytest.raises(ValidationError):
        rows_to_payload(ReportType.BUDGET_PLAN, {"budget_type": "capital"}, [{"item": "x"}])
