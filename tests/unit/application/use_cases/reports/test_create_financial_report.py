# tests/unit/application/use_cases/reports/test_create_financial_report.py
from __future__ import annotations

from decimal import Decimal

import pytest

from coopledger.application.schemas.dto.financial_reports import (
    CreateFinancialReportRequestDTO,
)
from coopledger.application.use_cases.reports import CreateFinancialReportUseCase
from coopledger.domain.entities.report_payloads import BalanceSheetPayload, CashFlowPayload
from coopledger.domain.enums.financial_report import (
    ReportingPeriod,
    ReportStatus,
    ReportType,
)
from coopledger.domain.exceptions.reports import (
    ReportAuthorizationError,
    ReportConflictError,
    ReportPersistenceError,
    ReportValidationError,
)


def _use_case(uow, actors, validation, clock, metrics=None) -> CreateFinancialReportUseCase:
    return CreateFinancialReportUseCase(
        uow=uow, actors=actors, validation=validation, clock=clock, metrics=metrics
    )


def _request(document, *, report_type=ReportType.BALANCE_SHEET, year=2024, **overrides):
    return CreateFinancialReportRequestDTO(
        cooperative_id=overrides.pop("cooperative_id", 5),
        actor_id=overrides.pop("actor_id", 42),
        report_type=report_type,
        reporting_year=year,
        payload=document,
        **overrides,
    )


@pytest.mark.asyncio
async def test_create_persists_draft_with_typed_payload(
    uow, repo, actors, validation, clock, metrics, make_balance_sheet
) -> None:
    uc = _use_case(uow, actors, validation, clock, metrics)

    result = await uc.execute(_request(make_balance_sheet(), notes="Audited"))

    assert result.report.id is not None
    assert result.report.status is ReportStatus.DRAFT
    assert result.report.version == 1
    assert result.report.created_by == 42
    assert result.report.notes == "Audited"
    assert isinstance(result.payload, BalanceSheetPayload)
    assert result.payload.accounts[0].current_amount == Decimal("1000000")
    assert result.warnings == ()
    assert uow.commits == 1
    assert repo.reports[result.report.id].natural_key() == (5, ReportType.BALANCE_SHEET, 2024)
    assert metrics.transitions == [("balance_sheet", "create", "success")]


@pytest.mark.asyncio
async def test_second_create_for_same_cooperative_type_and_year_conflicts(
    uow, repo, actors, validation, clock, metrics, make_balance_sheet
) -> None:
    uc = _use_case(uow, actors, validation, clock, metrics)
    first = await uc.execute(_request(make_balance_sheet()))

    with pytest.raises(ReportConflictError) as excinfo:
        await uc.execute(_request(make_balance_sheet()))

    assert excinfo.value.details["existing_report_id"] == first.report.id
    assert len(repo.reports) == 1
    assert uow.rollbacks == 1
    assert metrics.transitions[-1] == ("balance_sheet", "create", "report_conflict")


@pytest.mark.asyncio
async def test_conflict_raised_by_repository_insert_is_propagated(
    uow, repo, actors, validation, clock, make_balance_sheet, monkeypatch
) -> None:
    """A concurrent writer can win between the pre-check and the insert."""
    uc = _use_case(uow, actors, validation, clock)
    await uc.execute(_request(make_balance_sheet()))

    async def _no_existing(**_kwargs):
        return None

    monkeypatch.setattr(repo, "get_by_natural_key", _no_existing)

    with pytest.raises(ReportConflictError):
        await uc.execute(_request(make_balance_sheet()))
    assert len(repo.reports) == 1


@pytest.mark.asyncio
async def test_failure_between_header_and_lines_leaves_nothing_behind(
    uow, repo, actors, validation, clock, make_balance_sheet
) -> None:
    repo.fail_after_header = True
    uc = _use_case(uow, actors, validation, clock)

    with pytest.raises(ReportPersistenceError):
        await uc.execute(_request(make_balance_sheet()))

    assert uow.rollbacks == 1
    assert uow.commits == 0
    assert repo.reports == {}
    assert await repo.get(1, cooperative_id=5) is None


@pytest.mark.asyncio
async def test_unbalanced_balance_sheet_is_rejected_before_insert(
    uow, repo, actors, validation, clock, make_balance_sheet
) -> None:
    uc = _use_case(uow, actors, validation, clock)

    with pytest.raises(ReportValidationError) as excinfo:
        await uc.execute(_request(make_balance_sheet(assets=1_000_002)))

    codes = [v.code for v in excinfo.value.violations]
    assert codes == ["BALANCE_EQUATION"]
    assert repo.writes == []


@pytest.mark.asyncio
async def test_header_and_structure_violations_are_reported_together(
    uow, repo, actors, validation, clock
) -> None:
    uc = _use_case(uow, actors, validation, clock)
    document = {"accounts": [{"code": "A1", "name": "Kas", "category": "asset"}]}

    with pytest.raises(ReportValidationError) as excinfo:
        await uc.execute(_request(document, year=2019))

    fields = {v.field for v in excinfo.value.violations}
    assert "reporting_year" in fields
    assert "accounts.0.current_amount" in fields
    assert excinfo.value.details["report_type"] == "balance_sheet"
    assert repo.writes == []


@pytest.mark.asyncio
async def test_annual_only_report_rejects_quarterly_period(
    uow, actors, validation, clock
) -> None:
    uc = _use_case(uow, actors, validation, clock)
    document = {
        "total_shu": "1000000",
        "lines": [
            {
                "member_id": 1,
                "savings_contribution": "100000",
                "transaction_contribution": "200000",
                "shu_from_savings": "600000",
                "shu_from_transactions": "400000",
                "total_shu_received": "1000000",
                "tax_deduction": "50000",
                "net_shu_received": "950000",
            }
        ],
    }

    with pytest.raises(ReportValidationError) as excinfo:
        await uc.execute(
            _request(
                document,
                report_type=ReportType.SHU_DISTRIBUTION,
                reporting_period=ReportingPeriod.Q2,
            )
        )

    assert [v.field for v in excinfo.value.violations] == ["reporting_period"]


@pytest.mark.asyncio
async def test_typed_payload_of_another_kind_is_rejected(
    uow, actors, validation, clock, make_cash_flow
) -> None:
    uc = _use_case(uow, actors, validation, clock)
    cash_flow, _ = validation.parse_payload(ReportType.CASH_FLOW, make_cash_flow())
    assert isinstance(cash_flow, CashFlowPayload)

    with pytest.raises(ReportValidationError) as excinfo:
        await uc.execute(_request(cash_flow, report_type=ReportType.BALANCE_SHEET))

    assert excinfo.value.violations[0].code == "PAYLOAD_TYPE_MISMATCH"


@pytest.mark.asyncio
async def test_reviewer_cannot_create_reports(
    uow, repo, actors, validation, clock, metrics, make_balance_sheet
) -> None:
    uc = _use_case(uow, actors, validation, clock, metrics)

    with pytest.raises(ReportAuthorizationError):
        await uc.execute(_request(make_balance_sheet(), actor_id=7))

    assert repo.writes == []
    assert metrics.transitions == [("balance_sheet", "create", "report_forbidden")]


@pytest.mark.asyncio
async def test_create_returns_baseline_warnings_without_blocking(
    uow, repo, actors, validation, clock, seed_report, make_cash_flow
) -> None:
    seed_report(
        ReportType.CASH_FLOW,
        status=ReportStatus.APPROVED,
        reporting_year=2023,
        document=make_cash_flow(ending=900_000) | {"beginning_cash_balance": "600000"},
    )
    uc = _use_case(uow, actors, validation, clock)

    result = await uc.execute(_request(make_cash_flow(), report_type=ReportType.CASH_FLOW))

    assert result.report.status is ReportStatus.DRAFT
    assert [(w.field, w.code) for w in result.warnings] == [
        ("beginning_cash_balance", "BASELINE_MISMATCH")
    ]


@pytest.mark.asyncio
async def test_header_and_content_violations_are_reported_together(
    uow, repo, actors, validation, clock, make_balance_sheet
) -> None:
    uc = _use_case(uow, actors, validation, clock)

    with pytest.raises(ReportValidationError) as excinfo:
        await uc.execute(_request(make_balance_sheet(assets=1_000_002), year=2019))

    codes = {v.code for v in excinfo.value.violations}
    assert {"OUT_OF_RANGE", "BALANCE_EQUATION"} <= codes
    assert repo.writes == []


# ---------------------------------------------------------------------------
# Consistency with approved reports of the same year
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_cash_flow_disagreeing_with_approved_balance_sheet_cash_is_rejected(
    uow, repo, actors, validation, clock, seed_report, make_cash_flow
) -> None:
    seed_report(ReportType.BALANCE_SHEET, status=ReportStatus.APPROVED)
    uc = _use_case(uow, actors, validation, clock)

    with pytest.raises(ReportValidationError) as excinfo:
        await uc.execute(_request(make_cash_flow(), report_type=ReportType.CASH_FLOW))

    assert [(v.field, v.code) for v in excinfo.value.violations] == [
        ("ending_cash_balance", "CROSS_REPORT_CASH_MISMATCH")
    ]
    assert repo.writes == []


@pytest.mark.asyncio
async def test_cash_flow_matching_approved_balance_sheet_cash_is_created(
    uow, repo, actors, validation, clock, seed_report, make_cash_flow
) -> None:
    seed_report(ReportType.BALANCE_SHEET, status=ReportStatus.APPROVED)
    uc = _use_case(uow, actors, validation, clock)
    document = make_cash_flow(ending=1_000_000) | {"beginning_cash_balance": "700000"}

    result = await uc.execute(_request(document, report_type=ReportType.CASH_FLOW))

    assert result.report.status is ReportStatus.DRAFT
    assert result.warnings == ()


@pytest.mark.asyncio
async def test_unapproved_balance_sheet_is_not_used_for_cash_comparison(
    uow, repo, actors, validation, clock, seed_report, make_cash_flow
) -> None:
    seed_report(ReportType.BALANCE_SHEET, status=ReportStatus.SUBMITTED)
    uc = _use_case(uow, actors, validation, clock)

    result = await uc.execute(_request(make_cash_flow(), report_type=ReportType.CASH_FLOW))

    assert result.report.status is ReportStatus.DRAFT


@pytest.mark.asyncio
async def test_balance_sheet_retained_earnings_far_from_net_income_warns(
    uow, repo, actors, validation, clock, seed_report, make_balance_sheet
) -> None:
    seed_report(
        ReportType.INCOME_STATEMENT,
        status=ReportStatus.APPROVED,
        document={
            "accounts": [
                {
                    "code": "R100",
                    "name": "Pendapatan jasa",
                    "category": "revenue",
                    "current_amount": "5000000",
                },
                {
                    "code": "X100",
                    "name": "Beban operasional",
                    "category": "expense",
                    "current_amount": "3000000",
                },
            ]
        },
    )
    document = make_balance_sheet()
    document["accounts"][2]["name"] = "Laba ditahan"
    uc = _use_case(uow, actors, validation, clock)

    result = await uc.execute(_request(document))

    assert result.report.status is ReportStatus.DRAFT
    assert [(w.field, w.code) for w in result.warnings] == [
        ("accounts", "CROSS_REPORT_RETAINED_EARNINGS")
    ]
