# tests/unit/application/use_cases/reports/test_transition_financial_report.py
from __future__ import annotations

from dataclasses import replace

import pytest

from coopledger.application.schemas.dto.financial_reports import (
    RejectFinancialReportRequestDTO,
    ReportActionRequestDTO,
)
from coopledger.application.services.lifecycle_events import LifecycleEventDispatcher
from coopledger.application.use_cases.reports import (
    ApproveFinancialReportUseCase,
    RejectFinancialReportUseCase,
    SubmitFinancialReportUseCase,
)
from coopledger.domain.enums.financial_report import ReportStatus, ReportType
from coopledger.domain.exceptions.reports import (
    ReportAuthorizationError,
    ReportConflictError,
    ReportNotFoundError,
    ReportStateError,
    ReportValidationError,
)


def _submit(uow, actors, dispatcher, validation, clock, metrics=None):
    return SubmitFinancialReportUseCase(
        uow=uow,
        actors=actors,
        dispatcher=dispatcher,
        validation=validation,
        clock=clock,
        metrics=metrics,
    )


def _action(report_id: int, actor_id: int, **kwargs) -> ReportActionRequestDTO:
    cooperative_id = kwargs.pop("cooperative_id", 5)
    return ReportActionRequestDTO(
        report_id=report_id, cooperative_id=cooperative_id, actor_id=actor_id, **kwargs
    )


# ---------------------------------------------------------------------------
# Submit
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_submit_moves_draft_to_submitted_and_notifies_reviewers(
    uow, repo, actors, dispatcher, validation, clock, notifier, metrics, seed_report
) -> None:
    report = seed_report(ReportType.CASH_FLOW)
    uc = _submit(uow, actors, dispatcher, validation, clock, metrics)

    result = await uc.execute(_action(report.id, 42))

    saved = result.report
    assert saved.status is ReportStatus.SUBMITTED
    assert saved.submitted_by == 42
    assert saved.submitted_at == clock()
    assert saved.version == 2
    assert result.notification_delivered is True
    assert repo.reports[report.id].status is ReportStatus.SUBMITTED
    assert notifier.events == [
        (
            "submitted",
            {
                "cooperative_id": 5,
                "report_id": report.id,
                "report_type": ReportType.CASH_FLOW,
                "reporting_year": 2024,
            },
        )
    ]
    assert metrics.transitions == [("cash_flow", "submit", "success")]


@pytest.mark.asyncio
async def test_submit_revalidates_stored_payload(
    uow, repo, actors, dispatcher, validation, clock, notifier, seed_report, make_cash_flow
) -> None:
    report = seed_report(ReportType.CASH_FLOW, document=make_cash_flow(ending=1_400_000))
    uc = _submit(uow, actors, dispatcher, validation, clock)

    with pytest.raises(ReportValidationError) as excinfo:
        await uc.execute(_action(report.id, 42))

    assert [v.field for v in excinfo.value.violations] == ["ending_cash_balance"]
    assert repo.reports[report.id].status is ReportStatus.DRAFT
    assert notifier.events == []


@pytest.mark.asyncio
async def test_submit_rejects_cash_flow_contradicting_approved_balance_sheet(
    uow, repo, actors, dispatcher, validation, clock, notifier, seed_report, make_balance_sheet
) -> None:
    seed_report(
        ReportType.BALANCE_SHEET,
        status=ReportStatus.APPROVED,
        document=make_balance_sheet(assets=1_200_000, liabilities=800_000),
    )
    report = seed_report(ReportType.CASH_FLOW)
    uc = _submit(uow, actors, dispatcher, validation, clock)

    with pytest.raises(ReportValidationError) as excinfo:
        await uc.execute(_action(report.id, 42))

    assert [(v.field, v.code) for v in excinfo.value.violations] == [
        ("ending_cash_balance", "CROSS_REPORT_CASH_MISMATCH")
    ]
    assert repo.reports[report.id].status is ReportStatus.DRAFT
    assert notifier.events == []


@pytest.mark.asyncio
async def test_submit_by_reviewer_is_forbidden(
    uow, actors, dispatcher, validation, clock, seed_report
) -> None:
    report = seed_report()
    uc = _submit(uow, actors, dispatcher, validation, clock)

    with pytest.raises(ReportAuthorizationError):
        await uc.execute(_action(report.id, 7))


@pytest.mark.asyncio
async def test_submit_of_unknown_report_is_not_found(
    uow, actors, dispatcher, validation, clock
) -> None:
    uc = _submit(uow, actors, dispatcher, validation, clock)

    with pytest.raises(ReportNotFoundError):
        await uc.execute(_action(999, 42))


# ---------------------------------------------------------------------------
# Approve / reject
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "status", [ReportStatus.DRAFT, ReportStatus.APPROVED, ReportStatus.REJECTED]
)
async def test_approve_outside_submitted_is_a_state_error(
    uow, repo, actors, dispatcher, clock, seed_report, status
) -> None:
    report = seed_report(status=status)
    uc = ApproveFinancialReportUseCase(uow=uow, actors=actors, dispatcher=dispatcher, clock=clock)

    with pytest.raises(ReportStateError):
        await uc.execute(_action(report.id, 7))
    assert repo.writes == []


@pytest.mark.asyncio
async def test_state_is_checked_before_role(uow, actors, dispatcher, clock, seed_report) -> None:
    """A preparer approving a draft gets the workflow error, not the role error."""
    report = seed_report()
    uc = ApproveFinancialReportUseCase(uow=uow, actors=actors, dispatcher=dispatcher, clock=clock)

    with pytest.raises(ReportStateError):
        await uc.execute(_action(report.id, 42))


@pytest.mark.asyncio
async def test_approve_stamps_approver_and_notifies_cooperative(
    uow, repo, actors, dispatcher, clock, notifier, seed_report
) -> None:
    report = seed_report(status=ReportStatus.SUBMITTED)
    uc = ApproveFinancialReportUseCase(uow=uow, actors=actors, dispatcher=dispatcher, clock=clock)

    result = await uc.execute(_action(report.id, 7, expected_version=1))

    assert result.report.status is ReportStatus.APPROVED
    assert result.report.approved_by == 7
    assert result.report.approved_at == clock()
    assert [event for event, _ in notifier.events] == ["approved"]


@pytest.mark.asyncio
async def test_preparer_cannot_approve_submitted_report(
    uow, actors, dispatcher, clock, seed_report
) -> None:
    report = seed_report(status=ReportStatus.SUBMITTED)
    uc = ApproveFinancialReportUseCase(uow=uow, actors=actors, dispatcher=dispatcher, clock=clock)

    with pytest.raises(ReportAuthorizationError):
        await uc.execute(_action(report.id, 42))


@pytest.mark.asyncio
async def test_concurrent_approval_loses_the_check_and_set(
    uow, repo, actors, dispatcher, clock, notifier, seed_report, monkeypatch
) -> None:
    report = seed_report(status=ReportStatus.SUBMITTED)
    original_save = repo.save_transition

    async def _raced(updated, *, expected_status, expected_version):
        # Another reviewer rejected the report after it was read.
        repo.reports[updated.id] = replace(
            repo.reports[updated.id],
            status=ReportStatus.REJECTED,
            version=expected_version + 1,
        )
        return await original_save(
            updated, expected_status=expected_status, expected_version=expected_version
        )

    monkeypatch.setattr(repo, "save_transition", _raced)
    uc = ApproveFinancialReportUseCase(uow=uow, actors=actors, dispatcher=dispatcher, clock=clock)

    with pytest.raises(ReportConflictError):
        await uc.execute(_action(report.id, 7))
    assert notifier.events == []


@pytest.mark.asyncio
async def test_notification_failure_does_not_undo_approval(
    uow, repo, actors, clock, metrics, seed_report
) -> None:
    dispatcher = LifecycleEventDispatcher(notifier=_FailingNotifier(), metrics=metrics)
    report = seed_report(status=ReportStatus.SUBMITTED)
    uc = ApproveFinancialReportUseCase(
        uow=uow, actors=actors, dispatcher=dispatcher, clock=clock, metrics=metrics
    )

    result = await uc.execute(_action(report.id, 7))

    assert result.notification_delivered is False
    assert uow.commits == 1
    assert uow.rollbacks == 0
    assert repo.reports[report.id].status is ReportStatus.APPROVED
    assert metrics.notification_failures == ["notify_approved"]
    assert metrics.transitions == [("balance_sheet", "approve", "success")]


class _FailingNotifier:
    async def notify_submitted(self, **kwargs) -> None:
        raise ConnectionError("down")

    async def notify_approved(self, **kwargs) -> None:
        raise ConnectionError("down")

    async def notify_rejected(self, **kwargs) -> None:
        raise ConnectionError("down")


@pytest.mark.asyncio
async def test_reject_records_trimmed_reason_and_notifies(
    uow, repo, actors, dispatcher, clock, notifier, seed_report
) -> None:
    report = seed_report(status=ReportStatus.SUBMITTED)
    uc = RejectFinancialReportUseCase(uow=uow, actors=actors, dispatcher=dispatcher, clock=clock)

    result = await uc.execute(
        RejectFinancialReportRequestDTO(
            report_id=report.id,
            cooperative_id=5,
            actor_id=7,
            reason="  Neraca tidak seimbang  ",
        )
    )

    assert result.report.status is ReportStatus.REJECTED
    assert result.report.rejected_by == 7
    assert result.report.rejection_reason == "Neraca tidak seimbang"
    event, payload = notifier.events[0]
    assert event == "rejected"
    assert payload["reason"] == "Neraca tidak seimbang"


@pytest.mark.asyncio
@pytest.mark.parametrize("reason", ["", "   ", "x" * 51])
async def test_reject_requires_reason_within_limit(
    uow, repo, actors, dispatcher, clock, seed_report, reason
) -> None:
    report = seed_report(status=ReportStatus.SUBMITTED)
    uc = RejectFinancialReportUseCase(
        uow=uow, actors=actors, dispatcher=dispatcher, clock=clock, reason_max_length=50
    )

    with pytest.raises(ReportValidationError) as excinfo:
        await uc.execute(
            RejectFinancialReportRequestDTO(
                report_id=report.id, cooperative_id=5, actor_id=7, reason=reason
            )
        )

    assert excinfo.value.violations[0].field == "rejection_reason"
    assert repo.reports[report.id].status is ReportStatus.SUBMITTED


@pytest.mark.asyncio
async def test_reject_of_draft_is_a_state_error(
    uow, actors, dispatcher, clock, seed_report
) -> None:
    report = seed_report()
    uc = RejectFinancialReportUseCase(uow=uow, actors=actors, dispatcher=dispatcher, clock=clock)

    with pytest.raises(ReportStateError):
        await uc.execute(
            RejectFinancialReportRequestDTO(
                report_id=report.id, cooperative_id=5, actor_id=7, reason="late"
            )
        )
