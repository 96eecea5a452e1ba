# tests/unit/application/services/test_lifecycle_event_dispatcher.py
from __future__ import annotations

import logging

import pytest

from coopledger.application.services.lifecycle_events import LifecycleEventDispatcher
from coopledger.domain.entities.financial_report import FinancialReport
from coopledger.domain.enums.financial_report import (
    LifecycleEffect,
    ReportingPeriod,
    ReportStatus,
    ReportType,
)


class _FakeNotifier:
    def __init__(self, *, fail: bool = False) -> None:
        self.fail = fail
        self.calls: list[tuple[str, dict]] = []

    async def _record(self, name: str, kwargs: dict) -> None:
        if self.fail:
            raise TimeoutError("notifier timed out")
        self.calls.append((name, kwargs))

    async def notify_submitted(self, **kwargs) -> None:
        await self._record("submitted", kwargs)

    async def notify_approved(self, **kwargs) -> None:
        await self._record("approved", kwargs)

    async def notify_rejected(self, **kwargs) -> None:
        await self._record("rejected", kwargs)


class _FakeMetrics:
    def __init__(self) -> None:
        self.failures: list[str] = []

    def record_violations(self, **_kwargs) -> None:
        return None

    def record_transition(self, **_kwargs) -> None:
        return None

    def record_notification_failure(self, *, event: str) -> None:
        self.failures.append(event)


def _report(**overrides) -> FinancialReport:
    values = {
        "id": 21,
        "cooperative_id": 5,
        "report_type": ReportType.SHU_DISTRIBUTION,
        "reporting_year": 2024,
        "reporting_period": ReportingPeriod.ANNUAL,
        "status": ReportStatus.REJECTED,
        "created_by": 42,
        "rejection_reason": "Totals do not match",
    }
    values.update(overrides)
    return FinancialReport(**values)


@pytest.mark.asyncio
async def test_rejection_notice_carries_reason() -> None:
    notifier = _FakeNotifier()
    dispatcher = LifecycleEventDispatcher(notifier=notifier)

    delivered = await dispatcher.dispatch(LifecycleEffect.NOTIFY_REJECTED, _report())

    assert delivered is True
    assert notifier.calls == [
        (
            "rejected",
            {
                "cooperative_id": 5,
                "report_id": 21,
                "report_type": ReportType.SHU_DISTRIBUTION,
                "reporting_year": 2024,
                "reason": "Totals do not match",
            },
        )
    ]


@pytest.mark.asyncio
async def test_no_effect_or_no_notifier_is_a_noop() -> None:
    notifier = _FakeNotifier()

    assert await LifecycleEventDispatcher(notifier=notifier).dispatch(
        LifecycleEffect.NONE, _report()
    )
    assert await LifecycleEventDispatcher(notifier=None).dispatch(
        LifecycleEffect.NOTIFY_APPROVED, _report()
    )
    assert notifier.calls == []


@pytest.mark.asyncio
async def test_failed_delivery_is_logged_and_counted(caplog) -> None:
    metrics = _FakeMetrics()
    dispatcher = LifecycleEventDispatcher(notifier=_FakeNotifier(fail=True), metrics=metrics)

    with caplog.at_level(logging.WARNING):
        delivered = await dispatcher.dispatch(LifecycleEffect.NOTIFY_APPROVED, _report())

    assert delivered is False
    assert metrics.failures == ["notify_approved"]
    record = next(r for r in caplog.records if r.getMessage() == "financial_report.notification.failed")
    assert record.error_type == "TimeoutError"
    assert record.report_id == 21


@pytest.mark.asyncio
async def test_unsaved_report_cannot_be_dispatched() -> None:
    dispatcher = LifecycleEventDispatcher(notifier=_FakeNotifier())

    with pytest.raises(ValueError):
        await dispatcher.dispatch(LifecycleEffect.NOTIFY_SUBMITTED, _report(id=None))


@pytest.mark.asyncio
async def test_failed_delivery_log_carries_notification_error_code(caplog) -> None:
    dispatcher = LifecycleEventDispatcher(notifier=_FakeNotifier(fail=True))

    with caplog.at_level(logging.WARNING):
        delivered = await dispatcher.dispatch(LifecycleEffect.NOTIFY_REJECTED, _report())

    assert delivered is False
    record = next(r for r in caplog.records if r.getMessage() == "financial_report.notification.failed")
    assert record.code == "REPORT_NOTIFICATION_FAILED"
    assert record.event == "notify_rejected"
    assert record.error == "notifier timed out"
