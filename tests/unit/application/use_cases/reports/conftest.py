# tests/unit/application/use_cases/reports/conftest.py
from __future__ import annotations

from collections.abc import Callable
from dataclasses import replace
from datetime import UTC, datetime
from typing import Any

import pytest

from coopledger.application.services.lifecycle_events import LifecycleEventDispatcher
from coopledger.application.services.report_validation import ReportValidationService
from coopledger.domain.entities.financial_report import FinancialReport, FinancialReportAggregate
from coopledger.domain.entities.report_payloads import ReportPayload
from coopledger.domain.enums.financial_report import (
    ActorRole,
    ReportingPeriod,
    ReportStatus,
    ReportType,
)
from coopledger.domain.exceptions.reports import ReportConflictError, ReportPersistenceError
from coopledger.domain.interfaces.repositories.financial_reports_repository import (
    FinancialReportsRepository,
)

COOPERATIVE_ID = 5
OTHER_COOPERATIVE_ID = 6
PREPARER_ID = 42
REVIEWER_ID = 7
NOW = datetime(2025, 3, 1, 12, 0, tzinfo=UTC)


class InMemoryReportsRepo:
    """Dict-backed reports repository with the port's check-and-set rules.

    ``fail_after_header`` stores the header and then fails before the line
    items, mimicking a driver error in the middle of ``add``.
    """

    def __init__(self) -> None:
        self.reports: dict[int, FinancialReport] = {}
        self.payloads: dict[int, ReportPayload] = {}
        self.next_id = 1
        self.fail_after_header = False
        self.writes: list[str] = []

    # -- helpers ---------------------------------------------------------

    def seed(self, report: FinancialReport, payload: ReportPayload) -> FinancialReport:
        stored = replace(report, id=self.next_id)
        self.next_id += 1
        self.reports[stored.id] = stored
        self.payloads[stored.id] = payload
        return stored

    def snapshot(self) -> tuple[dict[int, FinancialReport], dict[int, ReportPayload], int]:
        return dict(self.reports), dict(self.payloads), self.next_id

    def restore(self, state: tuple[dict[int, FinancialReport], dict[int, ReportPayload], int]) -> None:
        reports, payloads, next_id = state
        self.reports, self.payloads, self.next_id = dict(reports), dict(payloads), next_id

    def _visible(self, report_id: int, cooperative_id: int) -> FinancialReport | None:
        report = self.reports.get(report_id)
        if report is None or report.cooperative_id != cooperative_id:
            return None
        return report

    def _check(
        self, report_id: int, *, status: ReportStatus, version: int
    ) -> FinancialReport:
        stored = self.reports.get(report_id)
        if stored is None or stored.status is not status or stored.version != version:
            raise ReportConflictError(
                "stale", details={"report_id": report_id, "expected_version": version}
            )
        return stored

    # -- port ------------------------------------------------------------

    async def get_header(self, report_id: int, *, cooperative_id: int) -> FinancialReport | None:
        return self._visible(report_id, cooperative_id)

    async def get(self, report_id: int, *, cooperative_id: int) -> FinancialReportAggregate | None:
        report = self._visible(report_id, cooperative_id)
        if report is None or report_id not in self.payloads:
            return None
        return FinancialReportAggregate(report=report, payload=self.payloads[report_id])

    def _by_key(self, key: tuple[int, ReportType, int]) -> FinancialReport | None:
        return next((r for r in self.reports.values() if r.natural_key() == key), None)

    async def get_by_natural_key(
        self, *, cooperative_id: int, report_type: ReportType, reporting_year: int
    ) -> FinancialReport | None:
        return self._by_key((cooperative_id, report_type, reporting_year))

    async def find_prior_period(
        self, *, cooperative_id: int, report_type: ReportType, reporting_year: int
    ) -> FinancialReportAggregate | None:
        prior = await self.get_by_natural_key(
            cooperative_id=cooperative_id,
            report_type=report_type,
            reporting_year=reporting_year - 1,
        )
        if prior is None or prior.status is not ReportStatus.APPROVED or prior.id is None:
            return None
        return FinancialReportAggregate(report=prior, payload=self.payloads[prior.id])

    async def find_approved_siblings(
        self, *, cooperative_id: int, reporting_year: int, exclude_report_id: int | None = None
    ) -> list[FinancialReportAggregate]:
        return [
            FinancialReportAggregate(report=r, payload=self.payloads[r.id])
            for r in sorted(self.reports.values(), key=lambda r: r.report_type.value)
            if r.cooperative_id == cooperative_id
            and r.reporting_year == reporting_year
            and r.status is ReportStatus.APPROVED
            and r.id != exclude_report_id
        ]

    async def add(self, report: FinancialReport, payload: ReportPayload) -> FinancialReport:
        self.writes.append("add")
        if self._by_key(report.natural_key()) is not None:
            raise ReportConflictError("duplicate", details={"constraint": "uq"})
        stored = replace(report, id=self.next_id)
        self.next_id += 1
        self.reports[stored.id] = stored
        if self.fail_after_header:
            raise ReportPersistenceError("line insert failed", details={"operation": "add"})
        self.payloads[stored.id] = payload
        return stored

    async def replace_payload(
        self, report: FinancialReport, payload: ReportPayload, *, expected_version: int
    ) -> FinancialReport:
        self.writes.append("replace_payload")
        assert report.id is not None
        self._check(report.id, status=ReportStatus.DRAFT, version=expected_version)
        saved = replace(report, version=expected_version + 1)
        self.reports[report.id] = saved
        self.payloads[report.id] = payload
        return saved

    async def save_transition(
        self, report: FinancialReport, *, expected_status: ReportStatus, expected_version: int
    ) -> FinancialReport:
        self.writes.append("save_transition")
        assert report.id is not None
        self._check(report.id, status=expected_status, version=expected_version)
        saved = replace(report, version=expected_version + 1)
        self.reports[report.id] = saved
        return saved

    async def delete(self, report_id: int, *, cooperative_id: int, expected_version: int) -> None:
        self.writes.append("delete")
        self._check(report_id, status=ReportStatus.DRAFT, version=expected_version)
        del self.reports[report_id]
        self.payloads.pop(report_id, None)


class FakeUow:
    """Unit of work over the in-memory repo; rollback restores the entry snapshot."""

    def __init__(self, repo: InMemoryReportsRepo) -> None:
        self.repo = repo
        self.commits = 0
        self.rollbacks = 0
        self._snapshot: Any = None

    async def __aenter__(self) -> FakeUow:
        self._snapshot = self.repo.snapshot()
        return self

    async def __aexit__(self, exc_type: Any, exc: Any, tb: Any) -> None:
        return None

    async def commit(self) -> None:
        self.commits += 1

    async def rollback(self) -> None:
        self.rollbacks += 1
        self.repo.restore(self._snapshot)

    def get_repository(self, repo_type: type[Any]) -> Any:
        assert repo_type is FinancialReportsRepository
        return self.repo


class FakeActors:
    def __init__(self) -> None:
        self._roles: dict[tuple[int, int], frozenset[ActorRole]] = {}
        self.calls: list[tuple[int, int]] = []

    def grant(self, actor_id: int, cooperative_id: int, *roles: ActorRole) -> None:
        self._roles[(actor_id, cooperative_id)] = frozenset(roles)

    async def roles_for(self, actor_id: int, *, cooperative_id: int) -> frozenset[ActorRole]:
        self.calls.append((actor_id, cooperative_id))
        return self._roles.get((actor_id, cooperative_id), frozenset())


class RecordingNotifier:
    def __init__(self, *, fail: bool = False) -> None:
        self.fail = fail
        self.events: list[tuple[str, dict[str, Any]]] = []

    def _record(self, event: str, kwargs: dict[str, Any]) -> None:
        if self.fail:
            raise ConnectionError("mail relay unavailable")
        self.events.append((event, kwargs))

    async def notify_submitted(self, **kwargs: Any) -> None:
        self._record("submitted", kwargs)

    async def notify_approved(self, **kwargs: Any) -> None:
        self._record("approved", kwargs)

    async def notify_rejected(self, **kwargs: Any) -> None:
        self._record("rejected", kwargs)


class RecordingMetrics:
    def __init__(self) -> None:
        self.transitions: list[tuple[str, str, str]] = []
        self.violations: list[tuple[str, int, int]] = []
        self.notification_failures: list[str] = []

    def record_violations(self, *, report_type: str, blocking: int, warnings: int) -> None:
        self.violations.append((report_type, blocking, warnings))

    def record_transition(self, *, report_type: str, action: str, outcome: str) -> None:
        self.transitions.append((report_type, action, outcome))

    def record_notification_failure(self, *, event: str) -> None:
        self.notification_failures.append(event)


# ---------------------------------------------------------------------------
# Documents
# ---------------------------------------------------------------------------


def balance_sheet_document(*, assets: int = 1_000_000, liabilities: int = 600_000) -> dict[str, Any]:
    equity = 1_000_000 - liabilities
    return {
        "accounts": [
            {"code": "A100", "name": "Kas", "category": "asset", "current_amount": str(assets)},
            {
                "code": "L100",
                "name": "Simpanan anggota",
                "category": "liability",
                "current_amount": str(liabilities),
            },
            {
                "code": "E100",
                "name": "Modal",
                "category": "equity",
                "current_amount": str(equity),
            },
        ]
    }


def cash_flow_document(*, ending: int = 1_300_000) -> dict[str, Any]:
    return {
        "beginning_cash_balance": "1000000",
        "ending_cash_balance": str(ending),
        "activities": [
            {"category": "operating", "description": "Penerimaan bunga", "current_amount": "500000"},
            {"category": "financing", "description": "Pelunasan pinjaman", "current_amount": "-200000"},
        ],
    }


def draft_header(
    report_type: ReportType = ReportType.BALANCE_SHEET,
    *,
    status: ReportStatus = ReportStatus.DRAFT,
    cooperative_id: int = COOPERATIVE_ID,
    reporting_year: int = 2024,
) -> FinancialReport:
    return FinancialReport(
        cooperative_id=cooperative_id,
        report_type=report_type,
        reporting_year=reporting_year,
        reporting_period=ReportingPeriod.ANNUAL,
        status=status,
        created_by=PREPARER_ID,
        created_at=NOW,
        updated_at=NOW,
    )


def parse(report_type: ReportType, document: dict[str, Any]) -> ReportPayload:
    payload, violations = ReportValidationService().parse_payload(report_type, document)
    assert payload is not None, violations
    return payload


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def repo() -> InMemoryReportsRepo:
    return InMemoryReportsRepo()


@pytest.fixture
def uow(repo: InMemoryReportsRepo) -> FakeUow:
    return FakeUow(repo)


@pytest.fixture
def actors() -> FakeActors:
    directory = FakeActors()
    directory.grant(PREPARER_ID, COOPERATIVE_ID, ActorRole.ADMIN_KOPERASI)
    directory.grant(REVIEWER_ID, COOPERATIVE_ID, ActorRole.ADMIN_DINAS)
    directory.grant(REVIEWER_ID, OTHER_COOPERATIVE_ID, ActorRole.ADMIN_DINAS)
    return directory


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def metrics() -> RecordingMetrics:
    return RecordingMetrics()


@pytest.fixture
def clock() -> Callable[[], datetime]:
    return lambda: NOW


@pytest.fixture
def validation() -> ReportValidationService:
    return ReportValidationService(today=lambda: NOW.date())


@pytest.fixture
def dispatcher(notifier: RecordingNotifier, metrics: RecordingMetrics) -> LifecycleEventDispatcher:
    return LifecycleEventDispatcher(notifier=notifier, metrics=metrics)


@pytest.fixture
def make_balance_sheet() -> Callable[..., dict[str, Any]]:
    return balance_sheet_document


@pytest.fixture
def make_cash_flow() -> Callable[..., dict[str, Any]]:
    return cash_flow_document


@pytest.fixture
def seed_report(repo: InMemoryReportsRepo) -> Callable[..., FinancialReport]:
    """Store a report directly in the repo and return its header."""

    def _seed(
        report_type: ReportType = ReportType.BALANCE_SHEET,
        *,
        status: ReportStatus = ReportStatus.DRAFT,
        document: dict[str, Any] | None = None,
        cooperative_id: int = COOPERATIVE_ID,
        reporting_year: int = 2024,
    ) -> FinancialReport:
        if document is None:
            document = (
                cash_flow_document()
                if report_type is ReportType.CASH_FLOW
                else balance_sheet_document()
            )
        header = draft_header(
            report_type,
            status=status,
            cooperative_id=cooperative_id,
            reporting_year=reporting_year,
        )
        return repo.seed(header, parse(report_type, document))

    return _seed
