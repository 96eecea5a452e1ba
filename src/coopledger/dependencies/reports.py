# src/coopledger/dependencies/reports.py
# Copyright (c)
# SPDX-License-Identifier: MIT
"""Dependency wiring for financial report use cases.

Overview:
    Builds every report use case against one SQLAlchemy session factory,
    the Prometheus metrics sink, and the caller's actor directory and
    notifier. Callers (an HTTP layer, a worker, a script) hold on to the
    returned :class:`ReportServices` and call ``execute`` on its members.

Layer:
    dependencies

Design:
    * Always return the real use case types.
    * Each use case gets its own unit of work instance. A unit of work is
      not re-entrant, so build one ReportServices per request or task
      rather than sharing it between concurrent callers.
    * Workflow limits (rejection reason length) come from ``Settings``.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import date, datetime

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from coopledger.adapters.uow import SqlAlchemyUnitOfWork
from coopledger.application.services.lifecycle_events import LifecycleEventDispatcher
from coopledger.application.services.report_validation import ReportValidationService
from coopledger.application.use_cases.reports import (
    ApproveFinancialReportUseCase,
    BulkApproveFinancialReportsUseCase,
    CreateFinancialReportUseCase,
    DeleteFinancialReportUseCase,
    GetFinancialReportUseCase,
    RejectFinancialReportUseCase,
    SubmitFinancialReportUseCase,
    UpdateFinancialReportUseCase,
)
from coopledger.config.settings import Settings, get_settings
from coopledger.domain.interfaces.gateways.actor_directory import ActorDirectory
from coopledger.domain.interfaces.gateways.report_notifier import ReportNotifier
from coopledger.infrastructure.database.session import (
    get_sessionmaker,
    init_engine_and_sessionmaker,
)
from coopledger.infrastructure.logging.logger import configure_root_logging
from coopledger.infrastructure.observability.report_metrics import PrometheusReportMetrics

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ReportServices:
    """Wired report use cases."""

    validation: ReportValidationService
    create: CreateFinancialReportUseCase
    update: UpdateFinancialReportUseCase
    delete: DeleteFinancialReportUseCase
    submit: SubmitFinancialReportUseCase
    approve: ApproveFinancialReportUseCase
    reject: RejectFinancialReportUseCase
    bulk_approve: BulkApproveFinancialReportsUseCase
    get: GetFinancialReportUseCase


def build_report_services(
    *,
    session_factory: async_sessionmaker[AsyncSession] | Callable[[], AsyncSession],
    actors: ActorDirectory,
    notifier: ReportNotifier | None = None,
    settings: Settings | None = None,
    clock: Callable[[], datetime] | None = None,
) -> ReportServices:
    """Wire all report use cases.

    Args:
        session_factory: Factory for AsyncSession instances.
        actors: Directory resolving actor roles per cooperative.
        notifier: Lifecycle notifier; None disables notifications.
        settings: Settings override; defaults to ``get_settings()``.
        clock: UTC clock override for tests.
    """
    cfg = settings or get_settings()
    metrics = PrometheusReportMetrics()

    def _uow() -> SqlAlchemyUnitOfWork:
        return SqlAlchemyUnitOfWork(session_factory=session_factory)

    today: Callable[[], date] | None = None
    if clock is not None:

        def today() -> date:
            return clock().date()

    validation = ReportValidationService(today=today, metrics=metrics)
    dispatcher = LifecycleEventDispatcher(notifier=notifier, metrics=metrics)
    approve = ApproveFinancialReportUseCase(
        uow=_uow(), actors=actors, dispatcher=dispatcher, clock=clock, metrics=metrics
    )

    logger.info(
        "financial_report.services.wired",
        extra={
            "environment": cfg.environment.value,
            "notifier": type(notifier).__name__ if notifier is not None else None,
            "rejection_reason_max_length": cfg.rejection_reason_max_length,
        },
    )
    return ReportServices(
        validation=validation,
        create=CreateFinancialReportUseCase(
            uow=_uow(), actors=actors, validation=validation, clock=clock, metrics=metrics
        ),
        update=UpdateFinancialReportUseCase(
            uow=_uow(), actors=actors, validation=validation, clock=clock, metrics=metrics
        ),
        delete=DeleteFinancialReportUseCase(uow=_uow(), actors=actors, metrics=metrics),
        submit=SubmitFinancialReportUseCase(
            uow=_uow(),
            actors=actors,
            dispatcher=dispatcher,
            validation=validation,
            clock=clock,
            metrics=metrics,
        ),
        approve=approve,
        reject=RejectFinancialReportUseCase(
            uow=_uow(),
            actors=actors,
            dispatcher=dispatcher,
            clock=clock,
            metrics=metrics,
            reason_max_length=cfg.rejection_reason_max_length,
        ),
        bulk_approve=BulkApproveFinancialReportsUseCase(
            approve=ApproveFinancialReportUseCase(
                uow=_uow(), actors=actors, dispatcher=dispatcher, clock=clock, metrics=metrics
            ),
            actors=actors,
        ),
        get=GetFinancialReportUseCase(_uow()),
    )


def bootstrap_report_services(
    *,
    actors: ActorDirectory,
    notifier: ReportNotifier | None = None,
    settings: Settings | None = None,
) -> ReportServices:
    """Configure logging, open the engine, and wire the use cases.

    Intended for process startup; pair with ``dispose_engine()`` on shutdown.
    """
    cfg = settings or get_settings()
    configure_root_logging(cfg.log_level)
    init_engine_and_sessionmaker(cfg)
    return build_report_services(
        session_factory=get_sessionmaker(),
        actors=actors,
        notifier=notifier,
        settings=cfg,
    )


__all__ = ["ReportServices", "bootstrap_report_services", "build_report_services"]
