# src/coopledger/application/services/lifecycle_events.py
# Copyright (c)
# SPDX-License-Identifier: MIT
"""Lifecycle event dispatch (application layer).

Purpose:
    The one place where committed lifecycle transitions turn into
    notifications. Validators and the state machine stay free of side
    effects; use cases hand the committed header and the transition effect
    to :class:`LifecycleEventDispatcher` after their unit of work commits.

Layer:
    application/services

Notes:
    - Delivery is fire-and-forget. A notifier failure is wrapped in
      ``NotificationDeliveryError``, logged and counted, and never propagates
      past the dispatcher since the transition is already durable.
"""

from __future__ import annotations

import logging

from coopledger.application.interfaces.report_metrics_port import (
    NullReportMetrics,
    ReportMetricsPort,
)
from coopledger.domain.entities.financial_report import FinancialReport
from coopledger.domain.enums.financial_report import LifecycleEffect
from coopledger.domain.exceptions.reports import NotificationDeliveryError
from coopledger.domain.interfaces.gateways.report_notifier import ReportNotifier

logger = logging.getLogger(__name__)


class LifecycleEventDispatcher:
    """Route transition effects to the notifier."""

    def __init__(
        self,
        *,
        notifier: ReportNotifier | None,
        metrics: ReportMetricsPort | None = None,
    ) -> None:
        self._notifier = notifier
        self._metrics = metrics or NullReportMetrics()

    async def dispatch(self, effect: LifecycleEffect, report: FinancialReport) -> bool:
        """Emit the notification for ``effect``.

        Returns:
            True when the notifier accepted the event (or none was needed),
            False when delivery failed.
        """
        if effect is LifecycleEffect.NONE or self._notifier is None:
            return True
        if report.id is None:
            raise ValueError("Cannot dispatch lifecycle events for an unsaved report.")

        try:
            await self._deliver(self._notifier, effect, report)
        except NotificationDeliveryError as exc:
            self._metrics.record_notification_failure(event=effect.value)
            logger.warning(
                "financial_report.notification.failed",
                extra={
                    "code": exc.code,
                    "event": effect.value,
                    "report_id": report.id,
                    "cooperative_id": report.cooperative_id,
                    "report_type": report.report_type.value,
                    "error_type": exc.details.get("error_type"),
                    "error": str(exc.__cause__),
                },
            )
            return False

        logger.info(
            "financial_report.notification.sent",
            extra={
                "event": effect.value,
                "report_id": report.id,
                "cooperative_id": report.cooperative_id,
            },
        )
        return True

    @staticmethod
    async def _deliver(
        notifier: ReportNotifier, effect: LifecycleEffect, report: FinancialReport
    ) -> None:
        """Call the notifier method for ``effect``.

        Raises:
            NotificationDeliveryError: Wrapping whatever the notifier raised.
        """
        common = {
            "cooperative_id": report.cooperative_id,
            "report_id": report.id,
            "report_type": report.report_type,
            "reporting_year": report.reporting_year,
        }
        try:
            if effect is LifecycleEffect.NOTIFY_SUBMITTED:
                await notifier.notify_submitted(**common)
            elif effect is LifecycleEffect.NOTIFY_APPROVED:
                await notifier.notify_approved(**common)
            elif effect is LifecycleEffect.NOTIFY_REJECTED:
                await notifier.notify_rejected(**common, reason=report.rejection_reason or "")
        except Exception as exc:  # noqa: BLE001
            raise NotificationDeliveryError(
                "Lifecycle notification was not delivered.",
                details={
                    "event": effect.value,
                    "report_id": report.id,
                    "error_type": type(exc).__name__,
                },
            ) from exc


__all__ = ["LifecycleEventDispatcher"]
