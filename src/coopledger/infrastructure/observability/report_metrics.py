# src/coopledger/infrastructure/observability/report_metrics.py
# Copyright (c)
# SPDX-License-Identifier: MIT
"""Prometheus-backed implementation of ``ReportMetricsPort``.

Layer:
    infrastructure/observability

Notes:
    Metric emission never breaks a use case: label or registry failures are
    suppressed, as in the repositories.
"""

from __future__ import annotations

from contextlib import suppress

from coopledger.application.interfaces.report_metrics_port import ReportMetricsPort
from coopledger.domain.enums.financial_report import ViolationSeverity
from coopledger.infrastructure.observability.metrics import (
    get_notification_failures_total,
    get_report_transitions_total,
    get_report_validation_violations_total,
)


class PrometheusReportMetrics(ReportMetricsPort):
    """Report counters on the active Prometheus registry."""

    def record_violations(self, *, report_type: str, blocking: int, warnings: int) -> None:
        with suppress(Exception):
            counter = get_report_validation_violations_total()
            if blocking:
                counter.labels(
                    report_type=report_type, severity=ViolationSeverity.BLOCKING.value
                ).inc(blocking)
            if warnings:
                counter.labels(
                    report_type=report_type, severity=ViolationSeverity.WARNING.value
                ).inc(warnings)

    def record_transition(self, *, report_type: str, action: str, outcome: str) -> None:
        with suppress(Exception):
            get_report_transitions_total().labels(
                report_type=report_type, action=action, outcome=outcome
            ).inc()

    def record_notification_failure(self, *, event: str) -> None:
        with suppress(Exception):
            get_notification_failures_total().labels(event=event).inc()


__all__ = ["PrometheusReportMetrics"]
