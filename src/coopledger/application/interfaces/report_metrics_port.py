# src/coopledger/application/interfaces/report_metrics_port.py
# Copyright (c)
# SPDX-License-Identifier: MIT
"""Application Interface: Report Metrics Port.

Synopsis:
    Counters emitted by report use cases. Keeps the application layer free of
    a hard dependency on the metrics backend; the Prometheus implementation
    lives in ``infrastructure/observability``.

Layer:
    application/interfaces
"""

from __future__ import annotations

from typing import Protocol


class ReportMetricsPort(Protocol):
    """Sink for report lifecycle and validation counters."""

    def record_violations(self, *, report_type: str, blocking: int, warnings: int) -> None:
        """Count violations produced by one validation run."""

    def record_transition(self, *, report_type: str, action: str, outcome: str) -> None:
        """Count a lifecycle action and whether it succeeded."""

    def record_notification_failure(self, *, event: str) -> None:
        """Count a notification that could not be handed to the notifier."""


class NullReportMetrics:
    """No-op metrics sink used when no backend is wired."""

    def record_violations(self, *, report_type: str, blocking: int, warnings: int) -> None:
        return None

    def record_transition(self, *, report_type: str, action: str, outcome: str) -> None:
        return None

    def record_notification_failure(self, *, event: str) -> None:
        return None


__all__ = ["NullReportMetrics", "ReportMetricsPort"]
