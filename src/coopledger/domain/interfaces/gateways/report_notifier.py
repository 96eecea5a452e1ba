# src/coopledger/domain/interfaces/gateways/report_notifier.py
# Copyright (c)
# SPDX-License-Identifier: MIT
"""Lifecycle notification gateway protocol.

Purpose:
    Deliver lifecycle events to people:

        * submitted: supervising agency officers (admin_dinas).
        * approved / rejected: the owning cooperative's administrators.

Layer:
    domain/interfaces/gateways

Notes:
    Calls are fire-and-forget from the engine's point of view. A failure is
    logged by the caller and never undoes the committed transition.
"""

from __future__ import annotations

from typing import Protocol

from coopledger.domain.enums.financial_report import ReportType


class ReportNotifier(Protocol):
    """Protocol for lifecycle notification delivery."""

    async def notify_submitted(
        self, *, cooperative_id: int, report_id: int, report_type: ReportType, reporting_year: int
    ) -> None:
        """Announce a newly submitted report to its reviewers."""
        ...

    async def notify_approved(
        self, *, cooperative_id: int, report_id: int, report_type: ReportType, reporting_year: int
    ) -> None:
        """Tell the owning cooperative that its report was approved."""
        ...

    async def notify_rejected(
        self,
        *,
        cooperative_id: int,
        report_id: int,
        report_type: ReportType,
        reporting_year: int,
        reason: str,
    ) -> None:
        """Tell the owning cooperative that its report was rejected, and why."""
        ...
