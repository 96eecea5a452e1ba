# src/coopledger/application/schemas/dto/financial_reports.py
# Copyright (c)
# SPDX-License-Identifier: MIT
"""Application DTOs for financial report use cases.

Purpose:
    Request and response shapes for the report orchestrator. Every request
    carries the acting user and the cooperative scope explicitly; nothing is
    read from ambient session state.

Layer:
    application/schemas/dto
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from coopledger.domain.entities.financial_report import FinancialReport
from coopledger.domain.entities.report_payloads import ReportPayload
from coopledger.domain.enums.financial_report import ReportingPeriod, ReportType


@dataclass(frozen=True, slots=True)
class CreateFinancialReportRequestDTO:
    """Request DTO for creating a draft report.

    Attributes:
        payload: Typed payload, or a raw JSON-like mapping to be parsed.
    """

    cooperative_id: int
    actor_id: int
    report_type: ReportType
    reporting_year: int
    payload: ReportPayload | Mapping[str, Any]
    reporting_period: ReportingPeriod = ReportingPeriod.ANNUAL
    notes: str | None = None


@dataclass(frozen=True, slots=True)
class UpdateFinancialReportRequestDTO:
    """Request DTO for replacing a draft report's content.

    The payload is a full replacement, not a patch. ``reporting_period`` and
    ``notes`` keep their stored values when left as None.
    """

    report_id: int
    cooperative_id: int
    actor_id: int
    payload: ReportPayload | Mapping[str, Any]
    reporting_period: ReportingPeriod | None = None
    notes: str | None = None
    expected_version: int | None = None


@dataclass(frozen=True, slots=True)
class ReportActionRequestDTO:
    """Request DTO for delete, submit, and approve."""

    report_id: int
    cooperative_id: int
    actor_id: int
    expected_version: int | None = None


@dataclass(frozen=True, slots=True)
class RejectFinancialReportRequestDTO:
    """Request DTO for rejecting a submitted report."""

    report_id: int
    cooperative_id: int
    actor_id: int
    reason: str
    expected_version: int | None = None


@dataclass(frozen=True, slots=True)
class ReportTransitionResponseDTO:
    """Committed header after a lifecycle transition.

    Attributes:
        report: Header as persisted, with its bumped version.
        notification_delivered: False when the notifier failed after commit.
    """

    report: FinancialReport
    notification_delivered: bool = True


@dataclass(frozen=True, slots=True)
class ReportRefDTO:
    """Reference to one report within its cooperative scope."""

    report_id: int
    cooperative_id: int


@dataclass(frozen=True, slots=True)
class BulkApproveRequestDTO:
    actor_id: int
    reports: tuple[ReportRefDTO, ...]


@dataclass(frozen=True, slots=True)
class BulkApproveFailureDTO:
    """Per-report failure collected by a bulk approval."""

    report_id: int
    cooperative_id: int
    code: str
    message: str


@dataclass(frozen=True, slots=True)
class BulkApproveResponseDTO:
    approved: tuple[FinancialReport, ...]
    failures: tuple[BulkApproveFailureDTO, ...]


@dataclass(frozen=True, slots=True)
class GetFinancialReportRequestDTO:
    report_id: int
    cooperative_id: int


__all__ = [
    "BulkApproveFailureDTO",
    "BulkApproveRequestDTO",
    "BulkApproveResponseDTO",
    "CreateFinancialReportRequestDTO",
    "GetFinancialReportRequestDTO",
    "RejectFinancialReportRequestDTO",
    "ReportActionRequestDTO",
    "ReportRefDTO",
    "ReportTransitionResponseDTO",
    "UpdateFinancialReportRequestDTO",
]
