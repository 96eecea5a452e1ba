# src/coopledger/domain/services/report_validators/notes_to_financial.py
# Copyright (c)
# SPDX-License-Identifier: MIT
"""Notes to the financial statements validator.

Notes carry narrative disclosures rather than figures, so only structure is
checked: section codes are well-formed and unique, and every section has a
title and content.
"""

from __future__ import annotations

import re
from datetime import date
from typing import Final

from coopledger.domain.entities.report_payloads import NotesToFinancialPayload
from coopledger.domain.enums.financial_report import ReportType
from coopledger.domain.services.report_validators.base import (
    BaseReportValidator,
    ViolationCollector,
)

SECTION_CODE_PATTERN: Final[re.Pattern[str]] = re.compile(r"[A-Z0-9.\-]+")
SECTION_CODE_MAX_LENGTH: Final[int] = 20
CONTENT_MAX_LENGTH: Final[int] = 10000


def _field(index: int, name: str) -> str:
    return f"sections.{index}.{name}"


class NotesToFinancialValidator(BaseReportValidator[NotesToFinancialPayload]):
    report_type = ReportType.NOTES_TO_FINANCIAL
    payload_type = NotesToFinancialPayload

    def _check_structure(
        self, payload: NotesToFinancialPayload, out: ViolationCollector, *, as_of: date
    ) -> None:
        out.require_min_count("sections", payload.sections, 1, "note section is")
        for i, section in enumerate(payload.sections):
            code = section.section_code
            if not code:
                out.blocking(_field(i, "section_code"), "Section code is required.", code="REQUIRED")
            elif len(code) > SECTION_CODE_MAX_LENGTH or not SECTION_CODE_PATTERN.fullmatch(code):
                out.blocking(
                    _field(i, "section_code"),
                    f"Section code must be at most {SECTION_CODE_MAX_LENGTH} uppercase letters, "
                    "digits, dots or hyphens.",
                    code="INVALID_CODE",
                )
            out.require_text(_field(i, "title"), section.title, max_length=255)
            out.require_text(_field(i, "content"), section.content, max_length=CONTENT_MAX_LENGTH)
            out.require_range(_field(i, "sort_order"), section.sort_order, minimum=0, maximum=999)

    def _check_consistency(
        self, payload: NotesToFinancialPayload, out: ViolationCollector
    ) -> None:
        out.require_unique(
            payload.sections,
            key=lambda section: section.section_code,
            field=lambda i: _field(i, "section_code"),
            describe=lambda section: f"section code '{section.section_code}'",
        )


__all__ = ["NotesToFinancialValidator"]
