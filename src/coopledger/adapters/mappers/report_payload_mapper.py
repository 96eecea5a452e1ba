# src/coopledger/adapters/mappers/report_payload_mapper.py
# Copyright (c)
# SPDX-License-Identifier: MIT
"""Report payload <-> row mapper.

Purpose:
    Split a typed payload into the header's ``attributes`` document and one
    JSON document per line item, and rebuild it on read. The payload DTOs
    are the single source of field shapes, so what is stored is exactly what
    the structural parser accepts.

Layer:
    adapters/mappers

Notes:
    - Decimals are dumped as strings (``mode="json"``) so stored amounts
      keep their exact value.
    - Line order is preserved through ``line_no``.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

from coopledger.application.schemas.dto.report_payloads import payload_dto_for
from coopledger.domain.entities.report_payloads import ReportPayload
from coopledger.domain.enums.financial_report import ReportType


def payload_to_rows(payload: ReportPayload) -> tuple[dict[str, Any], list[dict[str, Any]]]:
    """Return ``(attributes, lines)`` JSON documents for ``payload``."""
    dto_type = payload_dto_for(payload.report_type)
    document = dto_type.from_domain(payload).model_dump(mode="json")
    lines = document.pop(dto_type.line_field())
    return document, list(lines)


def rows_to_payload(
    report_type: ReportType,
    attributes: Mapping[str, Any] | None,
    lines: Iterable[Mapping[str, Any]],
) -> ReportPayload:
    """Rebuild a typed payload from stored documents.

    Raises:
        pydantic.ValidationError: If the stored documents no longer match
            the payload shape.
    """
    dto_type = payload_dto_for(report_type)
    document: dict[str, Any] = dict(attributes or {})
    document[dto_type.line_field()] = [dict(line) for line in lines]
    return dto_type.model_validate(document).to_domain()


__all__ = ["payload_to_rows", "rows_to_payload"]
