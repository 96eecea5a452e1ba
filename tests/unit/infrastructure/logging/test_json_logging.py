# tests/unit/infrastructure/logging/test_json_logging.py
from __future__ import annotations

import json
import logging
import sys

import pytest

from coopledger.infrastructure.logging.logger import (
    _JsonFormatter,
    clear_log_context,
    configure_root_logging,
    get_correlation_id,
    get_json_logger,
    set_log_context,
)


@pytest.fixture(autouse=True)
def _reset_context():
    clear_log_context()
    yield
    clear_log_context()


def _render(msg: str, *, exc_info=None, **extra) -> dict:
    record = logging.getLogger("coopledger.test").makeRecord(
        name="coopledger.test",
        level=logging.WARNING,
        fn="test_json_logging",
        lno=1,
        msg=msg,
        args=(),
        exc_info=exc_info,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return json.loads(_JsonFormatter().format(record))


def test_stable_keys_and_extras() -> None:
    payload = _render("financial_report.create.success", report_id=12, report_type="cash_flow")

    assert payload["message"] == "financial_report.create.success"
    assert payload["level"] == "WARNING"
    assert payload["logger"] == "coopledger.test"
    assert "ts" in payload
    assert payload["report_id"] == 12
    assert payload["report_type"] == "cash_flow"
    assert "lineno" not in payload


def test_context_identifiers_are_added() -> None:
    set_log_context(correlation_id="c-1", cooperative_id=5)
    set_log_context(actor_id=42)

    payload = _render("hello")

    assert (payload["correlation_id"], payload["cooperative_id"], payload["actor_id"]) == (
        "c-1",
        5,
        42,
    )
    assert get_correlation_id() == "c-1"


def test_record_extras_win_over_context() -> None:
    set_log_context(cooperative_id=5)

    assert _render("scoped", cooperative_id=6)["cooperative_id"] == 6


def test_exception_details_and_non_json_values() -> None:
    try:
        raise ValueError("bad amount")
    except ValueError:
        payload = _render("failed", exc_info=sys.exc_info(), amount=object())

    assert payload["exc_type"] == "ValueError"
    assert payload["exc_message"] == "bad amount"
    assert isinstance(payload["amount"], str)


def test_configure_root_logging_is_idempotent(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("LOG_LEVEL", "warning")
    root = logging.getLogger()
    monkeypatch.setattr(root, "handlers", [])
    monkeypatch.setattr(root, "level", root.level)

    configure_root_logging()
    configure_root_logging("DEBUG")

    assert root.level == logging.DEBUG
    assert len(root.handlers) == 1
    assert isinstance(root.handlers[0].formatter, _JsonFormatter)
    assert get_json_logger("coopledger.any").propagate is True
