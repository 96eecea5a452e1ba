# src/coopledger/infrastructure/logging/logger.py
# Copyright (c)
# SPDX-License-Identifier: MIT
"""Structured JSON logging utilities.

This module exposes an idempotent root configurator and a per-module logger
factory that produce one JSON object per log line.

Features:
    * Stable keys: ``ts``, ``level``, ``logger``, ``message``.
    * Enrichment with ``correlation_id``, ``cooperative_id`` and ``actor_id``
      from contextvars, so every line logged while a report request is being
      handled carries its scope.
    * Fields passed through ``extra={...}`` are emitted as top-level keys.
    * No-throw enrichment path.

Typical usage:
    configure_root_logging()
    set_log_context(correlation_id="c-1", cooperative_id=5, actor_id=42)
    log = get_json_logger(__name__)
"""

from __future__ import annotations

import json
import logging
import os
from contextvars import ContextVar
from datetime import UTC, datetime
from typing import Any

__all__ = [
    "clear_log_context",
    "configure_root_logging",
    "get_correlation_id",
    "get_json_logger",
    "set_log_context",
]

_CORRELATION_ID_CTX: ContextVar[str | None] = ContextVar("coopledger_correlation_id", default=None)
_COOPERATIVE_ID_CTX: ContextVar[int | None] = ContextVar("coopledger_cooperative_id", default=None)
_ACTOR_ID_CTX: ContextVar[int | None] = ContextVar("coopledger_actor_id", default=None)

# Attributes every LogRecord carries; anything else came from ``extra``.
_RESERVED_RECORD_ATTRS = frozenset(
    vars(logging.LogRecord("x", logging.INFO, "x", 0, "x", None, None))
) | {"message", "asctime", "taskName"}


def set_log_context(
    *,
    correlation_id: str | None = None,
    cooperative_id: int | None = None,
    actor_id: int | None = None,
) -> None:
    """Set correlation identifiers on the current context.

    Additive: arguments left as None keep their current value.
    """
    if correlation_id is not None:
        _CORRELATION_ID_CTX.set(correlation_id)
    if cooperative_id is not None:
        _COOPERATIVE_ID_CTX.set(cooperative_id)
    if actor_id is not None:
        _ACTOR_ID_CTX.set(actor_id)


def clear_log_context() -> None:
    """Reset all correlation identifiers on the current context."""
    _CORRELATION_ID_CTX.set(None)
    _COOPERATIVE_ID_CTX.set(None)
    _ACTOR_ID_CTX.set(None)


def get_correlation_id() -> str | None:
    """Return the current correlation id, if any."""
    return _CORRELATION_ID_CTX.get(None)


class _JsonFormatter(logging.Formatter):
    """JSON log formatter emitting stable keys and extras."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "ts": datetime.now(tz=UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        try:
            context = {
                "correlation_id": _CORRELATION_ID_CTX.get(None),
                "cooperative_id": _COOPERATIVE_ID_CTX.get(None),
                "actor_id": _ACTOR_ID_CTX.get(None),
            }
            payload.update({k: v for k, v in context.items() if v is not None})
        except Exception as exc:  # pragma: no cover
            payload["context_error"] = str(exc)

        if record.exc_info:
            exc_type, exc_value, _ = record.exc_info
            if exc_type is not None:
                payload["exc_type"] = exc_type.__name__
            if exc_value is not None:
                payload["exc_message"] = str(exc_value)

        # Record attributes win over context values of the same name.
        for key, value in vars(record).items():
            if key not in _RESERVED_RECORD_ATTRS and not key.startswith("_"):
                payload[key] = value

        return json.dumps(payload, separators=(",", ":"), ensure_ascii=False, default=str)


def configure_root_logging(level: str | int | None = None) -> None:
    """Initialize the root logger with a JSON stream handler (idempotent).

    Args:
        level: Logging level or level name. If ``None``, use env ``LOG_LEVEL`` or ``INFO``.
    """
    root = logging.getLogger()

    env_level = os.getenv("LOG_LEVEL")
    resolved: int | str = (
        level if level is not None else (env_level.upper() if env_level else "INFO")
    )
    root.setLevel(resolved)

    if any(isinstance(h.formatter, _JsonFormatter) for h in root.handlers):
        return

    handler = logging.StreamHandler()
    handler.setFormatter(_JsonFormatter())
    root.addHandler(handler)


def get_json_logger(name: str) -> logging.Logger:
    """Return a module logger that propagates to the JSON root handler.

    This does *not* configure the root logger. Call
    :func:`configure_root_logging` once at startup.
    """
    logger = logging.getLogger(name)
    logger.propagate = True
    return logger
