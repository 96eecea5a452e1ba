# src/coopledger/infrastructure/observability/metrics.py
# Copyright (c)
# SPDX-License-Identifier: MIT
"""Prometheus metrics accessors (registry-aware).

Every collector is obtained through a ``get_*`` accessor that returns one
instance per active ``prometheus_client.REGISTRY``. Tests that swap the
default registry get fresh collectors on their next call, and repeated
imports never raise duplicate-registration errors.

Collectors:
    coopledger_db_operation_duration_seconds{operation, model, outcome}
    coopledger_db_errors_total{operation, model, reason}
    coopledger_report_validation_violations_total{report_type, severity}
    coopledger_report_transitions_total{report_type, action, outcome}
    coopledger_notification_failures_total{event}

Example:
    get_db_errors_total().labels(
        operation="add", model="financial_reports", reason="IntegrityError"
    ).inc()
"""

from __future__ import annotations

import logging
import threading
from contextlib import suppress
from typing import Final

import prometheus_client as prom
from prometheus_client import Counter, Histogram

_log = logging.getLogger(__name__)

_BUCKETS: Final[tuple[float, ...]] = (
    0.005,
    0.010,
    0.025,
    0.050,
    0.100,
    0.250,
    0.500,
    1.000,
    2.500,
    5.000,
    10.000,
)

_registry_id: int | None = None
_hist_cache: dict[str, Histogram] = {}
_counter_cache: dict[str, Counter] = {}
_lock = threading.RLock()


def _ensure_registry() -> None:
    """Drop cached collectors when the default registry object changed."""
    global _registry_id
    with _lock:
        rid = id(prom.REGISTRY)
        if _registry_id != rid:
            _hist_cache.clear()
            _counter_cache.clear()
            _registry_id = rid


def _lookup_existing(name: str) -> object | None:
    with _lock, suppress(Exception):
        mapping = getattr(prom.REGISTRY, "_names_to_collectors", None)
        if isinstance(mapping, dict):
            return mapping.get(name)
    return None


def _get_or_create_hist(
    name: str,
    help_text: str,
    *,
    buckets: tuple[float, ...] = _BUCKETS,
    labelnames: tuple[str, ...] = (),
) -> Histogram:
    """Return the histogram ``name`` on the active registry, creating it once.

    Args:
        name: Metric name (snake_case).
        help_text: Human-readable description.
        buckets: Histogram buckets in seconds.
        labelnames: Label names.
    """
    _ensure_registry()
    with _lock:
        cached = _hist_cache.get(name)
        if cached is not None:
            return cached

        existing = _lookup_existing(name)
        if isinstance(existing, Histogram):
            _hist_cache[name] = existing
            return existing

        try:
            hist = Histogram(name, help_text, labelnames, buckets=buckets, registry=prom.REGISTRY)
        except ValueError as exc:
            if "Duplicated timeseries" in str(exc):
                again = _lookup_existing(name)
                if isinstance(again, Histogram):
                    _hist_cache[name] = again
                    return again
            _log.exception("Failed to register Prometheus histogram %s", name)
            raise
        _hist_cache[name] = hist
        return hist


def _get_or_create_counter(
    name: str,
    help_text: str,
    *,
    labelnames: tuple[str, ...] = (),
) -> Counter:
    """Return the counter ``name`` on the active registry, creating it once."""
    _ensure_registry()
    with _lock:
        cached = _counter_cache.get(name)
        if cached is not None:
            return cached

        existing = _lookup_existing(name)
        if isinstance(existing, Counter):
            _counter_cache[name] = existing
            return existing

        try:
            counter = Counter(name, help_text, labelnames, registry=prom.REGISTRY)
        except ValueError as exc:
            if "Duplicated timeseries" in str(exc):
                again = _lookup_existing(name)
                if isinstance(again, Counter):
                    _counter_cache[name] = again
                    return again
            _log.exception("Failed to register Prometheus counter %s", name)
            raise
        _counter_cache[name] = counter
        return counter


# ---------------------------------------------------------------------------
# DB metrics
# ---------------------------------------------------------------------------


def get_db_operation_duration_seconds() -> Histogram:
    """Return histogram for DB operation latency.

    Labels:
        operation: Repository method name (e.g. ``save_transition``).
        model: Table name (e.g. ``financial_reports``).
        outcome: ``success`` or ``error``.
    """
    return _get_or_create_hist(
        name="coopledger_db_operation_duration_seconds",
        help_text="Latency (seconds) of database operations.",
        labelnames=("operation", "model", "outcome"),
    )


def get_db_errors_total() -> Counter:
    """Return counter for DB errors.

    Labels:
        operation: Repository method name.
        model: Table name.
        reason: Exception class name.
    """
    return _get_or_create_counter(
        name="coopledger_db_errors_total",
        help_text="Total database errors by operation/model.",
        labelnames=("operation", "model", "reason"),
    )


# ---------------------------------------------------------------------------
# Report metrics
# ---------------------------------------------------------------------------


def get_report_validation_violations_total() -> Counter:
    """Return counter for validation violations, labelled by report type and severity."""
    return _get_or_create_counter(
        name="coopledger_report_validation_violations_total",
        help_text="Violations produced by report validation runs.",
        labelnames=("report_type", "severity"),
    )


def get_report_transitions_total() -> Counter:
    """Return counter for lifecycle actions.

    Labels:
        report_type: Report kind.
        action: ``create``, ``update``, ``delete``, ``submit``, ``approve``, ``reject``.
        outcome: ``success`` or the lower-cased error code.
    """
    return _get_or_create_counter(
        name="coopledger_report_transitions_total",
        help_text="Report lifecycle actions by outcome.",
        labelnames=("report_type", "action", "outcome"),
    )


def get_notification_failures_total() -> Counter:
    return _get_or_create_counter(
        name="coopledger_notification_failures_total",
        help_text="Lifecycle notifications the notifier failed to accept.",
        labelnames=("event",),
    )


__all__ = [
    "get_db_errors_total",
    "get_db_operation_duration_seconds",
    "get_notification_failures_total",
    "get_report_transitions_total",
    "get_report_validation_violations_total",
]
