# src/coopledger/infrastructure/database/session.py
# Copyright (c)
# SPDX-License-Identifier: MIT
"""Async SQLAlchemy engine and session factory.

This module owns the process-global async engine and ``async_sessionmaker``
used by :class:`~coopledger.adapters.uow.SqlAlchemyUnitOfWork`.

Lifecycle:
    * Call ``init_engine_and_sessionmaker(settings)`` at startup.
    * Pass ``get_sessionmaker()`` to the unit of work.
    * Call ``dispose_engine()`` during shutdown.

Notes:
    * ``pool_pre_ping=True`` surfaces dead connections before use.
    * Pool sizing options are only applied to pooled dialects; SQLite (used
      in local runs) keeps SQLAlchemy's defaults.
"""

from __future__ import annotations

from typing import Any

from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from coopledger.config.settings import Settings

_engine: AsyncEngine | None = None
_sessionmaker: async_sessionmaker[AsyncSession] | None = None


def engine_options(settings: Settings) -> dict[str, Any]:
    """Return ``create_async_engine`` keyword options for ``settings``."""
    options: dict[str, Any] = {"pool_pre_ping": True, "echo": settings.db_echo}
    if make_url(settings.database_url).get_backend_name() != "sqlite":
        options.update(
            pool_size=settings.db_pool_size,
            max_overflow=settings.db_max_overflow,
            pool_timeout=settings.db_pool_timeout_s,
        )
    return options


def init_engine_and_sessionmaker(settings: Settings) -> None:
    """Initialize the global async engine and sessionmaker (idempotent).

    Raises:
        ValueError: If ``database_url`` is empty.
    """
    global _engine, _sessionmaker

    if not settings.database_url:
        raise ValueError("database_url must be configured")
    if _engine is not None:
        return

    _engine = create_async_engine(settings.database_url, **engine_options(settings))
    _sessionmaker = async_sessionmaker(bind=_engine, expire_on_commit=False, class_=AsyncSession)


async def dispose_engine() -> None:
    """Dispose the global engine at shutdown."""
    global _engine, _sessionmaker
    if _engine is not None:
        await _engine.dispose()
        _engine = None
        _sessionmaker = None


def get_sessionmaker() -> async_sessionmaker[AsyncSession]:
    """Return the initialized async sessionmaker.

    Raises:
        RuntimeError: If the sessionmaker is not yet initialized.
    """
    if _sessionmaker is None:
        raise RuntimeError("DB sessionmaker not initialized (call init_engine_and_sessionmaker)")
    return _sessionmaker
