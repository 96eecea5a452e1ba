# src/coopledger/infrastructure/database/models/base.py
# Copyright (c)
# SPDX-License-Identifier: MIT
"""Declarative Base and persistence mixins.

This module defines:
    - The project-wide SQLAlchemy Declarative Base with deterministic naming
      conventions (stable Alembic diffs).
    - Mixins for audit timestamps (UTC) and optimistic concurrency control.
    - A JSON column type that maps to JSONB on PostgreSQL.

Persistence only; no domain behavior lives here.
"""

from __future__ import annotations

from datetime import UTC, datetime

from sqlalchemy import JSON, MetaData
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy.sql import func
from sqlalchemy.types import DateTime, Integer

__all__ = [
    "Base",
    "JSONDocument",
    "NAMING_CONVENTIONS",
    "OptimisticLockingMixin",
    "TimestampMixin",
    "metadata",
    "now_utc",
]

#: Deterministic naming conventions for Alembic-friendly diffs.
#: Ref: https://alembic.sqlalchemy.org/en/latest/naming.html
NAMING_CONVENTIONS: dict[str, str] = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}

metadata = MetaData(naming_convention=NAMING_CONVENTIONS)

#: JSON on every dialect, JSONB on PostgreSQL.
JSONDocument = JSON().with_variant(JSONB(), "postgresql")


def now_utc() -> datetime:
    """Return the current UTC time with timezone info."""
    return datetime.now(UTC)


class Base(DeclarativeBase):
    """Declarative Base for all ORM models."""

    metadata = metadata


class TimestampMixin:
    """Mixin providing ``created_at`` and ``updated_at`` timestamps."""

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=now_utc,
        server_default=func.now(),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=now_utc,
        onupdate=now_utc,
        server_default=func.now(),
    )


class OptimisticLockingMixin:
    """Mixin providing an integer ``version`` column for optimistic locking.

    The column is bumped explicitly by repository UPDATE statements whose
    WHERE clause carries the version the caller observed.
    """

    version: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=1,
        server_default="1",
    )
