# src/coopledger/adapters/uow/__init__.py
# Copyright (c)
# SPDX-License-Identifier: MIT
"""
Unit of Work implementations (Adapters Layer)

Purpose:
    Concrete UnitOfWork implementations backed by SQLAlchemy AsyncSession.
    Application code depends only on the ``UnitOfWork`` protocol from
    ``coopledger.application.uow``.

Exports:
    - SqlAlchemyUnitOfWork
"""

from __future__ import annotations

from .sqlalchemy_uow import SqlAlchemyUnitOfWork

__all__ = ["SqlAlchemyUnitOfWork"]
