# src/coopledger/application/uow.py
# Copyright (c)
# SPDX-License-Identifier: MIT
"""Unit of Work (Application Layer).

Purpose:
    Transactional boundary used by report use cases. A report header and
    its line items are written inside one unit of work so that either all
    rows become visible or none do.

    Infrastructure-agnostic: only the Protocol and a helper live here.
    The SQLAlchemy implementation lives in ``adapters/uow``.

Layer:
    application
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from contextlib import AbstractAsyncContextManager
from types import TracebackType
from typing import Any, Protocol, TypeVar, runtime_checkable

TResult = TypeVar("TResult")


@runtime_checkable
class UnitOfWork(Protocol, AbstractAsyncContextManager["UnitOfWork"]):
    """Unit-of-Work contract for application use cases."""

    async def __aenter__(self) -> UnitOfWork:
        """Open the transactional scope and return the active UoW."""
        raise NotImplementedError

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> bool | None:
        """Close the scope; implementations roll back when an exception escaped."""
        raise NotImplementedError

    async def commit(self) -> None:
        raise NotImplementedError

    async def rollback(self) -> None:
        raise NotImplementedError

    def get_repository(self, repo_type: type[Any]) -> Any:
        """Return the repository bound to this unit of work for ``repo_type``.

        Args:
            repo_type:
                Interface (Protocol) or concrete class used as the lookup key.
        """
        raise NotImplementedError


async def run_in_uow(  # noqa: UP047
    uow: UnitOfWork,
    fn: Callable[[UnitOfWork], Awaitable[TResult]],
) -> TResult:
    """Run ``fn`` inside ``uow``: commit on success, roll back and re-raise on error.

    Args:
        uow: UnitOfWork providing the transactional boundary.
        fn: Coroutine function receiving the active UnitOfWork.

    Returns:
        TResult: Whatever ``fn`` returned.
    """
    async with uow as tx:
        try:
            result = await fn(tx)
        except Exception:
            await tx.rollback()
            raise
        else:
            await tx.commit()
            return result
