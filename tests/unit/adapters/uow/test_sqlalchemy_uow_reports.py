# tests/unit/adapters/uow/test_sqlalchemy_uow_reports.py
from __future__ import annotations

import pytest

from coopledger.adapters.repositories.financial_reports_repository import (
    SqlAlchemyFinancialReportsRepository,
)
from coopledger.adapters.uow.sqlalchemy_uow import SqlAlchemyUnitOfWork
from coopledger.domain.interfaces.repositories.financial_reports_repository import (
    FinancialReportsRepository,
)


class _FakeAsyncSession:
    """Implements only what SqlAlchemyUnitOfWork calls on its session."""

    def __init__(self) -> None:
        self.committed = False
        self.rolled_back = False
        self.closed = False

    async def commit(self) -> None:
        self.committed = True

    async def rollback(self) -> None:
        self.rolled_back = True

    async def close(self) -> None:
        self.closed = True


class _Factory:
    def __init__(self) -> None:
        self.sessions: list[_FakeAsyncSession] = []

    def __call__(self) -> _FakeAsyncSession:
        session = _FakeAsyncSession()
        self.sessions.append(session)
        return session


@pytest.mark.asyncio
async def test_resolves_and_caches_reports_repository() -> None:
    uow = SqlAlchemyUnitOfWork(session_factory=_Factory())

    async with uow as tx:
        repo = tx.get_repository(FinancialReportsRepository)
        assert isinstance(repo, SqlAlchemyFinancialReportsRepository)
        assert tx.get_repository(FinancialReportsRepository) is repo


@pytest.mark.asyncio
async def test_exception_rolls_back_and_closes() -> None:
    factory = _Factory()
    uow = SqlAlchemyUnitOfWork(session_factory=factory)

    with pytest.raises(RuntimeError):
        async with uow:
            raise RuntimeError("boom")

    session = factory.sessions[0]
    assert session.rolled_back is True
    assert session.committed is False
    assert session.closed is True


@pytest.mark.asyncio
async def test_commit_then_exit_does_not_roll_back() -> None:
    factory = _Factory()
    uow = SqlAlchemyUnitOfWork(session_factory=factory)

    with pytest.raises(RuntimeError):
        async with uow as tx:
            await tx.commit()
            raise RuntimeError("after commit")

    assert factory.sessions[0].committed is True
    assert factory.sessions[0].rolled_back is False


@pytest.mark.asyncio
async def test_each_entry_opens_a_fresh_session() -> None:
    factory = _Factory()
    uow = SqlAlchemyUnitOfWork(session_factory=factory)

    async with uow:
        pass
    async with uow:
        pass

    assert len(factory.sessions) == 2
    assert all(s.closed for s in factory.sessions)


@pytest.mark.asyncio
async def test_misuse_is_reported() -> None:
    uow = SqlAlchemyUnitOfWork(session_factory=_Factory())

    with pytest.raises(RuntimeError):
        uow.get_repository(FinancialReportsRepository)
    with pytest.raises(RuntimeError):
        await uow.commit()

    async with uow as tx:
        with pytest.raises(RuntimeError):
            await uow.__aenter__()
        with pytest.raises(KeyError):
            tx.get_repository(dict)


@pytest.mark.asyncio
async def test_repo_factories_override_defaults() -> None:
    sentinel = object()
    uow = SqlAlchemyUnitOfWork(
        session_factory=_Factory(),
        repo_factories={FinancialReportsRepository: lambda _s: sentinel},
    )

    async with uow as tx:
        assert tx.get_repository(FinancialReportsRepository) is sentinel
