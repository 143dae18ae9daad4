"""
Tests for the shared connection lifecycle
"""

import asyncio
from unittest.mock import MagicMock

import pytest

from devevent.core.config import load_settings
from devevent.core.connection import ConnectionManager, database_factory
from devevent.core.errors import DatabaseConnectionError
from devevent.services.repositories import Database, SqlEventStore


class CountingFactory:
    """Connect factory that records how many attempts were started"""

    def __init__(self, failures=0):
        self.calls = 0
        self.failures = failures

    async def __call__(self):
        self.calls += 1
        await asyncio.sleep(0.01)
        if self.calls <= self.failures:
            raise OSError("connection refused")
        return MagicMock(spec=Database)


def test_concurrent_callers_share_one_attempt():
    """Test first-time callers all await the same connection attempt"""
    factory = CountingFactory()
    manager = ConnectionManager(factory)

    async def scenario():
        return await asyncio.gather(*(manager.acquire() for _ in range(10)))

    results = asyncio.run(scenario())

    assert factory.calls == 1
    assert all(conn is results[0] for conn in results)
    assert manager.connected


def test_resolved_connection_is_reused():
    factory = CountingFactory()
    manager = ConnectionManager(factory)

    first = asyncio.run(manager.acquire())
    second = asyncio.run(manager.acquire())

    assert first is second
    assert factory.calls == 1


def test_failed_attempt_is_shared_then_retried():
    """A failure reaches every waiter and the next call starts fresh"""
    factory = CountingFactory(failures=1)
    manager = ConnectionManager(factory)

    async def scenario():
        return await asyncio.gather(*(manager.acquire() for _ in range(3)), return_exceptions=True)

    results = asyncio.run(scenario())

    assert factory.calls == 1
    assert all(isinstance(r, DatabaseConnectionError) for r in results)
    assert isinstance(results[0].__cause__, OSError)
    assert not manager.connected

    conn = asyncio.run(manager.acquire())

    assert factory.calls == 2
    assert conn is not None
    assert manager.connected


def test_failure_is_not_retried_automatically():
    factory = CountingFactory(failures=5)
    manager = ConnectionManager(factory)

    with pytest.raises(DatabaseConnectionError):
        asyncio.run(manager.acquire())

    assert factory.calls == 1


def test_cancelled_caller_does_not_cancel_shared_attempt():
    factory = CountingFactory()
    manager = ConnectionManager(factory)

    async def scenario():
        waiter = asyncio.ensure_future(manager.acquire())
        other = asyncio.ensure_future(manager.acquire())
        await asyncio.sleep(0)
        waiter.cancel()
        return await other

    conn = asyncio.run(scenario())

    assert conn is not None
    assert factory.calls == 1


def test_close_disposes_and_resets():
    factory = CountingFactory()
    manager = ConnectionManager(factory)
    conn = asyncio.run(manager.acquire())

    asyncio.run(manager.close())

    conn.close.assert_called_once()
    assert not manager.connected
    asyncio.run(manager.acquire())
    assert factory.calls == 2


def test_sql_factory_opens_database(tmp_path):
    config = load_settings(DATABASE_URL=f"sqlite:///{tmp_path / 'factory.db'}", _env_file=None)
    manager = ConnectionManager(database_factory(config))

    db = asyncio.run(manager.acquire())

    assert isinstance(db.events, SqlEventStore)
    assert db.events.exists("missing") is False
    asyncio.run(manager.close())


def test_sql_factory_unreachable_target_fails(tmp_path):
    missing_dir = tmp_path / "no" / "such" / "dir"
    config = load_settings(DATABASE_URL=f"sqlite:///{missing_dir / 'x.db'}", _env_file=None)
    manager = ConnectionManager(database_factory(config))

    with pytest.raises(DatabaseConnectionError):
        asyncio.run(manager.acquire())

    assert not manager.connected


def test_failure_with_no_waiters_allows_fresh_attempt():
    """A failed attempt is cleared even when its only caller was cancelled"""
    factory = CountingFactory(failures=1)
    manager = ConnectionManager(factory)

    async def scenario():
        waiter = asyncio.ensure_future(manager.acquire())
        await asyncio.sleep(0)
        waiter.cancel()
        # The attempt fails while nobody is awaiting it
        await asyncio.sleep(0.05)
        return await manager.acquire()

    conn = asyncio.run(scenario())

    assert conn is not None
    assert factory.calls == 2
    assert manager.connected


def test_success_with_no_waiters_is_kept():
    factory = CountingFactory()
    manager = ConnectionManager(factory)

    async def scenario():
        waiter = asyncio.ensure_future(manager.acquire())
        await asyncio.sleep(0)
        waiter.cancel()
        await asyncio.sleep(0.05)
        return manager.connected

    assert asyncio.run(scenario()) is True
    assert factory.calls == 1
