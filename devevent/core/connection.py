"""
Database connection lifecycle

One ConnectionManager is created per process and shared by every request.
It connects lazily, lets concurrent callers wait on a single in-flight
attempt, and forgets a failed attempt so the next caller can try again.
"""

import asyncio
import logging
from functools import lru_cache
from typing import Awaitable, Callable, Optional

from fastapi import Request
from fastapi.concurrency import run_in_threadpool

from devevent.core.config import Settings, settings
from devevent.core.errors import DatabaseConnectionError
from devevent.services.repositories import Database, open_firestore_database, open_sql_database

logger = logging.getLogger(__name__)

ConnectFactory = Callable[[], Awaitable[Database]]


class ConnectionManager:
    """Lazily opens and memoizes a single Database handle"""

    def __init__(self, connect: ConnectFactory):
        self._connect = connect
        self._conn: Optional[Database] = None
        self._pending: Optional[asyncio.Future] = None

    @property
    def connected(self) -> bool:
        return self._conn is not None

    async def acquire(self) -> Database:
        """Return the shared handle, connecting on first use."""
        if self._conn is not None:
            return self._conn

        if self._pending is None:
            self._pending = asyncio.ensure_future(self._attempt())
        pending = self._pending

        # Shielded: a cancelled caller must not cancel the attempt others are awaiting
        return await asyncio.shield(pending)

    async def _attempt(self) -> Database:
        """Run one connection attempt; it owns both slots whether or not anyone is waiting."""
        logger.info("Opening database connection")
        try:
            conn = await self._connect()
        except Exception as exc:
            if self._pending is asyncio.current_task():
                self._pending = None
            if isinstance(exc, DatabaseConnectionError):
                raise
            logger.error("Database connection failed: %s", exc.__class__.__name__)
            raise DatabaseConnectionError(f"Could not connect to the database: {exc}") from exc
        if self._pending is asyncio.current_task():
            self._conn = conn
        logger.info("Database connection established")
        return conn

    async def close(self) -> None:
        """Dispose the resolved handle and reset both slots."""
        conn, self._conn, self._pending = self._conn, None, None
        if conn is not None:
            await run_in_threadpool(conn.close)
            logger.info("Database connection closed")


def database_factory(config: Settings) -> ConnectFactory:
    """Pick the backend from the DATABASE_URL scheme."""

    async def connect() -> Database:
        if config.use_firestore:
            return await run_in_threadpool(open_firestore_database)
        return await run_in_threadpool(open_sql_database, config.DATABASE_URL)

    return connect


@lru_cache(maxsize=1)
def get_connection_manager() -> ConnectionManager:
    """Process-wide manager, built once per process."""
    return ConnectionManager(database_factory(settings))


async def get_database(request: Request) -> Database:
    """FastAPI dependency resolving the application's shared Database handle"""
    return await request.app.state.connections.acquire()
