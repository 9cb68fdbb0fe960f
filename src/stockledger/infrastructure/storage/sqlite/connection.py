"""
aiosqlite connections for the ledger database.

Reads share a small pool of WAL connections. Writes go through
``transaction()``, which takes the database write lock with BEGIN IMMEDIATE:
the version check of a record save and the movement rows inserted with it
commit or roll back as one unit.
"""

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path

import aiosqlite

from stockledger.config import get_logger, get_settings

logger = get_logger(__name__)

CONNECTION_PRAGMAS = (
    "PRAGMA journal_mode=WAL",
    "PRAGMA synchronous=NORMAL",
    "PRAGMA foreign_keys=ON",
)


async def open_connection(db_path: Path, busy_timeout: int) -> aiosqlite.Connection:
    """Open one ledger connection with rows addressable by column name."""
    conn = await aiosqlite.connect(db_path)
    for pragma in (*CONNECTION_PRAGMAS, f"PRAGMA busy_timeout={busy_timeout}"):
        await conn.execute(pragma)
    conn.row_factory = aiosqlite.Row
    return conn


class ConnectionPool:
    """Fixed set of connections handed out through a queue, opened lazily."""

    def __init__(self, db_path: Path, size: int = 5, busy_timeout: int = 30000):
        self.db_path = db_path
        self.size = size
        self.busy_timeout = busy_timeout

        self._idle: asyncio.Queue[aiosqlite.Connection] | None = None
        self._connections: list[aiosqlite.Connection] = []
        self._open_lock = asyncio.Lock()

    @property
    def is_open(self) -> bool:
        return self._idle is not None

    async def open(self) -> None:
        async with self._open_lock:
            if self._idle is not None:
                return

            self.db_path.parent.mkdir(parents=True, exist_ok=True)
            idle: asyncio.Queue[aiosqlite.Connection] = asyncio.Queue(maxsize=self.size)
            for _ in range(self.size):
                conn = await open_connection(self.db_path, self.busy_timeout)
                self._connections.append(conn)
                idle.put_nowait(conn)
            self._idle = idle

            logger.info("ledger_pool_opened", db_path=str(self.db_path), size=self.size)

    @asynccontextmanager
    async def acquire(self) -> AsyncIterator[aiosqlite.Connection]:
        """Borrow a connection for reads; it goes back to the pool on exit."""
        if self._idle is None:
            await self.open()
        idle = self._idle
        assert idle is not None

        conn = await idle.get()
        try:
            yield conn
        finally:
            idle.put_nowait(conn)

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[aiosqlite.Connection]:
        """Borrow a connection inside a write transaction: commit on exit, rollback on error."""
        async with self.acquire() as conn:
            await conn.execute("BEGIN IMMEDIATE")
            try:
                yield conn
                await conn.commit()
            except Exception:
                await conn.rollback()
                raise

    async def close(self) -> None:
        async with self._open_lock:
            connections, self._connections = self._connections, []
            self._idle = None
            for conn in connections:
                await conn.close()
            logger.info("ledger_pool_closed", closed=len(connections))


_pool: ConnectionPool | None = None


async def get_pool() -> ConnectionPool:
    """Get the process-wide pool, opening it on first use."""
    global _pool
    if _pool is None:
        storage = get_settings().storage
        _pool = ConnectionPool(
            db_path=storage.db_path,
            size=storage.pool_size,
            busy_timeout=storage.busy_timeout,
        )
        await _pool.open()
    return _pool


async def close_pool() -> None:
    global _pool
    if _pool is not None:
        await _pool.close()
        _pool = None


@asynccontextmanager
async def get_connection() -> AsyncIterator[aiosqlite.Connection]:
    pool = await get_pool()
    async with pool.acquire() as conn:
        yield conn


@asynccontextmanager
async def get_transaction() -> AsyncIterator[aiosqlite.Connection]:
    pool = await get_pool()
    async with pool.transaction() as conn:
        yield conn
