"""SQLite connection pool backing the document store."""

from __future__ import annotations

import asyncio
from collections import deque
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncIterator, Deque, List

import aiosqlite

from core import get_logger
from core.constants import StoreDefaults

logger = get_logger(__name__)


class DocumentStorePool:
    """Fixed set of autocommit SQLite connections shared by store calls.

    Connections are opened with ``isolation_level=None``; every transaction
    is issued explicitly as ``BEGIN IMMEDIATE`` / commit / rollback. A caller
    holds a connection for the whole ``connection()`` block and waits while
    all of them are checked out.
    """

    PRAGMAS = (
        "PRAGMA journal_mode=WAL",
        "PRAGMA synchronous=NORMAL",
        "PRAGMA temp_store=MEMORY",
    )

    def __init__(
        self,
        database_path: str,
        pool_size: int = StoreDefaults.POOL_SIZE,
        busy_timeout_ms: int = StoreDefaults.BUSY_TIMEOUT,
    ) -> None:
        self.database_path = Path(database_path)
        self.pool_size = pool_size
        self.busy_timeout_ms = busy_timeout_ms
        self._opened: List[aiosqlite.Connection] = []
        self._idle: Deque[aiosqlite.Connection] = deque()
        self._idle_changed = asyncio.Condition()
        self._opening = asyncio.Lock()

    @property
    def initialized(self) -> bool:
        return bool(self._opened)

    async def open(self) -> None:
        async with self._opening:
            if self._opened:
                return

            self.database_path.parent.mkdir(parents=True, exist_ok=True)
            for _ in range(self.pool_size):
                conn = await aiosqlite.connect(self.database_path.as_posix(), isolation_level=None)
                for pragma in self.PRAGMAS:
                    await conn.execute(pragma)
                await conn.execute(f"PRAGMA busy_timeout={self.busy_timeout_ms}")
                self._opened.append(conn)
                self._idle.append(conn)

        logger.info(f"Opened {self.pool_size} connections to {self.database_path}")

    async def close(self) -> None:
        async with self._idle_changed:
            connections, self._opened = self._opened, []
            self._idle.clear()
        for conn in connections:
            await conn.close()

    @asynccontextmanager
    async def connection(self) -> AsyncIterator[aiosqlite.Connection]:
        await self.open()
        async with self._idle_changed:
            await self._idle_changed.wait_for(lambda: bool(self._idle))
            conn = self._idle.popleft()
        try:
            yield conn
        finally:
            async with self._idle_changed:
                # Connections closed while checked out are not returned
                if conn in self._opened:
                    self._idle.append(conn)
                    self._idle_changed.notify()
