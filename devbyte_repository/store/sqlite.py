"""
SQLite video store.

Keeps the cached playlist in a single ``videos`` table. The remote order is
stored in a ``position`` column so reads come back in presentation order.
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

import aiosqlite

from ..exceptions import StoreError
from ..records import ROW_COLUMNS, DatabaseVideo, dedupe_by_url
from .base import VideoStore

logger = logging.getLogger(__name__)

_CREATE_TABLE_SQL = """
CREATE TABLE IF NOT EXISTS videos (
    url TEXT NOT NULL PRIMARY KEY,
    position INTEGER NOT NULL,
    title TEXT NOT NULL,
    description TEXT NOT NULL,
    updated TEXT NOT NULL,
    thumbnail TEXT NOT NULL,
    closed_captions TEXT
)
"""

_SELECT_ALL_SQL = f"SELECT {', '.join(ROW_COLUMNS)} FROM videos ORDER BY position"

_INSERT_SQL = (
    f"INSERT INTO videos ({', '.join(ROW_COLUMNS)}) "
    f"VALUES ({', '.join('?' for _ in ROW_COLUMNS)})"
)


class SQLiteVideoStore(VideoStore):
    """
    SQLite-backed video store.

    Features:
    - Single file database (or ``:memory:`` for tests)
    - Destructive ``replace_all`` inside one transaction
    - Reads and writes serialized with an ``asyncio.Lock``
    """

    def __init__(self, db_path: str | Path = ":memory:") -> None:
        super().__init__()
        self.db_path = db_path
        self.conn: aiosqlite.Connection | None = None
        self._initialized = False
        self._lock = asyncio.Lock()

    @classmethod
    async def create(cls, db_path: str | Path = ":memory:") -> SQLiteVideoStore:
        """Create and initialize a SQLite store."""
        store = cls(db_path)
        await store.initialize()
        return store

    async def initialize(self) -> None:
        """Open the connection, create the schema and load the stored rows."""
        if self._initialized:
            return

        try:
            if self.db_path != ":memory:":
                Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)
            self.conn = await aiosqlite.connect(str(self.db_path))
            await self.conn.execute(_CREATE_TABLE_SQL)
            await self.conn.execute(
                "CREATE INDEX IF NOT EXISTS idx_videos_position ON videos(position)"
            )
            await self.conn.commit()
            rows = await self._select_all(self.conn)
        except Exception as e:
            if self.conn is not None:
                await self.conn.close()
                self.conn = None
            raise StoreError("initialize", str(self.db_path), e) from e

        self._publisher.publish(rows)
        self._initialized = True
        logger.info(f"SQLite video store initialized: {self.db_path} ({len(rows)} videos)")

    async def close(self) -> None:
        """Close the connection and end all subscriptions."""
        self._publisher.close()
        if self.conn:
            await self.conn.close()
            self.conn = None
        self._initialized = False

    async def get_all(self) -> list[DatabaseVideo]:
        conn = self._require_connection("get_all")
        # Same connection as the writer: wait so an open transaction is never read
        async with self._lock:
            try:
                return await self._select_all(conn)
            except Exception as e:
                raise StoreError("get_all", str(self.db_path), e) from e

    async def replace_all(self, videos: list[DatabaseVideo]) -> None:
        conn = self._require_connection("replace_all")
        rows = dedupe_by_url(videos)

        async with self._lock:
            try:
                await conn.execute("BEGIN")
                await conn.execute("DELETE FROM videos")
                await conn.executemany(
                    _INSERT_SQL, [row.to_row(position) for position, row in enumerate(rows)]
                )
                await conn.commit()
            except asyncio.CancelledError:
                # Leave no open transaction behind for the next writer. The
                # commit may already have landed, so publish what is stored.
                await conn.rollback()
                stored = await self._select_all(conn)
                if stored != self._publisher.current:
                    self._publisher.publish(stored)
                logger.warning(f"replace_all cancelled, {len(stored)} videos stored")
                raise
            except Exception as e:
                await conn.rollback()
                logger.error(f"replace_all failed, rolled back: {e}")
                raise StoreError("replace_all", str(self.db_path), e) from e

            self._publisher.publish(rows)

        logger.debug(f"Replaced stored videos with {len(rows)} rows")

    def _require_connection(self, operation: str) -> aiosqlite.Connection:
        if self.conn is None or not self._initialized:
            raise StoreError(operation, str(self.db_path), RuntimeError("Not initialized"))
        return self.conn

    @staticmethod
    async def _select_all(conn: aiosqlite.Connection) -> list[DatabaseVideo]:
        async with conn.execute(_SELECT_ALL_SQL) as cursor:
            rows = await cursor.fetchall()
        return [DatabaseVideo.from_row(tuple(row)) for row in rows]
