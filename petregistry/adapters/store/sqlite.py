"""SQLite record store adapter.

Implements RecordStorePort using SQLite with aiosqlite for async access.
Provides ACID guarantees for registry records with zero operational overhead.
"""

import asyncio
import json
import logging
from collections.abc import Sequence
from pathlib import Path
from typing import Any

import aiosqlite

from petregistry.core.ports import RecordStorePort, RecordWrite

logger = logging.getLogger(__name__)

_UPSERT = """
    INSERT INTO records (namespace, key, body)
    VALUES (?, ?, ?)
    ON CONFLICT (namespace, key) DO UPDATE SET body = excluded.body
"""


class SQLiteRecordStore(RecordStorePort):
    """SQLite-backed record store with connection pooling and async access."""

    def __init__(self, db_path: str, pool_size: int = 5):
        """Initialize SQLite store with connection pooling.

        Args:
            db_path: Path to SQLite database file.
            pool_size: Number of connections to maintain in the pool.
        """
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._pool: list[aiosqlite.Connection] = []
        self._pool_lock = asyncio.Lock()
        self._schema_lock = asyncio.Lock()
        self._pool_size = pool_size
        self._schema_initialized = False

    async def _get_connection(self) -> aiosqlite.Connection:
        """Get a connection from the pool or create a new one."""
        async with self._pool_lock:
            if self._pool:
                return self._pool.pop()
        return await aiosqlite.connect(str(self.db_path))

    async def _return_connection(self, conn: aiosqlite.Connection) -> None:
        """Return a connection to the pool."""
        async with self._pool_lock:
            if len(self._pool) < self._pool_size:
                self._pool.append(conn)
                return
        await conn.close()

    async def close(self) -> None:
        """Close all pooled connections."""
        async with self._pool_lock:
            for conn in self._pool:
                await conn.close()
            self._pool.clear()

    async def _init_schema(self) -> None:
        """Initialize database schema on first use.

        Only runs once per instance. Subsequent calls are no-ops.
        """
        if self._schema_initialized:
            return

        async with self._schema_lock:
            # Check again after acquiring lock to prevent race
            if self._schema_initialized:
                return

            conn = await self._get_connection()
            try:
                # seq keeps insertion order; upserts leave it untouched
                await conn.execute(
                    """
                    CREATE TABLE IF NOT EXISTS records (
                        seq INTEGER PRIMARY KEY AUTOINCREMENT,
                        namespace TEXT NOT NULL,
                        key TEXT NOT NULL,
                        body TEXT NOT NULL,
                        UNIQUE (namespace, key)
                    )
                    """
                )
                await conn.execute(
                    "CREATE INDEX IF NOT EXISTS idx_namespace_seq "
                    "ON records(namespace, seq)"
                )
                await conn.commit()
                self._schema_initialized = True
            finally:
                await self._return_connection(conn)

    async def get(self, namespace: str, key: str) -> dict[str, Any] | None:
        """Look up a record by namespace and key."""
        await self._init_schema()

        conn = await self._get_connection()
        try:
            cursor = await conn.execute(
                "SELECT body FROM records WHERE namespace = ? AND key = ?",
                (namespace, key),
            )
            row = await cursor.fetchone()
            if row is None:
                return None
            return self._decode(namespace, key, row[0])
        finally:
            await self._return_connection(conn)

    async def insert(
        self, namespace: str, key: str, record: dict[str, Any]
    ) -> dict[str, Any] | None:
        """Insert or replace a record, returning the previous one."""
        await self._init_schema()

        conn = await self._get_connection()
        try:
            cursor = await conn.execute(
                "SELECT body FROM records WHERE namespace = ? AND key = ?",
                (namespace, key),
            )
            row = await cursor.fetchone()
            await conn.execute(_UPSERT, (namespace, key, json.dumps(record)))
            await conn.commit()
        except Exception:
            await conn.rollback()
            raise
        finally:
            await self._return_connection(conn)

        if row is None:
            return None
        return self._decode(namespace, key, row[0])

    async def values(self, namespace: str) -> list[dict[str, Any]]:
        """Return every record in a namespace in insertion order."""
        await self._init_schema()

        conn = await self._get_connection()
        try:
            cursor = await conn.execute(
                "SELECT key, body FROM records WHERE namespace = ? ORDER BY seq",
                (namespace,),
            )
            rows = await cursor.fetchall()
            return [self._decode(namespace, key, body) for key, body in rows]
        finally:
            await self._return_connection(conn)

    async def apply_batch(self, writes: Sequence[RecordWrite]) -> None:
        """Insert several records in a single transaction."""
        await self._init_schema()

        encoded = [
            (namespace, key, json.dumps(record)) for namespace, key, record in writes
        ]

        conn = await self._get_connection()
        try:
            for params in encoded:
                await conn.execute(_UPSERT, params)
            await conn.commit()
        except Exception as e:
            await conn.rollback()
            logger.error(f"Batch of {len(encoded)} writes rolled back: {e}")
            raise
        finally:
            await self._return_connection(conn)

    @staticmethod
    def _decode(namespace: str, key: str, body: str) -> dict[str, Any]:
        """Parse a stored record body.

        Raises:
            ValueError: If the body is not a JSON object.
        """
        try:
            record = json.loads(body)
        except (json.JSONDecodeError, TypeError) as e:
            logger.error(f"Failed to parse record {namespace}/{key}: {e}")
            raise ValueError(f"Record {namespace}/{key} is corrupt: {e}") from e
        if not isinstance(record, dict):
            raise ValueError(f"Record {namespace}/{key} is not an object")
        return record
