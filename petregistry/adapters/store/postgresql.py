"""PostgreSQL record store adapter.

Implements RecordStorePort using PostgreSQL with asyncpg for async access.
Provides ACID guarantees for registry records with scalability for production use.
"""

import asyncio
import json
import logging
from collections.abc import Sequence
from typing import Any

import asyncpg

from petregistry.core.ports import RecordStorePort, RecordWrite

logger = logging.getLogger(__name__)

_UPSERT = """
    INSERT INTO records (namespace, key, body)
    VALUES ($1, $2, $3::jsonb)
    ON CONFLICT (namespace, key) DO UPDATE SET body = EXCLUDED.body
"""


class PostgreSQLRecordStore(RecordStorePort):
    """PostgreSQL-backed record store with connection pooling and async access."""

    def __init__(
        self,
        host: str = "localhost",
        port: int = 5432,
        database: str = "petregistry",
        user: str = "petregistry",
        password: str = "",
        pool_size: int = 10,
    ):
        """Initialize PostgreSQL store with connection pooling.

        Args:
            host: PostgreSQL server hostname.
            port: PostgreSQL server port.
            database: Database name.
            user: Database user.
            password: Database password.
            pool_size: Number of connections to maintain in the pool.
        """
        self.host = host
        self.port = port
        self.database = database
        self.user = user
        self.password = password
        self._pool: asyncpg.Pool | None = None
        self._pool_size = pool_size
        self._schema_lock = asyncio.Lock()
        self._schema_initialized = False

    async def _init_pool(self) -> None:
        """Initialize the connection pool on first use."""
        if self._pool is not None:
            return

        self._pool = await asyncpg.create_pool(
            host=self.host,
            port=self.port,
            database=self.database,
            user=self.user,
            password=self.password,
            min_size=1,
            max_size=self._pool_size,
        )

    async def close(self) -> None:
        """Close all pooled connections."""
        if self._pool is not None:
            await self._pool.close()
            self._pool = None

    async def _init_schema(self) -> None:
        """Initialize database schema on first use.

        Only runs once per instance. Subsequent calls are no-ops.
        Uses dedicated _schema_lock to avoid contention with pool operations.
        """
        if self._schema_initialized:
            return

        async with self._schema_lock:
            if self._schema_initialized:
                return

            await self._init_pool()
            assert self._pool is not None

            async with self._pool.acquire() as conn:
                await conn.execute(
                    """
                    CREATE TABLE IF NOT EXISTS records (
                        seq BIGSERIAL PRIMARY KEY,
                        namespace TEXT NOT NULL,
                        key TEXT NOT NULL,
                        body JSONB NOT NULL,
                        UNIQUE (namespace, key)
                    )
                    """
                )
                await conn.execute(
                    "CREATE INDEX IF NOT EXISTS idx_namespace_seq "
                    "ON records(namespace, seq)"
                )

            self._schema_initialized = True

    async def get(self, namespace: str, key: str) -> dict[str, Any] | None:
        """Look up a record by namespace and key."""
        await self._init_schema()
        assert self._pool is not None

        async with self._pool.acquire() as conn:
            body = await conn.fetchval(
                "SELECT body FROM records WHERE namespace = $1 AND key = $2",
                namespace,
                key,
            )
        if body is None:
            return None
        return self._decode(namespace, key, body)

    async def insert(
        self, namespace: str, key: str, record: dict[str, Any]
    ) -> dict[str, Any] | None:
        """Insert or replace a record, returning the previous one."""
        await self._init_schema()
        assert self._pool is not None

        async with self._pool.acquire() as conn:
            async with conn.transaction():
                previous = await conn.fetchval(
                    "SELECT body FROM records "
                    "WHERE namespace = $1 AND key = $2 FOR UPDATE",
                    namespace,
                    key,
                )
                await conn.execute(_UPSERT, namespace, key, json.dumps(record))

        if previous is None:
            return None
        return self._decode(namespace, key, previous)

    async def values(self, namespace: str) -> list[dict[str, Any]]:
        """Return every record in a namespace in insertion order."""
        await self._init_schema()
        assert self._pool is not None

        async with self._pool.acquire() as conn:
            rows = await conn.fetch(
                "SELECT key, body FROM records WHERE namespace = $1 ORDER BY seq",
                namespace,
            )
        return [self._decode(namespace, row["key"], row["body"]) for row in rows]

    async def apply_batch(self, writes: Sequence[RecordWrite]) -> None:
        """Insert several records in a single transaction."""
        await self._init_schema()
        assert self._pool is not None

        encoded = [
            (namespace, key, json.dumps(record)) for namespace, key, record in writes
        ]
        async with self._pool.acquire() as conn:
            async with conn.transaction():
                await conn.executemany(_UPSERT, encoded)

    @staticmethod
    def _decode(namespace: str, key: str, body: Any) -> dict[str, Any]:
        """Parse a JSONB body.

        asyncpg returns JSONB as text unless a codec is registered.

        Raises:
            ValueError: If the body is not a JSON object.
        """
        try:
            record = json.loads(body) if isinstance(body, str) else body
        except json.JSONDecodeError as e:
            logger.error(f"Failed to parse record {namespace}/{key}: {e}")
            raise ValueError(f"Record {namespace}/{key} is corrupt: {e}") from e
        if not isinstance(record, dict):
            raise ValueError(f"Record {namespace}/{key} is not an object")
        return record
