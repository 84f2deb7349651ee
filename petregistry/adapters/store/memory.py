"""In-memory record store adapter.

Implements RecordStorePort with per-namespace dicts. Nothing survives
a restart; intended for local runs and tests.
"""

import asyncio
import copy
import logging
from collections.abc import Sequence
from typing import Any

from petregistry.core.ports import RecordStorePort, RecordWrite

logger = logging.getLogger(__name__)


class InMemoryRecordStore(RecordStorePort):
    """Dict-backed record store.

    Records are deep-copied on the way in and out so callers never share
    mutable state with the store.
    """

    def __init__(self) -> None:
        self._namespaces: dict[str, dict[str, dict[str, Any]]] = {}
        self._lock = asyncio.Lock()

    def _namespace(self, namespace: str) -> dict[str, dict[str, Any]]:
        return self._namespaces.setdefault(namespace, {})

    async def get(self, namespace: str, key: str) -> dict[str, Any] | None:
        record = self._namespace(namespace).get(key)
        return copy.deepcopy(record) if record is not None else None

    async def insert(
        self, namespace: str, key: str, record: dict[str, Any]
    ) -> dict[str, Any] | None:
        async with self._lock:
            records = self._namespace(namespace)
            previous = records.get(key)
            records[key] = copy.deepcopy(record)
        return previous

    async def values(self, namespace: str) -> list[dict[str, Any]]:
        return [copy.deepcopy(record) for record in self._namespace(namespace).values()]

    async def apply_batch(self, writes: Sequence[RecordWrite]) -> None:
        # Copy everything first so a bad record leaves the store untouched
        staged = [
            (namespace, key, copy.deepcopy(record))
            for namespace, key, record in writes
        ]
        async with self._lock:
            for namespace, key, record in staged:
                self._namespace(namespace)[key] = record
        logger.debug(f"Applied batch of {len(staged)} writes")

    async def close(self) -> None:
        """Nothing to release."""
