"""Fake RecordStorePort implementation for testing."""

import asyncio
import copy
from collections.abc import Sequence
from typing import Any

from petregistry.core.ports import RecordStorePort, RecordWrite


class FakeRecordStorePort(RecordStorePort):
    """In-memory record store for testing.

    Tracks every write for assertions and can be told to fail batches
    to simulate an unavailable store. Setting read_delay makes reads
    suspend like a real store, so concurrent callers interleave.
    """

    def __init__(self):
        """Initialize with empty namespaces."""
        self.records: dict[str, dict[str, dict[str, Any]]] = {}
        self.inserts: list[tuple[str, str]] = []
        self.batches: list[list[tuple[str, str]]] = []
        self.get_calls: list[tuple[str, str]] = []
        self.fail_batches = False
        self.read_delay: float | None = None
        self.closed = False

    async def _maybe_suspend(self) -> None:
        if self.read_delay is not None:
            await asyncio.sleep(self.read_delay)

    async def get(self, namespace: str, key: str) -> dict[str, Any] | None:
        self.get_calls.append((namespace, key))
        await self._maybe_suspend()
        record = self.records.get(namespace, {}).get(key)
        return copy.deepcopy(record)

    async def insert(
        self, namespace: str, key: str, record: dict[str, Any]
    ) -> dict[str, Any] | None:
        self.inserts.append((namespace, key))
        previous = self.records.setdefault(namespace, {}).get(key)
        self.records[namespace][key] = copy.deepcopy(record)
        return previous

    async def values(self, namespace: str) -> list[dict[str, Any]]:
        await self._maybe_suspend()
        return [copy.deepcopy(r) for r in self.records.get(namespace, {}).values()]

    async def apply_batch(self, writes: Sequence[RecordWrite]) -> None:
        if self.fail_batches:
            raise ConnectionError("Store unavailable")
        self.batches.append([(namespace, key) for namespace, key, _ in writes])
        for namespace, key, record in writes:
            self.records.setdefault(namespace, {})[key] = copy.deepcopy(record)

    async def close(self) -> None:
        self.closed = True

    def count(self, namespace: str) -> int:
        """Number of records stored in a namespace."""
        return len(self.records.get(namespace, {}))

    def snapshot(self) -> dict[str, dict[str, dict[str, Any]]]:
        """Deep copy of every stored record."""
        return copy.deepcopy(self.records)

    def reset(self) -> None:
        """Reset all records and tracking."""
        self.records.clear()
        self.inserts.clear()
        self.batches.clear()
        self.get_calls.clear()
        self.fail_batches = False
        self.read_delay = None
