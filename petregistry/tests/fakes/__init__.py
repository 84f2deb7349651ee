"""Fake implementations of core ports for testing.

These in-memory implementations allow core domain logic to be tested
without external dependencies:

- FakeRecordStorePort: In-memory record persistence with call tracking
"""

from .store import FakeRecordStorePort

__all__ = [
    "FakeRecordStorePort",
]
