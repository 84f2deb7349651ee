"""Test suite for the pet adoption registry.

Organized into three categories:

1. core/: Unit tests for core domain logic
   - Minimal dependencies, fast execution
   - Uses in-memory fakes for ports

2. adapters/: Integration tests for adapter implementations
   - Tests against real SQLite files and in-process servers
   - Validates adapter behavior and error handling

3. fakes/: Port implementations for testing
   - In-memory implementation of RecordStorePort
   - Used by core unit tests
"""
