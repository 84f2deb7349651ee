"""External adapters for the pet adoption registry.

This package contains all external dependencies (SQLite, PostgreSQL,
HTTP servers, etc.) and provides implementations of the core port
interfaces.

Adapter Organization:

- store/: Adapters for record persistence (memory, SQLite, PostgreSQL)
- cli/: Command-line interface for registry operations
- api/: JSON-over-HTTP server for registry operations
- dispatch.py: Operation routing shared by the CLI and HTTP adapters
"""
