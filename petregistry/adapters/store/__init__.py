"""Record store adapters for persistence.

Implementations support multiple backends:
- In-memory (no persistence, local runs and tests)
- SQLite (zero-config, single-file)
- PostgreSQL (distributed, scalable)
"""
