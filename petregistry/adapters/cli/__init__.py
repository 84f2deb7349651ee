"""Command-line interface adapters.

Provides CLI commands for managing the registry:
- users, shelters and pets: register, look up and update records
- adoptions: file, complete, fail and amend adoption records
"""
