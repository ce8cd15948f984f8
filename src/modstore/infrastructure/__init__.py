"""Infrastructure layer — the in-memory store, its registries, and SQLite snapshots.

This layer depends on the domain layer, stdlib, and SQLAlchemy.
It must never import from services, commands, or output.
"""
