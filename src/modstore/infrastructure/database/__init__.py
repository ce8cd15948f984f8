"""SQLite snapshot storage via SQLAlchemy Core."""

from modstore.infrastructure.database.engine import create_db_engine, init_database
from modstore.infrastructure.database.schema import metadata, module_snapshots
from modstore.infrastructure.database.snapshots import SnapshotRepository

__all__ = [
    "SnapshotRepository",
    "create_db_engine",
    "init_database",
    "metadata",
    "module_snapshots",
]
