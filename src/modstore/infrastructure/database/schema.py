"""SQLAlchemy Core table definitions for the snapshot database.

One row per module: the module's full ordered item list serialized as a
JSON array, plus the last code sequence handed out so codes stay
unique across processes. Rows are replaced wholesale on every save.
"""

from __future__ import annotations

from sqlalchemy import Column, Integer, MetaData, Table, Text

metadata = MetaData()

module_snapshots = Table(
    "module_snapshots",
    metadata,
    Column("module", Text, primary_key=True),
    Column("payload", Text, nullable=False),  # JSON array of items
    Column("item_count", Integer, nullable=False, default=0, server_default="0"),
    Column("code_sequence", Integer, nullable=False, default=0, server_default="0"),
    Column("saved_at", Text, nullable=False),
)
