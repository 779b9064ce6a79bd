"""SQLite persistence for the document index."""

from tableplane.index._internal.db.database import BulkWriter, Database

__all__ = ["BulkWriter", "Database"]
