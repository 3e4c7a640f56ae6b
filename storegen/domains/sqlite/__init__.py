"""SQLite mapping domain — marked classes ↔ sqlite3 tables."""

from storegen.domains.sqlite.attributes import SQLiteColumnAttributes, SQLiteTypeAttributes
from storegen.domains.sqlite.domain import COLUMN_MARKER, TYPE_MARKER, SQLiteDomain

__all__ = [
    "COLUMN_MARKER",
    "SQLiteColumnAttributes",
    "SQLiteDomain",
    "SQLiteTypeAttributes",
    "TYPE_MARKER",
]
