"""
SQLite attributes carried by TypeMeta and ColumnMeta.
"""

from __future__ import annotations

from storegen.core.models.meta import Attributes, ColumnMeta, TypeMeta


class SQLiteTypeAttributes(Attributes):
    """Type-level attributes: the table a class maps to."""

    table: str


class SQLiteColumnAttributes(Attributes):
    """Column-level attributes."""

    key: bool = False           # column identifies the row (WHERE clause of get/delete)
    ignore_null: bool = False   # skip the column on put when the value is None


def column_attributes(column: ColumnMeta) -> SQLiteColumnAttributes:
    """The column's SQLite attributes (defaults if it carries none)."""
    if isinstance(column.attributes, SQLiteColumnAttributes):
        return column.attributes
    return SQLiteColumnAttributes()


def table_name(type_meta: TypeMeta) -> str | None:
    if isinstance(type_meta.attributes, SQLiteTypeAttributes):
        return type_meta.attributes.table
    return None
