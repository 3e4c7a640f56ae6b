"""
SQLite generators — render the four resolver modules for one type.

Each generator is a pure function ``TypeMeta → GeneratedArtifact``.
The emitted modules target the stdlib ``sqlite3`` API and are written
next to the model's module:

    <snake>_sqlite_put_resolver.py     INSERT OR REPLACE from the object
    <snake>_sqlite_get_resolver.py     SELECT by key / all rows → objects
    <snake>_sqlite_delete_resolver.py  DELETE by key
    <snake>_sqlite_type_mapping.py     bundles the three resolvers

Identical TypeMeta in, byte-identical source out: columns are emitted
in the order they appear on the TypeMeta and every literal goes
through repr().
"""

from __future__ import annotations

import re

from storegen.core.models.artifact import GeneratedArtifact
from storegen.core.models.meta import ColumnMeta, TypeMeta, ValueType
from storegen.domains.base import GenerationError, GeneratorRole
from storegen.domains.sqlite.attributes import column_attributes, table_name

_MODULE_SUFFIX: dict[GeneratorRole, str] = {
    GeneratorRole.PUT_RESOLVER: "sqlite_put_resolver",
    GeneratorRole.GET_RESOLVER: "sqlite_get_resolver",
    GeneratorRole.DELETE_RESOLVER: "sqlite_delete_resolver",
    GeneratorRole.MAPPING: "sqlite_type_mapping",
}

_CLASS_SUFFIX: dict[GeneratorRole, str] = {
    GeneratorRole.PUT_RESOLVER: "SQLitePutResolver",
    GeneratorRole.GET_RESOLVER: "SQLiteGetResolver",
    GeneratorRole.DELETE_RESOLVER: "SQLiteDeleteResolver",
    GeneratorRole.MAPPING: "SQLiteTypeMapping",
}


# ── Naming ──────────────────────────────────────────────────────


def snake_case(name: str) -> str:
    """``UserProfile`` → ``user_profile``, ``HTTPLog`` → ``http_log``."""
    name = re.sub(r"([A-Z]+)([A-Z][a-z])", r"\1_\2", name)
    name = re.sub(r"([a-z0-9])([A-Z])", r"\1_\2", name)
    return name.replace(".", "_").lower()


def type_path(type_meta: TypeMeta) -> str:
    """Name of the type inside its module (``Outer.Inner`` for nested classes)."""
    prefix = type_meta.module + "."
    if type_meta.qualified_name.startswith(prefix):
        return type_meta.qualified_name[len(prefix):]
    return type_meta.simple_name


def artifact_class(type_meta: TypeMeta, role: GeneratorRole) -> str:
    return type_path(type_meta).replace(".", "") + _CLASS_SUFFIX[role]


def artifact_module(type_meta: TypeMeta, role: GeneratorRole) -> str:
    """Dotted module name of a generated artifact (sibling of the model)."""
    package = type_meta.module.rpartition(".")[0]
    name = f"{snake_case(type_path(type_meta))}_{_MODULE_SUFFIX[role]}"
    return f"{package}.{name}" if package else name


def _artifact(type_meta: TypeMeta, role: GeneratorRole, content: str) -> GeneratedArtifact:
    module = artifact_module(type_meta, role)
    return GeneratedArtifact(
        path=module.replace(".", "/") + ".py",
        module=module,
        content=content,
        role=role.value,
        type_name=type_meta.qualified_name,
        reason=f"Generated {role.value} for {type_meta.qualified_name}",
    )


# ── Source helpers ──────────────────────────────────────────────


def quote_identifier(name: str) -> str:
    """SQL identifier in double quotes."""
    return '"' + name.replace('"', '""') + '"'


def _table(type_meta: TypeMeta) -> str:
    table = table_name(type_meta)
    if not table:
        raise GenerationError(f"No table name for {type_meta.qualified_name}")
    return table


def _key_column(type_meta: TypeMeta) -> ColumnMeta:
    keys = [c for c in type_meta.columns if column_attributes(c).key]
    if len(keys) != 1:
        raise GenerationError(
            f"{type_meta.qualified_name} needs exactly one key column, found {len(keys)}"
        )
    return keys[0]


def _header(type_meta: TypeMeta, role: GeneratorRole) -> list[str]:
    title = role.value.replace("_", " ").capitalize()
    return [
        f'"""{title} for {type_meta.qualified_name}.',
        "",
        "Generated by storegen. Do not edit.",
        '"""',
        "",
        "from __future__ import annotations",
        "",
    ]


def _type_import(type_meta: TypeMeta) -> str:
    top = type_path(type_meta).split(".")[0]
    return f"from {type_meta.module} import {top}"


def _read_value(column: ColumnMeta, index: int) -> str:
    """Expression converting ``row[index]`` to the field's Python value."""
    raw = f"row[{index}]"
    if column.value_type == ValueType.BOOLEAN:
        converted = f"bool({raw})"
    elif column.value_type == ValueType.BYTES:
        converted = f"bytes({raw})"
    else:
        return raw
    if column.nullable:
        return f"None if {raw} is None else {converted}"
    return converted


def _render(lines: list[str]) -> str:
    return "\n".join(lines).rstrip("\n") + "\n"


# ═══════════════════════════════════════════════════════════════════
#  Generators
# ═══════════════════════════════════════════════════════════════════


def generate_put_resolver(type_meta: TypeMeta) -> GeneratedArtifact:
    """Put resolver: object → values map → INSERT OR REPLACE."""
    role = GeneratorRole.PUT_RESOLVER
    table = _table(type_meta)
    _key_column(type_meta)
    ref = type_path(type_meta)

    lines = _header(type_meta, role) + [
        "import sqlite3",
        "from typing import Any",
        "",
        _type_import(type_meta),
        "",
        f"TABLE = {table!r}",
        "_QUOTED = {",
    ]
    for column in type_meta.columns:
        lines.append(f"    {column.storage_name!r}: {quote_identifier(column.storage_name)!r},")
    lines += [
        "}",
        "",
        "",
        f"class {artifact_class(type_meta, role)}:",
        f'    """Writes {ref} objects into the {table!r} table."""',
        "",
        "    table = TABLE",
        "",
        f"    def map_to_values(self, obj: {ref}) -> dict[str, Any]:",
        "        values: dict[str, Any] = {}",
    ]
    for column in type_meta.columns:
        if column_attributes(column).ignore_null:
            lines += [
                f"        if obj.{column.field_name} is not None:",
                f"            values[{column.storage_name!r}] = obj.{column.field_name}",
            ]
        else:
            lines.append(f"        values[{column.storage_name!r}] = obj.{column.field_name}")

    insert_default = f"INSERT INTO {quote_identifier(table)} DEFAULT VALUES"
    insert_prefix = f"INSERT OR REPLACE INTO {quote_identifier(table)} ("
    lines += [
        "        return values",
        "",
        f"    def put(self, connection: sqlite3.Connection, obj: {ref}) -> int | None:",
        '        """Insert or replace the row for ``obj``; returns the rowid."""',
        "        values = self.map_to_values(obj)",
        "        if not values:",
        f"            return connection.execute({insert_default!r}).lastrowid",
        '        columns = ", ".join(_QUOTED[name] for name in values)',
        '        placeholders = ", ".join("?" for _ in values)',
        "        cursor = connection.execute(",
        f'            {insert_prefix!r} + columns + ") VALUES (" + placeholders + ")",',
        "            tuple(values.values()),",
        "        )",
        "        return cursor.lastrowid",
    ]
    return _artifact(type_meta, role, _render(lines))


def generate_get_resolver(type_meta: TypeMeta) -> GeneratedArtifact:
    """Get resolver: row → object, lookups by key and full scans."""
    role = GeneratorRole.GET_RESOLVER
    table = _table(type_meta)
    key = _key_column(type_meta)
    ref = type_path(type_meta)

    column_list = ", ".join(quote_identifier(c.storage_name) for c in type_meta.columns)
    select = f"SELECT {column_list} FROM {quote_identifier(table)}"
    where = f" WHERE {quote_identifier(key.storage_name)} = ?"
    names = ", ".join(repr(c.storage_name) for c in type_meta.columns)
    if len(type_meta.columns) == 1:
        names += ","

    lines = _header(type_meta, role) + [
        "import sqlite3",
        "from collections.abc import Sequence",
        "from typing import Any",
        "",
        _type_import(type_meta),
        "",
        f"TABLE = {table!r}",
        f"COLUMNS = ({names})",
        f"_SELECT = {select!r}",
        f"_WHERE_KEY = {where!r}",
        "",
        "",
        f"class {artifact_class(type_meta, role)}:",
        f'    """Reads {ref} objects from the {table!r} table."""',
        "",
        "    table = TABLE",
        "    columns = COLUMNS",
        "",
        f"    def map_from_row(self, row: Sequence[Any]) -> {ref}:",
        '        """Build an object from a row ordered like COLUMNS, without calling __init__."""',
        f"        obj = {ref}.__new__({ref})",
    ]
    for index, column in enumerate(type_meta.columns):
        lines.append(f"        obj.{column.field_name} = {_read_value(column, index)}")
    lines += [
        "        return obj",
        "",
        f"    def get(self, connection: sqlite3.Connection, key: Any) -> {ref} | None:",
        "        row = connection.execute(_SELECT + _WHERE_KEY, (key,)).fetchone()",
        "        if row is None:",
        "            return None",
        "        return self.map_from_row(row)",
        "",
        f"    def get_all(self, connection: sqlite3.Connection) -> list[{ref}]:",
        "        return [self.map_from_row(row) for row in connection.execute(_SELECT)]",
    ]
    return _artifact(type_meta, role, _render(lines))


def generate_delete_resolver(type_meta: TypeMeta) -> GeneratedArtifact:
    """Delete resolver: object → key → DELETE."""
    role = GeneratorRole.DELETE_RESOLVER
    table = _table(type_meta)
    key = _key_column(type_meta)
    ref = type_path(type_meta)

    delete = f"DELETE FROM {quote_identifier(table)} WHERE {quote_identifier(key.storage_name)} = ?"

    lines = _header(type_meta, role) + [
        "import sqlite3",
        "from typing import Any",
        "",
        _type_import(type_meta),
        "",
        f"TABLE = {table!r}",
        f"_DELETE = {delete!r}",
        "",
        "",
        f"class {artifact_class(type_meta, role)}:",
        f'    """Deletes {ref} objects from the {table!r} table by {key.storage_name!r}."""',
        "",
        "    table = TABLE",
        "",
        f"    def map_to_key(self, obj: {ref}) -> Any:",
        f"        return obj.{key.field_name}",
        "",
        f"    def delete(self, connection: sqlite3.Connection, obj: {ref}) -> int:",
        '        """Delete the row for ``obj``; returns the number of rows removed."""',
        "        cursor = connection.execute(_DELETE, (self.map_to_key(obj),))",
        "        return cursor.rowcount",
    ]
    return _artifact(type_meta, role, _render(lines))


def generate_type_mapping(type_meta: TypeMeta) -> GeneratedArtifact:
    """Type mapping: one object holding the put, get and delete resolvers."""
    role = GeneratorRole.MAPPING
    table = _table(type_meta)
    _key_column(type_meta)
    ref = type_path(type_meta)

    put_cls = artifact_class(type_meta, GeneratorRole.PUT_RESOLVER)
    get_cls = artifact_class(type_meta, GeneratorRole.GET_RESOLVER)
    delete_cls = artifact_class(type_meta, GeneratorRole.DELETE_RESOLVER)

    lines = _header(type_meta, role) + [
        "import sqlite3",
        "from typing import Any",
        "",
        _type_import(type_meta),
        f"from {artifact_module(type_meta, GeneratorRole.DELETE_RESOLVER)} import {delete_cls}",
        f"from {artifact_module(type_meta, GeneratorRole.GET_RESOLVER)} import {get_cls}",
        f"from {artifact_module(type_meta, GeneratorRole.PUT_RESOLVER)} import {put_cls}",
        "",
        "",
        f"class {artifact_class(type_meta, role)}:",
        f'    """Put, get and delete resolvers for {ref}."""',
        "",
        f"    type = {ref}",
        f"    table = {table!r}",
        "",
        "    def __init__(self) -> None:",
        f"        self.put_resolver = {put_cls}()",
        f"        self.get_resolver = {get_cls}()",
        f"        self.delete_resolver = {delete_cls}()",
        "",
        f"    def put(self, connection: sqlite3.Connection, obj: {ref}) -> int | None:",
        "        return self.put_resolver.put(connection, obj)",
        "",
        f"    def get(self, connection: sqlite3.Connection, key: Any) -> {ref} | None:",
        "        return self.get_resolver.get(connection, key)",
        "",
        f"    def get_all(self, connection: sqlite3.Connection) -> list[{ref}]:",
        "        return self.get_resolver.get_all(connection)",
        "",
        f"    def delete(self, connection: sqlite3.Connection, obj: {ref}) -> int:",
        "        return self.delete_resolver.delete(connection, obj)",
    ]
    return _artifact(type_meta, role, _render(lines))
