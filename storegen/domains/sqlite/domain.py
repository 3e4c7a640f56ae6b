"""
SQLite mapping domain — markers, extraction and aggregate rules.

Markers:
    @sqlite_type(table="users")
    id: int = sqlite_column(name="_id", key=True)
    email: str | None = sqlite_column(name="email", ignore_null=True)
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from storegen.adapters.base import Declaration, Expression
from storegen.core.models.diagnostic import Diagnostic
from storegen.core.models.meta import ColumnMeta, ProcessingResult
from storegen.domains.base import Generator, GeneratorRole, MappingDomain, ProcessingError
from storegen.domains.sqlite import generators
from storegen.domains.sqlite.attributes import (
    SQLiteColumnAttributes,
    SQLiteTypeAttributes,
    column_attributes,
)
from storegen.domains.sqlite.types import resolve_annotation

logger = logging.getLogger(__name__)

TYPE_MARKER = "sqlite_type"
COLUMN_MARKER = "sqlite_column"


def _argument(args: dict[str, Any], name: str, position: int) -> Any:
    """Keyword argument, falling back to the positional one."""
    if name in args:
        return args[name]
    positional = args.get("args") or []
    if len(positional) > position:
        return positional[position]
    return None


def _require_name(declaration: Declaration, value: Any, what: str) -> str:
    if isinstance(value, Expression):
        raise ProcessingError(
            declaration,
            f"{what} must be a string literal, got {value}: {declaration.simple_name}",
        )
    if not isinstance(value, str) or not value.strip():
        raise ProcessingError(declaration, f"{what} is empty: {declaration.simple_name}")
    return value


def _require_flag(declaration: Declaration, args: dict[str, Any], name: str, position: int) -> bool:
    value = _argument(args, name, position)
    if value is None:
        return False
    if not isinstance(value, bool):
        raise ProcessingError(
            declaration,
            f"{name} of {COLUMN_MARKER} must be True or False: {declaration.simple_name}",
        )
    return value


class SQLiteDomain(MappingDomain):
    """Maps marked classes onto SQLite tables through sqlite3."""

    @property
    def name(self) -> str:
        return "sqlite"

    @property
    def type_marker(self) -> str:
        return TYPE_MARKER

    @property
    def column_marker(self) -> str:
        return COLUMN_MARKER

    def extract_type(self, declaration: Declaration) -> SQLiteTypeAttributes:
        args = declaration.marker_arguments(TYPE_MARKER)
        table = _require_name(declaration, _argument(args, "table", 0), "Table name")
        return SQLiteTypeAttributes(table=table)

    def extract_column(self, declaration: Declaration) -> ColumnMeta:
        args = declaration.marker_arguments(COLUMN_MARKER)
        storage_name = _require_name(declaration, _argument(args, "name", 0), "Column name")
        key = _require_flag(declaration, args, "key", 1)
        ignore_null = _require_flag(declaration, args, "ignore_null", 2)

        annotation = declaration.annotation
        if not annotation:
            raise ProcessingError(
                declaration,
                f"{COLUMN_MARKER} field needs a type annotation: {declaration.simple_name}",
            )

        resolved = resolve_annotation(annotation)
        if resolved is None:
            raise ProcessingError(
                declaration,
                f"Unsupported type of field for {COLUMN_MARKER}: "
                f"{declaration.simple_name} ({annotation})",
            )
        value_type, nullable = resolved

        return ColumnMeta(
            declaration=declaration,
            field_name=declaration.simple_name,
            storage_name=storage_name,
            value_type=value_type,
            nullable=nullable,
            attributes=SQLiteColumnAttributes(key=key, ignore_null=ignore_null),
        )

    def validate_aggregate(self, result: ProcessingResult) -> list[Diagnostic]:
        diagnostics: list[Diagnostic] = []

        for meta in result.values():
            if not meta.columns:
                diagnostics.append(
                    Diagnostic(
                        message=f"Class should have at least one field annotated with "
                        f"{COLUMN_MARKER}: {meta.simple_name}",
                        declaration=meta.declaration,
                    )
                )
                continue

            keys = [c for c in meta.columns if column_attributes(c).key]
            if not keys:
                diagnostics.append(
                    Diagnostic(
                        message=f"Class should have exactly one key column: {meta.simple_name}",
                        declaration=meta.declaration,
                    )
                )
            for extra in keys[1:]:
                diagnostics.append(
                    Diagnostic(
                        message=f"Only one key column is allowed, {meta.simple_name} "
                        f"already uses {keys[0].field_name}: {extra.field_name}",
                        declaration=extra.declaration,
                    )
                )

            used: set[str] = set()
            for column in meta.columns:
                if column.storage_name in used:
                    diagnostics.append(
                        Diagnostic(
                            message=f"Column name {column.storage_name!r} is used twice "
                            f"in {meta.simple_name}: {column.field_name}",
                            declaration=column.declaration,
                        )
                    )
                used.add(column.storage_name)

                if column_attributes(column).ignore_null and not column.nullable:
                    diagnostics.append(
                        Diagnostic(
                            message=f"ignore_null should not be used for non-nullable "
                            f"field: {column.field_name}",
                            declaration=column.declaration,
                        )
                    )

        logger.debug("SQLite aggregate validation: %d violation(s)", len(diagnostics))
        return diagnostics

    def generators(self) -> Mapping[GeneratorRole, Generator]:
        return {
            GeneratorRole.PUT_RESOLVER: generators.generate_put_resolver,
            GeneratorRole.GET_RESOLVER: generators.generate_get_resolver,
            GeneratorRole.DELETE_RESOLVER: generators.generate_delete_resolver,
            GeneratorRole.MAPPING: generators.generate_type_mapping,
        }
