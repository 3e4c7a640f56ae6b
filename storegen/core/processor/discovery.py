"""
Discovery & extraction engine — marked declarations in, metadata out.

Flow (one round):
    find type-marked → validate → domain.extract_type → builder.add_type
    find column-marked → validate → domain.extract_column → builder.attach_column

Every step for one declaration returns a Result.  A failed step
excludes that declaration only; the loop carries on with the next one.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import TypeVar

from storegen.adapters.base import Declaration, DeclarationKind, Host
from storegen.core.models.diagnostic import Diagnostic
from storegen.core.models.meta import Attributes, ColumnMeta, ProcessingResultBuilder
from storegen.core.models.result import Result
from storegen.core.processor.validation import validate_field, validate_type
from storegen.domains.base import MappingDomain, ProcessingError

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _call_hook(hook: Callable[[Declaration], T], declaration: Declaration) -> Result[T]:
    """Run a domain hook, turning whatever it raises into a Result."""
    try:
        return Result.success(hook(declaration))
    except ProcessingError as e:
        return Result.failure(
            Diagnostic(message=e.message, declaration=e.declaration or declaration)
        )
    except Exception as e:
        logger.error("Domain hook raised for %s: %s", declaration.qualified_name, e)
        return Result.failure(
            Diagnostic(
                message=f"Unexpected error while processing {declaration.simple_name}: {e}",
                declaration=declaration,
            )
        )


def extract_type(declaration: Declaration, domain: MappingDomain) -> Result[Attributes]:
    """Validate one type-marked declaration and extract its attributes."""
    problems = validate_type(declaration, domain.type_marker)
    if problems:
        return Result.failure(*problems)
    return _call_hook(domain.extract_type, declaration)


def extract_column(declaration: Declaration, domain: MappingDomain) -> Result[ColumnMeta]:
    """Validate one column-marked declaration and build its ColumnMeta."""
    problems = validate_field(declaration, domain.type_marker, domain.column_marker)
    if problems:
        return Result.failure(*problems)
    return _call_hook(domain.extract_column, declaration)


def discover_types(
    host: Host,
    domain: MappingDomain,
    builder: ProcessingResultBuilder,
) -> list[Diagnostic]:
    """Add every valid type-marked declaration to the builder.

    Returns:
        Diagnostics for the declarations that were excluded.
    """
    diagnostics: list[Diagnostic] = []
    seen: set[Declaration] = set()

    for declaration in host.find_marked(domain.type_marker):
        if declaration in seen:
            logger.debug("Ignoring repeated declaration %s", declaration.qualified_name)
            continue
        seen.add(declaration)

        result = extract_type(declaration, domain)
        if result.failed:
            logger.debug(
                "Excluded type %s (%d problem(s))",
                declaration.qualified_name,
                len(result.diagnostics),
            )
            diagnostics.extend(result.diagnostics)
            continue

        builder.add_type(declaration, result.unwrap())
        logger.debug("Discovered type %s", declaration.qualified_name)

    return diagnostics


def extract_columns(
    host: Host,
    domain: MappingDomain,
    builder: ProcessingResultBuilder,
) -> list[Diagnostic]:
    """Attach every valid column-marked field to its owning type.

    Fields whose owner was excluded during discovery are skipped
    silently: the owner already carries a diagnostic.

    Returns:
        Diagnostics for the fields that were rejected.
    """
    diagnostics: list[Diagnostic] = []
    seen: set[Declaration] = set()

    for declaration in host.find_marked(domain.column_marker):
        if declaration in seen:
            continue
        seen.add(declaration)

        owner = declaration.enclosing
        if _excluded_owner(owner, domain, builder):
            logger.debug(
                "Skipping column %s: owning type was excluded",
                declaration.qualified_name,
            )
            continue

        result = extract_column(declaration, domain)
        if result.failed:
            diagnostics.extend(result.diagnostics)
            continue

        builder.attach_column(owner, result.unwrap())

    return diagnostics


def _excluded_owner(
    owner: Declaration | None, domain: MappingDomain, builder: ProcessingResultBuilder
) -> bool:
    return (
        owner is not None
        and owner.kind == DeclarationKind.CLASS
        and owner.has_marker(domain.type_marker)
        and owner not in builder
    )
