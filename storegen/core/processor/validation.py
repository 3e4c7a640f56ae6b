"""
Declaration validator — structural rules for single marked declarations.

Each function checks one declaration and returns the list of rule
violations as Diagnostics (empty list = valid).  Nothing here raises
or depends on any other declaration's outcome.
"""

from __future__ import annotations

from storegen.adapters.base import Declaration, DeclarationKind
from storegen.core.models.diagnostic import Diagnostic


def validate_type(declaration: Declaration, type_marker: str) -> list[Diagnostic]:
    """Check a declaration found with the type-marker.

    Rules:
        - it must be a class
        - it must not be private
    """
    if declaration.kind != DeclarationKind.CLASS:
        return [
            Diagnostic(
                message=f"{type_marker} can only be applied to classes: {declaration.simple_name}",
                declaration=declaration,
            )
        ]

    if declaration.is_private:
        return [
            Diagnostic(
                message=f"{type_marker} can not be applied to private class: {declaration.simple_name}",
                declaration=declaration,
            )
        ]

    return []


def validate_field(
    declaration: Declaration,
    type_marker: str,
    column_marker: str,
) -> list[Diagnostic]:
    """Check a declaration found with the column-marker.

    Rules:
        - the enclosing declaration must be a class
        - that class must carry the type-marker
        - the field must not be private
        - the field must not be final

    The marker check only runs when the enclosing declaration is a
    class.  Visibility and finality are reported independently, so a
    private final field yields two diagnostics.
    """
    problems: list[Diagnostic] = []
    enclosing = declaration.enclosing

    if enclosing is None or enclosing.kind != DeclarationKind.CLASS:
        problems.append(
            Diagnostic(
                message=f"Please apply {column_marker} to fields of class: {declaration.simple_name}",
                declaration=declaration,
            )
        )
    elif not enclosing.has_marker(type_marker):
        problems.append(
            Diagnostic(
                message=f"Please annotate class {enclosing.simple_name} with {type_marker}",
                declaration=declaration,
            )
        )

    if declaration.is_private:
        problems.append(
            Diagnostic(
                message=f"{column_marker} can not be applied to private field: {declaration.simple_name}",
                declaration=declaration,
            )
        )

    if declaration.is_final:
        problems.append(
            Diagnostic(
                message=f"{column_marker} can not be applied to final field: {declaration.simple_name}",
                declaration=declaration,
            )
        )

    return problems
