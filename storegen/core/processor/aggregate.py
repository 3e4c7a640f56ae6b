"""
Cross-type validator — aggregate rules over the frozen round result.

The rules themselves belong to the mapping domain.  This module runs
the domain hook once, normalises what it returns, and works out which
types the violations block from generation.
"""

from __future__ import annotations

import logging

from storegen.adapters.base import Declaration
from storegen.core.models.diagnostic import Diagnostic, DiagnosticCategory
from storegen.core.models.meta import ProcessingResult
from storegen.domains.base import MappingDomain, ProcessingError

logger = logging.getLogger(__name__)


def validate_aggregate(domain: MappingDomain, result: ProcessingResult) -> list[Diagnostic]:
    """Run the domain's aggregate rules over the whole result.

    Returns every violation, tagged as aggregate and de-duplicated in
    first-seen order.  Running it twice over the same result gives the
    same list.
    """
    try:
        found = list(domain.validate_aggregate(result))
    except ProcessingError as e:
        found = [e.to_diagnostic()]
    except Exception as e:
        logger.error("Aggregate validation for domain %s raised: %s", domain.name, e)
        found = [Diagnostic(message=f"Aggregate validation failed: {e}")]

    diagnostics: list[Diagnostic] = []
    seen: set[Diagnostic] = set()
    for diagnostic in found:
        diagnostic = diagnostic.with_category(DiagnosticCategory.AGGREGATE)
        if diagnostic in seen:
            continue
        seen.add(diagnostic)
        diagnostics.append(diagnostic)
    return diagnostics


def blocked_types(result: ProcessingResult, diagnostics: list[Diagnostic]) -> set[Declaration]:
    """Type declarations named by a diagnostic, directly or via a column.

    Diagnostics without a declaration block nothing.
    """
    blocked: set[Declaration] = set()
    for diagnostic in diagnostics:
        if diagnostic.declaration is None:
            continue
        owner = result.owner_of(diagnostic.declaration)
        if owner is not None:
            blocked.add(owner.declaration)
    return blocked
