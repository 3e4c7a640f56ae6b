"""
Diagnostic model — an attributable problem found during a round.

Diagnostics are the only way failures leave a stage.  They carry the
offending declaration when one is known so the host can point the
user at the exact source construct.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict

from storegen.adapters.base import Declaration


class DiagnosticCategory(str, Enum):
    """Which stage detected the problem."""

    DECLARATION = "declaration"   # single declaration breaks a structural rule
    AGGREGATE = "aggregate"       # cross-column / cross-type invariant
    GENERATION = "generation"     # a generator or the sink failed for one type
    FATAL = "fatal"               # anything outside the per-declaration model


class Diagnostic(BaseModel):
    """One problem, optionally attributed to a declaration."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    message: str
    declaration: Declaration | None = None
    category: DiagnosticCategory = DiagnosticCategory.DECLARATION

    @property
    def location(self) -> str:
        """Where the problem is, or an empty string for round-level ones."""
        return self.declaration.location if self.declaration is not None else ""

    @property
    def attributed(self) -> bool:
        return self.declaration is not None

    def with_category(self, category: DiagnosticCategory) -> Diagnostic:
        """Copy of this diagnostic re-tagged with another category."""
        if category == self.category:
            return self
        return self.model_copy(update={"category": category})

    def to_dict(self) -> dict:
        return {
            "message": self.message,
            "category": self.category.value,
            "location": self.location or None,
            "declaration": self.declaration.qualified_name if self.declaration else None,
        }

    def __str__(self) -> str:
        if self.location:
            return f"{self.location}: {self.message}"
        return self.message
