"""
Result model — explicit success-or-diagnostics value.

Validation and extraction steps return a Result instead of raising so
that a caller can collect failures for one declaration and carry on
with its siblings.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, TypeVar

from storegen.core.models.diagnostic import Diagnostic

T = TypeVar("T")


@dataclass(frozen=True)
class Result(Generic[T]):
    """Outcome of one step: a value, or the diagnostics explaining why not."""

    value: T | None = None
    diagnostics: tuple[Diagnostic, ...] = ()

    @property
    def ok(self) -> bool:
        """Whether the step succeeded."""
        return not self.diagnostics

    @property
    def failed(self) -> bool:
        return bool(self.diagnostics)

    def unwrap(self) -> T:
        """Return the value, or raise if the step failed."""
        if self.diagnostics:
            raise ValueError(
                "Cannot unwrap a failed result: "
                + "; ".join(str(d) for d in self.diagnostics)
            )
        return self.value  # type: ignore[return-value]

    @classmethod
    def success(cls, value: T) -> Result[T]:
        """Create a success result."""
        return cls(value=value)

    @classmethod
    def failure(cls, *diagnostics: Diagnostic) -> Result[T]:
        """Create a failure result.  At least one diagnostic is required."""
        if not diagnostics:
            raise ValueError("A failed result needs at least one diagnostic")
        return cls(diagnostics=tuple(diagnostics))
