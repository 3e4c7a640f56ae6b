"""
Mapping domain base — the strategy set a concrete storage backend supplies.

A domain decides which markers it reacts to, how a marked class and
field turn into metadata, which aggregate rules the metadata must
satisfy, and which four generators render it.  The orchestrator
receives a domain instance at construction; it never subclasses one.

To create a new domain:
    1. Subclass MappingDomain
    2. Implement the markers, extraction hooks, validate_aggregate and
       generators
    3. Register it in the DomainRegistry
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable, Mapping
from enum import Enum

from storegen.adapters.base import Declaration
from storegen.core.models.artifact import GeneratedArtifact
from storegen.core.models.diagnostic import Diagnostic
from storegen.core.models.meta import Attributes, ColumnMeta, ProcessingResult, TypeMeta


class GeneratorRole(str, Enum):
    """The four artifacts generated per type, in dispatch order."""

    PUT_RESOLVER = "put_resolver"
    GET_RESOLVER = "get_resolver"
    DELETE_RESOLVER = "delete_resolver"
    MAPPING = "mapping"


Generator = Callable[[TypeMeta], GeneratedArtifact]


class ProcessingError(Exception):
    """Raised by domain hooks for a problem attributable to one declaration."""

    def __init__(self, declaration: Declaration | None, message: str):
        super().__init__(message)
        self.declaration = declaration
        self.message = message

    def to_diagnostic(self) -> Diagnostic:
        return Diagnostic(message=self.message, declaration=self.declaration)


class GenerationError(Exception):
    """Raised by a generator that cannot render a type."""


class MappingDomain(ABC):
    """Abstract base class for mapping domains."""

    @property
    @abstractmethod
    def name(self) -> str:
        """The domain identifier (e.g., 'sqlite')."""

    @property
    @abstractmethod
    def type_marker(self) -> str:
        """Marker name that flags a class for mapping."""

    @property
    @abstractmethod
    def column_marker(self) -> str:
        """Marker name that flags a field as a stored column."""

    @abstractmethod
    def extract_type(self, declaration: Declaration) -> Attributes:
        """Read type-level attributes from a validated class.

        Raises:
            ProcessingError: If the marker arguments are unusable.
        """

    @abstractmethod
    def extract_column(self, declaration: Declaration) -> ColumnMeta:
        """Build the ColumnMeta for a validated field.

        Raises:
            ProcessingError: If the marker arguments or the field type are unusable.
        """

    @abstractmethod
    def validate_aggregate(self, result: ProcessingResult) -> list[Diagnostic]:
        """Check invariants spanning each type's full column set.

        Must return every violation found, not just the first.
        """

    @abstractmethod
    def generators(self) -> Mapping[GeneratorRole, Generator]:
        """One generator per GeneratorRole."""

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} name={self.name!r}>"
