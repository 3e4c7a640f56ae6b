"""
Adapter base — the protocol contract between the processor and the host.

The processor never touches source files or the output directory
directly.  It only talks to two narrow capabilities:

    Declaration — an opaque handle for a class, field, function or
                  module, answering the handful of questions the
                  validators and mapping domains need.
    Host        — the toolchain the processor runs inside: it finds
                  marked declarations, receives diagnostics and accepts
                  generated artifacts.

Declarations are compared and hashed by identity.  They are used as
mapping keys and for diagnostic attribution, never interpreted.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence
from enum import Enum
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from storegen.core.models.artifact import GeneratedArtifact
    from storegen.core.models.diagnostic import Diagnostic


class DeclarationKind(str, Enum):
    """What sort of source construct a declaration is."""

    CLASS = "class"
    FIELD = "field"
    FUNCTION = "function"
    MODULE = "module"


class Expression(str):
    """A marker argument the host could not evaluate statically.

    Holds the argument's source text, e.g. ``TABLE_NAME`` in
    ``@sqlite_type(table=TABLE_NAME)``.
    """

    def __repr__(self) -> str:
        return f"Expression({str.__repr__(self)})"


class Declaration(ABC):
    """Opaque handle for one source-level declaration.

    To create a new declaration source:
        1. Subclass Declaration
        2. Implement the abstract properties and marker lookups
        3. Return instances from a Host's find_marked()
    """

    @property
    @abstractmethod
    def kind(self) -> DeclarationKind:
        """Class, field, function or module."""

    @property
    @abstractmethod
    def simple_name(self) -> str:
        """Unqualified name, used in diagnostic messages."""

    @property
    @abstractmethod
    def qualified_name(self) -> str:
        """Dotted name, unique within one processing round."""

    @property
    @abstractmethod
    def module(self) -> str:
        """Dotted name of the module that contains the declaration."""

    @property
    @abstractmethod
    def is_private(self) -> bool:
        """Whether the declaration has restricted visibility."""

    @property
    @abstractmethod
    def is_final(self) -> bool:
        """Whether the declaration is immutable once assigned."""

    @property
    @abstractmethod
    def enclosing(self) -> Declaration | None:
        """The declaration this one is nested in (None for modules)."""

    @property
    def annotation(self) -> str | None:
        """Source text of the declared type, if any."""
        return None

    @property
    def location(self) -> str:
        """Human-readable position for diagnostics."""
        return self.qualified_name

    @abstractmethod
    def has_marker(self, marker: str) -> bool:
        """Whether the declaration carries the named marker."""

    @abstractmethod
    def marker_arguments(self, marker: str) -> dict[str, Any]:
        """Keyword arguments given to the named marker (empty if unmarked)."""

    # Identity semantics: two handles are equal only if they are the same object.
    __eq__ = object.__eq__
    __hash__ = object.__hash__

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} {self.kind.value} {self.qualified_name!r}>"


class Host(ABC):
    """The toolchain a processing round runs inside.

    All operations are synchronous.  The processor calls
    find_marked() once per marker per round, report() once per
    diagnostic, and accepts() then write_artifact() once per generated
    artifact.
    """

    @abstractmethod
    def find_marked(self, marker: str) -> Sequence[Declaration]:
        """Return every declaration carrying the named marker."""

    @abstractmethod
    def report(self, diagnostic: Diagnostic) -> None:
        """Receive one diagnostic.  Routing and severity are up to the host."""

    @abstractmethod
    def write_artifact(self, artifact: GeneratedArtifact) -> bool:
        """Accept one generated artifact.

        Returns:
            True if the artifact was accepted, False if the host refused it.
        """

    def accepts(self, artifact: GeneratedArtifact) -> bool:
        """Whether write_artifact() would take this artifact.

        Checked for every artifact of a type before any of them is
        written.  Hosts that cannot tell in advance accept everything.
        """
        return True

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__}>"
