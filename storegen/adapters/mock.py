"""
Mock host — in-memory test double for the host toolchain.

MockDeclaration builds declaration trees by hand; MockHost serves
them to the processor and records every diagnostic and artifact it
receives.  Writes can be configured to be refused or to raise.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from storegen.adapters.base import Declaration, DeclarationKind, Host
from storegen.core.models.artifact import GeneratedArtifact
from storegen.core.models.diagnostic import Diagnostic


class MockDeclaration(Declaration):
    """Hand-built declaration.

    Markers are given as ``{marker_name: {kwarg: value}}``.
    """

    def __init__(
        self,
        name: str,
        kind: DeclarationKind = DeclarationKind.CLASS,
        *,
        enclosing: Declaration | None = None,
        markers: dict[str, dict[str, Any]] | None = None,
        private: bool = False,
        final: bool = False,
        annotation: str | None = None,
        module: str = "models",
    ):
        self._name = name
        self._kind = kind
        self._enclosing = enclosing
        self._markers = dict(markers or {})
        self._private = private
        self._final = final
        self._annotation = annotation
        self._module = module

    @property
    def kind(self) -> DeclarationKind:
        return self._kind

    @property
    def simple_name(self) -> str:
        return self._name

    @property
    def qualified_name(self) -> str:
        if self._enclosing is not None and self._enclosing.kind != DeclarationKind.MODULE:
            return f"{self._enclosing.qualified_name}.{self._name}"
        return f"{self._module}.{self._name}"

    @property
    def module(self) -> str:
        return self._module

    @property
    def is_private(self) -> bool:
        return self._private

    @property
    def is_final(self) -> bool:
        return self._final

    @property
    def enclosing(self) -> Declaration | None:
        return self._enclosing

    @property
    def annotation(self) -> str | None:
        return self._annotation

    def has_marker(self, marker: str) -> bool:
        return marker in self._markers

    def marker_arguments(self, marker: str) -> dict[str, Any]:
        return dict(self._markers.get(marker, {}))

    def field(self, name: str, annotation: str | None = None, **options: Any) -> MockDeclaration:
        """Create a field declaration enclosed by this one."""
        return MockDeclaration(
            name,
            DeclarationKind.FIELD,
            enclosing=self,
            annotation=annotation,
            module=self._module,
            **options,
        )


class MockHost(Host):
    """Universal host double for testing."""

    def __init__(self, declarations: Sequence[Declaration] = ()):
        self._declarations: list[Declaration] = list(declarations)
        self._diagnostics: list[Diagnostic] = []
        self._artifacts: list[GeneratedArtifact] = []
        self._refused_paths: set[str] = set()
        self._write_error: Exception | None = None
        self._queries: list[str] = []

    # ── Setup ───────────────────────────────────────────────────

    def add(self, *declarations: Declaration) -> None:
        self._declarations.extend(declarations)

    def refuse(self, path: str) -> None:
        """Make write_artifact() return False for this path."""
        self._refused_paths.add(path)

    def fail_writes(self, error: Exception) -> None:
        """Make every write_artifact() raise this error."""
        self._write_error = error

    # ── Recorded calls ──────────────────────────────────────────

    @property
    def diagnostics(self) -> list[Diagnostic]:
        return self._diagnostics

    @property
    def artifacts(self) -> list[GeneratedArtifact]:
        return self._artifacts

    @property
    def queries(self) -> list[str]:
        """Marker names passed to find_marked(), in call order."""
        return self._queries

    def artifacts_for(self, type_name: str) -> list[GeneratedArtifact]:
        return [a for a in self._artifacts if a.type_name == type_name]

    def reset(self) -> None:
        """Clear recorded diagnostics, artifacts and queries."""
        self._diagnostics.clear()
        self._artifacts.clear()
        self._queries.clear()

    # ── Host ────────────────────────────────────────────────────

    def find_marked(self, marker: str) -> Sequence[Declaration]:
        self._queries.append(marker)
        return [d for d in self._declarations if d.has_marker(marker)]

    def report(self, diagnostic: Diagnostic) -> None:
        self._diagnostics.append(diagnostic)

    def accepts(self, artifact: GeneratedArtifact) -> bool:
        return artifact.path not in self._refused_paths

    def write_artifact(self, artifact: GeneratedArtifact) -> bool:
        if self._write_error is not None:
            raise self._write_error
        if artifact.path in self._refused_paths:
            return False
        self._artifacts.append(artifact)
        return True
