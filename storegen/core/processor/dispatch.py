"""
Generator dispatch — fan one TypeMeta out to the four generators.

A type's artifacts are rendered in full, and the host asked to accept
all of them, before any of them is written.  If one generator fails or
the host refuses one artifact, nothing is written for that type and the
failure comes back as a Diagnostic; other types are unaffected.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping

from storegen.adapters.base import Host
from storegen.core.models.artifact import GeneratedArtifact
from storegen.core.models.diagnostic import Diagnostic, DiagnosticCategory
from storegen.core.models.meta import TypeMeta
from storegen.core.models.result import Result
from storegen.domains.base import Generator, GeneratorRole

logger = logging.getLogger(__name__)


class GeneratorDispatch:
    """Holds one generator per role and invokes them in role order."""

    def __init__(self, generators: Mapping[GeneratorRole, Generator]):
        missing = [r.value for r in GeneratorRole if r not in generators]
        extra = [str(r) for r in generators if r not in set(GeneratorRole)]
        if missing or extra:
            raise ValueError(
                "Generator dispatch needs exactly one generator per role"
                f" (missing: {missing or 'none'}, unexpected: {extra or 'none'})"
            )
        self._generators: list[tuple[GeneratorRole, Generator]] = [
            (role, generators[role]) for role in GeneratorRole
        ]

    @property
    def roles(self) -> list[GeneratorRole]:
        return [role for role, _ in self._generators]

    def render(self, type_meta: TypeMeta) -> Result[tuple[GeneratedArtifact, ...]]:
        """Invoke every generator for one type.

        Returns:
            All four artifacts, or one diagnostic per failing generator.
        """
        artifacts: list[GeneratedArtifact] = []
        problems: list[Diagnostic] = []

        for role, generator in self._generators:
            try:
                artifacts.append(generator(type_meta))
            except Exception as e:
                logger.error(
                    "%s generator failed for %s: %s", role.value, type_meta.qualified_name, e
                )
                problems.append(
                    Diagnostic(
                        message=f"Failed to generate {role.value} for {type_meta.simple_name}: {e}",
                        declaration=type_meta.declaration,
                        category=DiagnosticCategory.GENERATION,
                    )
                )

        if problems:
            return Result.failure(*problems)
        return Result.success(tuple(artifacts))

    def dispatch(self, type_meta: TypeMeta, host: Host) -> Result[tuple[GeneratedArtifact, ...]]:
        """Render one type and hand its artifacts to the host as a unit.

        The host is asked to accept all four artifacts before any is
        written; one refusal fails the whole type and nothing reaches
        the host.  A write the host refuses after accepting it also
        fails the type, and no artifact is reported for it.  An
        exception from the host is not caught here: a broken sink is a
        round-level fault for the orchestrator to handle.

        Returns:
            The four artifacts written, or the diagnostics.
        """
        rendered = self.render(type_meta)
        if rendered.failed:
            return rendered
        artifacts = rendered.unwrap()

        refused = [a for a in artifacts if not host.accepts(a)]
        if refused:
            return Result.failure(*(self._refusal(type_meta, a) for a in refused))

        for index, artifact in enumerate(artifacts):
            if not host.write_artifact(artifact):
                logger.error(
                    "Host refused %s after accepting it; %d earlier artifact(s) for %s"
                    " were already handed over",
                    artifact.path,
                    index,
                    type_meta.qualified_name,
                )
                return Result.failure(self._refusal(type_meta, artifact))
            logger.debug("Wrote %s", artifact.path)

        return Result.success(artifacts)

    @staticmethod
    def _refusal(type_meta: TypeMeta, artifact: GeneratedArtifact) -> Diagnostic:
        return Diagnostic(
            message=f"Host refused artifact {artifact.path} for {type_meta.simple_name}",
            declaration=type_meta.declaration,
            category=DiagnosticCategory.GENERATION,
        )
