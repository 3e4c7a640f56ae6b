"""
Filesystem host — scans a source tree and writes artifacts to disk.

DirectorySink writes generated modules under an output root.
SourceTreeHost joins a DeclarationIndex with a sink so a processing
round can run against real files.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from pathlib import Path

from storegen.adapters.base import Declaration, Host
from storegen.adapters.python_source import DEFAULT_EXCLUDE, DeclarationIndex, scan_tree
from storegen.core.models.artifact import GeneratedArtifact
from storegen.core.models.diagnostic import Diagnostic

logger = logging.getLogger(__name__)


class DirectorySink:
    """Writes artifacts under an output root.

    Paths that would escape the root are refused.  Unchanged files are
    not rewritten, so repeated rounds leave mtimes alone.  OS errors
    propagate: a sink that cannot write is a round-level failure.
    """

    def __init__(self, output_root: Path, dry_run: bool = False):
        self.output_root = output_root
        self.dry_run = dry_run
        self.written: list[Path] = []
        self.unchanged: list[Path] = []

    def target_for(self, artifact: GeneratedArtifact) -> Path | None:
        """Absolute output path, or None if it falls outside the root."""
        root = self.output_root.resolve()
        target = (root / artifact.path).resolve()
        if target != root and root not in target.parents:
            return None
        return target

    def write(self, artifact: GeneratedArtifact) -> bool:
        target = self.target_for(artifact)
        if target is None:
            logger.error("Refusing to write outside %s: %s", self.output_root, artifact.path)
            return False

        if self.dry_run:
            logger.info("[dry-run] Would write %s", target)
            self.written.append(target)
            return True

        if target.is_file() and target.read_text(encoding="utf-8") == artifact.content:
            logger.debug("Unchanged: %s", target)
            self.unchanged.append(target)
            return True

        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(artifact.content, encoding="utf-8")
        logger.debug("Written %d bytes to %s", len(artifact.content), target)
        self.written.append(target)
        return True


class SourceTreeHost(Host):
    """Host over Python files on disk.

    Diagnostics are logged and kept in ``diagnostics`` for the caller.
    """

    def __init__(self, index: DeclarationIndex, sink: DirectorySink):
        self.index = index
        self.sink = sink
        self.diagnostics: list[Diagnostic] = []

    @classmethod
    def from_paths(
        cls,
        base: Path,
        sources: list[str] | None = None,
        output: Path | None = None,
        *,
        exclude_patterns: tuple[str, ...] = DEFAULT_EXCLUDE,
        dry_run: bool = False,
    ) -> SourceTreeHost:
        """Scan the sources under ``base`` and write into ``output`` (default: base)."""
        index = scan_tree(base, sources, exclude_patterns=exclude_patterns)
        return cls(index, DirectorySink(output or base, dry_run=dry_run))

    def find_marked(self, marker: str) -> Sequence[Declaration]:
        return self.index.marked(marker)

    def report(self, diagnostic: Diagnostic) -> None:
        self.diagnostics.append(diagnostic)
        logger.warning("%s", diagnostic)

    def accepts(self, artifact: GeneratedArtifact) -> bool:
        return self.sink.target_for(artifact) is not None

    def write_artifact(self, artifact: GeneratedArtifact) -> bool:
        return self.sink.write(artifact)
