"""
Generate use case — config → source tree host → domain → one round.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

from storegen.adapters.filesystem import SourceTreeHost
from storegen.core.config.loader import ConfigError, GeneratorConfig, load_config
from storegen.core.processor.orchestrator import Orchestrator, RoundReport
from storegen.domains.registry import DomainRegistry, default_registry

logger = logging.getLogger(__name__)


@dataclass
class GenerateResult:
    """Result of a generate run."""

    config: GeneratorConfig | None = None
    report: RoundReport | None = None
    dry_run: bool = False
    errors: list[str] = field(default_factory=list)
    scan_errors: dict[str, str] = field(default_factory=dict)
    written: list[str] = field(default_factory=list)
    unchanged: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        """No setup errors and no diagnostics."""
        return not self.errors and self.report is not None and self.report.ok

    @property
    def failed(self) -> bool:
        """Whether the run should fail the build."""
        if self.errors or self.report is None:
            return True
        if self.report.fatal:
            return True
        fail_on_diagnostics = self.config.fail_on_diagnostics if self.config else True
        return fail_on_diagnostics and not self.report.ok

    def to_dict(self) -> dict:
        return {
            "ok": self.ok,
            "failed": self.failed,
            "dry_run": self.dry_run,
            "errors": self.errors,
            "scan_errors": self.scan_errors,
            "written": self.written,
            "unchanged": self.unchanged,
            "round": self.report.to_dict() if self.report else None,
        }


def run_generate(
    config_path: Path | None = None,
    *,
    sources: list[str] | None = None,
    output: str | None = None,
    domain: str | None = None,
    dry_run: bool = False,
    registry: DomainRegistry | None = None,
) -> GenerateResult:
    """Run one processing round over the configured source tree.

    Args:
        config_path: Explicit storegen.yml (default: search upward, else defaults).
        sources: Override the configured sources.
        output: Override the configured output directory.
        domain: Override the configured domain name.
        dry_run: Scan, validate and render, but write nothing.
        registry: Domain registry (default: built-in domains).

    Returns:
        GenerateResult; never raises for configuration problems.
    """
    result = GenerateResult(dry_run=dry_run)

    try:
        config = load_config(config_path)
    except ConfigError as e:
        result.errors.append(str(e))
        return result

    overrides: dict = {}
    if sources:
        overrides["sources"] = list(sources)
    if output is not None:
        overrides["output"] = output
    if domain is not None:
        overrides["domain"] = domain
    if overrides:
        config = config.model_copy(update=overrides)
    result.config = config

    registry = registry or default_registry()
    mapping_domain = registry.get(config.domain)
    if mapping_domain is None:
        known = ", ".join(registry.list_domains()) or "none"
        result.errors.append(f"Unknown domain '{config.domain}' (available: {known})")
        return result

    host = SourceTreeHost.from_paths(
        config.base_dir,
        config.sources,
        config.output_dir,
        exclude_patterns=config.exclude_patterns,
        dry_run=dry_run,
    )
    result.scan_errors = dict(host.index.errors)

    result.report = Orchestrator(mapping_domain, host).process_round()
    result.written = [str(p) for p in host.sink.written]
    result.unchanged = [str(p) for p in host.sink.unchanged]
    return result
