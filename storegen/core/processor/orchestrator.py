"""
Orchestrator — one processing round from discovery to generated artifacts.

Flow:
    idle → discovering → extracting → validating → generating → done

Failures are local.  A declaration that breaks a rule is reported and
dropped; its siblings carry on.  Anything that escapes a stage is
turned into one fatal diagnostic and the round still ends in ``done``:
process_round() never raises into the host.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum

from storegen.adapters.base import Host
from storegen.core.models.artifact import GeneratedArtifact
from storegen.core.models.diagnostic import Diagnostic, DiagnosticCategory
from storegen.core.models.meta import ProcessingResult, ProcessingResultBuilder
from storegen.core.processor.aggregate import blocked_types, validate_aggregate
from storegen.core.processor.discovery import discover_types, extract_columns
from storegen.core.processor.dispatch import GeneratorDispatch
from storegen.domains.base import MappingDomain

logger = logging.getLogger(__name__)


class RoundState(str, Enum):
    IDLE = "idle"
    DISCOVERING = "discovering"
    EXTRACTING = "extracting"
    VALIDATING = "validating"
    GENERATING = "generating"
    DONE = "done"


@dataclass
class RoundReport:
    """Result of one processing round."""

    round_id: str = ""
    domain: str = ""
    state: RoundState = RoundState.IDLE
    types: list[str] = field(default_factory=list)
    generated: list[str] = field(default_factory=list)
    artifacts: list[GeneratedArtifact] = field(default_factory=list)
    diagnostics: list[Diagnostic] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.diagnostics

    @property
    def fatal(self) -> bool:
        return any(d.category == DiagnosticCategory.FATAL for d in self.diagnostics)

    @property
    def status(self) -> str:
        if not self.diagnostics:
            return "ok"
        if self.generated:
            return "partial"
        return "failed"

    def diagnostics_for(self, qualified_name: str) -> list[Diagnostic]:
        """Diagnostics attributed to a declaration with the given name."""
        return [
            d for d in self.diagnostics
            if d.declaration is not None and d.declaration.qualified_name == qualified_name
        ]

    def to_dict(self) -> dict:
        return {
            "round_id": self.round_id,
            "domain": self.domain,
            "state": self.state.value,
            "status": self.status,
            "types": self.types,
            "generated": self.generated,
            "artifacts": [a.path for a in self.artifacts],
            "diagnostics": [d.to_dict() for d in self.diagnostics],
        }


def generate_round_id() -> str:
    """Generate a unique round ID."""
    now = datetime.now(UTC).strftime("%Y%m%d-%H%M%S")
    short = uuid.uuid4().hex[:6]
    return f"round-{now}-{short}"


class Orchestrator:
    """Runs processing rounds for one mapping domain against one host.

    The domain supplies markers, extraction hooks, aggregate rules and
    generators; the host supplies declarations and receives diagnostics
    and artifacts.  Per-round state lives only in the RoundReport being
    built and is re-created on every call to process_round().
    """

    def __init__(
        self,
        domain: MappingDomain,
        host: Host,
        dispatch: GeneratorDispatch | None = None,
    ):
        self._domain = domain
        self._host = host
        self._dispatch = dispatch or GeneratorDispatch(domain.generators())
        self._state = RoundState.IDLE
        self._report = RoundReport()

    @property
    def state(self) -> RoundState:
        return self._state

    @property
    def domain(self) -> MappingDomain:
        return self._domain

    def process_round(self) -> RoundReport:
        """Run discovery, extraction, validation and generation once."""
        self._report = RoundReport(round_id=generate_round_id(), domain=self._domain.name)
        self._state = RoundState.IDLE

        try:
            result = self._discover_and_extract()
            self._report.types = result.qualified_names

            self._enter(RoundState.VALIDATING)
            aggregate = validate_aggregate(self._domain, result)
            self._emit_all(aggregate)

            self._enter(RoundState.GENERATING)
            self._generate(result, blocked_types(result, aggregate))
        except Exception as e:
            logger.error("Round %s aborted: %s", self._report.round_id, e)
            self._emit(
                Diagnostic(
                    message=f"Problem occurred with {self._domain.name} processor: {e}",
                    category=DiagnosticCategory.FATAL,
                )
            )
        finally:
            self._enter(RoundState.DONE)

        report = self._report
        logger.info(
            "Round %s: %d type(s), %d generated, %d artifact(s), %d diagnostic(s)",
            report.round_id,
            len(report.types),
            len(report.generated),
            len(report.artifacts),
            len(report.diagnostics),
        )
        return report

    # ── Stages ──────────────────────────────────────────────────

    def _discover_and_extract(self) -> ProcessingResult:
        builder = ProcessingResultBuilder()

        self._enter(RoundState.DISCOVERING)
        self._emit_all(discover_types(self._host, self._domain, builder))

        self._enter(RoundState.EXTRACTING)
        self._emit_all(extract_columns(self._host, self._domain, builder))

        return builder.freeze()

    def _generate(self, result: ProcessingResult, blocked: set) -> None:
        for declaration, type_meta in result.items():
            if declaration in blocked:
                logger.info("Skipping generation for %s: aggregate violations", type_meta.qualified_name)
                continue

            outcome = self._dispatch.dispatch(type_meta, self._host)
            if outcome.value:
                self._report.artifacts.extend(outcome.value)
            if outcome.failed:
                self._emit_all(outcome.diagnostics)
            else:
                self._report.generated.append(type_meta.qualified_name)

    # ── Helpers ─────────────────────────────────────────────────

    def _enter(self, state: RoundState) -> None:
        logger.debug("Round %s: %s → %s", self._report.round_id, self._state.value, state.value)
        self._state = state
        self._report.state = state

    def _emit_all(self, diagnostics) -> None:
        for diagnostic in diagnostics:
            self._emit(diagnostic)

    def _emit(self, diagnostic: Diagnostic) -> None:
        self._report.diagnostics.append(diagnostic)
        try:
            self._host.report(diagnostic)
        except Exception as e:
            # The host's diagnostic sink is broken; the report still has it.
            logger.error("Host failed to accept diagnostic %r: %s", diagnostic.message, e)
