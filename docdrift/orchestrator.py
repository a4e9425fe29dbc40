"""Pipeline orchestration for a drift check run."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Sequence

from .config import DriftConfig
from .evidence.builder import EvidenceBuilder, Fetcher
from .evidence.fetcher import DocFetcher
from .extract.dependencies import detect_dependency_changes
from .extract.tokens import collect_tokens
from .gate import DriftGate, GateDecision
from .github.client import GitHubClient
from .llm.client import JudgmentClient
from .llm.prompt import build_judgment_input
from .llm.schema import DriftReport
from .logging import get_logger
from .models import ChangeAnalysis, ChangedFile, DependencyChanges, DocEvidence, DocSource
from .report.renderer import COMMENT_MARKER, ReportRenderer


@dataclass
class DriftOutcome:
    """Everything one run produced."""

    analysis: ChangeAnalysis
    evidence: List[DocEvidence]
    report: DriftReport
    comment: str
    decision: GateDecision
    published: Optional[str] = None


class DriftOrchestrator:
    """Coordinates extraction, evidence, judgment, rendering and gating."""

    def __init__(
        self,
        config: DriftConfig,
        *,
        fetcher: Fetcher | None = None,
        judge: JudgmentClient | None = None,
        renderer: ReportRenderer | None = None,
        gate: DriftGate | None = None,
    ) -> None:
        self.config = config
        self.evidence_builder = EvidenceBuilder(
            fetcher
            or DocFetcher(max_bytes=config.max_doc_bytes, request_timeout=config.request_timeout),
            snippet_radius=config.snippet_radius,
            max_snippets_per_hit=config.max_snippets_per_hit,
        )
        self.judge = judge or JudgmentClient(
            config.api_key,
            model=config.model,
            base_url=config.base_url,
            max_findings=config.max_findings,
            request_timeout=config.request_timeout,
        )
        self.renderer = renderer or ReportRenderer()
        self.gate = gate or DriftGate(
            fail_on_drift=config.fail_on_drift,
            threshold=config.confidence_threshold,
        )
        self.logger = get_logger("orchestrator")

    def analyze(self, files: Sequence[ChangedFile]) -> ChangeAnalysis:
        """Extract tokens and dependency changes from the changed files."""
        tokens = collect_tokens((changed.patch for changed in files), limit=self.config.max_tokens)
        per_file = [
            detect_dependency_changes(
                changed.filename,
                changed.patch,
                limit=self.config.max_dependency_changes,
            )
            for changed in files
        ]
        dependency_changes = DependencyChanges.merge(per_file, limit=self.config.max_dependency_changes)
        self.logger.debug(
            "Extracted %d token(s); dependencies +%d -%d ~%d",
            len(tokens),
            len(dependency_changes.added),
            len(dependency_changes.removed),
            len(dependency_changes.updated),
        )
        return ChangeAnalysis(files=list(files), tokens=tokens, dependency_changes=dependency_changes)

    def evaluate(
        self,
        files: Sequence[ChangedFile],
        *,
        doc_sources: Sequence[DocSource] | None = None,
    ) -> DriftOutcome:
        """Run the full check without publishing anything."""
        sources = list(doc_sources) if doc_sources is not None else list(self.config.doc_sources)
        self.logger.info(
            "Checking %d changed file(s) against %d documentation source(s)",
            len(files),
            len(sources),
        )
        analysis = self.analyze(files)
        evidence = self.evidence_builder.build(sources, analysis.tokens, analysis.dependency_changes)
        messages = build_judgment_input(analysis, evidence, max_findings=self.config.max_findings)
        report = self.judge.judge(messages)
        comment = self.renderer.render_comment(report)
        decision = self.gate.evaluate(report)
        return DriftOutcome(
            analysis=analysis,
            evidence=evidence,
            report=report,
            comment=comment,
            decision=decision,
        )

    def run_pull_request(
        self,
        github: GitHubClient,
        number: int,
        *,
        publish: bool = True,
    ) -> DriftOutcome:
        """Check a pull request and upsert the report comment."""
        files = github.list_pull_request_files(number)
        outcome = self.evaluate(files)
        if publish:
            outcome.published = github.upsert_comment(number, outcome.comment, marker=COMMENT_MARKER)
        return outcome


__all__ = ["DriftOrchestrator", "DriftOutcome"]
