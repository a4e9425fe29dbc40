"""Markdown rendering for drift reports."""

from __future__ import annotations

import math
from typing import List

from ..llm.schema import DriftReport, Finding

COMMENT_MARKER = "<!-- doc-drift-report -->"
MAX_EVIDENCE_EXCERPTS = 3


def percent(value: float) -> int:
    """Round a 0..1 ratio to a whole percentage, halves rounding up."""
    return int(math.floor(value * 100 + 0.5))


class ReportRenderer:
    """Serialises a report into the pull request comment body."""

    TITLE = "## Documentation Drift Report"
    NO_DRIFT = "_No documentation drift detected._"

    def render(self, report: DriftReport) -> str:
        total = len(report.findings)
        parts: List[str] = [
            f"{self.TITLE}\n\n",
            f"**Drift detected:** {'YES' if report.drift_detected else 'NO'}\n",
            f"**Total drift instances:** {total}\n\n",
        ]
        if total == 0:
            parts.append(f"{self.NO_DRIFT}\n")
        else:
            for number, finding in enumerate(report.findings, start=1):
                parts.append(self._render_finding(number, finding))
        return "".join(parts)

    def render_comment(self, report: DriftReport) -> str:
        """Return the body with the marker as its first line."""
        return f"{COMMENT_MARKER}\n{self.render(report)}"

    @staticmethod
    def _render_finding(number: int, finding: Finding) -> str:
        block = (
            f"### {number}. {finding.doc_title}\n"
            f"- Doc: {finding.doc_url}\n"
            f"- Change: {finding.change_summary}\n"
            f"- Impact: {finding.impact_statement}\n"
            f"- Confidence: {percent(finding.confidence)}%\n\n"
        )
        if finding.evidence:
            block += "**Evidence**\n"
            for excerpt in finding.evidence[:MAX_EVIDENCE_EXCERPTS]:
                quoted = excerpt.strip().replace("\n", "\n> ")
                block += f"> {quoted}\n\n"

        wording = finding.suggested_revised_wording.strip()
        if wording:
            block += "**Suggested revised wording**\n```text\n"
            block += f"{wording}\n"
            block += "```\n\n"
        return block


__all__ = ["COMMENT_MARKER", "MAX_EVIDENCE_EXCERPTS", "ReportRenderer", "percent"]
