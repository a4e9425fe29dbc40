"""Structured output contract for the drift judgment service."""

from __future__ import annotations

from typing import Any, Dict, List

from pydantic import BaseModel, ConfigDict, Field, StrictBool, StrictFloat, StrictStr

SCHEMA_NAME = "doc_drift_report"

_FINDING_FIELDS = [
    "doc_title",
    "doc_url",
    "change_summary",
    "impact_statement",
    "confidence",
    "evidence",
    "suggested_revised_wording",
]

DRIFT_REPORT_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "additionalProperties": False,
    "required": ["drift_detected", "findings"],
    "properties": {
        "drift_detected": {"type": "boolean"},
        "findings": {
            "type": "array",
            "items": {
                "type": "object",
                "additionalProperties": False,
                "required": list(_FINDING_FIELDS),
                "properties": {
                    "doc_title": {"type": "string"},
                    "doc_url": {"type": "string"},
                    # Concrete statement of what the change did.
                    "change_summary": {"type": "string"},
                    # Ties the quoted doc text to the change.
                    "impact_statement": {"type": "string"},
                    "confidence": {"type": "number", "minimum": 0, "maximum": 1},
                    "evidence": {"type": "array", "items": {"type": "string"}},
                    # Ready-to-paste replacement, or deletion instruction plus replacement.
                    "suggested_revised_wording": {"type": "string"},
                },
            },
        },
    },
}


class Finding(BaseModel):
    """One asserted instance of documentation drift."""

    model_config = ConfigDict(extra="forbid")

    doc_title: StrictStr
    doc_url: StrictStr
    change_summary: StrictStr
    impact_statement: StrictStr
    confidence: StrictFloat = Field(ge=0.0, le=1.0)
    evidence: List[StrictStr]
    suggested_revised_wording: StrictStr


class DriftReport(BaseModel):
    """Judgment outcome: whether drift exists and the findings backing it."""

    model_config = ConfigDict(extra="forbid")

    drift_detected: StrictBool
    findings: List[Finding]

    def capped(self, max_findings: int) -> "DriftReport":
        """Return a copy holding at most ``max_findings`` findings (first N kept)."""
        if len(self.findings) <= max_findings:
            return self
        return self.model_copy(update={"findings": self.findings[:max_findings]})

    @property
    def max_confidence(self) -> float:
        return max((finding.confidence for finding in self.findings), default=0.0)


__all__ = ["DRIFT_REPORT_SCHEMA", "DriftReport", "Finding", "SCHEMA_NAME"]
