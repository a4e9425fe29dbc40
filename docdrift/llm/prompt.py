"""Builds the judgment prompt from the deterministic evidence."""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Dict, List, Sequence

from ..models import ChangeAnalysis, DocEvidence, truncate

PATCH_PREVIEW_CHARS = 4000

SYSTEM_PROMPT = (
    "You are a documentation drift detector. "
    "You MUST ground every finding ONLY in the provided evidence text. Do not invent doc contents. "
    "Return ALL drift instances you can justify. Do not stop after the first. "
    "Create a SEPARATE finding for each distinct doc location that needs change. "
    "Do NOT flag drift for generic statements like 'performance matters' unless the PR changed "
    "something that directly contradicts the statement. "
    "Do NOT flag drift for version bumps alone unless the doc evidence contains a specific "
    "API/usage/step that is now incorrect. "
    "For each finding, write change_summary as a concrete statement (e.g., 'Removed dependency X', "
    "'Renamed endpoint /a to /b', 'Changed UI label Add Item to Create Item'). "
    "impact_statement must explicitly connect the doc evidence to the change. "
    "suggested_revised_wording must be specific and ready to paste: either a replacement "
    "sentence/paragraph or a concise instruction to delete a sentence plus replacement text."
)

GOAL = (
    "Determine whether code changes in this PR require documentation updates across the "
    "provided documentation sources."
)

REQUIRED_BEHAVIOR: Sequence[str] = (
    "Return up to max_findings findings.",
    "Return findings only when the evidence contains specific text that should change.",
    "Do not output vague impact statements. You must say what changed and how the doc is now stale.",
    "If a dependency was removed and docs reference it, explicitly say 'You dropped X' and "
    "recommend how to reword or delete the mention.",
    "If you cannot propose a concrete revised wording grounded in the evidence, do not mark drift.",
)


@dataclass(frozen=True)
class PromptMessage:
    """Represents a single chat message for the judgment call."""

    role: str
    content: str

    def to_dict(self) -> Dict[str, str]:
        return {"role": self.role, "content": self.content}


def build_judgment_input(
    analysis: ChangeAnalysis,
    evidence: Sequence[DocEvidence],
    *,
    max_findings: int,
) -> List[PromptMessage]:
    payload = {
        "goal": GOAL,
        "limits": {"max_findings": max_findings},
        "pr_files": [
            {
                "filename": changed.filename,
                "status": changed.status,
                "patch": truncate(changed.patch, PATCH_PREVIEW_CHARS),
            }
            for changed in analysis.files
        ],
        "extracted_change_tokens": list(analysis.tokens),
        "dependency_changes": analysis.dependency_changes.to_dict(),
        "documentation_evidence": [bundle.to_dict() for bundle in evidence],
        "required_behavior": list(REQUIRED_BEHAVIOR),
    }
    return [
        PromptMessage(role="system", content=SYSTEM_PROMPT),
        PromptMessage(role="user", content=json.dumps(payload, indent=2)),
    ]


__all__ = ["GOAL", "PromptMessage", "REQUIRED_BEHAVIOR", "SYSTEM_PROMPT", "build_judgment_input"]
