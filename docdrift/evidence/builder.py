"""Locates change tokens and dependency names inside fetched documentation."""

from __future__ import annotations

import re
from typing import List, Optional, Protocol, Sequence

from ..extract.dependencies import search_names
from ..logging import get_logger
from ..models import DependencyChanges, DocEvidence, DocSource, EvidenceHit

DEFAULT_SNIPPET_RADIUS = 250
DEFAULT_MAX_SNIPPETS_PER_HIT = 3
MAX_OCCURRENCES_PER_TERM = 6


class Fetcher(Protocol):
    def fetch(self, url: str) -> Optional[str]:
        ...


def find_snippets(
    text: str,
    needle: str,
    *,
    radius: int = DEFAULT_SNIPPET_RADIUS,
    limit: int = MAX_OCCURRENCES_PER_TERM,
) -> List[str]:
    """Return windows of ``text`` around case-insensitive occurrences of ``needle``."""
    if not text or not needle:
        return []

    snippets: List[str] = []
    for match in re.finditer(re.escape(needle), text, re.IGNORECASE):
        if len(snippets) >= limit:
            break
        start = max(0, match.start() - radius)
        end = min(len(text), match.end() + radius)
        snippets.append(text[start:end])
    return snippets


class EvidenceBuilder:
    """Builds per-source evidence bundles for the judgment step."""

    def __init__(
        self,
        fetcher: Fetcher,
        *,
        snippet_radius: int = DEFAULT_SNIPPET_RADIUS,
        max_snippets_per_hit: int = DEFAULT_MAX_SNIPPETS_PER_HIT,
    ) -> None:
        self.fetcher = fetcher
        self.snippet_radius = snippet_radius
        self.max_snippets_per_hit = max_snippets_per_hit
        self.logger = get_logger("evidence")

    def build(
        self,
        sources: Sequence[DocSource],
        tokens: Sequence[str],
        dependency_changes: DependencyChanges,
    ) -> List[DocEvidence]:
        dependency_names = search_names(dependency_changes)
        evidence: List[DocEvidence] = []
        for source in sources:
            text = self.fetcher.fetch(source.url)
            if text is None:
                continue
            hits = self.collect_hits(text, [*tokens, *dependency_names])
            self.logger.debug("%s: %d hit(s)", source.url, len(hits))
            # Sources without hits stay in the bundle so the judge sees the absence.
            evidence.append(DocEvidence(title=source.label, url=source.url, hits=hits))
        return evidence

    def collect_hits(self, text: str, terms: Sequence[str]) -> List[EvidenceHit]:
        hits: List[EvidenceHit] = []
        for term in terms:
            snippets = find_snippets(text, term, radius=self.snippet_radius)
            if snippets:
                hits.append(EvidenceHit(token=term, snippets=snippets[: self.max_snippets_per_hit]))
        return hits


__all__ = [
    "DEFAULT_MAX_SNIPPETS_PER_HIT",
    "DEFAULT_SNIPPET_RADIUS",
    "EvidenceBuilder",
    "Fetcher",
    "MAX_OCCURRENCES_PER_TERM",
    "find_snippets",
]
