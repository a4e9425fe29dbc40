"""Core data models shared across docdrift components."""

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Sequence

TRUNCATION_MARKER = "\n...[truncated]..."


def truncate(text: str | None, limit: int) -> str:
    """Cut ``text`` to ``limit`` characters, appending a visible marker when cut."""
    if not text:
        return ""
    if len(text) > limit:
        return text[:limit] + TRUNCATION_MARKER
    return text


def unique(items: Iterable[str]) -> List[str]:
    """Deduplicate while keeping first-appearance order."""
    return list(dict.fromkeys(items))


@dataclass(frozen=True)
class ChangedFile:
    """One file touched by the change under review."""

    filename: str
    status: str
    patch: str = ""


@dataclass(frozen=True)
class DocSource:
    """A documentation location to check for drift."""

    url: str
    title: str = ""

    @property
    def label(self) -> str:
        return self.title or self.url


@dataclass
class DependencyChanges:
    """Added, removed and updated package identifiers found in manifest diffs."""

    added: List[str] = field(default_factory=list)
    removed: List[str] = field(default_factory=list)
    updated: List[str] = field(default_factory=list)

    def is_empty(self) -> bool:
        return not (self.added or self.removed or self.updated)

    @classmethod
    def merge(cls, changes: Sequence["DependencyChanges"], *, limit: int) -> "DependencyChanges":
        """Union per-file results for a run, deduplicated and capped."""
        return cls(
            added=unique(item for change in changes for item in change.added)[:limit],
            removed=unique(item for change in changes for item in change.removed)[:limit],
            updated=unique(item for change in changes for item in change.updated)[:limit],
        )

    def to_dict(self) -> Dict[str, List[str]]:
        return {
            "added": list(self.added),
            "removed": list(self.removed),
            "updated": list(self.updated),
        }


@dataclass
class EvidenceHit:
    """Snippets found for one search term inside one documentation source."""

    token: str
    snippets: List[str]

    def to_dict(self) -> Dict[str, Any]:
        return {"token": self.token, "snippets": list(self.snippets)}


@dataclass
class DocEvidence:
    """Evidence bundle for a single documentation source."""

    title: str
    url: str
    hits: List[EvidenceHit] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "title": self.title,
            "url": self.url,
            "hits": [hit.to_dict() for hit in self.hits],
        }


@dataclass
class ChangeAnalysis:
    """Deterministic signals extracted from the changed files of one run."""

    files: List[ChangedFile]
    tokens: List[str]
    dependency_changes: DependencyChanges
