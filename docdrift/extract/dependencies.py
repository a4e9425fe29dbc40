"""Dependency change detection for common package manifests."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Sequence

from ..models import DependencyChanges, unique
from .tokens import changed_lines

DEFAULT_MAX_DEPENDENCY_CHANGES = 50
UPDATE_SEPARATOR = " -> "

_VERSION_OPERATOR_SUFFIX = re.compile(r"(==|>=|<=|~=|>|<).+$")


@dataclass(frozen=True)
class ManifestDialect:
    """A manifest flavour: which files it covers and how one line yields a dependency."""

    name: str
    suffixes: Sequence[str]
    pattern: re.Pattern[str]
    formatter: Callable[[re.Match[str]], str]

    def matches(self, filename: str) -> bool:
        return filename.endswith(tuple(self.suffixes))

    def parse(self, content: str) -> Optional[str]:
        """Return at most one identifier for the line (first match only)."""
        match = self.pattern.search(content)
        if match is None:
            return None
        return self.formatter(match)


MANIFEST_DIALECTS: Sequence[ManifestDialect] = (
    ManifestDialect(
        name="npm",
        suffixes=("package.json",),
        pattern=re.compile(r'"(@?[\w.-]+/?[\w.-]*)"\s*:\s*"([^"]+)"', re.ASCII),
        formatter=lambda m: f"{m.group(1)}@{m.group(2)}",
    ),
    ManifestDialect(
        name="pip",
        suffixes=("requirements.txt", "Pipfile"),
        pattern=re.compile(r"^([A-Za-z0-9_.-]+)\s*(==|>=|<=|~=|>|<)\s*([A-Za-z0-9_.-]+)\s*$"),
        formatter=lambda m: f"{m.group(1)}{m.group(2)}{m.group(3)}",
    ),
    ManifestDialect(
        name="maven",
        suffixes=("pom.xml",),
        pattern=re.compile(r"<artifactId>\s*([^<]+)\s*</artifactId>"),
        formatter=lambda m: m.group(1),
    ),
    ManifestDialect(
        name="gradle",
        suffixes=("build.gradle", "build.gradle.kts"),
        pattern=re.compile(r"(implementation|api|compileOnly|runtimeOnly)\s*\(?[\"']([^\"']+)[\"']"),
        formatter=lambda m: m.group(2),
    ),
)


def dialect_for(filename: str) -> Optional[ManifestDialect]:
    for dialect in MANIFEST_DIALECTS:
        if dialect.matches(filename):
            return dialect
    return None


def bare_name(identifier: str) -> str:
    """Strip the version part of a dependency identifier.

    ``@scope/pkg@1.2.0`` -> ``@scope/pkg``, ``org.foo:bar:1.0`` -> ``org.foo:bar``,
    ``requests>=2.0`` -> ``requests``.
    """
    at = identifier.rfind("@")
    if at > 0:
        return identifier[:at].strip()
    if ":" in identifier:
        return ":".join(identifier.split(":")[:2]).strip()
    return _VERSION_OPERATOR_SUFFIX.sub("", identifier).strip()


def detect_dependency_changes(
    filename: str,
    patch: str | None,
    *,
    limit: int = DEFAULT_MAX_DEPENDENCY_CHANGES,
) -> DependencyChanges:
    """Classify manifest diff lines into added, removed and updated dependencies."""
    dialect = dialect_for(filename)
    if dialect is None or not patch:
        return DependencyChanges()

    added: Dict[str, None] = {}
    removed: Dict[str, None] = {}
    for line in changed_lines(patch):
        identifier = dialect.parse(line[1:].strip())
        if identifier is None:
            continue
        if line[0] == "+":
            added[identifier] = None
        else:
            removed[identifier] = None

    updated = _reconcile(added, removed)
    return DependencyChanges(
        added=list(added)[:limit],
        removed=list(removed)[:limit],
        updated=updated[:limit],
    )


def _reconcile(added: Dict[str, None], removed: Dict[str, None]) -> List[str]:
    """Move names present on both sides into ``old -> new`` records."""
    added_by_name = {bare_name(identifier): identifier for identifier in added}
    removed_by_name = {bare_name(identifier): identifier for identifier in removed}

    shared = [name for name in removed_by_name if name in added_by_name]
    updated = [f"{removed_by_name[name]}{UPDATE_SEPARATOR}{added_by_name[name]}" for name in shared]

    # A name must never stay on both sides, even when a manifest lists it twice.
    shared_names = set(shared)
    for side in (added, removed):
        for identifier in [item for item in side if bare_name(item) in shared_names]:
            del side[identifier]
    return unique(updated)


def search_names(changes: DependencyChanges) -> List[str]:
    """Bare names worth looking up in documentation, one per record."""
    identifiers = [*changes.added, *changes.removed]
    identifiers.extend(record.split(UPDATE_SEPARATOR)[-1] for record in changes.updated)
    return unique(name for name in (bare_name(identifier) for identifier in identifiers) if name)


__all__ = [
    "DEFAULT_MAX_DEPENDENCY_CHANGES",
    "MANIFEST_DIALECTS",
    "ManifestDialect",
    "UPDATE_SEPARATOR",
    "bare_name",
    "detect_dependency_changes",
    "dialect_for",
    "search_names",
]
