"""Deterministic signal extraction from diffs."""

from .dependencies import MANIFEST_DIALECTS, ManifestDialect, bare_name, detect_dependency_changes
from .tokens import collect_tokens, extract_tokens

__all__ = [
    "MANIFEST_DIALECTS",
    "ManifestDialect",
    "bare_name",
    "collect_tokens",
    "detect_dependency_changes",
    "extract_tokens",
]
