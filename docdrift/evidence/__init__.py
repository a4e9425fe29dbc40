"""Documentation fetching and evidence bundles."""

from .builder import EvidenceBuilder, find_snippets
from .fetcher import DocFetcher

__all__ = ["DocFetcher", "EvidenceBuilder", "find_snippets"]
