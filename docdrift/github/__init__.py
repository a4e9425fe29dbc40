"""Diff sources and comment publication."""

from .client import GitHubClient, GitHubError, read_pull_request_number
from .local import LocalDiffSource, parse_unified_diff

__all__ = [
    "GitHubClient",
    "GitHubError",
    "LocalDiffSource",
    "parse_unified_diff",
    "read_pull_request_number",
]
