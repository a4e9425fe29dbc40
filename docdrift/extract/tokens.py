"""Token extraction from unified diff patches."""

from __future__ import annotations

import re
from typing import Iterable, Iterator, List

from ..models import unique

DEFAULT_MAX_TOKENS = 40

_QUOTED_PATTERN = re.compile(r"([\"'`])((?:\\\1|.)*?)\1")
_TOKENISH_PATTERN = re.compile(r"[A-Za-z0-9_./-]{6,80}")
_SEMVER_PATTERN = re.compile(r"^\d+\.\d+\.\d+")

_QUOTED_MIN = 4
_QUOTED_MAX = 120


def changed_lines(patch: str | None) -> Iterator[str]:
    """Yield added/removed lines of a patch, skipping the ``+++``/``---`` headers."""
    if not patch:
        return
    for line in patch.split("\n"):
        if not line.startswith(("+", "-")):
            continue
        if line.startswith(("+++ ", "--- ")):
            continue
        yield line


def extract_tokens(patch: str | None, *, limit: int = DEFAULT_MAX_TOKENS) -> List[str]:
    """Return documentation-relevant fragments (UI strings, paths, flags, env vars)."""
    candidates: List[str] = []
    for line in changed_lines(patch):
        candidates.extend(_quoted_strings(line))
        candidates.extend(_tokenish_runs(line))

    # A bare version bump says nothing about the docs on its own.
    tokens = [token for token in unique(candidates) if not _SEMVER_PATTERN.match(token)]
    return tokens[:limit]


def collect_tokens(patches: Iterable[str | None], *, limit: int = DEFAULT_MAX_TOKENS) -> List[str]:
    """Union the tokens of several patches, first appearance wins."""
    return unique(token for patch in patches for token in extract_tokens(patch, limit=limit))


def _quoted_strings(line: str) -> Iterator[str]:
    for match in _QUOTED_PATTERN.finditer(line):
        value = match.group(2).strip()
        if _QUOTED_MIN <= len(value) <= _QUOTED_MAX:
            yield value


def _tokenish_runs(line: str) -> Iterator[str]:
    for match in _TOKENISH_PATTERN.finditer(line):
        token = match.group(0)
        if "/" in token or "--" in token or token == token.upper() or "." in token:
            yield token


__all__ = ["DEFAULT_MAX_TOKENS", "changed_lines", "collect_tokens", "extract_tokens"]
