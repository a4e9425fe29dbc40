"""Local diff source: per-file patches from ``git diff`` without GitHub."""

from __future__ import annotations

import subprocess
from pathlib import Path
from typing import Callable, Iterable, List, Optional

from ..models import ChangedFile

_DIFF_HEADER = "diff --git "


class LocalDiffSource:
    """Reads changed files and their patches from a local checkout."""

    def __init__(self, runner: Callable[..., str] | None = None) -> None:
        self._runner = runner or self._default_runner

    def changed_files(self, repo_path: str, diff_base: str) -> List[ChangedFile]:
        repo = Path(repo_path)
        if not (repo / ".git").exists():
            raise RuntimeError(f"{repo_path} is not a Git repository")
        output = self._runner(["git", "diff", "--no-color", f"{diff_base}...HEAD"], cwd=repo)
        return parse_unified_diff(output)

    @staticmethod
    def _default_runner(args: Iterable[str], *, cwd: Path) -> str:
        completed = subprocess.run(
            list(args),
            cwd=str(cwd),
            check=True,
            text=True,
            capture_output=True,
        )
        return completed.stdout


def parse_unified_diff(text: str) -> List[ChangedFile]:
    """Split a multi-file unified diff into GitHub-style file records."""
    files: List[ChangedFile] = []
    block: List[str] = []
    for line in text.split("\n"):
        if line.startswith(_DIFF_HEADER) and block:
            files.append(_parse_block(block))
            block = []
        block.append(line)
    if block and block[0].startswith(_DIFF_HEADER):
        files.append(_parse_block(block))
    return files


def _parse_block(lines: List[str]) -> ChangedFile:
    status = "modified"
    old_path: Optional[str] = None
    new_path: Optional[str] = None
    hunk_start: Optional[int] = None

    for index, line in enumerate(lines):
        if line.startswith("@@"):
            hunk_start = index
            break
        if line.startswith("new file mode"):
            status = "added"
        elif line.startswith("deleted file mode"):
            status = "removed"
        elif line.startswith("rename from "):
            status = "renamed"
            old_path = line[len("rename from "):]
        elif line.startswith("rename to "):
            new_path = line[len("rename to "):]
        elif line.startswith("--- "):
            old_path = _strip_prefix(line[4:], "a/") or old_path
        elif line.startswith("+++ "):
            new_path = _strip_prefix(line[4:], "b/") or new_path

    filename = new_path or old_path or _path_from_header(lines[0])
    # GitHub patches start at the first hunk header.
    patch = "\n".join(lines[hunk_start:]).rstrip("\n") if hunk_start is not None else ""
    return ChangedFile(filename=filename, status=status, patch=patch)


def _strip_prefix(path: str, prefix: str) -> Optional[str]:
    path = path.strip()
    if path == "/dev/null":
        return None
    return path[len(prefix):] if path.startswith(prefix) else path


def _path_from_header(header: str) -> str:
    # "diff --git a/path b/path"
    _, _, remainder = header.partition(" b/")
    return remainder.strip()


__all__ = ["LocalDiffSource", "parse_unified_diff"]
