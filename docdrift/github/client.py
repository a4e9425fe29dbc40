"""GitHub access through the ``gh`` CLI: pull request files and the report comment."""

from __future__ import annotations

import json
import os
import subprocess
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, Iterator, List, Optional

from ..logging import get_logger
from ..models import ChangedFile

PAGE_SIZE = 100


class GitHubError(RuntimeError):
    """Raised when GitHub cannot be queried or updated."""


def read_pull_request_number(event_path: Path) -> int:
    """Return the pull request number from an Actions event payload."""
    try:
        payload = json.loads(event_path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        raise GitHubError(f"Unable to read GitHub event payload at {event_path}: {exc}") from exc
    pull_request = payload.get("pull_request") if isinstance(payload, dict) else None
    if not isinstance(pull_request, dict) or not isinstance(pull_request.get("number"), int):
        raise GitHubError("This action must run on pull_request events")
    return pull_request["number"]


class GitHubClient:
    """Lists pull request files and upserts the drift report comment."""

    def __init__(
        self,
        repository: str,
        *,
        token: str | None = None,
        runner: Callable[..., str] | None = None,
    ) -> None:
        if "/" not in repository:
            raise GitHubError(f"Repository must look like owner/name, got '{repository}'")
        self.repository = repository
        self.token = token
        self._runner = runner or self._default_runner
        self.logger = get_logger("github")

    def list_pull_request_files(self, number: int) -> List[ChangedFile]:
        files: List[ChangedFile] = []
        for item in self._paginate(f"repos/{self.repository}/pulls/{number}/files"):
            files.append(
                ChangedFile(
                    filename=str(item.get("filename", "")),
                    status=str(item.get("status", "")),
                    patch=item.get("patch") or "",
                )
            )
        self.logger.info("Loaded %d changed file(s) from pull request #%d", len(files), number)
        return files

    def upsert_comment(self, number: int, body: str, *, marker: str) -> str:
        """Update the comment carrying ``marker`` or create one; returns the action taken."""
        existing = self._find_comment(number, marker)
        if existing is not None:
            self._api(
                ["--method", "PATCH", f"repos/{self.repository}/issues/comments/{existing}", "-f", f"body={body}"]
            )
            self.logger.info("Updated drift report comment %s", existing)
            return "updated"
        self._api(
            ["--method", "POST", f"repos/{self.repository}/issues/{number}/comments", "-f", f"body={body}"]
        )
        self.logger.info("Created drift report comment on pull request #%d", number)
        return "created"

    # ------------------------------------------------------------------
    # Helpers

    def _find_comment(self, number: int, marker: str) -> Optional[Any]:
        for comment in self._paginate(f"repos/{self.repository}/issues/{number}/comments"):
            if marker in (comment.get("body") or ""):
                return comment.get("id")
        return None

    def _paginate(self, endpoint: str) -> Iterator[Dict[str, Any]]:
        page = 1
        while True:
            output = self._api([f"{endpoint}?per_page={PAGE_SIZE}&page={page}"])
            try:
                items = json.loads(output or "[]")
            except json.JSONDecodeError as exc:
                raise GitHubError(f"GitHub returned invalid JSON for {endpoint}") from exc
            if not isinstance(items, list):
                raise GitHubError(f"GitHub returned an unexpected payload for {endpoint}")
            for item in items:
                if isinstance(item, dict):
                    yield item
            if len(items) < PAGE_SIZE:
                return
            page += 1

    def _api(self, args: Iterable[str]) -> str:
        command = ["gh", "api", *args]
        env = os.environ.copy()
        if self.token:
            env["GH_TOKEN"] = self.token
        try:
            return self._runner(command, env=env)
        except FileNotFoundError as exc:  # pragma: no cover - depends on environment
            raise GitHubError("Unable to locate the 'gh' CLI. Install GitHub CLI to publish reports.") from exc
        except subprocess.CalledProcessError as exc:
            detail = (exc.stderr or "").strip() if isinstance(exc.stderr, str) else ""
            raise GitHubError(f"gh api failed with exit code {exc.returncode}: {detail}") from exc

    @staticmethod
    def _default_runner(args: Iterable[str], *, env: dict[str, str] | None = None) -> str:
        completed = subprocess.run(
            list(args),
            env=env,
            check=True,
            text=True,
            capture_output=True,
        )
        return completed.stdout


__all__ = ["GitHubClient", "GitHubError", "PAGE_SIZE", "read_pull_request_number"]
