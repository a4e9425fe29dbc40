"""Tests for the gh-backed GitHub client."""

from __future__ import annotations

import json
import subprocess
from pathlib import Path

import pytest

from docdrift.github.client import PAGE_SIZE, GitHubClient, GitHubError, read_pull_request_number

MARKER = "<!-- doc-drift-report -->"


class _Runner:
    """Answers ``gh api`` calls from a route table keyed by endpoint."""

    def __init__(self, routes: dict[str, object]) -> None:
        self.routes = routes
        self.calls: list[tuple[list[str], dict[str, str] | None]] = []

    def __call__(self, args, *, env=None) -> str:
        args = list(args)
        self.calls.append((args, env))
        endpoint = next(arg for arg in args[2:] if arg.startswith("repos/"))
        response = self.routes.get(endpoint, [])
        return response if isinstance(response, str) else json.dumps(response)


def test_list_pull_request_files_paginates() -> None:
    first_page = [{"filename": f"src/file{i}.py", "status": "modified", "patch": "@@"} for i in range(PAGE_SIZE)]
    second_page = [{"filename": "docs/removed.md", "status": "removed"}]
    runner = _Runner(
        {
            "repos/octo/widgets/pulls/5/files?per_page=100&page=1": first_page,
            "repos/octo/widgets/pulls/5/files?per_page=100&page=2": second_page,
        }
    )
    client = GitHubClient("octo/widgets", token="ghs_abc", runner=runner)

    files = client.list_pull_request_files(5)

    assert len(files) == PAGE_SIZE + 1
    assert files[0].filename == "src/file0.py"
    assert files[-1].status == "removed"
    assert files[-1].patch == ""
    assert len(runner.calls) == 2
    assert runner.calls[0][0][:2] == ["gh", "api"]
    assert runner.calls[0][1]["GH_TOKEN"] == "ghs_abc"


def test_upsert_comment_updates_existing_marker_comment() -> None:
    runner = _Runner(
        {
            "repos/octo/widgets/issues/5/comments?per_page=100&page=1": [
                {"id": 11, "body": "Looks good"},
                {"id": 12, "body": f"{MARKER}\nold report"},
            ],
        }
    )
    client = GitHubClient("octo/widgets", runner=runner)

    action = client.upsert_comment(5, f"{MARKER}\nnew report", marker=MARKER)

    assert action == "updated"
    args = runner.calls[-1][0]
    assert args[2:5] == ["--method", "PATCH", "repos/octo/widgets/issues/comments/12"]
    assert args[-1] == f"body={MARKER}\nnew report"


def test_upsert_comment_creates_when_no_marker_comment() -> None:
    runner = _Runner({"repos/octo/widgets/issues/5/comments?per_page=100&page=1": [{"id": 11, "body": None}]})
    client = GitHubClient("octo/widgets", runner=runner)

    action = client.upsert_comment(5, f"{MARKER}\nreport", marker=MARKER)

    assert action == "created"
    args = runner.calls[-1][0]
    assert args[2:5] == ["--method", "POST", "repos/octo/widgets/issues/5/comments"]


def test_gh_failures_raise_github_error() -> None:
    def runner(args, *, env=None) -> str:
        raise subprocess.CalledProcessError(1, list(args), output="", stderr="HTTP 404: Not Found\n")

    client = GitHubClient("octo/widgets", runner=runner)

    with pytest.raises(GitHubError, match="HTTP 404"):
        client.list_pull_request_files(5)


def test_invalid_json_raises_github_error() -> None:
    client = GitHubClient("octo/widgets", runner=lambda args, env=None: "not json")

    with pytest.raises(GitHubError, match="invalid JSON"):
        client.list_pull_request_files(5)


def test_repository_must_include_owner() -> None:
    with pytest.raises(GitHubError, match="owner/name"):
        GitHubClient("widgets")


def test_read_pull_request_number(tmp_path: Path) -> None:
    event = tmp_path / "event.json"
    event.write_text(json.dumps({"action": "opened", "pull_request": {"number": 42}}), encoding="utf-8")

    assert read_pull_request_number(event) == 42


def test_read_pull_request_number_rejects_other_events(tmp_path: Path) -> None:
    event = tmp_path / "event.json"
    event.write_text(json.dumps({"ref": "refs/heads/main"}), encoding="utf-8")

    with pytest.raises(GitHubError, match="pull_request events"):
        read_pull_request_number(event)


def test_read_pull_request_number_missing_file(tmp_path: Path) -> None:
    with pytest.raises(GitHubError, match="Unable to read"):
        read_pull_request_number(tmp_path / "missing.json")
