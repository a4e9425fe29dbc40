"""Tests for the FastAPI service mode."""

from __future__ import annotations

import pytest

try:
    from fastapi.testclient import TestClient
except ModuleNotFoundError:  # pragma: no cover - optional dependency
    pytest.skip("fastapi not installed", allow_module_level=True)

from docdrift.config import ConfigError
from docdrift.llm.client import JudgmentError
from docdrift.orchestrator import DriftOrchestrator
from docdrift.service import create_app
from tests._fixtures.fakes import FakeFetcher, finding, make_config, make_judge

API_URL = "https://docs.example.com/api"

FILES = [
    {
        "filename": "src/routes.js",
        "status": "modified",
        "patch": '@@ -1 +1 @@\n-app.get("/teams", handler)\n+app.get("/squads", handler)',
    }
]


@pytest.fixture
def fetcher() -> FakeFetcher:
    return FakeFetcher({API_URL: "Call `GET /teams` to list teams."})


@pytest.fixture
def client(fetcher: FakeFetcher) -> TestClient:
    judge, _ = make_judge({"drift_detected": True, "findings": [finding(confidence=0.9)]})
    orchestrator = DriftOrchestrator(make_config(), fetcher=fetcher, judge=judge)
    return TestClient(create_app(lambda: orchestrator))


def test_health_endpoint(client: TestClient) -> None:
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_check_endpoint_returns_report_and_decision(client: TestClient) -> None:
    response = client.post("/check", json={"files": FILES})

    assert response.status_code == 200
    body = response.json()
    assert body["report"]["drift_detected"] is True
    assert body["report"]["findings"][0]["doc_title"] == "API Guide"
    assert body["markdown"].startswith("<!-- doc-drift-report -->\n## Documentation Drift Report")
    assert body["decision"]["passed"] is False
    assert body["decision"]["level"] == "error"
    assert "/teams" in body["extracted_change_tokens"]
    assert body["dependency_changes"] == {"added": [], "removed": [], "updated": []}


def test_check_endpoint_uses_request_doc_sources(client: TestClient, fetcher: FakeFetcher) -> None:
    response = client.post(
        "/check",
        json={"files": FILES, "doc_sources": [{"url": "https://docs.example.com/other"}]},
    )

    assert response.status_code == 200
    assert fetcher.calls == ["https://docs.example.com/other"]


def test_check_endpoint_rejects_empty_doc_sources(client: TestClient) -> None:
    response = client.post("/check", json={"files": FILES, "doc_sources": []})

    assert response.status_code == 400
    assert "non-empty" in response.json()["detail"]


class _FailingOrchestrator:
    def __init__(self, error: Exception) -> None:
        self.error = error

    def evaluate(self, files, *, doc_sources=None):
        raise self.error


@pytest.mark.parametrize(
    ("error", "status"),
    [
        (JudgmentError("Judgment API error: 500\nupstream"), 502),
        (ConfigError("Missing required env var: OPENAI_API_KEY"), 400),
    ],
)
def test_check_endpoint_maps_errors(error: Exception, status: int) -> None:
    client = TestClient(create_app(lambda: _FailingOrchestrator(error)))

    response = client.post("/check", json={"files": FILES})

    assert response.status_code == status
    assert response.json()["detail"] == str(error)
