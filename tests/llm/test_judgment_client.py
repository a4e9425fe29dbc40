"""Tests for the judgment service client."""

from __future__ import annotations

import io
import json
from urllib.error import HTTPError

import pytest

from docdrift.llm.client import JudgmentClient, JudgmentError
from docdrift.llm.prompt import PromptMessage
from docdrift.llm.schema import DRIFT_REPORT_SCHEMA
from tests._fixtures.fakes import RecordingTransport, finding, make_judge, responses_payload

MESSAGES = [PromptMessage(role="system", content="judge"), PromptMessage(role="user", content="{}")]


def test_judge_returns_validated_report() -> None:
    client, transport = make_judge({"drift_detected": True, "findings": [finding()]})

    report = client.judge(MESSAGES)

    assert report.drift_detected is True
    assert report.findings[0].doc_title == "API Guide"
    assert report.max_confidence == pytest.approx(0.9)
    request = transport.requests[0]
    assert request.messages == [
        {"role": "system", "content": "judge"},
        {"role": "user", "content": "{}"},
    ]
    assert request.schema is DRIFT_REPORT_SCHEMA
    assert request.model == "gpt-4o-mini"


def test_judge_truncates_findings_beyond_cap() -> None:
    findings = [finding(doc_title=f"Doc {index}") for index in range(4)]
    client, _ = make_judge({"drift_detected": True, "findings": findings}, max_findings=2)

    report = client.judge(MESSAGES)

    assert [item.doc_title for item in report.findings] == ["Doc 0", "Doc 1"]


def test_judge_skips_non_message_output_items() -> None:
    payload = responses_payload({"drift_detected": False, "findings": []})
    payload["output"].insert(0, {"type": "reasoning", "summary": []})
    client = JudgmentClient("key", transport=RecordingTransport(payload))

    report = client.judge(MESSAGES)

    assert report.drift_detected is False
    assert report.findings == []


@pytest.mark.parametrize(
    "payload",
    [
        {"output": []},
        {"output": [{"type": "message", "content": [{"type": "output_text", "text": "not json"}]}]},
        responses_payload({"drift_detected": True}),
        responses_payload({"drift_detected": True, "findings": [finding(confidence=1.5)]}),
        responses_payload({"drift_detected": True, "findings": [finding(extra="nope")]}),
        responses_payload({"drift_detected": True, "findings": [], "summary": "extra"}),
        responses_payload({"drift_detected": "true", "findings": []}),
        responses_payload({"drift_detected": True, "findings": [finding(confidence="0.9")]}),
        responses_payload({"drift_detected": True, "findings": [finding(evidence=[42])]}),
    ],
)
def test_judge_rejects_unusable_output(payload) -> None:
    client = JudgmentClient("key", transport=RecordingTransport(payload))

    with pytest.raises(JudgmentError):
        client.judge(MESSAGES)


def test_build_payload_requests_strict_schema() -> None:
    client, transport = make_judge({"drift_detected": False, "findings": []})
    client.judge(MESSAGES)

    payload = JudgmentClient.build_payload(transport.requests[0])

    assert payload["model"] == "gpt-4o-mini"
    assert payload["input"][0] == {"role": "system", "content": "judge"}
    assert payload["text"]["format"] == {
        "type": "json_schema",
        "name": "doc_drift_report",
        "schema": DRIFT_REPORT_SCHEMA,
        "strict": True,
    }


def test_schema_requires_every_finding_field() -> None:
    items = DRIFT_REPORT_SCHEMA["properties"]["findings"]["items"]

    assert DRIFT_REPORT_SCHEMA["additionalProperties"] is False
    assert items["additionalProperties"] is False
    assert set(items["required"]) == set(items["properties"])


class FakeResponse:
    def __init__(self, payload):
        self._payload = payload

    def read(self):
        return json.dumps(self._payload).encode("utf-8")

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        return False


def test_http_transport_posts_to_responses_endpoint(monkeypatch) -> None:
    captured = {}

    def fake_urlopen(request, timeout=None):
        captured["url"] = request.full_url
        captured["headers"] = {k.lower(): v for k, v in request.header_items()}
        captured["payload"] = json.loads(request.data.decode("utf-8"))
        captured["timeout"] = timeout
        return FakeResponse(responses_payload({"drift_detected": False, "findings": []}))

    monkeypatch.setattr("docdrift.llm.client.urlopen", fake_urlopen)

    client = JudgmentClient(
        "secret",
        model="gpt-4.1-mini",
        base_url="https://llm.example.com/v1/",
        request_timeout=30.0,
    )
    report = client.judge(MESSAGES)

    assert report.drift_detected is False
    assert captured["url"] == "https://llm.example.com/v1/responses"
    assert captured["headers"]["authorization"] == "Bearer secret"
    assert captured["headers"]["content-type"] == "application/json"
    assert captured["payload"]["model"] == "gpt-4.1-mini"
    assert captured["payload"]["text"]["format"]["strict"] is True
    assert captured["timeout"] == 30.0


def test_http_transport_raises_on_error_status(monkeypatch) -> None:
    def fake_urlopen(request, timeout=None):
        raise HTTPError(request.full_url, 500, "Server Error", hdrs=None, fp=io.BytesIO(b"exploded"))

    monkeypatch.setattr("docdrift.llm.client.urlopen", fake_urlopen)

    with pytest.raises(JudgmentError, match="500"):
        JudgmentClient("secret").judge(MESSAGES)


def test_judge_accepts_integer_confidence() -> None:
    client, _ = make_judge({"drift_detected": True, "findings": [finding(confidence=1)]})

    report = client.judge(MESSAGES)

    assert report.max_confidence == 1.0
