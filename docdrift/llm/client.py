"""Client for the structured-output judgment service (OpenAI Responses API)."""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Sequence
from urllib.error import HTTPError, URLError
from urllib.request import Request, urlopen

from pydantic import ValidationError

from ..logging import get_logger
from .prompt import PromptMessage
from .schema import DRIFT_REPORT_SCHEMA, SCHEMA_NAME, DriftReport


class JudgmentError(RuntimeError):
    """Raised when the judgment service fails or returns unusable output."""


@dataclass
class JudgmentRequest:
    """Represents one strict structured-output request."""

    messages: List[Dict[str, str]]
    schema: Dict[str, Any]
    model: str
    base_url: str
    api_key: str
    request_timeout: Optional[float]


class JudgmentClient:
    """Sends the evidence bundle to the judgment service and validates the reply."""

    DEFAULT_MODEL = "gpt-4o-mini"
    DEFAULT_BASE_URL = "https://api.openai.com/v1"

    def __init__(
        self,
        api_key: str,
        *,
        model: str | None = None,
        base_url: str | None = None,
        max_findings: int = 25,
        request_timeout: Optional[float] = 120.0,
        transport: Callable[[JudgmentRequest], Dict[str, Any]] | None = None,
    ) -> None:
        self.api_key = api_key
        self.model = model or self.DEFAULT_MODEL
        self.base_url = (base_url or self.DEFAULT_BASE_URL).rstrip("/")
        self.max_findings = max_findings
        self.request_timeout = request_timeout
        self._transport = transport or self._http_transport
        self.logger = get_logger("judgment")

    def judge(self, messages: Sequence[PromptMessage]) -> DriftReport:
        """Return the validated report, capped to ``max_findings``."""
        request = JudgmentRequest(
            messages=[message.to_dict() for message in messages],
            schema=DRIFT_REPORT_SCHEMA,
            model=self.model,
            base_url=self.base_url,
            api_key=self.api_key,
            request_timeout=self.request_timeout,
        )
        self.logger.info("Requesting drift judgment from %s", self.model)
        response_payload = self._transport(request)

        output = self._extract_output_text(response_payload)
        if not output:
            raise JudgmentError("Missing structured output from judgment service")
        try:
            report = DriftReport.model_validate_json(output)
        except ValidationError as exc:
            raise JudgmentError(f"Judgment output does not match the report schema: {exc}") from exc

        if len(report.findings) > self.max_findings:
            self.logger.debug(
                "Judgment returned %d findings; keeping the first %d",
                len(report.findings),
                self.max_findings,
            )
        return report.capped(self.max_findings)

    @staticmethod
    def build_payload(request: JudgmentRequest) -> Dict[str, Any]:
        return {
            "model": request.model,
            "input": request.messages,
            "text": {
                "format": {
                    "type": "json_schema",
                    "name": SCHEMA_NAME,
                    "schema": request.schema,
                    "strict": True,
                }
            },
        }

    @staticmethod
    def _http_transport(request: JudgmentRequest) -> Dict[str, Any]:
        endpoint = f"{request.base_url}/responses"
        data = json.dumps(JudgmentClient.build_payload(request)).encode("utf-8")
        headers = {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {request.api_key}",
        }
        http_request = Request(endpoint, data=data, headers=headers, method="POST")

        try:
            with urlopen(http_request, timeout=request.request_timeout) as response:  # type: ignore[arg-type]
                raw = response.read()
        except HTTPError as exc:
            detail = exc.read().decode("utf-8", errors="ignore") if hasattr(exc, "read") else ""
            raise JudgmentError(f"Judgment API error: {exc.code}\n{detail.strip()}") from exc
        except URLError as exc:
            raise JudgmentError(f"Judgment API request failed: {exc.reason}") from exc

        try:
            payload = json.loads(raw.decode("utf-8"))
        except json.JSONDecodeError as exc:
            raise JudgmentError("Judgment API returned invalid JSON") from exc
        if not isinstance(payload, dict):
            raise JudgmentError("Judgment API returned an unexpected payload")
        return payload

    @staticmethod
    def _extract_output_text(payload: Dict[str, Any]) -> str:
        output = payload.get("output")
        if isinstance(output, list):
            for item in output:
                if not isinstance(item, dict):
                    continue
                content = item.get("content")
                if not isinstance(content, list):
                    continue
                for part in content:
                    if isinstance(part, dict) and isinstance(part.get("text"), str):
                        return part["text"]
        text = payload.get("output_text")
        if isinstance(text, str):
            return text
        return ""


__all__ = ["JudgmentClient", "JudgmentError", "JudgmentRequest"]
