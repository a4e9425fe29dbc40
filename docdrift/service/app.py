"""FastAPI application exposing drift checks over HTTP."""

from __future__ import annotations

import asyncio
from typing import Any, Callable, Dict, List, Optional

from fastapi import Depends, FastAPI
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from ..config import ConfigError, DriftConfig, parse_doc_sources
from ..llm.client import JudgmentError
from ..llm.schema import DriftReport
from ..models import ChangedFile
from ..orchestrator import DriftOrchestrator, DriftOutcome


class ChangedFilePayload(BaseModel):
    filename: str
    status: str = "modified"
    patch: str = ""


class DocSourcePayload(BaseModel):
    url: str
    title: Optional[str] = None


class CheckRequest(BaseModel):
    files: List[ChangedFilePayload]
    doc_sources: Optional[List[DocSourcePayload]] = None


class DecisionResponse(BaseModel):
    passed: bool
    level: str
    message: str
    max_confidence: float


class CheckResponse(BaseModel):
    report: DriftReport
    markdown: str
    decision: DecisionResponse
    extracted_change_tokens: List[str]
    dependency_changes: Dict[str, List[str]]


class HealthResponse(BaseModel):
    status: str


def create_app(orchestrator_factory: Callable[[], DriftOrchestrator]) -> FastAPI:
    """Create the FastAPI application around an orchestrator factory."""
    app = FastAPI(title="DocDrift Service", version="0.1.0")

    async def get_orchestrator() -> DriftOrchestrator:
        return orchestrator_factory()

    @app.get("/health", response_model=HealthResponse)
    async def health() -> HealthResponse:
        return HealthResponse(status="ok")

    @app.post("/check", response_model=CheckResponse)
    async def check(
        payload: CheckRequest,
        orchestrator: DriftOrchestrator = Depends(get_orchestrator),
    ) -> CheckResponse:
        files = [ChangedFile(filename=f.filename, status=f.status, patch=f.patch) for f in payload.files]
        sources = None
        if payload.doc_sources is not None:
            sources = parse_doc_sources([source.model_dump() for source in payload.doc_sources])

        def _run() -> DriftOutcome:
            return orchestrator.evaluate(files, doc_sources=sources)

        # Evidence fetching and judgment block on network I/O.
        loop = asyncio.get_running_loop()
        outcome = await loop.run_in_executor(None, _run)

        return CheckResponse(
            report=outcome.report,
            markdown=outcome.comment,
            decision=DecisionResponse(
                passed=outcome.decision.passed,
                level=outcome.decision.level,
                message=outcome.decision.message,
                max_confidence=outcome.decision.max_confidence,
            ),
            extracted_change_tokens=outcome.analysis.tokens,
            dependency_changes=outcome.analysis.dependency_changes.to_dict(),
        )

    @app.exception_handler(ConfigError)
    async def config_error_handler(_: Any, exc: ConfigError) -> JSONResponse:
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    @app.exception_handler(JudgmentError)
    async def judgment_error_handler(_: Any, exc: JudgmentError) -> JSONResponse:
        return JSONResponse(status_code=502, content={"detail": str(exc)})

    return app


def run_service(
    config: DriftConfig, host: str = "127.0.0.1", port: int = 8000
) -> None:  # pragma: no cover - integration path
    import uvicorn

    app = create_app(lambda: DriftOrchestrator(config))
    uvicorn.run(app, host=host, port=port)


__all__ = ["create_app", "run_service"]
