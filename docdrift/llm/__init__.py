"""Judgment service contract and client."""

from .client import JudgmentClient, JudgmentError, JudgmentRequest
from .prompt import PromptMessage, build_judgment_input
from .schema import DRIFT_REPORT_SCHEMA, DriftReport, Finding

__all__ = [
    "DRIFT_REPORT_SCHEMA",
    "DriftReport",
    "Finding",
    "JudgmentClient",
    "JudgmentError",
    "JudgmentRequest",
    "PromptMessage",
    "build_judgment_input",
]
