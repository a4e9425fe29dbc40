"""Pass/fail decision for a drift report."""

from __future__ import annotations

from dataclasses import dataclass

from .llm.schema import DriftReport
from .logging import get_logger
from .report.renderer import percent

DEFAULT_CONFIDENCE_THRESHOLD = 0.75


@dataclass(frozen=True)
class GateDecision:
    """Outcome of the drift gate; ``level`` is ``none``, ``warning`` or ``error``."""

    passed: bool
    level: str
    message: str
    max_confidence: float


class DriftGate:
    """Turns a report into a build signal using the configured policy."""

    def __init__(
        self,
        *,
        fail_on_drift: bool = True,
        threshold: float = DEFAULT_CONFIDENCE_THRESHOLD,
    ) -> None:
        self.fail_on_drift = fail_on_drift
        self.threshold = threshold
        self.logger = get_logger("gate")

    def evaluate(self, report: DriftReport) -> GateDecision:
        max_confidence = report.max_confidence
        if not report.drift_detected:
            return GateDecision(passed=True, level="none", message="", max_confidence=max_confidence)

        if self.fail_on_drift and max_confidence >= self.threshold:
            message = (
                f"Documentation drift detected (max finding confidence "
                f"{percent(max_confidence)}% >= {percent(self.threshold)}%)."
            )
            self.logger.error(message)
            return GateDecision(passed=False, level="error", message=message, max_confidence=max_confidence)

        message = (
            "Possible documentation drift detected, but not failing build "
            f"(max finding confidence {percent(max_confidence)}%)."
        )
        self.logger.warning(message)
        return GateDecision(passed=True, level="warning", message=message, max_confidence=max_confidence)


__all__ = ["DEFAULT_CONFIDENCE_THRESHOLD", "DriftGate", "GateDecision"]
