"""Logging utilities for docdrift commands."""

from __future__ import annotations

import logging
from pathlib import Path

_LOGGER_NAME = "docdrift"

_ANNOTATION_LEVELS = {
    logging.WARNING: "warning",
    logging.ERROR: "error",
    logging.CRITICAL: "error",
}


class GitHubAnnotationFormatter(logging.Formatter):
    """Render warnings and errors as GitHub Actions workflow commands."""

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        command = _ANNOTATION_LEVELS.get(record.levelno)
        if command is None:
            return message
        # Workflow commands are single-line; newlines must be percent-encoded.
        escaped = message.replace("%", "%25").replace("\r", "%0D").replace("\n", "%0A")
        return f"::{command}::{escaped}"


def get_logger(name: str | None = None) -> logging.Logger:
    """Return a module-scoped logger under the docdrift hierarchy."""
    full_name = f"{_LOGGER_NAME}.{name}" if name else _LOGGER_NAME
    return logging.getLogger(full_name)


def configure_logging(
    *,
    verbose: bool = False,
    log_file: Path | None = None,
    github_annotations: bool = False,
) -> logging.Logger:
    """Configure the docdrift logger with console output and optional file sink."""
    level = logging.DEBUG if verbose else logging.INFO
    logger = logging.getLogger(_LOGGER_NAME)
    logger.setLevel(level)
    logger.propagate = False

    # Reset handlers to avoid duplicate output when the CLI is invoked multiple times.
    for handler in list(logger.handlers):
        logger.removeHandler(handler)

    stream_handler = logging.StreamHandler()
    stream_handler.setLevel(level)
    if github_annotations:
        stream_handler.setFormatter(GitHubAnnotationFormatter("%(message)s"))
    else:
        stream_handler.setFormatter(logging.Formatter("[docdrift] %(levelname)s %(message)s"))
    logger.addHandler(stream_handler)

    if log_file is not None:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(level)
        file_handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")
        )
        logger.addHandler(file_handler)

    return logger


__all__ = ["GitHubAnnotationFormatter", "configure_logging", "get_logger"]
