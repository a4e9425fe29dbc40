"""Configuration loading for docdrift (environment plus optional .docdrift.yml)."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple

import yaml

from .evidence.builder import DEFAULT_MAX_SNIPPETS_PER_HIT, DEFAULT_SNIPPET_RADIUS
from .evidence.fetcher import DEFAULT_MAX_DOC_BYTES
from .extract.dependencies import DEFAULT_MAX_DEPENDENCY_CHANGES
from .extract.tokens import DEFAULT_MAX_TOKENS
from .gate import DEFAULT_CONFIDENCE_THRESHOLD
from .llm.client import JudgmentClient
from .models import DocSource

CONFIG_FILENAME = ".docdrift.yml"


class ConfigError(RuntimeError):
    """Raised when a mandatory setting is missing or malformed."""


@dataclass(frozen=True)
class GitHubSettings:
    """Pull request context; only needed when talking to GitHub."""

    token: Optional[str] = None
    repository: Optional[str] = None
    event_path: Optional[Path] = None


@dataclass(frozen=True)
class DriftConfig:
    """Effective settings for one docdrift run."""

    api_key: str
    doc_sources: Tuple[DocSource, ...]
    model: str = JudgmentClient.DEFAULT_MODEL
    base_url: str = JudgmentClient.DEFAULT_BASE_URL
    fail_on_drift: bool = True
    confidence_threshold: float = DEFAULT_CONFIDENCE_THRESHOLD
    max_findings: int = 25
    max_doc_bytes: int = DEFAULT_MAX_DOC_BYTES
    max_tokens: int = DEFAULT_MAX_TOKENS
    max_dependency_changes: int = DEFAULT_MAX_DEPENDENCY_CHANGES
    snippet_radius: int = DEFAULT_SNIPPET_RADIUS
    max_snippets_per_hit: int = DEFAULT_MAX_SNIPPETS_PER_HIT
    request_timeout: float = 120.0
    github: GitHubSettings = field(default_factory=GitHubSettings)


def load_config(environ: Mapping[str, str], config_path: Path | None = None) -> DriftConfig:
    """Build the run configuration; environment values override the YAML file."""
    file_data = _read_config_file(config_path) if config_path is not None else {}

    api_key = _as_str(environ.get("OPENAI_API_KEY"))
    if not api_key:
        raise ConfigError("Missing required env var: OPENAI_API_KEY")

    doc_sources = _load_doc_sources(environ, file_data)

    values: Dict[str, Any] = {}
    for name, (env_key, parser) in _TUNABLES.items():
        raw = environ.get(env_key)
        if raw is not None and raw.strip() != "":
            values[name] = parser(env_key, raw)
        elif file_data.get(name) is not None:
            values[name] = parser(name, file_data[name])

    threshold = values.get("confidence_threshold", DEFAULT_CONFIDENCE_THRESHOLD)
    if not 0.0 <= threshold <= 1.0:
        raise ConfigError("DRIFT_CONFIDENCE_THRESHOLD must be between 0 and 1")

    event_path = _as_str(environ.get("GITHUB_EVENT_PATH"))
    github = GitHubSettings(
        token=_as_str(environ.get("GITHUB_TOKEN")),
        repository=_as_str(environ.get("GITHUB_REPOSITORY")),
        event_path=Path(event_path) if event_path else None,
    )

    return DriftConfig(api_key=api_key, doc_sources=doc_sources, github=github, **values)


def parse_doc_sources(raw: Any) -> Tuple[DocSource, ...]:
    """Validate a list of ``{title, url}`` mappings."""
    if not isinstance(raw, list) or not raw:
        raise ConfigError("DOC_SOURCES_JSON must be a non-empty JSON array")
    sources: List[DocSource] = []
    for index, entry in enumerate(raw):
        if not isinstance(entry, dict):
            raise ConfigError(f"Documentation source #{index + 1} must be an object with a url")
        url = _as_str(entry.get("url"))
        if not url:
            raise ConfigError(f"Documentation source #{index + 1} is missing a url")
        title = _as_str(entry.get("title")) or url
        sources.append(DocSource(url=url, title=title))
    return tuple(sources)


def _load_doc_sources(environ: Mapping[str, str], file_data: Dict[str, Any]) -> Tuple[DocSource, ...]:
    raw_json = environ.get("DOC_SOURCES_JSON")
    if raw_json:
        try:
            parsed = json.loads(raw_json)
        except json.JSONDecodeError as exc:
            raise ConfigError("DOC_SOURCES_JSON must be valid JSON") from exc
        return parse_doc_sources(parsed)
    if "doc_sources" in file_data:
        return parse_doc_sources(file_data["doc_sources"])
    raise ConfigError("Missing required env var: DOC_SOURCES_JSON")


def _read_config_file(path: Path) -> Dict[str, Any]:
    config_file = path.expanduser()
    if config_file.is_dir():
        config_file = config_file / CONFIG_FILENAME
    if not config_file.exists():
        return {}
    text = config_file.read_text(encoding="utf-8")
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {config_file.name}: {exc}") from exc
    if loaded is None:
        return {}
    if not isinstance(loaded, dict):
        raise ConfigError(f"{config_file.name} must contain a mapping at the root")
    return loaded


def _as_str(value: Any) -> Optional[str]:
    if isinstance(value, str):
        stripped = value.strip()
        return stripped or None
    return None


def _as_bool(key: str, value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        # Anything but an explicit "true" disables the flag.
        return value.strip().lower() == "true"
    raise ConfigError(f"{key} must be a boolean")


def _as_int(key: str, value: Any) -> int:
    if isinstance(value, bool):
        raise ConfigError(f"{key} must be an integer")
    if isinstance(value, int):
        parsed = value
    else:
        try:
            parsed = int(str(value).strip(), 10)
        except ValueError as exc:
            raise ConfigError(f"{key} must be an integer") from exc
    if parsed < 0:
        raise ConfigError(f"{key} must not be negative")
    return parsed


def _as_float(key: str, value: Any) -> float:
    if isinstance(value, bool):
        raise ConfigError(f"{key} must be a number")
    try:
        return float(value)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"{key} must be a number") from exc


def _as_text(key: str, value: Any) -> str:
    text = _as_str(value)
    if text is None:
        raise ConfigError(f"{key} must be a non-empty string")
    return text


# setting name -> (environment variable, parser); the name doubles as the YAML key.
_TUNABLES: Dict[str, Tuple[str, Callable[[str, Any], Any]]] = {
    "model": ("OPENAI_MODEL", _as_text),
    "base_url": ("OPENAI_BASE_URL", _as_text),
    "fail_on_drift": ("DRIFT_FAILS_BUILD", _as_bool),
    "confidence_threshold": ("DRIFT_CONFIDENCE_THRESHOLD", _as_float),
    "max_findings": ("MAX_FINDINGS", _as_int),
    "max_doc_bytes": ("MAX_DOC_BYTES", _as_int),
    "max_tokens": ("MAX_TOKENS", _as_int),
    "max_dependency_changes": ("MAX_DEPENDENCY_CHANGES", _as_int),
    "snippet_radius": ("SNIPPET_RADIUS", _as_int),
    "max_snippets_per_hit": ("MAX_SNIPPETS_PER_HIT", _as_int),
    "request_timeout": ("REQUEST_TIMEOUT", _as_float),
}


__all__ = [
    "CONFIG_FILENAME",
    "ConfigError",
    "DriftConfig",
    "GitHubSettings",
    "load_config",
    "parse_doc_sources",
]
