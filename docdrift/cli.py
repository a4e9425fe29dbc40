"""CLI entrypoints for docdrift commands."""

from __future__ import annotations

import argparse
import os
import sys
from dataclasses import replace
from pathlib import Path

from .config import ConfigError, DriftConfig, load_config
from .github.client import GitHubClient, GitHubError, read_pull_request_number
from .github.local import LocalDiffSource
from .llm.client import JudgmentError
from .logging import configure_logging
from .orchestrator import DriftOrchestrator, DriftOutcome


def _add_verbose_option(
    parser: argparse.ArgumentParser, *, suppress_default: bool = False
) -> None:
    kwargs: dict[str, object] = {
        "action": "store_true",
        "help": "Increase log verbosity for troubleshooting.",
    }
    if suppress_default:
        kwargs["default"] = argparse.SUPPRESS
    else:
        kwargs["default"] = False
    parser.add_argument(
        "-v",
        "--verbose",
        **kwargs,
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="docdrift",
        description="Detect documentation made stale by a code change.",
    )
    _add_verbose_option(parser)
    subparsers = parser.add_subparsers(dest="command", required=True)

    check_parser = subparsers.add_parser(
        "check",
        help="Check a pull request (or a local diff) for documentation drift.",
    )
    _add_verbose_option(check_parser, suppress_default=True)
    check_parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to a .docdrift.yml file or the directory holding it (default: current directory).",
    )
    check_parser.add_argument(
        "--repo",
        default=None,
        help="Repository as owner/name (defaults to GITHUB_REPOSITORY).",
    )
    check_parser.add_argument(
        "--pr",
        type=int,
        default=None,
        help="Pull request number (defaults to the one in GITHUB_EVENT_PATH).",
    )
    check_parser.add_argument(
        "--local",
        default=None,
        metavar="PATH",
        help="Read the diff from a local Git checkout instead of GitHub.",
    )
    check_parser.add_argument(
        "--diff-base",
        default="origin/main",
        help="Commit or ref to compare against in --local mode.",
    )
    check_parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Print the report instead of publishing the pull request comment.",
    )
    check_parser.add_argument(
        "--no-fail",
        action="store_true",
        help="Never fail the build on drift, regardless of DRIFT_FAILS_BUILD.",
    )
    check_parser.add_argument(
        "--github-annotations",
        action="store_true",
        default=bool(os.environ.get("GITHUB_ACTIONS")),
        help="Emit warnings and errors as GitHub Actions annotations.",
    )

    serve_parser = subparsers.add_parser(
        "serve",
        help="Run the HTTP service exposing drift checks.",
    )
    _add_verbose_option(serve_parser, suppress_default=True)
    serve_parser.add_argument("--config", type=Path, default=None)
    serve_parser.add_argument("--host", default="127.0.0.1")
    serve_parser.add_argument("--port", type=int, default=8000)

    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for docdrift commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    configure_logging(
        verbose=bool(args.verbose),
        github_annotations=bool(getattr(args, "github_annotations", False)),
    )

    try:
        config = load_config(os.environ, args.config if args.config is not None else Path.cwd())
    except ConfigError as exc:
        parser.exit(1, f"{exc}\n")

    if args.command == "check":
        _run_check(parser, args, config)
    elif args.command == "serve":
        from .service.app import run_service

        run_service(config, host=args.host, port=args.port)
    else:  # pragma: no cover - argparse enforces choices
        parser.exit(1, "Unknown command\n")


def _run_check(parser: argparse.ArgumentParser, args: argparse.Namespace, config: DriftConfig) -> None:
    if args.no_fail:
        config = replace(config, fail_on_drift=False)
    orchestrator = DriftOrchestrator(config)

    try:
        if args.local:
            files = LocalDiffSource().changed_files(args.local, args.diff_base)
            outcome = orchestrator.evaluate(files)
        else:
            github, number = _github_target(args, config)
            outcome = orchestrator.run_pull_request(github, number, publish=not args.dry_run)
    except (ConfigError, GitHubError, JudgmentError) as exc:
        parser.exit(1, f"{exc}\n")
    except RuntimeError as exc:
        parser.exit(1, f"docdrift check failed: {exc}\nRun with --verbose for more details.\n")

    _report(outcome, print_comment=bool(args.dry_run or args.local))
    if not outcome.decision.passed:
        # The gate already logged its message.
        parser.exit(1)


def _github_target(args: argparse.Namespace, config: DriftConfig) -> tuple[GitHubClient, int]:
    repository = args.repo or config.github.repository
    if not repository:
        raise ConfigError("Missing repository: pass --repo or set GITHUB_REPOSITORY")
    if not config.github.token:
        raise ConfigError("Missing required env var: GITHUB_TOKEN")
    number = args.pr
    if number is None:
        if config.github.event_path is None:
            raise ConfigError("Missing pull request: pass --pr or set GITHUB_EVENT_PATH")
        number = read_pull_request_number(config.github.event_path)
    return GitHubClient(repository, token=config.github.token), number


def _report(outcome: DriftOutcome, *, print_comment: bool) -> None:
    if print_comment:
        print(outcome.comment)
    elif outcome.published:
        print(f"Drift report comment {outcome.published}")


if __name__ == "__main__":
    main(sys.argv[1:])
