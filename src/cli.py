"""Command-line interface for sdkref-core."""

from __future__ import annotations

import argparse
import logging
import os
import sys
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from index.sdk_index import IndexBuildError
from pipeline import run_check
from rules.config import CheckerConfig, ConfigError, load_config
from verify.verify import verify_determinism

SDK_DIR_ENV = "SDK_DIR"


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="sdkref",
        description="Check documentation code snippets against SDK sources.",
    )
    parser.add_argument(
        "--docs-dir",
        default=".",
        help="Documentation root (default: .)",
    )
    parser.add_argument(
        "--sdk-dir",
        default=None,
        help=f"SDK source root (default: ${SDK_DIR_ENV})",
    )
    parser.add_argument(
        "--fail-threshold",
        type=float,
        default=None,
        metavar="PERCENT",
        help="Coverage percent below which the check fails (default: config or 100)",
    )
    parser.add_argument(
        "--format",
        dest="output_format",
        choices=("text", "json"),
        default="text",
        help="Report format (default: text)",
    )
    parser.add_argument(
        "--group-by",
        choices=("document", "kind"),
        default="document",
        help="Group report summaries per document or per symbol kind",
    )
    parser.add_argument(
        "--language",
        dest="languages",
        nargs="+",
        default=None,
        metavar="TAG",
        help="Fence language tags to scan (default: config languages)",
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Config file (default: <docs-dir>/sdkref.toml when present)",
    )
    parser.add_argument(
        "--output",
        default=None,
        help="Write the report to this file instead of stdout",
    )
    parser.add_argument(
        "--jobs",
        type=int,
        default=None,
        metavar="N",
        help="Worker threads for parsing",
    )
    parser.add_argument(
        "--exclude-ambiguous",
        action="store_true",
        default=None,
        help="Leave ambiguous matches out of the coverage denominator",
    )
    parser.add_argument(
        "--undocumented",
        action="store_true",
        default=None,
        help="List public SDK symbols that no document references",
    )
    parser.add_argument(
        "--verify-determinism",
        action="store_true",
        help="Run the check twice and fail if the reports differ",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Log debug output to stderr",
    )
    return parser


def _apply_overrides(config: CheckerConfig, args: argparse.Namespace) -> CheckerConfig:
    overrides: dict[str, Any] = {}
    if args.fail_threshold is not None:
        overrides["fail_threshold"] = args.fail_threshold
    if args.languages is not None:
        overrides["languages"] = args.languages
    if args.jobs is not None:
        overrides["jobs"] = args.jobs
    if args.exclude_ambiguous:
        overrides["exclude_ambiguous"] = True
    if args.undocumented:
        overrides["report_undocumented"] = True
    if not overrides:
        return config
    return CheckerConfig.model_validate({**config.model_dump(), **overrides})


def _resolve_sdk_dir(sdk_dir: str | None) -> Path | None:
    value = sdk_dir or os.environ.get(SDK_DIR_ENV)
    if not value:
        return None
    return Path(value).expanduser().resolve()


def _emit(rendered: str, output: str | None) -> None:
    if output is None:
        sys.stdout.write(rendered)
        return
    Path(output).expanduser().write_text(rendered, encoding="utf-8")


def _error(message: object) -> int:
    sys.stderr.write(f"error: {message}\n")
    return 2


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            stream=sys.stderr,
            format="%(levelname)s %(name)s: %(message)s",
        )

    docs_dir = Path(args.docs_dir).expanduser().resolve()
    sdk_dir = _resolve_sdk_dir(args.sdk_dir)
    if sdk_dir is None:
        return _error(f"no SDK directory given (use --sdk-dir or set ${SDK_DIR_ENV})")

    config_path = Path(args.config).expanduser() if args.config else None
    try:
        config = _apply_overrides(load_config(docs_dir, config_path), args)
    except ConfigError as exc:
        return _error(exc)
    except ValidationError as exc:
        return _error(f"invalid option: {exc}")

    try:
        if args.verify_determinism:
            result = verify_determinism(
                docs_dir,
                sdk_dir,
                config,
                args.output_format,
                group_by=args.group_by,
            )
            if not result.ok:
                sys.stderr.write(
                    "error: report differs between runs "
                    f"(first difference at byte {result.first_difference})\n"
                )
                return 1
            outcome = result.first
        else:
            outcome = run_check(
                docs_dir,
                sdk_dir,
                config,
                group_by=args.group_by,
                output_format=args.output_format,
            )
    except IndexBuildError as exc:
        return _error(exc)
    except FileNotFoundError as exc:
        return _error(exc)

    try:
        _emit(outcome.rendered, args.output)
    except OSError as exc:
        return _error(f"cannot write report: {exc}")
    return outcome.report.status.exit_code


if __name__ == "__main__":
    raise SystemExit(main())
