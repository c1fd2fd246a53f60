"""Command-line interface for seams."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from rules.config import ConfigError, load_config
from seams import ANALYZER_DOC, ANALYZER_NAME
from seams.analyzer import analyze_repository
from seams.report import write_diagnostics


def _add_common_paths(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "root",
        nargs="?",
        default=".",
        help="Repository root (default: .)",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog=ANALYZER_NAME, description=ANALYZER_DOC)
    subparsers = parser.add_subparsers(dest="command", required=True)

    check_parser = subparsers.add_parser(
        "check", help="Report calls that cannot be replaced by test doubles"
    )
    _add_common_paths(check_parser)
    check_parser.add_argument(
        "--format",
        choices=("text", "jsonl"),
        default=None,
        help="Output format (default: config format, else text)",
    )
    check_parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Log progress and skipped files to stderr",
    )

    return parser


def _handle_check(root: Path, output_format: str | None) -> int:
    try:
        config = load_config(root)
    except ConfigError as exc:
        sys.stderr.write(f"error: {exc}\n")
        return 2

    result = analyze_repository(root, config)
    for path in result.failed_files:
        sys.stderr.write(f"skipped: {path}\n")

    write_diagnostics(result.diagnostics, sys.stdout, output_format or config.format)
    return 1 if result.diagnostics else 0


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    root = Path(args.root).expanduser().resolve()

    if args.command == "check":
        return _handle_check(root, args.format)

    raise AssertionError


if __name__ == "__main__":
    raise SystemExit(main())
