# Blacken
# Copyright (C) 2025 Phoenix Link (Pty) Ltd. All Rights Reserved.
#
# This file is part of Blacken.
#
# Blacken is dual-licensed:
#
# 1. Open Source: GNU Affero General Public License v3.0 (AGPL-3.0)
# 2. Commercial: Available from Phoenix Link (Pty) Ltd
#
# Contributions require a signed CLA. See COPYRIGHT.md and CLA.md.
"""
Blacken CLI -- Main entry point.

Usage:
    blacken app.py lib.py            # Format files in place
    blacken --region 10:80 app.py    # Format part of a file
    blacken --check app.py           # Report, don't write
    blacken - < app.py               # Filter stdin to stdout
    blacken doctor                   # System diagnostics
    blacken serve --port 8765        # HTTP API
    blacken --version                # Version info
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from blacken import __version__
from blacken.core.config import FormatterSettings, load_formatter_settings
from blacken.core.editing import (
    DiagnosticsView,
    OutcomeStatus,
    ReplacementOutcome,
    TextBuffer,
    format_buffer,
    format_region,
)
from blacken.core.logging import get_logger

logger = logging.getLogger("blacken.cli.app")

DEFAULT_PORT = 8765


def _parse_region(value: str) -> tuple[int, int]:
    start, sep, end = value.partition(":")
    if not sep:
        raise argparse.ArgumentTypeError("region must be START:END")
    try:
        region = int(start), int(end)
    except ValueError:
        raise argparse.ArgumentTypeError("region offsets must be integers") from None
    if region[0] < 0 or region[1] < region[0]:
        raise argparse.ArgumentTypeError("region must satisfy 0 <= START <= END")
    return region


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="blacken",
        description="Pipe files through an external formatter and apply the result.",
    )
    parser.add_argument("files", nargs="+", help="Files to format; '-' filters stdin to stdout")
    parser.add_argument("--executable", default=None, help="Formatter executable (default: black)")
    parser.add_argument("-l", "--line-length", type=int, default=None, help="Line length passed to the formatter")
    parser.add_argument(
        "-S",
        "--skip-string-normalization",
        action="store_true",
        default=None,
        help="Pass --skip-string-normalization",
    )
    parser.add_argument("--fast", action="store_true", default=None, help="Pass --fast")
    parser.add_argument(
        "-t",
        "--target-version",
        action="append",
        default=None,
        dest="target_versions",
        help="Pass --target-version (repeatable)",
    )
    parser.add_argument("--region", type=_parse_region, default=None, help="Only format START:END (single file)")
    parser.add_argument("--check", action="store_true", help="Don't write files; exit 1 if any would change")
    parser.add_argument("--display", action="store_true", help="Print full formatter diagnostics on failure")
    parser.add_argument("--settings", type=Path, default=None, help="Settings file (default: ~/.blacken/settings.json)")
    parser.add_argument("-v", "--verbose", action="store_true", help="Mirror debug logs to stderr")
    return parser


def resolve_settings(args: argparse.Namespace) -> FormatterSettings:
    """Settings file and environment first, command-line flags on top."""
    settings = load_formatter_settings(args.settings)
    if args.executable:
        settings.executable = args.executable
    if args.line_length is not None:
        settings.line_length = args.line_length
    if args.skip_string_normalization:
        settings.skip_string_normalization = True
    if args.fast:
        settings.fast = True
    if args.target_versions:
        settings.target_versions = list(args.target_versions)
    return settings


def _format_one(
    buffer: TextBuffer,
    settings: FormatterSettings,
    region: tuple[int, int] | None,
    display: bool,
) -> ReplacementOutcome:
    diagnostics = DiagnosticsView()
    if region is not None:
        start, end = region
        outcome = format_region(
            buffer, start, min(end, len(buffer)), settings, display_errors=display, diagnostics=diagnostics
        )
    else:
        outcome = format_buffer(buffer, settings, display_errors=display, diagnostics=diagnostics)
    if diagnostics.visible:
        sys.stderr.write(diagnostics.text if diagnostics.text.endswith("\n") else diagnostics.text + "\n")
    return outcome


def run_format(args: argparse.Namespace) -> int:
    """Format every file named on the command line; return the exit code."""
    settings = resolve_settings(args)
    log = get_logger(verbose=args.verbose)

    if args.region is not None and len(args.files) > 1:
        print("blacken: --region needs exactly one file", file=sys.stderr)
        return 2

    log.info("CLI", "Formatting files", count=len(args.files), executable=settings.executable)
    exit_code = 0
    for name in args.files:
        try:
            if name == "-":
                buffer = TextBuffer(sys.stdin.buffer.read().decode("utf-8"))
            else:
                buffer = TextBuffer.from_file(name)
        except (OSError, UnicodeDecodeError) as exc:
            print(f"{name}: cannot read: {exc}", file=sys.stderr)
            exit_code = 1
            continue
        if args.region is not None and args.region[0] > len(buffer):
            print(f"{name}: region starts past end of file", file=sys.stderr)
            exit_code = 1
            continue

        outcome = _format_one(buffer, settings, args.region, args.display)
        result = outcome.result
        log.format_run(
            name,
            status=outcome.status.value,
            exit_status=result.exit_status if result else None,
            duration=result.duration_seconds if result else 0.0,
        )

        if outcome.status is OutcomeStatus.FAILED:
            exit_code = 1
        elif outcome.status is OutcomeStatus.REPLACED and args.check:
            exit_code = 1

        if name == "-":
            if outcome.ok:
                sys.stdout.write(buffer.text())
            continue

        if outcome.status is OutcomeStatus.REPLACED and not args.check:
            buffer.save()
        message = "would reformat" if args.check and outcome.status is OutcomeStatus.REPLACED else outcome.message
        print(f"{name}: {message}", file=sys.stderr)

    return exit_code


def run_serve(argv: list[str]) -> int:
    parser = argparse.ArgumentParser(prog="blacken serve", description="Run the blacken HTTP API.")
    parser.add_argument("--host", default="127.0.0.1")
    parser.add_argument("--port", type=int, default=DEFAULT_PORT)
    args = parser.parse_args(argv)

    import uvicorn

    from blacken.api.server import app

    get_logger().info("Server", "Starting API", host=args.host, port=args.port)
    uvicorn.run(app, host=args.host, port=args.port, log_level="info")
    return 0


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    argv = list(sys.argv[1:] if argv is None else argv)

    if argv and argv[0] == "--version":
        print(f"blacken {__version__}")
        return 0

    if argv and argv[0] == "doctor":
        from blacken.cli.doctor import run_doctor

        report = run_doctor(settings_path=Path(argv[1]) if len(argv) > 1 else None)
        return 0 if report.healthy else 1

    if argv and argv[0] == "serve":
        return run_serve(argv[1:])

    args = build_parser().parse_args(argv)
    return run_format(args)


if __name__ == "__main__":
    sys.exit(main())
