"""Entry point for ``python -m itmd``.

Processes one itinerary markdown file and prints the result as JSON on
stdout.  Uses stdlib :mod:`argparse` for argument parsing.

Exit codes:
    0 -- The document was processed (including zero events).
    1 -- An error occurred (file not found, unreadable, config error).
    2 -- Argument parsing error (handled by argparse).
"""

from __future__ import annotations

import argparse
import json
import sys
from dataclasses import replace

from itmd.config import ConfigError, load_settings
from itmd.extract import summarize_events
from itmd.log import setup_logging
from itmd.pipeline.run import load_markdown_file, process_markdown
from itmd.timezones import normalize_timezone


def build_parser() -> argparse.ArgumentParser:
    """Build and return the CLI argument parser."""
    parser = argparse.ArgumentParser(
        prog="itmd",
        description="Convert an itinerary markdown file into structured events.",
    )
    parser.add_argument(
        "markdown_file",
        type=str,
        help="Path to the itinerary markdown file.",
    )
    parser.add_argument(
        "--timezone",
        type=str,
        default=None,
        help="Default timezone (overrides ITMD_DEFAULT_TIMEZONE).",
    )
    parser.add_argument(
        "--currency",
        type=str,
        default=None,
        help="Default currency code (overrides ITMD_DEFAULT_CURRENCY).",
    )
    parser.add_argument(
        "--events-only",
        action="store_true",
        default=False,
        help="Print event summaries instead of the full document tree.",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        default=False,
        help="Enable debug-level logging.",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    """Run the itmd CLI.

    Args:
        argv: Command-line arguments.  Defaults to ``sys.argv[1:]``
            when ``None`` (the normal case).

    Returns:
        Exit code: ``0`` on success, ``1`` on error.
    """
    parser = build_parser()
    args = parser.parse_args(argv if argv is not None else sys.argv[1:])

    # --- Configuration ------------------------------------------------
    try:
        settings = load_settings()
    except ConfigError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    setup_logging("DEBUG" if args.verbose else settings.log_level)

    policy = settings.to_policy()
    if args.timezone:
        timezone = normalize_timezone(args.timezone)
        if timezone is None:
            print(f"Error: Unknown timezone: {args.timezone}", file=sys.stderr)
            return 1
        policy = replace(policy, default_timezone=timezone)
    if args.currency:
        policy = replace(policy, default_currency=args.currency.upper())

    # --- Process ------------------------------------------------------
    try:
        text = load_markdown_file(args.markdown_file)
    except (FileNotFoundError, PermissionError, UnicodeDecodeError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    document = process_markdown(text, policy)

    # --- Output -------------------------------------------------------
    if args.events_only:
        payload = [summary.model_dump() for summary in summarize_events(document.root)]
        print(json.dumps(payload, indent=2, ensure_ascii=False))
    else:
        print(document.root.model_dump_json(indent=2, by_alias=True))

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
