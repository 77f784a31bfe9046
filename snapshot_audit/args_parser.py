"""
Argument parsing for the snapshot_audit CLI.

Handles command-line argument definition, parsing, and validation.
"""

from __future__ import annotations

import argparse
import sys
from datetime import date, datetime
from pathlib import Path
from typing import NoReturn

from botocore.exceptions import InvalidRegionError
from botocore.utils import validate_region_name

from .config import DATE_FORMAT

EPILOG = """\
Examples:
  snapshot-audit -s 2025-01-01 -r ap-southeast-2
  snapshot-audit -s 2025-01-01 -e 2025-06-01 -r us-east-1
"""


class HelpOnErrorParser(argparse.ArgumentParser):
    """ArgumentParser that prints the full help on any usage error."""

    def error(self, message: str) -> NoReturn:
        sys.stderr.write(f"ERROR: {message}\n\n")
        self.print_help(sys.stderr)
        sys.exit(2)


def parse_date(value: str) -> date:
    """Parse a YYYY-MM-DD date for argparse."""
    try:
        return datetime.strptime(value, DATE_FORMAT).date()
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"Invalid date {value!r} (expected YYYY-MM-DD)") from exc


def build_parser() -> argparse.ArgumentParser:
    parser = HelpOnErrorParser(
        prog="snapshot-audit",
        description=(
            "AWS Snapshot Audit - Track CreateSnapshot/DeleteSnapshot events from CloudTrail "
            "and report snapshots that were created but never deleted."
        ),
        epilog=EPILOG,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    required = parser.add_argument_group("required")
    required.add_argument(
        "-s",
        "--start",
        type=parse_date,
        required=True,
        metavar="DATE",
        help="Start date (YYYY-MM-DD).",
    )
    required.add_argument("-r", "--region", required=True, help="AWS region.")

    parser.add_argument(
        "-e", "--end", type=parse_date, metavar="DATE", help="End date (YYYY-MM-DD, default: now)."
    )
    parser.add_argument(
        "--cache-dir",
        type=Path,
        help="Directory for cached API responses and reports (default: ./snapshot_audit_cache).",
    )
    parser.add_argument(
        "--refresh-cache",
        action="store_true",
        help="Ignore existing cache entries and refetch everything.",
    )
    parser.add_argument(
        "--env-file",
        help="Path to a .env file with AWS credentials (default: $AWS_ENV_FILE or ~/.env).",
    )
    parser.add_argument("--verbose", action="store_true", help="Enable verbose logging.")
    return parser


def _validate_args(args: argparse.Namespace, parser: argparse.ArgumentParser) -> None:
    if not args.region.strip():
        parser.error("Region is required (-r)")
    try:
        validate_region_name(args.region)
    except InvalidRegionError:
        parser.error(f"Invalid region {args.region!r}")
    if args.end is not None and args.end < args.start:
        parser.error("End date must not be before start date")


def parse_args(argv: list[str]) -> argparse.Namespace:
    """Parse and validate command-line arguments for snapshot_audit."""
    parser = build_parser()
    args = parser.parse_args(argv)
    _validate_args(args, parser)
    return args
