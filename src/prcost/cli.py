"""Command-line argument parsing for the PR cost analyzer."""

from __future__ import annotations

import argparse
from datetime import datetime, timezone
from typing import Optional, Sequence

from .config import DEFAULT_MAX_WORKERS, DEFAULT_OUTPUT_PATH

DATE_FORMAT = "%m-%d-%Y"


def _positive_int(value: str) -> int:
    """Parse and validate a positive integer CLI value.

    Raises:
        argparse.ArgumentTypeError: If value is not a positive integer.
    """
    try:
        parsed = int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError("must be an integer") from exc

    if parsed <= 0:
        raise argparse.ArgumentTypeError("must be greater than 0")

    return parsed


def _utc_date(value: str) -> datetime:
    """Parse an ``MM-DD-YYYY`` date as midnight UTC.

    Raises:
        argparse.ArgumentTypeError: If value does not match the format.
    """
    try:
        parsed = datetime.strptime(value, DATE_FORMAT)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"expected a date formatted as MM-DD-YYYY, got '{value}'") from exc

    return parsed.replace(tzinfo=timezone.utc)


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    """Parse command-line arguments for cost analysis.

    Returns:
        Parsed CLI arguments containing organization, repository, the closed
        date window and output options.
    """
    parser = argparse.ArgumentParser(
        prog="prow-pr-cost-analyzer",
        description=(
            "Estimate the cloud cost and retest count of Prow CI jobs for "
            "pull requests closed within a date window."
        ),
    )

    parser.add_argument("org", help="GitHub organization name.")
    parser.add_argument("repo", help="GitHub repository name.")
    parser.add_argument("start_date", type=_utc_date, help="First closed date to include (MM-DD-YYYY).")
    parser.add_argument("end_date", type=_utc_date, help="Last closed date to include (MM-DD-YYYY).")
    parser.add_argument(
        "--output",
        default=DEFAULT_OUTPUT_PATH,
        help=f"Path of the JSON cost report (default: {DEFAULT_OUTPUT_PATH}).",
    )
    parser.add_argument(
        "--max-workers",
        type=_positive_int,
        default=DEFAULT_MAX_WORKERS,
        help=f"Pull requests analyzed concurrently (default: {DEFAULT_MAX_WORKERS}).",
    )
    parser.add_argument(
        "--no-azure-durations",
        dest="resolve_azure_durations",
        action="store_false",
        help="Do not measure Azure job runtimes; Azure jobs are then billed at zero hours.",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable debug logging.",
    )

    return parser.parse_args(argv)
