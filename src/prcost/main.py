"""Entry point for the Prow pull-request cost analyzer."""

from __future__ import annotations

import logging
import sys
from typing import Optional, Sequence

from .cli import parse_args
from .config import load_config
from .cost_model import CostModel
from .errors import ApiError, ConfigurationError, DataValidationError, ReportWriteError
from .github_client import GitHubClient
from .pipeline import run_pipeline
from .prow_client import ProwClient
from .report import format_summary, write_report
from .worker import PRWorker

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_UNEXPECTED = 1
EXIT_CONFIGURATION = 2
EXIT_API = 4
EXIT_REPORT_WRITE = 5


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def orchestrate_cost_analysis(argv: Optional[Sequence[str]] = None) -> int:
    """Run the full analysis and return a process exit code."""
    try:
        args = parse_args(argv)
        _configure_logging(args.verbose)

        config = load_config(
            organization=args.org,
            repository=args.repo,
            start=args.start_date,
            end=args.end_date,
            output_path=args.output,
            max_workers=args.max_workers,
            resolve_azure_durations=args.resolve_azure_durations,
        )

        github = GitHubClient(config=config)
        prow = ProwClient(config=config)
        worker = PRWorker(github=github, prow=prow, cost_model=CostModel(config.rates), config=config)

        print(
            f"Pull Requests closed between {config.start:%Y-%m-%d} and {config.end:%Y-%m-%d} "
            f"in {config.organization}/{config.repository}:"
        )
        pull_requests = github.list_closed_pull_requests(
            organization=config.organization,
            repository=config.repository,
            start=config.start,
            end=config.end,
        )
        print(f"Analyzing {len(pull_requests)} pull requests...")

        reports = run_pipeline(pull_requests, worker.build_report, max_workers=config.max_workers)

        write_report(reports, config.output_path)
        print(format_summary(reports, config.rates))
        print(f"\nCost report written to {config.output_path}")
        return EXIT_OK
    except ConfigurationError as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        return EXIT_CONFIGURATION
    except (ApiError, DataValidationError) as exc:
        print(f"ERROR: Failed to get pull requests: {exc}", file=sys.stderr)
        return EXIT_API
    except ReportWriteError as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        return EXIT_REPORT_WRITE
    except Exception as exc:
        logger.exception("Unexpected failure")
        print(f"ERROR: Unexpected failure: {exc}", file=sys.stderr)
        return EXIT_UNEXPECTED


def main() -> None:
    raise SystemExit(orchestrate_cost_analysis())


if __name__ == "__main__":
    main()
