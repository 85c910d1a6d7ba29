"""Bounded-concurrency fan-out of per pull request cost analysis."""

from __future__ import annotations

import logging
from concurrent.futures import Future, ThreadPoolExecutor, as_completed
from typing import Callable, Dict, List, Sequence

from .config import DEFAULT_MAX_WORKERS
from .models import PRCostReport, PullRequestRef
from .worker import empty_report

logger = logging.getLogger(__name__)


def sort_reports(reports: Sequence[PRCostReport]) -> List[PRCostReport]:
    """Order reports by total cost, most expensive first."""
    return sorted(reports, key=lambda report: report.total_cost, reverse=True)


def run_pipeline(
    pull_requests: Sequence[PullRequestRef],
    build_report: Callable[[PullRequestRef], PRCostReport],
    max_workers: int = DEFAULT_MAX_WORKERS,
) -> List[PRCostReport]:
    """Build one report per pull request with at most ``max_workers`` in flight.

    Pull requests are admitted in listing order. Completed reports are
    collected by the calling thread only; the returned list holds exactly one
    report per input pull request, sorted by total cost descending.
    """
    if max_workers <= 0:
        raise ValueError("max_workers must be greater than 0")

    collected: List[PRCostReport] = []
    if not pull_requests:
        return collected

    with ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="pr-worker") as executor:
        futures: Dict[Future, PullRequestRef] = {
            executor.submit(build_report, pr): pr for pr in pull_requests
        }

        for future in as_completed(futures):
            pr = futures[future]
            try:
                report = future.result()
            except Exception:
                logger.exception(
                    "Pull request analysis failed; recording empty report",
                    extra={"pr": f"{pr.organization}/{pr.repository}#{pr.number}"},
                )
                report = empty_report(pr)
            collected.append(report)
            logger.debug(
                "Collected pull request report",
                extra={"completed": len(collected), "total": len(futures)},
            )

    return sort_reports(collected)
