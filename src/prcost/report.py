"""Serialization and formatting helpers for PR cost reports.

This module provides utilities for:
- Converting reports into JSON-ready dictionaries with stable field names.
- Writing the sorted report collection to ``pr_costs.json``.
- Building the human-readable per pull request cost summary.
"""

from __future__ import annotations

import json
from typing import Any, Dict, List, Sequence

from .config import CostRates
from .errors import ReportWriteError
from .models import BILLABLE_PROVIDERS, JobCostEntry, PRCostReport


def job_to_dict(job: JobCostEntry) -> Dict[str, Any]:
    """Convert a job entry; unknown durations are written as ``null``."""
    return {
        "job_url": job.job_url,
        "provider": job.provider.value,
        "duration_hours": job.duration_hours,
        "cost": job.cost,
    }


def report_to_dict(report: PRCostReport) -> Dict[str, Any]:
    """Convert a PR report to a dictionary keyed by stable snake_case names."""
    payload: Dict[str, Any] = {
        "org": report.organization,
        "repo": report.repository,
        "pr_number": report.number,
        "pr_lifespan_days": report.lifespan_days,
        "pr_retest_count": report.retest_count,
        "jobs": [job_to_dict(job) for job in report.jobs],
    }
    for provider in BILLABLE_PROVIDERS:
        payload[f"{provider.value}_total_hours"] = report.hours_for(provider)
    payload["unknown_duration_jobs"] = report.unknown_duration_jobs
    payload["total_cost"] = report.total_cost
    return payload


def write_report(reports: Sequence[PRCostReport], path: str) -> None:
    """Write ``reports`` as a JSON array to ``path``.

    Raises:
        ReportWriteError: If serialization or the file write fails.
    """
    try:
        data = json.dumps([report_to_dict(report) for report in reports], indent=2)
    except (TypeError, ValueError) as exc:
        raise ReportWriteError(f"Failed to serialize cost report: {exc}") from exc

    try:
        with open(path, "w", encoding="utf-8") as handle:
            handle.write(data)
    except OSError as exc:
        raise ReportWriteError(f"Failed to write cost report to '{path}': {exc}") from exc


def format_summary(reports: Sequence[PRCostReport], rates: CostRates) -> str:
    """Generate the human-readable cost summary, one block per pull request.

    Args:
        reports: Reports already sorted by total cost.
        rates: Hourly rates used to price per-provider hours.

    Returns:
        Formatted multi-line text summary.
    """
    lines: List[str] = ["PR Costs (sorted from most expensive to least):"]

    for report in reports:
        lines.extend(
            [
                "",
                f"  TOTAL PR COST:  ${report.total_cost:.2f}",
                f"  TOTAL CLOUD USAGE FOR PR {report.organization}/{report.repository}/{report.number}",
            ]
        )
        for provider in BILLABLE_PROVIDERS:
            hours = report.hours_for(provider)
            lines.extend(
                [
                    f"    {provider.name}",
                    f"      HOURS: {hours:.2f}",
                    f"      COSTS: ${hours * rates.rate_for(provider):.2f}",
                ]
            )
        if report.unknown_duration_jobs:
            lines.append(f"    JOBS WITH UNKNOWN DURATION: {report.unknown_duration_jobs}")
        lines.append(f"    RETESTS: {report.retest_count}")

    return "\n".join(lines)
