"""Per pull request cost analysis.

For one pull request this module:
- discovers the Prow job runs from its history page,
- classifies each run by cloud provider and measures its billable hours,
- counts ``/retest`` style commands in its comments,
- assembles the resulting :class:`PRCostReport`.

External failures degrade the report instead of aborting it.
"""

from __future__ import annotations

import logging
from typing import Dict, List

from .config import Config
from .cost_model import CostModel, classify
from .errors import ApiError
from .github_client import GitHubClient
from .models import BILLABLE_PROVIDERS, CloudProvider, JobCostEntry, PRCostReport, PullRequestRef
from .prow_client import ProwClient, split_job_link
from .retest import count_pr_retests

logger = logging.getLogger(__name__)


def empty_report(pr: PullRequestRef) -> PRCostReport:
    """Return a zero-cost report for a pull request whose analysis failed outright."""
    return PRCostReport(
        organization=pr.organization,
        repository=pr.repository,
        number=pr.number,
        lifespan_days=pr.lifespan_days,
        retest_count=0,
        jobs=[],
        provider_hours={provider: 0.0 for provider in BILLABLE_PROVIDERS},
        total_cost=0.0,
    )


class PRWorker:
    """Builds the cost report for a single pull request."""

    def __init__(
        self,
        github: GitHubClient,
        prow: ProwClient,
        cost_model: CostModel,
        config: Config,
    ) -> None:
        self._github = github
        self._prow = prow
        self._cost_model = cost_model
        self._config = config

    def _is_duration_eligible(self, provider: CloudProvider) -> bool:
        if provider is CloudProvider.UNCLASSIFIED:
            return False
        if provider is CloudProvider.AZURE:
            return self._config.resolve_azure_durations
        return True

    def _discover_job_links(self, pr: PullRequestRef) -> List[str]:
        try:
            return self._prow.discover_job_links(pr.organization, pr.repository, pr.number)
        except ApiError as exc:
            logger.warning(
                "Job discovery failed; reporting pull request without jobs",
                extra={"pr": f"{pr.organization}/{pr.repository}#{pr.number}", "error": str(exc)},
            )
            return []

    def _count_retests(self, pr: PullRequestRef) -> int:
        try:
            comments = self._github.list_issue_comments(pr.organization, pr.repository, pr.number)
        except ApiError as exc:
            logger.warning(
                "Comment fetch failed; reporting zero retests",
                extra={"pr": f"{pr.organization}/{pr.repository}#{pr.number}", "error": str(exc)},
            )
            return 0
        return count_pr_retests(comments, self._config.retest_triggers)

    def cost_job(self, pr: PullRequestRef, job_link: str) -> JobCostEntry:
        """Classify one job run and price its billable hours."""
        provider = classify(job_link)

        if provider is CloudProvider.UNCLASSIFIED:
            logger.info("Unknown job type, cannot calculate costs", extra={"job_url": job_link})
            return JobCostEntry(job_url=job_link, provider=provider, duration_hours=0.0, cost=0.0)

        if not self._is_duration_eligible(provider):
            return JobCostEntry(job_url=job_link, provider=provider, duration_hours=0.0, cost=0.0)

        job_name, run_id = split_job_link(job_link)
        hours = self._prow.resolve_job_duration(pr.organization, pr.repository, pr.number, job_name, run_id)
        if hours is None:
            logger.warning("Job duration unavailable", extra={"job_url": job_link})

        return JobCostEntry(
            job_url=job_link,
            provider=provider,
            duration_hours=hours,
            cost=self._cost_model.cost(provider, hours),
        )

    def build_report(self, pr: PullRequestRef) -> PRCostReport:
        """Run job discovery, costing and retest counting for ``pr``."""
        jobs = [self.cost_job(pr, link) for link in self._discover_job_links(pr)]

        provider_hours: Dict[CloudProvider, float] = {provider: 0.0 for provider in BILLABLE_PROVIDERS}
        for job in jobs:
            if job.provider in provider_hours and job.duration_hours is not None:
                provider_hours[job.provider] += job.duration_hours

        report = PRCostReport(
            organization=pr.organization,
            repository=pr.repository,
            number=pr.number,
            lifespan_days=pr.lifespan_days,
            retest_count=self._count_retests(pr),
            jobs=jobs,
            provider_hours=provider_hours,
            total_cost=self._cost_model.total_cost(provider_hours),
        )

        logger.info(
            "Computed pull request cost",
            extra={
                "pr": report.identity,
                "jobs": len(jobs),
                "unknown_durations": report.unknown_duration_jobs,
                "retests": report.retest_count,
                "total_cost": round(report.total_cost, 2),
            },
        )
        return report
