"""Domain models for PR cost analysis.

These dataclasses model only the subset of GitHub and Prow payload fields that
are required to attribute cloud cost to a pull request.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional


class CloudProvider(str, Enum):
    """Cloud backend a CI job executed on."""

    AWS = "aws"
    GCP = "gcp"
    VSPHERE = "vsphere"
    AZURE = "azure"
    UNCLASSIFIED = "unclassified"


BILLABLE_PROVIDERS = (
    CloudProvider.AWS,
    CloudProvider.GCP,
    CloudProvider.VSPHERE,
    CloudProvider.AZURE,
)


@dataclass(frozen=True, slots=True)
class PullRequestRef:
    """Identifies one closed pull request returned by the search API."""

    organization: str
    repository: str
    number: int
    created_at: datetime
    closed_at: datetime
    title: str = ""

    @property
    def lifespan_days(self) -> float:
        return (self.closed_at - self.created_at).total_seconds() / 86400


@dataclass(frozen=True, slots=True)
class Comment:
    """Represents the minimal issue comment data used for retest counting."""

    body: str


@dataclass(frozen=True, slots=True)
class JobCostEntry:
    """Cost attributed to a single Prow job run.

    ``duration_hours`` is ``None`` when the job's timing artifacts could not be
    read; such entries contribute no hours and no cost.
    """

    job_url: str
    provider: CloudProvider
    duration_hours: Optional[float]
    cost: float

    @property
    def duration_known(self) -> bool:
        return self.duration_hours is not None


@dataclass(frozen=True, slots=True)
class PRCostReport:
    """Aggregated cloud cost for one pull request."""

    organization: str
    repository: str
    number: int
    lifespan_days: float
    retest_count: int
    jobs: List[JobCostEntry] = field(default_factory=list)
    provider_hours: Dict[CloudProvider, float] = field(default_factory=dict)
    total_cost: float = 0.0

    @property
    def identity(self) -> str:
        return f"{self.organization}/{self.repository}#{self.number}"

    def hours_for(self, provider: CloudProvider) -> float:
        return self.provider_hours.get(provider, 0.0)

    @property
    def unknown_duration_jobs(self) -> int:
        return sum(1 for job in self.jobs if not job.duration_known)
