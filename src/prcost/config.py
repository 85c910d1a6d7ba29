"""Configuration parsing and validation for the PR cost analyzer."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional, Tuple

from .errors import ConfigurationError
from .models import CloudProvider

DEFAULT_OUTPUT_PATH = "pr_costs.json"
DEFAULT_MAX_WORKERS = 10
DEFAULT_RETEST_TRIGGERS = ("/retest", "/retest-required")


@dataclass(frozen=True)
class CostRates:
    """Hourly cost rates per cloud provider, in dollars."""

    aws: float = 0.90
    gcp: float = 1.70
    vsphere: float = 4.10
    azure: float = 2.30

    def rate_for(self, provider: CloudProvider) -> float:
        """Return the hourly rate for ``provider``; unclassified jobs are free."""
        rates = {
            CloudProvider.AWS: self.aws,
            CloudProvider.GCP: self.gcp,
            CloudProvider.VSPHERE: self.vsphere,
            CloudProvider.AZURE: self.azure,
        }
        return rates.get(provider, 0.0)


@dataclass(frozen=True)
class Config:
    """Validated runtime settings used by the cost analyzer."""

    organization: str
    repository: str
    start: datetime
    end: datetime
    output_path: str = DEFAULT_OUTPUT_PATH
    max_workers: int = DEFAULT_MAX_WORKERS
    provisioning_overhead_hours: float = 0.5
    retest_triggers: Tuple[str, ...] = DEFAULT_RETEST_TRIGGERS
    rates: CostRates = field(default_factory=CostRates)
    resolve_azure_durations: bool = True
    github_token: Optional[str] = None
    timeout_seconds: int = 30
    github_api_url: str = "https://api.github.com"
    prow_url: str = "https://prow.ci.openshift.org"
    gcsweb_url: str = "https://gcsweb-ci.apps.ci.l2s4.p1.openshiftapps.com"


def load_config(
    organization: str,
    repository: str,
    start: datetime,
    end: datetime,
    output_path: str = DEFAULT_OUTPUT_PATH,
    max_workers: int = DEFAULT_MAX_WORKERS,
    resolve_azure_durations: bool = True,
) -> Config:
    """Build and validate application configuration.

    Args:
        organization: GitHub organization owning the repository.
        repository: GitHub repository name.
        start: Inclusive start of the closed-date window (UTC).
        end: Inclusive end of the closed-date window (UTC).
        output_path: Destination of the JSON cost report.
        max_workers: Number of pull requests analyzed concurrently.
        resolve_azure_durations: Whether Azure jobs have their runtime measured.

    Returns:
        A validated ``Config`` instance.

    Raises:
        ConfigurationError: If the window is inverted, ``max_workers`` is not
            positive, or any identifier is blank.
    """
    if not organization.strip() or not repository.strip():
        raise ConfigurationError("Organization and repository must be non-empty.")

    if start > end:
        raise ConfigurationError(
            f"Invalid date window: start {start:%m-%d-%Y} is after end {end:%m-%d-%Y}."
        )

    if max_workers <= 0:
        raise ConfigurationError("Invalid value for 'max_workers': expected an integer greater than 0.")

    if not output_path.strip():
        raise ConfigurationError("Invalid value for 'output_path': expected a non-empty path.")

    token: str = os.getenv("GITHUB_TOKEN", "").strip()

    return Config(
        organization=organization.strip(),
        repository=repository.strip(),
        start=start,
        end=end,
        output_path=output_path,
        max_workers=max_workers,
        resolve_azure_durations=resolve_azure_durations,
        github_token=token or None,
    )
