"""Provider classification and cost calculations for Prow job runs."""

from __future__ import annotations

import math
from typing import Mapping, Optional

from .config import CostRates
from .models import BILLABLE_PROVIDERS, CloudProvider

SECONDS_PER_HOUR = 3600


def classify(job_link: str) -> CloudProvider:
    """Classify a job link by the first provider tag it contains.

    Tags are checked case-sensitively in the order aws, gcp, vsphere, azure.
    """
    for provider in BILLABLE_PROVIDERS:
        if provider.value in job_link:
            return provider
    return CloudProvider.UNCLASSIFIED


def billable_hours(
    start_timestamp: float, finish_timestamp: float, overhead_hours: float = 0.5
) -> Optional[float]:
    """Convert a job's start/finish epoch seconds into billable hours.

    The provisioning overhead is subtracted, the result floored at zero and
    rounded half-up to one decimal place. Returns ``None`` when the timestamps
    do not yield a finite duration.
    """
    hours = (finish_timestamp - start_timestamp) / SECONDS_PER_HOUR - overhead_hours
    if not math.isfinite(hours):
        return None
    if hours < 0.0:
        hours = 0.0
    return math.floor(hours * 10 + 0.5) / 10


class CostModel:
    """Maps provider hours to dollars using a fixed rate table."""

    def __init__(self, rates: CostRates) -> None:
        self._rates = rates

    @property
    def rates(self) -> CostRates:
        return self._rates

    def cost(self, provider: CloudProvider, hours: Optional[float]) -> float:
        """Return the cost of ``hours`` on ``provider``; unknown durations cost nothing."""
        if hours is None or hours < 0:
            return 0.0
        return hours * self._rates.rate_for(provider)

    def total_cost(self, provider_hours: Mapping[CloudProvider, float]) -> float:
        return sum(self.cost(provider, hours) for provider, hours in provider_hours.items())
