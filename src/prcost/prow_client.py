"""Prow dashboard and GCS artifact client for job discovery and timing."""

from __future__ import annotations

import logging
import math
import re
from typing import Any, Dict, List, Optional, Tuple
from urllib.parse import urlencode, urlparse

from .config import Config
from .cost_model import billable_hours
from .errors import ApiError
from .transport import HttpTransport

logger = logging.getLogger(__name__)

LOG_BUCKET_PATH = "origin-ci-test/pr-logs/pull"

# /view/gs/<bucket>/pr-logs/pull/<org>_<repo>/<pr>/<job-name>/<run-id>
JOB_LINK_PATTERN = re.compile(
    r"/view/gs/" + re.escape(LOG_BUCKET_PATH) + r"/[^/\s\"'<>]+/\d+/[^/\s\"'<>]+/\d+"
)


def split_job_link(job_link: str) -> Tuple[str, str]:
    """Return ``(job_name, run_id)`` from the last two path segments of a job link."""
    segments = [segment for segment in urlparse(job_link).path.split("/") if segment]
    if len(segments) < 2:
        raise ValueError(f"Job link has no job name and run id: {job_link}")
    return segments[-2], segments[-1]


def _read_timestamp(artifact: Optional[Dict[str, Any]]) -> Optional[float]:
    if artifact is None:
        return None
    value = artifact.get("timestamp")
    # bool is an int subclass but never a valid epoch
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    try:
        timestamp = float(value)
    except OverflowError:
        return None
    if not math.isfinite(timestamp):
        return None
    return timestamp


class ProwClient:
    """Client for the Prow PR history page and the job timing artifacts."""

    def __init__(self, config: Config, transport: Optional[HttpTransport] = None) -> None:
        self._config = config
        self._prow_url = config.prow_url.rstrip("/")
        self._gcsweb_url = config.gcsweb_url.rstrip("/")
        self._transport = transport or HttpTransport(config.timeout_seconds)

    def pr_history_url(self, organization: str, repository: str, number: int) -> str:
        query = urlencode({"org": organization, "repo": repository, "pr": number})
        return f"{self._prow_url}/pr-history/?{query}"

    def artifact_url(
        self,
        organization: str,
        repository: str,
        number: int,
        job_name: str,
        run_id: str,
        artifact: str,
    ) -> str:
        return (
            f"{self._gcsweb_url}/gcs/{LOG_BUCKET_PATH}/{organization}_{repository}/"
            f"{number}/{job_name}/{run_id}/{artifact}"
        )

    def discover_job_links(self, organization: str, repository: str, number: int) -> List[str]:
        """Extract every job run link from the pull request's Prow history page.

        Raises:
            ApiError: If the page cannot be fetched or read.
        """
        url = self.pr_history_url(organization, repository, number)
        response = self._transport.get(url)
        try:
            body = response.text
        except (UnicodeDecodeError, LookupError) as exc:
            raise ApiError(f"Unreadable Prow history page: GET {url}") from exc

        links = [self._prow_url + match.group(0) for match in JOB_LINK_PATTERN.finditer(body)]
        logger.debug(
            "Discovered job links",
            extra={"pr": f"{organization}/{repository}#{number}", "jobs": len(links)},
        )
        return links

    def resolve_job_duration(
        self,
        organization: str,
        repository: str,
        number: int,
        job_name: str,
        run_id: str,
    ) -> Optional[float]:
        """Return the billable hours for a job run, or ``None`` if unknown.

        Jobs that failed or were aborted may lack ``started.json`` or
        ``finished.json``; any missing or malformed artifact yields ``None``.
        """
        started = self._transport.fetch_optional_json(
            self.artifact_url(organization, repository, number, job_name, run_id, "started.json")
        )
        start_timestamp = _read_timestamp(started)
        if start_timestamp is None:
            return None

        finished = self._transport.fetch_optional_json(
            self.artifact_url(organization, repository, number, job_name, run_id, "finished.json")
        )
        finish_timestamp = _read_timestamp(finished)
        if finish_timestamp is None:
            return None

        return billable_hours(start_timestamp, finish_timestamp, self._config.provisioning_overhead_hours)
