"""GitHub REST API client for closed pull request and comment retrieval."""

from __future__ import annotations

import calendar
import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Iterator, List, Optional, Tuple

from .config import Config
from .errors import ApiError, DataValidationError
from .models import Comment, PullRequestRef
from .transport import HttpTransport

logger = logging.getLogger(__name__)

MAX_PR_AGE_MONTHS = 6


def subtract_months(value: datetime, months: int) -> datetime:
    """Move ``value`` back by calendar months.

    A day that does not exist in the target month overflows into the next
    month, so August 31st minus six months is March 3rd (or 2nd in leap years).
    """
    month_index = value.year * 12 + (value.month - 1) - months
    year, month = divmod(month_index, 12)
    month += 1
    days_in_month = calendar.monthrange(year, month)[1]
    if value.day <= days_in_month:
        return value.replace(year=year, month=month)
    return value.replace(year=year, month=month, day=1) + timedelta(days=value.day - 1)


def filter_by_creation_date(pull_requests: List[PullRequestRef], start: datetime) -> List[PullRequestRef]:
    """Keep pull requests created strictly after ``start`` minus six months."""
    cutoff = subtract_months(start, MAX_PR_AGE_MONTHS)
    return [pr for pr in pull_requests if pr.created_at > cutoff]


def parse_pull_request_url(html_url: str) -> Tuple[str, str, int]:
    """Split ``https://github.com/ORG/REPO/pull/NUM`` into its parts.

    Raises:
        DataValidationError: If the URL does not identify a pull request.
    """
    path = html_url.split("://", 1)[-1]
    segments = path.split("/")
    # host, org, repo, "pull", number
    if len(segments) < 5 or not segments[4].isdigit():
        raise DataValidationError(f"Not a pull request URL: {html_url}")
    return segments[1], segments[2], int(segments[4])


class GitHubClient:
    """Small, typed client for the GitHub search and issue comment APIs."""

    _PAGE_SIZE = 100

    def __init__(self, config: Config, transport: Optional[HttpTransport] = None) -> None:
        """Initialize a GitHub API client.

        Args:
            config: Validated runtime configuration.
            transport: Optional pre-built transport, mainly for tests.
        """
        self._config = config
        self._base_url = config.github_api_url.rstrip("/")
        headers = {"Accept": "application/vnd.github.v3+json"}
        if config.github_token:
            headers["Authorization"] = f"Bearer {config.github_token}"
        self._transport = transport or HttpTransport(config.timeout_seconds, headers=headers)

    def _parse_datetime(self, value: Optional[str]) -> Optional[datetime]:
        """Parse GitHub ISO8601 timestamps into timezone-aware datetimes."""
        if not value:
            return None

        normalized = value[:-1] + "+00:00" if value.endswith("Z") else value
        parsed = datetime.fromisoformat(normalized)
        if parsed.tzinfo is None:
            return parsed.replace(tzinfo=timezone.utc)
        return parsed

    def _paginate(self, url: str, params: Optional[Dict[str, Any]], expected_type: type) -> Iterator[Any]:
        """Yield decoded pages, following the ``Link`` header ``next`` relation."""
        next_url: Optional[str] = url
        next_params = params

        while next_url:
            response = self._transport.get(next_url, params=next_params)
            yield HttpTransport.decode_json(response, next_url, expected_type)

            next_url = (response.links or {}).get("next", {}).get("url")
            # the next link already carries the query string
            next_params = None

    def _to_pull_request(self, item: Dict[str, Any]) -> PullRequestRef:
        html_url = item.get("html_url")
        created_at = self._parse_datetime(item.get("created_at"))
        closed_at = self._parse_datetime(item.get("closed_at"))

        if not html_url or created_at is None or closed_at is None:
            raise ApiError(f"GitHub search result is missing required fields: payload={item}")

        organization, repository, number = parse_pull_request_url(str(html_url))
        if closed_at < created_at:
            raise DataValidationError(
                f"Pull request {organization}/{repository}#{number} closed before it was created"
            )

        return PullRequestRef(
            organization=organization,
            repository=repository,
            number=number,
            created_at=created_at,
            closed_at=closed_at,
            title=str(item.get("title") or ""),
        )

    def list_closed_pull_requests(
        self,
        organization: str,
        repository: str,
        start: datetime,
        end: datetime,
    ) -> List[PullRequestRef]:
        """List pull requests closed within ``[start, end]``.

        Pull requests created six months or more before ``start`` are dropped
        page by page. Any failed page aborts the whole listing.

        Raises:
            ApiError: If any page fails or is malformed.
            DataValidationError: If a result violates pull request invariants.
        """
        query = (
            f"repo:{organization}/{repository} is:pr is:closed "
            f"closed:{start:%Y-%m-%d}..{end:%Y-%m-%d}"
        )
        params: Dict[str, Any] = {"q": query, "per_page": self._PAGE_SIZE}
        pull_requests: List[PullRequestRef] = []

        for page_number, payload in enumerate(
            self._paginate(f"{self._base_url}/search/issues", params, dict), start=1
        ):
            items = payload.get("items")
            if not isinstance(items, list):
                raise ApiError(f"GitHub search page {page_number} has no 'items' list")

            page = [self._to_pull_request(item) for item in items]
            kept = filter_by_creation_date(page, start)
            pull_requests.extend(kept)

            logger.debug(
                "Fetched pull request search page",
                extra={"page": page_number, "items": len(page), "kept": len(kept)},
            )

        logger.info(
            "Listed closed pull requests",
            extra={"repository": f"{organization}/{repository}", "pull_requests": len(pull_requests)},
        )
        return pull_requests

    def list_issue_comments(self, organization: str, repository: str, number: int) -> List[Comment]:
        """List all issue comments on a pull request."""
        url = f"{self._base_url}/repos/{organization}/{repository}/issues/{number}/comments"
        comments: List[Comment] = []

        for payload in self._paginate(url, {"per_page": self._PAGE_SIZE}, list):
            for item in payload:
                body = item.get("body") if isinstance(item, dict) else None
                comments.append(Comment(body=str(body or "")))

        return comments
