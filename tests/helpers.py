"""Shared builders for the test suite."""

import sys
from datetime import datetime, timezone
from pathlib import Path
from unittest.mock import Mock

# Add src directory to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from prcost.config import Config
from prcost.models import PullRequestRef


def utc(year: int, month: int, day: int, hour: int = 0) -> datetime:
    return datetime(year, month, day, hour, tzinfo=timezone.utc)


def build_config(**overrides) -> Config:
    values = dict(
        organization="openshift",
        repository="installer",
        start=utc(2023, 6, 1),
        end=utc(2023, 6, 30),
    )
    values.update(overrides)
    return Config(**values)


def make_pr(number: int = 1, created: datetime | None = None, closed: datetime | None = None) -> PullRequestRef:
    return PullRequestRef(
        organization="openshift",
        repository="installer",
        number=number,
        created_at=created or utc(2023, 6, 1),
        closed_at=closed or utc(2023, 6, 3),
    )


def response(
    status_code: int = 200,
    payload=None,
    text: str = "",
    headers: dict | None = None,
    links: dict | None = None,
):
    resp = Mock()
    resp.status_code = status_code
    resp.text = text
    resp.headers = headers or {}
    resp.links = links or {}
    if isinstance(payload, Exception):
        resp.json.side_effect = payload
    else:
        resp.json.return_value = payload if payload is not None else {}
    return resp
