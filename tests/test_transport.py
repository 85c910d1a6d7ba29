"""Tests for the retrying HTTP transport with mocked sessions."""

from unittest.mock import Mock, patch

import pytest
import requests

from helpers import response

from prcost.errors import ApiError
from prcost.transport import HttpTransport


def test_get_retries_on_429_and_succeeds():
    """Verify get retries after HTTP 429 and honors Retry-After."""
    transport = HttpTransport()
    first = response(429, headers={"Retry-After": "1"})
    second = response(200, payload={"ok": True})
    transport._session.get = Mock(side_effect=[first, second])

    with patch("prcost.transport.time.sleep") as sleep_mock:
        result = transport.get("https://example.test/a")

    assert result is second
    assert transport._session.get.call_count == 2
    sleep_mock.assert_called_once_with(1)


def test_get_retries_on_5xx_and_raises_after_max_retries():
    """Verify retryable server errors raise ApiError once the retry limit is reached."""
    transport = HttpTransport()
    server_error = response(503, text="service unavailable")
    transport._session.get = Mock(side_effect=[server_error] * transport._MAX_RETRIES)

    with patch("prcost.transport.time.sleep") as sleep_mock:
        with pytest.raises(ApiError):
            transport.get("https://example.test/a")

    assert transport._session.get.call_count == transport._MAX_RETRIES
    assert sleep_mock.call_count == transport._MAX_RETRIES - 1


def test_get_raises_immediately_on_404():
    """Verify client errors are not retried."""
    transport = HttpTransport()
    transport._session.get = Mock(return_value=response(404, text="not found"))

    with pytest.raises(ApiError, match="404"):
        transport.get("https://example.test/missing")

    assert transport._session.get.call_count == 1


def test_get_retries_connection_errors():
    """Verify connection errors are retried before succeeding."""
    transport = HttpTransport()
    ok = response(200)
    transport._session.get = Mock(side_effect=[requests.ConnectionError("reset"), ok])

    with patch("prcost.transport.time.sleep"):
        assert transport.get("https://example.test/a") is ok


def test_get_json_rejects_unexpected_shape():
    """Verify a list payload is rejected when an object is expected."""
    transport = HttpTransport()
    transport._session.get = Mock(return_value=response(200, payload=[1, 2]))

    with pytest.raises(ApiError, match="unexpected payload shape"):
        transport.get_json("https://example.test/a")


def test_get_json_rejects_invalid_json():
    """Verify undecodable bodies raise ApiError."""
    transport = HttpTransport()
    transport._session.get = Mock(return_value=response(200, payload=ValueError("bad json")))

    with pytest.raises(ApiError, match="not valid JSON"):
        transport.get_json("https://example.test/a")


def test_fetch_optional_json_returns_none_on_failure():
    """Verify optional fetches degrade to None instead of raising."""
    transport = HttpTransport()
    transport._session.get = Mock(return_value=response(404))

    assert transport.fetch_optional_json("https://example.test/started.json") is None


def test_get_failure_message_names_request_and_attempts():
    """Verify the final error carries the full query, attempt count and last status."""
    transport = HttpTransport()
    transport._session.get = Mock(return_value=response(502, text="bad gateway"))

    with patch("prcost.transport.time.sleep"):
        with pytest.raises(ApiError) as excinfo:
            transport.get("https://api.github.com/search/issues", params={"q": "repo:o/r is:pr", "per_page": 100})

    message = str(excinfo.value)
    assert "GET https://api.github.com/search/issues?q=repo%3Ao%2Fr+is%3Apr&per_page=100" in message
    assert f"failed after {transport._MAX_RETRIES} attempts" in message
    assert "last: HTTP 502" in message


def test_get_client_error_message_truncates_body():
    """Verify long error bodies are shortened in the raised message."""
    transport = HttpTransport()
    transport._session.get = Mock(return_value=response(403, text="x" * 1000))

    with pytest.raises(ApiError) as excinfo:
        transport.get("https://example.test/a")

    assert str(excinfo.value) == "GET https://example.test/a returned 403: " + "x" * 200 + "..."


def test_describe_request_appends_to_existing_query():
    """Verify params are joined onto a URL that already has a query string."""
    assert (
        HttpTransport.describe_request("https://example.test/a?page=2", {"per_page": 100})
        == "GET https://example.test/a?page=2&per_page=100"
    )
