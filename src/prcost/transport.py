"""Shared HTTP transport with retry handling for GitHub and Prow requests."""

from __future__ import annotations

import logging
import time
from typing import Any, Dict, Optional
from urllib.parse import urlencode

import requests

from .errors import ApiError

logger = logging.getLogger(__name__)

_BODY_EXCERPT_CHARS = 200


class HttpTransport:
    """Thin wrapper around a ``requests.Session`` that retries transient failures."""

    _MAX_RETRIES = 5
    _MAX_BACKOFF_SECONDS = 30

    def __init__(self, timeout_seconds: int = 30, headers: Optional[Dict[str, str]] = None) -> None:
        self._timeout_seconds = timeout_seconds
        self._session = requests.Session()
        if headers:
            self._session.headers.update(headers)

    def _extract_backoff_seconds(self, response: requests.Response, attempt: int) -> int:
        """Compute exponential backoff seconds, honoring Retry-After when available."""
        retry_after_header = response.headers.get("Retry-After")
        if retry_after_header:
            try:
                retry_after_seconds = int(retry_after_header)
                return min(self._MAX_BACKOFF_SECONDS, max(1, retry_after_seconds))
            except ValueError:
                pass

        return min(self._MAX_BACKOFF_SECONDS, 2 ** (attempt - 1))

    @staticmethod
    def describe_request(url: str, params: Optional[Dict[str, Any]] = None) -> str:
        """Render ``GET url?query`` for error messages and logs."""
        if not params:
            return f"GET {url}"
        separator = "&" if "?" in url else "?"
        return f"GET {url}{separator}{urlencode(params)}"

    @staticmethod
    def _body_excerpt(response: requests.Response) -> str:
        text = (response.text or "").strip()
        if len(text) > _BODY_EXCERPT_CHARS:
            return text[:_BODY_EXCERPT_CHARS] + "..."
        return text

    def get(self, url: str, params: Optional[Dict[str, Any]] = None) -> requests.Response:
        """Execute a GET request, retrying 429/5xx responses and connection errors.

        Raises:
            ApiError: If the request returns HTTP >= 400 or still fails after
                ``_MAX_RETRIES`` attempts. The message names the full request,
                the attempt count and the last status or error seen.
        """
        request = self.describe_request(url, params)
        last_failure = "no response"
        last_error: Optional[Exception] = None

        for attempt in range(1, self._MAX_RETRIES + 1):
            try:
                response = self._session.get(url, params=params, timeout=self._timeout_seconds)
            except requests.RequestException as exc:
                last_error = exc
                last_failure = f"{type(exc).__name__}: {exc}"
                backoff = min(self._MAX_BACKOFF_SECONDS, 2 ** (attempt - 1))
            else:
                status_code = response.status_code
                if status_code < 400:
                    return response

                if status_code != 429 and status_code < 500:
                    raise ApiError(
                        f"{request} returned {status_code}: {self._body_excerpt(response)}"
                    )

                last_error = None
                last_failure = f"HTTP {status_code}"
                backoff = self._extract_backoff_seconds(response, attempt)

            if attempt < self._MAX_RETRIES:
                logger.debug(
                    "Retrying request",
                    extra={"request": request, "attempt": attempt, "failure": last_failure},
                )
                time.sleep(backoff)

        raise ApiError(
            f"{request} failed after {self._MAX_RETRIES} attempts (last: {last_failure})"
        ) from last_error

    def get_json(
        self,
        url: str,
        params: Optional[Dict[str, Any]] = None,
        expected_type: type = dict,
    ) -> Any:
        """GET ``url`` and decode its JSON body, checking the top-level shape.

        Raises:
            ApiError: If the request fails or the body is not JSON of ``expected_type``.
        """
        response = self.get(url, params=params)
        return self.decode_json(response, url, expected_type)

    @staticmethod
    def decode_json(response: requests.Response, url: str, expected_type: type = dict) -> Any:
        try:
            payload = response.json()
        except ValueError as exc:
            raise ApiError(f"Response was not valid JSON: GET {url}") from exc

        if not isinstance(payload, expected_type):
            raise ApiError(f"Response had unexpected payload shape: GET {url}")

        return payload

    def fetch_optional_json(self, url: str) -> Optional[Dict[str, Any]]:
        """Return the JSON object at ``url`` or ``None`` if it cannot be fetched or decoded."""
        try:
            return self.get_json(url)
        except ApiError as exc:
            logger.debug("Optional artifact unavailable", extra={"url": url, "error": str(exc)})
            return None
