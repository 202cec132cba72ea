"""Shared HTTP client utilities (requests + retry/backoff).

HTTP calls go through the RetryExecutor so that every outbound request gets
the same classification and backoff policy.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import requests

from apiretry.domain.config.retry import RetryConfig
from apiretry.domain.errors import ApiCallError
from apiretry.infrastructure.retry import RetryExecutor

logger = logging.getLogger(__name__)


def _retry_after_seconds(response: Optional[requests.Response]) -> Optional[str]:
    """Retry-After header value when it is given in seconds."""
    if response is None:
        return None
    value = response.headers.get("Retry-After")
    if value is None:
        return None
    value = value.strip()
    try:
        float(value)
    except ValueError:
        # HTTP-date form is not supported
        return None
    return value


def _status_error(error: requests.exceptions.HTTPError) -> requests.exceptions.HTTPError:
    """Rebuild an HTTP error so its message carries the status and Retry-After hint but not the URL."""
    resp = error.response
    kind = "Client" if resp.status_code < 500 else "Server"
    message = f"{resp.status_code} {kind} Error"
    if resp.reason:
        message += f": {resp.reason}"
    seconds = _retry_after_seconds(resp)
    if seconds is not None:
        message += f"; retry in {seconds} seconds"
    return requests.exceptions.HTTPError(message, response=resp, request=error.request)


def request_json_with_retries(
    method: str,
    url: str,
    *,
    payload: Optional[Dict[str, Any]] = None,
    params: Optional[Dict[str, Any]] = None,
    headers: Optional[Dict[str, str]] = None,
    timeout: float,
    retry: RetryConfig,
    executor: Optional[RetryExecutor] = None,
) -> requests.Response:
    """Send a request with retry on network errors, 429, 500 and 503.

    Args:
        method: HTTP method
        url: Request URL
        payload: JSON body
        params: Query parameters
        headers: Request headers
        timeout: Per-attempt timeout in seconds
        retry: Retry configuration
        executor: Executor to run the call with (a default one if None)

    Returns:
        Successful response

    Raises:
        requests.HTTPError: Non-retryable HTTP error status
        RetriesExhaustedError: Retryable failure persisted through every attempt
        ApiCallError: Unexpected failure while sending the request
    """
    executor = executor or RetryExecutor()

    def _make_request() -> requests.Response:
        logger.debug(f"HTTP {method.upper()} {url}")
        try:
            resp = requests.request(
                method.upper(),
                url,
                json=payload,
                params=params,
                headers=headers,
                timeout=timeout,
            )
        except (requests.exceptions.ConnectionError, requests.exceptions.Timeout) as e:
            # Transport failures count as the upstream being unavailable
            raise ApiCallError(f"503 Service Unavailable: {e}") from e
        try:
            resp.raise_for_status()
        except requests.exceptions.HTTPError as e:
            # The URL may contain digits the classifier would read as a status code
            raise _status_error(e) from e
        return resp

    try:
        return executor.execute(_make_request, retry)
    except requests.exceptions.RequestException as e:
        if isinstance(e, requests.exceptions.HTTPError):
            raise
        raise ApiCallError(f"HTTP request failed: {e}") from e


def post_json_with_retries(
    url: str,
    *,
    payload: Dict[str, Any],
    headers: Dict[str, str],
    timeout: float,
    retry: RetryConfig,
    executor: Optional[RetryExecutor] = None,
) -> requests.Response:
    """POST JSON with retry on network errors, 429, 500 and 503."""
    return request_json_with_retries(
        "POST",
        url,
        payload=payload,
        headers=headers,
        timeout=timeout,
        retry=retry,
        executor=executor,
    )
