"""Shared HTTP helpers used by the remote repository client.

Encapsulates common request/timeout error handling so modules avoid
duplicating try/except blocks. Transport failures become RemoteFetchError
instead of terminating the process: a failed fetch only ever abandons one
subtree or one dependency.
"""
from __future__ import annotations

import logging
from typing import Any, Optional

import requests

from constants import Constants
from common.errors import NotFoundRemotely, RemoteFetchError
from common.logging_utils import extra_context, is_debug_enabled, safe_url, Timer

logger = logging.getLogger(__name__)


def safe_get(
    url: str,
    *,
    context: str,
    timeout: Optional[float] = None,
    **kwargs: Any,
) -> requests.Response:
    """Perform a GET request with consistent error handling and DEBUG traces.

    Args:
        url: Target URL.
        context: Human-readable source tag for logs (e.g., "pom", "jar").
        timeout: Seconds before giving up; defaults to Constants.REQUEST_TIMEOUT.
        **kwargs: Passed through to requests.get.

    Returns:
        requests.Response: The HTTP response object, whatever its status.

    Raises:
        RemoteFetchError: On timeout or connection failure.
    """
    safe_target = safe_url(url)
    effective_timeout = Constants.REQUEST_TIMEOUT if timeout is None else timeout
    headers = {"User-Agent": Constants.HTTP_USER_AGENT}
    headers.update(kwargs.pop("headers", None) or {})
    with Timer() as t:
        if is_debug_enabled(logger):
            logger.debug(
                "HTTP request",
                extra=extra_context(
                    event="http_request",
                    component="http_client",
                    action="GET",
                    target=safe_target,
                    context=context,
                ),
            )
        try:
            res = requests.get(url, timeout=effective_timeout, headers=headers, **kwargs)
        except requests.Timeout as exc:
            logger.warning(
                "%s request timed out after %s seconds",
                context,
                effective_timeout,
                extra=extra_context(event="http_exception", outcome="timeout", target=safe_target),
            )
            raise RemoteFetchError(
                f"request timed out after {effective_timeout} seconds", url=url
            ) from exc
        except requests.RequestException as exc:  # includes ConnectionError
            logger.warning(
                "%s connection error: %s",
                context,
                exc,
                extra=extra_context(event="http_exception", outcome="request_exception", target=safe_target),
            )
            raise RemoteFetchError(f"connection error: {exc}", url=url) from exc
        if is_debug_enabled(logger):
            logger.debug(
                "HTTP response",
                extra=extra_context(
                    event="http_response",
                    component="http_client",
                    action="GET",
                    status_code=res.status_code,
                    duration_ms=t.duration_ms(),
                    target=safe_target,
                    context=context,
                ),
            )
        return res


def get_bytes(
    url: str,
    *,
    context: str,
    coordinate: Any = None,
    timeout: Optional[float] = None,
) -> bytes:
    """GET a URL and return the body, raising on any non-200 status.

    Raises:
        NotFoundRemotely: On HTTP 404.
        RemoteFetchError: On any other non-success status or transport failure.
    """
    try:
        res = safe_get(url, context=context, timeout=timeout)
    except RemoteFetchError as exc:
        exc.coordinate = coordinate
        raise
    if res.status_code == 200:
        return res.content
    reason = getattr(res, "reason", None) or "unexpected response"
    if res.status_code == 404:
        raise NotFoundRemotely(
            f"not found at {safe_url(url)}", coordinate=coordinate, url=url, status_code=404
        )
    raise RemoteFetchError(
        f"HTTP {res.status_code} {reason} from {safe_url(url)}",
        coordinate=coordinate,
        url=url,
        status_code=res.status_code,
    )
