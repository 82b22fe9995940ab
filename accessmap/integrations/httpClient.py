"""
Shared HTTP plumbing for the external lookup services.

Every integration issues requests through ``send_request`` /
``request_json`` on a caller-owned ``httpx.AsyncClient``.  Calls are made
exactly once (no retry) and are bounded by the client's timeout.  Transport
errors, unexpected HTTP statuses and undecodable bodies are all raised as
``ResolutionFailure`` so callers only ever catch one exception type.
"""

from __future__ import annotations

import logging
from typing import Any, Collection

import httpx

from accessmap.core.config import Settings
from accessmap.models import Coordinate

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Custom exception
# ---------------------------------------------------------------------------


class ResolutionFailure(Exception):
    """Raised when a single external lookup fails (network error, error
    status, or malformed response)."""

    def __init__(self, message: str, status: str | None = None, raw: Any = None) -> None:
        super().__init__(message)
        self.status = status
        self.raw = raw


# ---------------------------------------------------------------------------
# Client factory
# ---------------------------------------------------------------------------


def create_http_client(settings: Settings) -> httpx.AsyncClient:
    """Build the shared async client used by every integration."""
    return httpx.AsyncClient(
        timeout=httpx.Timeout(settings.request_timeout_seconds),
        headers={"Accept": "application/json"},
    )


# ---------------------------------------------------------------------------
# Request helpers
# ---------------------------------------------------------------------------


async def send_request(
    client: httpx.AsyncClient,
    method: str,
    url: str,
    *,
    context: str,
    params: dict[str, Any] | None = None,
    headers: dict[str, str] | None = None,
    json: Any = None,
    not_found_statuses: Collection[int] = (),
) -> httpx.Response | None:
    """Execute a single HTTP request.

    Returns:
        The response for 2xx statuses, or None when the status is one of
        ``not_found_statuses``.

    Raises:
        ResolutionFailure: On timeouts, connection errors, or any other
            non-2xx status.
    """
    try:
        response = await client.request(
            method,
            url,
            params=params,
            headers=headers,
            json=json,
        )
    except httpx.TimeoutException as exc:
        logger.warning("%s request timed out: %s", context, exc)
        raise ResolutionFailure(f"{context}: request timed out", raw=str(exc)) from exc
    except httpx.HTTPError as exc:
        logger.warning("%s request failed: %s", context, exc)
        raise ResolutionFailure(f"{context}: request failed", raw=str(exc)) from exc

    if response.status_code in not_found_statuses:
        logger.debug("%s returned HTTP %d (not found)", context, response.status_code)
        return None

    if not response.is_success:
        raise ResolutionFailure(
            f"{context}: HTTP {response.status_code}",
            status=str(response.status_code),
            raw=response.text,
        )

    return response


async def request_json(
    client: httpx.AsyncClient,
    method: str,
    url: str,
    *,
    context: str,
    params: dict[str, Any] | None = None,
    headers: dict[str, str] | None = None,
    json: Any = None,
    not_found_statuses: Collection[int] = (),
) -> Any:
    """Like ``send_request`` but decodes the JSON body.

    Returns None when the status is one of ``not_found_statuses``.
    """
    response = await send_request(
        client,
        method,
        url,
        context=context,
        params=params,
        headers=headers,
        json=json,
        not_found_statuses=not_found_statuses,
    )
    if response is None:
        return None

    try:
        return response.json()
    except ValueError as exc:
        raise ResolutionFailure(
            f"{context}: response body is not valid JSON",
            status=str(response.status_code),
            raw=response.text,
        ) from exc


def parse_coordinate(lat: Any, lng: Any, context: str) -> Coordinate:
    """Convert raw lat/lng values from a payload into a ``Coordinate``."""
    try:
        return Coordinate(lat=float(lat), lng=float(lng))
    except (TypeError, ValueError) as exc:
        raise ResolutionFailure(
            f"{context}: malformed coordinate ({lat!r}, {lng!r})",
            raw={"lat": lat, "lng": lng},
        ) from exc


def expect_object(data: Any, context: str) -> dict[str, Any]:
    """Ensure a decoded JSON body is an object."""
    if not isinstance(data, dict):
        raise ResolutionFailure(f"{context}: unexpected response shape", raw=data)
    return data


def expect_list(data: Any, context: str) -> list[Any]:
    """Ensure a decoded JSON value is an array; a missing value is empty."""
    if data is None:
        return []
    if not isinstance(data, list):
        raise ResolutionFailure(f"{context}: unexpected response shape", raw=data)
    return data
