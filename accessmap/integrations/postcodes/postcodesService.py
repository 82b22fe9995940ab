"""
postcodes.io lookup service
============================

Resolves UK postcodes to the coordinate of their centroid via the public
postcodes.io API.  No API key is required.

A postcode lookup yields exactly one coordinate or nothing: postcodes.io
answers unknown postcodes with HTTP 404, which is treated as "not found"
rather than as a failure.
"""

from __future__ import annotations

import logging
from urllib.parse import quote

import httpx

from accessmap.integrations.httpClient import (
    expect_object,
    parse_coordinate,
    request_json,
)
from accessmap.models import Coordinate

logger = logging.getLogger(__name__)

_BASE_URL = "https://api.postcodes.io"


class PostcodesClient:
    """Postal-code resolver backed by postcodes.io."""

    def __init__(self, http: httpx.AsyncClient, base_url: str = _BASE_URL) -> None:
        self._http = http
        self._base_url = base_url.rstrip("/")

    async def lookup(self, code: str) -> Coordinate | None:
        """Look up a postcode.

        Args:
            code: Postcode as typed, with or without the inward-code space.

        Returns:
            The postcode centroid, or None for an unknown postcode or one
            without a registered location (e.g. some PO boxes).

        Raises:
            ResolutionFailure: On API failure or a malformed response.
        """
        data = await request_json(
            self._http,
            "GET",
            f"{self._base_url}/postcodes/{quote(code.strip(), safe='')}",
            context="postcodes.io lookup",
            not_found_statuses=(404,),
        )
        if data is None:
            return None

        result = expect_object(data, "postcodes.io lookup").get("result")
        if not isinstance(result, dict):
            return None

        if result.get("latitude") is None or result.get("longitude") is None:
            logger.info("Postcode '%s' has no registered coordinates", code)
            return None

        return parse_coordinate(result["latitude"], result["longitude"], "postcodes.io lookup")
