"""
Google Places API wrapper service
==================================

Async wrapper around the Google Places web service, providing
autocomplete predictions for free-text queries and place-detail lookups
that turn a prediction's ``place_id`` into coordinates.

The browser widget used the callback-style ``AutocompleteService`` and
``PlacesService``; here both are plain request/response coroutines that
either return a value or raise ``ResolutionFailure``.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from accessmap.integrations.httpClient import (
    ResolutionFailure,
    expect_list,
    expect_object,
    parse_coordinate,
    request_json,
)
from accessmap.models import Coordinate

logger = logging.getLogger(__name__)

_BASE_URL = "https://maps.googleapis.com/maps/api/place"


def _check_api_status(data: dict[str, Any], context: str) -> None:
    """Check the top-level ``status`` field common to Google Maps API
    responses and raise on error statuses.

    OK and ZERO_RESULTS are not considered errors (ZERO_RESULTS means a
    valid request that matched nothing).
    """
    status = data.get("status", "")
    if status in ("OK", "ZERO_RESULTS"):
        return
    raise ResolutionFailure(
        f"{context}: API returned status '{status}' -- "
        f"{data.get('error_message', 'no error message')}",
        status=status,
        raw=data,
    )


class GooglePlacesClient:
    """Places-autocomplete resolver backed by the Google Places API."""

    def __init__(
        self,
        http: httpx.AsyncClient,
        api_key: str,
        base_url: str = _BASE_URL,
    ) -> None:
        self._http = http
        self._api_key = api_key
        self._base_url = base_url.rstrip("/")

    def _ensure_api_key(self) -> str:
        if not self._api_key:
            raise ResolutionFailure("Google Maps API key is not configured")
        return self._api_key

    async def suggest(self, text: str, region: str) -> list[dict[str, str]]:
        """Return autocomplete predictions restricted to a country.

        Args:
            text: Free-text query.
            region: ISO 3166-1 alpha-2 country code (e.g. "gb").

        Returns:
            List of dicts with keys ``place_ref`` and ``display_label``, in
            the order Google ranks them.

        Raises:
            ResolutionFailure: On API failure or a malformed response.
        """
        key = self._ensure_api_key()
        data = await request_json(
            self._http,
            "GET",
            f"{self._base_url}/autocomplete/json",
            context="Places autocomplete",
            params={
                "input": text,
                "components": f"country:{region.lower()}",
                "key": key,
            },
        )
        payload = expect_object(data, "Places autocomplete")
        _check_api_status(payload, "Places autocomplete")

        results: list[dict[str, str]] = []
        for prediction in expect_list(payload.get("predictions"), "Places autocomplete"):
            if not isinstance(prediction, dict):
                continue
            place_id = prediction.get("place_id")
            description = prediction.get("description")
            if not place_id or not description:
                logger.debug("Skipping incomplete Places prediction: %r", prediction)
                continue
            results.append({"place_ref": place_id, "display_label": description})
        return results

    async def resolve_coordinate(self, place_ref: str) -> Coordinate | None:
        """Fetch the geometry of a place.

        Returns:
            The place location, or None if the place has no geometry or is
            unknown.

        Raises:
            ResolutionFailure: On API failure or a malformed response.
        """
        key = self._ensure_api_key()
        data = await request_json(
            self._http,
            "GET",
            f"{self._base_url}/details/json",
            context="Place details",
            params={"place_id": place_ref, "fields": "geometry", "key": key},
        )
        payload = expect_object(data, "Place details")
        if payload.get("status") == "NOT_FOUND":
            return None
        _check_api_status(payload, "Place details")

        result = payload.get("result")
        if result is None:
            return None
        geometry = expect_object(result, "Place details").get("geometry")
        if geometry is None:
            return None
        location = expect_object(geometry, "Place details").get("location")
        if not isinstance(location, dict):
            return None
        return parse_coordinate(location.get("lat"), location.get("lng"), "Place details")
