"""
what3words API wrapper service
===============================

Async wrapper around the what3words v3 REST API, providing three-word
address suggestions, conversion of a three-word address to coordinates,
and the reverse conversion used to label the user's position.

Suggestions deliberately carry no coordinates: converting every
suggestion would cost one extra API call per candidate, so conversion is
deferred until the user picks one.
"""

from __future__ import annotations

import logging

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

_BASE_URL = "https://api.what3words.com/v3"

# what3words answers unknown/invalid word triples with HTTP 400 + BadWords
_NOT_FOUND_STATUSES = (400, 404)


class What3WordsClient:
    """Three-word-code resolver backed by the what3words API."""

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
            raise ResolutionFailure("what3words API key is not configured")
        return self._api_key

    async def suggest(self, prefix: str) -> list[dict[str, str]]:
        """Return candidate three-word addresses for a (partial) input.

        Returns:
            List of dicts with keys ``words`` and ``display_label``.

        Raises:
            ResolutionFailure: On API failure or a malformed response.
        """
        key = self._ensure_api_key()
        data = await request_json(
            self._http,
            "GET",
            f"{self._base_url}/autosuggest",
            context="what3words autosuggest",
            params={"input": prefix, "key": key},
        )

        suggestions = expect_list(
            expect_object(data, "what3words autosuggest").get("suggestions"),
            "what3words autosuggest",
        )
        results: list[dict[str, str]] = []
        for suggestion in suggestions:
            words = suggestion.get("words") if isinstance(suggestion, dict) else None
            if not words:
                logger.debug("Skipping what3words suggestion without words: %r", suggestion)
                continue
            results.append({"words": words, "display_label": f"{words} (What3Words)"})
        return results

    async def resolve(self, words: str) -> Coordinate | None:
        """Convert a three-word address to coordinates.

        Returns:
            The coordinate, or None if the words do not name a square.

        Raises:
            ResolutionFailure: On API failure or a malformed response.
        """
        key = self._ensure_api_key()
        data = await request_json(
            self._http,
            "GET",
            f"{self._base_url}/convert-to-coordinates",
            context="what3words convert-to-coordinates",
            params={"words": words, "key": key},
            not_found_statuses=_NOT_FOUND_STATUSES,
        )
        if data is None:
            return None

        coordinates = expect_object(data, "what3words convert-to-coordinates").get("coordinates")
        if not isinstance(coordinates, dict):
            return None
        return parse_coordinate(
            coordinates.get("lat"),
            coordinates.get("lng"),
            "what3words convert-to-coordinates",
        )

    async def words_for(self, coordinate: Coordinate) -> str | None:
        """Convert coordinates to the three-word address of their square."""
        key = self._ensure_api_key()
        data = await request_json(
            self._http,
            "GET",
            f"{self._base_url}/convert-to-3wa",
            context="what3words convert-to-3wa",
            params={"coordinates": f"{coordinate.lat},{coordinate.lng}", "key": key},
            not_found_statuses=_NOT_FOUND_STATUSES,
        )
        if data is None:
            return None
        return expect_object(data, "what3words convert-to-3wa").get("words") or None

