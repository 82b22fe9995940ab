"""
Data Layers for Accessibility API client
=========================================

Fetches accessibility points of interest (zebra crossings, wheelchair
services, ...) around a location and forwards user-submitted
accessibility reports for a location.

Nearby locations are returned as ``OverlayMarker`` objects grouped by
category so the map surface can load them without further conversion.
Categories are taken from the payload as-is; a category the backend
adds later shows up as a new marker collection without code changes.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from typing import Any, Mapping

import httpx
from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError

from accessmap.integrations.httpClient import ResolutionFailure, request_json, send_request
from accessmap.models import DEFAULT_DATA_LAYERS, Coordinate, DataLayer, OverlayMarker

logger = logging.getLogger(__name__)

DEFAULT_NEARBY_RADIUS_METERS = 500


# ---------------------------------------------------------------------------
# Custom exception
# ---------------------------------------------------------------------------


class ReportSubmissionError(Exception):
    """Raised when the Data Layers API rejects or fails to receive a report."""

    def __init__(self, message: str, status: str | None = None, raw: Any = None) -> None:
        super().__init__(message)
        self.status = status
        self.raw = raw


# ---------------------------------------------------------------------------
# Payload schema
# ---------------------------------------------------------------------------


class DataLayerLocation(BaseModel):
    """One location record as returned by ``/locations/nearby``."""

    model_config = ConfigDict(extra="allow", populate_by_name=True, coerce_numbers_to_str=True)

    id: str = Field(validation_alias=AliasChoices("id", "locationId", "location_id"))
    category: str = Field(validation_alias=AliasChoices("category", "layer", "type"))
    latitude: float = Field(ge=-90, le=90, validation_alias=AliasChoices("latitude", "lat"))
    longitude: float = Field(ge=-180, le=180, validation_alias=AliasChoices("longitude", "lng", "lon"))
    name: str | None = None


# ---------------------------------------------------------------------------
# Client
# ---------------------------------------------------------------------------


class DataLayersClient:
    """Client for the accessibility data layers backend."""

    def __init__(
        self,
        http: httpx.AsyncClient,
        base_url: str,
        api_key: str,
        layers: Mapping[str, DataLayer] | None = None,
    ) -> None:
        self._http = http
        self._base_url = base_url.rstrip("/")
        self._api_key = api_key
        self._layers = dict(layers) if layers is not None else dict(DEFAULT_DATA_LAYERS)

    async def nearby(
        self,
        coordinate: Coordinate,
        radius_meters: int = DEFAULT_NEARBY_RADIUS_METERS,
    ) -> dict[str, list[OverlayMarker]]:
        """Fetch accessibility locations within a radius of a point.

        Records that fail validation are skipped and logged; the rest of the
        payload is still used.

        Returns:
            Mapping of category -> markers, in payload order.

        Raises:
            ResolutionFailure: On API failure or a malformed response.
        """
        data = await request_json(
            self._http,
            "GET",
            f"{self._base_url}/locations/nearby",
            context="Data layers nearby",
            params={
                "latitude": coordinate.lat,
                "longitude": coordinate.lng,
                "radius": radius_meters,
            },
            headers={"X-API-KEY": self._api_key},
        )

        if isinstance(data, dict):
            data = data.get("locations")
        if not isinstance(data, list):
            raise ResolutionFailure("Data layers nearby: expected a list of locations", raw=data)

        markers: dict[str, list[OverlayMarker]] = defaultdict(list)
        skipped = 0
        for raw in data:
            try:
                location = DataLayerLocation.model_validate(raw)
            except ValidationError as exc:
                skipped += 1
                logger.debug("Skipping malformed data layer record %r: %s", raw, exc)
                continue
            markers[location.category].append(self._to_marker(location, raw))

        if skipped:
            logger.warning(
                "Data layers nearby returned %d malformed record(s) near (%.5f,%.5f)",
                skipped,
                coordinate.lat,
                coordinate.lng,
            )
        return dict(markers)

    def _to_marker(self, location: DataLayerLocation, raw: Any) -> OverlayMarker:
        layer = self._layers.get(location.category)
        label = location.name or (layer.name if layer else location.category)
        return OverlayMarker(
            category=location.category,
            coordinate=Coordinate(lat=location.latitude, lng=location.longitude),
            visible=True,
            label=label,
            payload=raw,
            marker_id=location.id,
        )

    async def submit_report(self, location_id: str, report: dict[str, Any]) -> None:
        """Send an accessibility report for a location.

        Raises:
            ReportSubmissionError: If the request fails or is rejected.
        """
        try:
            await send_request(
                self._http,
                "PATCH",
                f"{self._base_url}/locations/{location_id}/reports",
                context="Data layers report",
                headers={
                    "Content-Type": "application/json",
                    "Authorization": f"Bearer {self._api_key}",
                },
                json=report,
            )
        except ResolutionFailure as exc:
            logger.error("Error sending report for location %s: %s", location_id, exc)
            raise ReportSubmissionError(
                f"Report for location '{location_id}' was not accepted: {exc}",
                status=exc.status,
                raw=exc.raw,
            ) from exc

        logger.info("Submitted accessibility report for location %s", location_id)
