"""
Map Surface
===========

Server-side state of the map a client is looking at: its centre, the
overlay marker collections per category, and the marker whose callout is
open.  Rendering (tiles, styling, marker icons) belongs to the client;
this module only owns the state the search and ranking cores act on.

Lifecycle is explicit: ``open_map_surface()`` is an async context
manager that builds a ready surface and tears it down on exit, instead of
relying on a process-wide "map is loaded" callback.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Mapping, Protocol, Sequence

from accessmap.core.config import Settings
from accessmap.integrations.datalayers import DataLayersClient
from accessmap.integrations.httpClient import ResolutionFailure
from accessmap.models import ActiveLayerSet, Coordinate, OverlayMarker

logger = logging.getLogger(__name__)


class MapSurface(Protocol):
    """What the search and ranking cores need from a map."""

    def markers_by_category(self) -> Mapping[str, Sequence[OverlayMarker]]: ...

    async def recenter(self, coordinate: Coordinate) -> None: ...

    async def trigger_marker_callout(self, marker: OverlayMarker) -> None: ...


class HeadlessMapSurface:
    """In-process ``MapSurface`` implementation."""

    def __init__(
        self,
        center: Coordinate,
        data_layers: DataLayersClient | None = None,
        nearby_radius_meters: int = 500,
    ) -> None:
        self._center = center
        self._data_layers = data_layers
        self._nearby_radius_meters = nearby_radius_meters
        self._markers: dict[str, list[OverlayMarker]] = {}
        self.open_callout: OverlayMarker | None = None
        self.closed = False

    @property
    def center(self) -> Coordinate:
        return self._center

    def markers_by_category(self) -> dict[str, list[OverlayMarker]]:
        return self._markers

    # -- Marker collections ---------------------------------------------------

    def load_layer(self, category: str, markers: Sequence[OverlayMarker]) -> None:
        """Replace the marker collection of a category."""
        self._markers[category] = list(markers)
        if self.open_callout is not None and self.open_callout.category == category:
            self.open_callout = None

    def set_layer_visibility(self, category: str, visible: bool) -> None:
        for marker in self._markers.get(category, ()):
            marker.visible = visible
        if not visible and self.open_callout is not None and self.open_callout.category == category:
            self.open_callout = None

    def apply_active_layers(self, active_layers: ActiveLayerSet) -> None:
        """Show the markers of enabled layers and hide the rest."""
        for category in self._markers:
            self.set_layer_visibility(category, bool(active_layers.get(category, False)))

    def find_marker(self, marker_id: str) -> OverlayMarker | None:
        for markers in self._markers.values():
            for marker in markers:
                if marker.marker_id == marker_id:
                    return marker
        return None

    async def load_nearby(self, center: Coordinate | None = None) -> int:
        """Replace every marker collection with the locations around a point.

        On a failed fetch the existing markers are kept.

        Returns:
            Number of markers loaded (0 on failure or without a client).
        """
        if self._data_layers is None:
            logger.debug("No data layers client configured; nothing to load")
            return 0

        point = center or self._center
        try:
            by_category = await self._data_layers.nearby(point, self._nearby_radius_meters)
        except ResolutionFailure as exc:
            logger.warning(
                "Could not load nearby locations around (%.5f,%.5f): %s",
                point.lat,
                point.lng,
                exc,
            )
            return 0

        self._markers = {category: list(markers) for category, markers in by_category.items()}
        self.open_callout = None
        total = sum(len(markers) for markers in self._markers.values())
        logger.info(
            "Loaded %d overlay marker(s) in %d layer(s) around (%.5f,%.5f)",
            total,
            len(self._markers),
            point.lat,
            point.lng,
        )
        return total

    # -- MapSurface -----------------------------------------------------------

    async def recenter(self, coordinate: Coordinate) -> None:
        self._center = coordinate
        logger.debug("Map recentred on (%.6f, %.6f)", coordinate.lat, coordinate.lng)

    async def trigger_marker_callout(self, marker: OverlayMarker) -> None:
        self.open_callout = marker

    def close(self) -> None:
        self._markers.clear()
        self.open_callout = None
        self.closed = True


@asynccontextmanager
async def open_map_surface(
    settings: Settings,
    data_layers: DataLayersClient | None = None,
    *,
    preload: bool = False,
) -> AsyncIterator[HeadlessMapSurface]:
    """Create a map surface centred on the configured default location.

    With ``preload`` the overlay markers around the default location are
    fetched before the surface is handed out.  The surface is closed when
    the context exits.
    """
    surface = HeadlessMapSurface(
        center=Coordinate(lat=settings.default_latitude, lng=settings.default_longitude),
        data_layers=data_layers,
        nearby_radius_meters=settings.nearby_radius_meters,
    )
    if preload:
        await surface.load_nearby()
    logger.info("Map surface ready at (%.6f, %.6f)", surface.center.lat, surface.center.lng)
    try:
        yield surface
    finally:
        surface.close()
        logger.info("Map surface closed")
