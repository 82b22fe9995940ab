"""
Overlay layers & nearest locations REST API endpoints
======================================================

Endpoints:
  - GET  /api/v1/layers                      Configured overlay layers
  - POST /api/v1/map/nearby                  Load markers around a point
  - POST /api/v1/nearest                     Closest visible markers
  - POST /api/v1/markers/{marker_id}/view    Recenter + open callout
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, HTTPException, status

from accessmap.api.deps import AppSettings, MapState, NearestTracker
from accessmap.api.schemas.nearest import (
    LayerOut,
    LayersResponse,
    MarkerViewResponse,
    NearbyRequest,
    NearbyResponse,
    NearestLocationOut,
    NearestRequest,
    NearestResponse,
)
from accessmap.models import DEFAULT_DATA_LAYERS, Coordinate
from accessmap.services.geoService import format_distance
from accessmap.services.proximityRanker import rank

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Nearest locations"])


@router.get("/layers", summary="List overlay layers")
async def layers_endpoint(settings: AppSettings) -> LayersResponse:
    layer_ids = list(DEFAULT_DATA_LAYERS)
    layer_ids += [name for name in settings.initial_active_layers if name not in DEFAULT_DATA_LAYERS]

    layers = []
    for layer_id in layer_ids:
        meta = DEFAULT_DATA_LAYERS.get(layer_id)
        layers.append(
            LayerOut(
                layer_id=layer_id,
                name=meta.name if meta else layer_id,
                emoji=meta.emoji if meta else "",
                active=settings.initial_active_layers.get(layer_id, False),
            )
        )
    return LayersResponse(layers=layers)


@router.post("/map/nearby", summary="Load overlay markers around a point")
async def nearby_endpoint(body: NearbyRequest, map_surface: MapState) -> NearbyResponse:
    """Fetch accessibility locations around the point into the map surface.

    If the data layers backend is unavailable the previously loaded
    markers are kept.
    """
    total = await map_surface.load_nearby(Coordinate(lat=body.lat, lng=body.lng))
    markers = map_surface.markers_by_category()
    logger.debug("Map surface now holds %d marker(s)", total)
    return NearbyResponse(
        total_markers=sum(len(m) for m in markers.values()),
        markers_by_layer={category: len(m) for category, m in markers.items()},
    )


@router.post("/nearest", summary="Rank the nearest accessibility locations")
async def nearest_endpoint(
    body: NearestRequest,
    settings: AppSettings,
    map_surface: MapState,
    tracker: NearestTracker,
) -> NearestResponse:
    """Return the closest visible markers of the active layers.

    ``display`` is false when no layer is active or no marker is visible;
    clients should hide the panel rather than render it empty.  Requests
    that use the default ``top_n`` go through the shared tracker, which
    only re-ranks when the location, the layer flags, or a layer's marker
    count changes.

    Each location's ``lat``/``lng`` is the marker position; clients use it
    as the destination when the user chooses to navigate there.
    """
    active_layers = body.active_layers if body.active_layers is not None else settings.initial_active_layers
    user_location = Coordinate(lat=body.lat, lng=body.lng)
    map_surface.apply_active_layers(active_layers)

    if body.top_n is None or body.top_n == tracker.top_n:
        ranked = tracker.refresh(user_location, active_layers, map_surface.markers_by_category())
        display = tracker.should_display
    else:
        ranked = rank(user_location, active_layers, map_surface.markers_by_category(), body.top_n)
        display = any(active_layers.values()) and bool(ranked)

    locations = []
    for location in ranked:
        meta = DEFAULT_DATA_LAYERS.get(location.category)
        locations.append(
            NearestLocationOut(
                category=location.category,
                label=location.label,
                emoji=meta.emoji if meta else "",
                lat=location.coordinate.lat,
                lng=location.coordinate.lng,
                distance_meters=round(location.distance_meters, 1),
                distance_text=format_distance(location.distance_meters),
                marker_id=location.source_marker.marker_id,
            )
        )
    return NearestResponse(display=display, locations=locations)


@router.post("/markers/{marker_id}/view", summary="Center the map on a marker")
async def view_marker_endpoint(marker_id: str, map_surface: MapState) -> MarkerViewResponse:
    """Recenter the map on a marker and open its callout."""
    marker = map_surface.find_marker(marker_id)
    if marker is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Marker '{marker_id}' is not loaded",
        )

    await map_surface.recenter(marker.coordinate)
    await map_surface.trigger_marker_callout(marker)
    return MarkerViewResponse(
        marker_id=marker_id,
        lat=marker.coordinate.lat,
        lng=marker.coordinate.lng,
        callout_open=map_surface.open_callout is marker,
    )
