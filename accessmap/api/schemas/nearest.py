"""
Pydantic v2 schemas for the overlay layers and nearest-locations API.
"""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Layers
# ---------------------------------------------------------------------------

class LayerOut(BaseModel):
    """An overlay category and whether it starts enabled."""

    layer_id: str
    name: str
    emoji: str = ""
    active: bool = False


class LayersResponse(BaseModel):
    layers: list[LayerOut]


class NearbyRequest(BaseModel):
    """Load overlay markers around a point."""

    lat: float = Field(ge=-90, le=90, description="Latitude")
    lng: float = Field(ge=-180, le=180, description="Longitude")


class NearbyResponse(BaseModel):
    total_markers: int
    markers_by_layer: dict[str, int]


# ---------------------------------------------------------------------------
# Nearest locations
# ---------------------------------------------------------------------------

class NearestRequest(BaseModel):
    """Rank overlay markers by distance from the user."""

    lat: float = Field(ge=-90, le=90, description="User latitude")
    lng: float = Field(ge=-180, le=180, description="User longitude")
    active_layers: Optional[dict[str, bool]] = Field(
        default=None,
        description="Layer -> enabled flag (defaults to the configured initial layers)",
    )
    top_n: Optional[int] = Field(default=None, ge=0, le=50)


class NearestLocationOut(BaseModel):
    """A ranked overlay marker.

    ``lat``/``lng`` is the marker position and doubles as the navigation
    target for a "Navigate" action.
    """

    category: str
    label: str
    emoji: str = ""
    lat: float
    lng: float
    distance_meters: float
    distance_text: str = Field(description="'850m' below 1 km, '1.5km' above")
    marker_id: Optional[str] = None


class NearestResponse(BaseModel):
    display: bool = Field(description="False when the panel should be hidden")
    locations: list[NearestLocationOut]


class MarkerViewResponse(BaseModel):
    marker_id: str
    lat: float
    lng: float
    callout_open: bool


# ---------------------------------------------------------------------------
# Locations
# ---------------------------------------------------------------------------

class ThreeWordAddressResponse(BaseModel):
    lat: float
    lng: float
    words: Optional[str] = None


class AccessibilityReport(BaseModel):
    """Structured accessibility feedback for one location."""

    category: str = Field(min_length=1, description="Overlay layer the location belongs to")
    features: dict[str, Any] = Field(default_factory=dict)
    comment: Optional[str] = Field(default=None, max_length=2000)


class ReportAccepted(BaseModel):
    location_id: str
    submitted: bool = True
