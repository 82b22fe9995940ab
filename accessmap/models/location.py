"""
Value types shared by the search resolver, the proximity ranker, and the
map surface.

Search results are a closed tagged union of three frozen dataclasses.
Consumers dispatch on the concrete type instead of probing for optional
fields.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, ClassVar, Mapping, Union


@dataclass(frozen=True)
class Coordinate:
    """A WGS84 point in decimal degrees."""

    lat: float
    lng: float

    def __post_init__(self) -> None:
        if not -90.0 <= self.lat <= 90.0:
            raise ValueError(f"Latitude {self.lat} is outside [-90, 90]")
        if not -180.0 <= self.lng <= 180.0:
            raise ValueError(f"Longitude {self.lng} is outside [-180, 180]")


def _require_label(label: str) -> None:
    if not label or not label.strip():
        raise ValueError("display_label must be a non-empty string")


# ---------------------------------------------------------------------------
# Search results
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ThreeWordResult:
    """A what3words suggestion; the coordinate is resolved on selection."""

    kind: ClassVar[str] = "three_word"

    words: str
    display_label: str

    def __post_init__(self) -> None:
        _require_label(self.display_label)


@dataclass(frozen=True)
class PostalCodeResult:
    """A postcode lookup, already resolved to a coordinate."""

    kind: ClassVar[str] = "postal_code"

    coordinate: Coordinate
    display_label: str

    def __post_init__(self) -> None:
        _require_label(self.display_label)


@dataclass(frozen=True)
class PlaceResult:
    """A places-autocomplete prediction; resolved lazily via its place ref."""

    kind: ClassVar[str] = "place"

    place_ref: str
    display_label: str

    def __post_init__(self) -> None:
        _require_label(self.display_label)


SearchResult = Union[ThreeWordResult, PostalCodeResult, PlaceResult]


# ---------------------------------------------------------------------------
# Overlay markers & ranking output
# ---------------------------------------------------------------------------


@dataclass
class OverlayMarker:
    """A point of interest drawn on the map for one overlay category.

    Owned and mutated by the map surface (``visible`` flips when the layer is
    toggled).  The ranker only reads ``coordinate`` and ``visible``.
    """

    category: str
    coordinate: Coordinate
    visible: bool = True
    label: str = ""
    payload: Any = None
    marker_id: str | None = None


@dataclass(frozen=True)
class RankedLocation:
    """An overlay marker paired with its distance from the user."""

    category: str
    label: str
    coordinate: Coordinate
    distance_meters: float
    source_marker: OverlayMarker = field(compare=False)


@dataclass(frozen=True)
class DataLayer:
    """Display metadata for an overlay category."""

    layer_id: str
    name: str
    emoji: str = ""


# category name -> enabled flag
ActiveLayerSet = Mapping[str, bool]


DEFAULT_DATA_LAYERS: dict[str, DataLayer] = {
    "zebraCrossings": DataLayer("zebraCrossings", "Zebra Crossing", "\U0001F993"),
    "wheelchairServices": DataLayer("wheelchairServices", "Wheelchair Service", "♿"),
}
