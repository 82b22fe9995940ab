"""
Accessible map domain models
=============================

Central import point for the value types used across the search,
ranking, and map-surface layers.

Usage::

    from accessmap.models import Coordinate, OverlayMarker, SearchResult
"""

from .location import (
    DEFAULT_DATA_LAYERS,
    ActiveLayerSet,
    Coordinate,
    DataLayer,
    OverlayMarker,
    PlaceResult,
    PostalCodeResult,
    RankedLocation,
    SearchResult,
    ThreeWordResult,
)

__all__ = [
    "ActiveLayerSet",
    "Coordinate",
    "DataLayer",
    "DEFAULT_DATA_LAYERS",
    "OverlayMarker",
    "PlaceResult",
    "PostalCodeResult",
    "RankedLocation",
    "SearchResult",
    "ThreeWordResult",
]
