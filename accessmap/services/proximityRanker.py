"""
Proximity Ranker
================

Ranks the visible overlay markers of every active layer by great-circle
distance from the user and keeps the closest N for the "nearest
locations" panel.

Algorithm:
  1. For each active category that has a marker collection, keep the
     markers with ``visible == True``.
  2. Compute the haversine distance from the user to each marker.
  3. Merge all categories in active-layer order.
  4. Stable sort ascending by distance (equal distances keep input order).
  5. Truncate to ``top_n``.

The ranking is deterministic: identical inputs always produce identical
output.
"""

from __future__ import annotations

import logging
from operator import attrgetter
from typing import Mapping, Sequence

from accessmap.models import ActiveLayerSet, Coordinate, OverlayMarker, RankedLocation
from accessmap.services.geoService import haversine_distance

logger = logging.getLogger(__name__)

DEFAULT_TOP_N: int = 3


def rank(
    user_location: Coordinate,
    active_layers: ActiveLayerSet,
    markers_by_category: Mapping[str, Sequence[OverlayMarker]],
    top_n: int = DEFAULT_TOP_N,
) -> list[RankedLocation]:
    """Return the ``top_n`` visible markers closest to ``user_location``.

    Args:
        user_location: Reference point.
        active_layers: Category -> enabled flag.
        markers_by_category: Category -> marker collection.  Categories
            without a collection are skipped.
        top_n: Maximum number of results.

    Returns:
        Ranked locations sorted by ascending distance; empty when no layer
        is active or no visible marker exists.

    Raises:
        ValueError: If ``top_n`` is negative.
    """
    if top_n < 0:
        raise ValueError(f"top_n must be >= 0, got {top_n}")

    candidates: list[RankedLocation] = []

    for category, enabled in active_layers.items():
        if not enabled:
            continue
        markers = markers_by_category.get(category)
        if not markers:
            continue

        for marker in markers:
            if not marker.visible:
                continue
            candidates.append(
                RankedLocation(
                    category=category,
                    label=marker.label,
                    coordinate=marker.coordinate,
                    distance_meters=haversine_distance(user_location, marker.coordinate),
                    source_marker=marker,
                )
            )

    # list.sort is stable, so ties keep merge order
    candidates.sort(key=attrgetter("distance_meters"))
    return candidates[:top_n]


class NearestLocationsTracker:
    """Caches the nearest-locations ranking between refreshes.

    The ranking is recomputed only when the user location, the active layer
    flags, or the *number* of markers in a tracked category changes.  A
    marker that moves, or toggles visibility, without the collection size
    changing does not trigger a re-rank; the panel may show stale distances
    until one of the keyed inputs changes.
    """

    def __init__(self, top_n: int = DEFAULT_TOP_N) -> None:
        self.top_n = top_n
        self._signature: tuple | None = None
        self._active = False
        self.locations: list[RankedLocation] = []

    @staticmethod
    def _make_signature(
        user_location: Coordinate,
        active_layers: ActiveLayerSet,
        markers_by_category: Mapping[str, Sequence[OverlayMarker]],
    ) -> tuple:
        return (
            user_location,
            tuple(sorted((name, bool(flag)) for name, flag in active_layers.items())),
            tuple(sorted((name, len(markers)) for name, markers in markers_by_category.items())),
        )

    def refresh(
        self,
        user_location: Coordinate,
        active_layers: ActiveLayerSet,
        markers_by_category: Mapping[str, Sequence[OverlayMarker]],
    ) -> list[RankedLocation]:
        """Return the current ranking, recomputing it if a keyed input changed."""
        signature = self._make_signature(user_location, active_layers, markers_by_category)
        if signature == self._signature:
            logger.debug("Nearest locations inputs unchanged; reusing ranking")
            return self.locations

        self._signature = signature
        self._active = any(active_layers.values())
        self.locations = rank(user_location, active_layers, markers_by_category, self.top_n)
        logger.debug("Re-ranked nearest locations: %d result(s)", len(self.locations))
        return self.locations

    @property
    def should_display(self) -> bool:
        """False when no layer is active or nothing was found, so the panel
        is hidden rather than rendered empty."""
        return self._active and bool(self.locations)
