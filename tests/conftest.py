"""
Shared pytest fixtures for the accessible map backend tests.

Provides async mocks of the three lookup collaborators (what3words,
postcodes.io, Google Places) and sample overlay markers around a fixed
user location in Westminster, so tests never touch the network.
"""

from unittest.mock import AsyncMock

import pytest

from accessmap.models import Coordinate, OverlayMarker
from accessmap.services.queryResolver import QueryResolver


# ---------------------------------------------------------------------------
# Locations
# ---------------------------------------------------------------------------

USER_LOCATION = Coordinate(lat=51.5007, lng=-0.1246)
POSTCODE_LOCATION = Coordinate(lat=51.501009, lng=-0.141588)
W3W_LOCATION = Coordinate(lat=51.520847, lng=-0.195521)
PLACE_LOCATION = Coordinate(lat=51.503396, lng=-0.127640)

# One degree of latitude on a 6 371 km sphere, in metres
METERS_PER_DEGREE_LAT = 111_194.92664455873


def offset_north(origin: Coordinate, meters: float) -> Coordinate:
    """A point ``meters`` due north of ``origin`` (exact on the sphere)."""
    return Coordinate(lat=origin.lat + meters / METERS_PER_DEGREE_LAT, lng=origin.lng)


def make_marker(
    category: str,
    meters_north: float,
    *,
    visible: bool = True,
    marker_id: str | None = None,
    label: str | None = None,
) -> OverlayMarker:
    return OverlayMarker(
        category=category,
        coordinate=offset_north(USER_LOCATION, meters_north),
        visible=visible,
        label=label or f"{category} @ {meters_north:g}m",
        payload={"id": marker_id},
        marker_id=marker_id,
    )


@pytest.fixture
def user_location() -> Coordinate:
    return USER_LOCATION


@pytest.fixture
def sample_markers() -> dict[str, list[OverlayMarker]]:
    """Two layers with interleaved distances."""
    return {
        "zebraCrossings": [
            make_marker("zebraCrossings", 400, marker_id="z-400"),
            make_marker("zebraCrossings", 120, marker_id="z-120"),
            make_marker("zebraCrossings", 2500, marker_id="z-2500"),
        ],
        "wheelchairServices": [
            make_marker("wheelchairServices", 300, marker_id="w-300"),
            make_marker("wheelchairServices", 50, marker_id="w-50", visible=False),
            make_marker("wheelchairServices", 900, marker_id="w-900"),
        ],
    }


# ---------------------------------------------------------------------------
# Collaborator mocks
# ---------------------------------------------------------------------------


@pytest.fixture
def mock_three_words() -> AsyncMock:
    client = AsyncMock()
    client.suggest.return_value = [
        {"words": "filled.count.soap", "display_label": "filled.count.soap (What3Words)"},
        {"words": "filled.count.soaps", "display_label": "filled.count.soaps (What3Words)"},
    ]
    client.resolve.return_value = W3W_LOCATION
    return client


@pytest.fixture
def mock_postcodes() -> AsyncMock:
    client = AsyncMock()
    client.lookup.return_value = POSTCODE_LOCATION
    return client


@pytest.fixture
def mock_places() -> AsyncMock:
    client = AsyncMock()
    client.suggest.return_value = [
        {"place_ref": "ChIJ-10-downing", "display_label": "10 Downing Street, London, UK"},
        {"place_ref": "ChIJ-downing-college", "display_label": "Downing College, Cambridge, UK"},
    ]
    client.resolve_coordinate.return_value = PLACE_LOCATION
    return client


@pytest.fixture
def resolver(mock_three_words, mock_postcodes, mock_places) -> QueryResolver:
    return QueryResolver(
        three_words=mock_three_words,
        postcodes=mock_postcodes,
        places=mock_places,
        region="gb",
    )
