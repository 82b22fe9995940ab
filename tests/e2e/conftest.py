"""
E2E test fixtures for the accessible map API.

Provides:
- An in-process FastAPI test app with all routes registered
- httpx AsyncClient wired via ASGI transport (no network needed)
- A map surface pre-loaded with the sample overlay markers

External services (what3words, postcodes.io, Google Places, Data Layers)
are replaced by ``AsyncMock`` clients on ``app.state`` so the full
route -> service flow is exercised without network access.
"""

from __future__ import annotations

from typing import AsyncGenerator
from unittest.mock import AsyncMock

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from accessmap.core.config import Settings
from accessmap.services.mapSurface import HeadlessMapSurface
from accessmap.services.proximityRanker import NearestLocationsTracker
from tests.conftest import USER_LOCATION, make_marker


@pytest.fixture
def test_settings() -> Settings:
    return Settings(
        api_v1_prefix="/api/v1",
        search_region="gb",
        nearest_top_n=3,
        initial_active_layers={"zebraCrossings": True, "wheelchairServices": False},
    )


@pytest.fixture
def mock_data_layers() -> AsyncMock:
    client = AsyncMock()
    client.nearby.return_value = {
        "zebraCrossings": [
            make_marker("zebraCrossings", 80, marker_id="z-80"),
            make_marker("zebraCrossings", 1800, marker_id="z-1800"),
        ],
        "wheelchairServices": [make_marker("wheelchairServices", 150, marker_id="w-150")],
    }
    client.submit_report.return_value = None
    return client


@pytest.fixture
def map_surface(sample_markers, mock_data_layers) -> HeadlessMapSurface:
    surface = HeadlessMapSurface(center=USER_LOCATION, data_layers=mock_data_layers)
    for category, markers in sample_markers.items():
        surface.load_layer(category, markers)
    return surface


# ---------------------------------------------------------------------------
# FastAPI test application
# ---------------------------------------------------------------------------

def _create_test_app(settings: Settings, **state):
    """Build a FastAPI app with all routes registered and the lifespan
    collaborators placed on ``app.state`` directly."""
    from fastapi import FastAPI

    from accessmap.api.routes.locations import router as locations_router
    from accessmap.api.routes.nearest import router as nearest_router
    from accessmap.api.routes.search import router as search_router

    app = FastAPI(title="Accessible Map Test")
    app.state.settings = settings
    for name, value in state.items():
        setattr(app.state, name, value)

    app.include_router(search_router, prefix=settings.api_v1_prefix)
    app.include_router(nearest_router, prefix=settings.api_v1_prefix)
    app.include_router(locations_router, prefix=settings.api_v1_prefix)

    return app


@pytest_asyncio.fixture
async def client(
    test_settings,
    resolver,
    map_surface,
    mock_three_words,
    mock_data_layers,
) -> AsyncGenerator[AsyncClient, None]:
    """httpx AsyncClient connected to the test app via ASGI transport."""
    mock_three_words.words_for.return_value = "index.home.raft"
    app = _create_test_app(
        test_settings,
        resolver=resolver,
        map_surface=map_surface,
        nearest_tracker=NearestLocationsTracker(top_n=test_settings.nearest_top_n),
        what3words=mock_three_words,
        data_layers=mock_data_layers,
    )
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
