"""Accessible Map API -- Main Application Entry Point

Creates the FastAPI application, builds the shared HTTP client, the
lookup clients, the search resolver and the map surface in the lifespan
hook, and registers the API route modules under the /api/v1 prefix.

Run with::

    uvicorn accessmap.main:app --host 0.0.0.0 --port 8000 --reload
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from accessmap.api.routes import locations, nearest, search
from accessmap.core.config import Settings, settings
from accessmap.integrations.datalayers import DataLayersClient
from accessmap.integrations.httpClient import create_http_client
from accessmap.integrations.places import GooglePlacesClient
from accessmap.integrations.postcodes import PostcodesClient
from accessmap.integrations.what3words import What3WordsClient
from accessmap.services.mapSurface import open_map_surface
from accessmap.services.proximityRanker import NearestLocationsTracker
from accessmap.services.queryResolver import QueryResolver

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Lifespan: startup / shutdown hooks
# ---------------------------------------------------------------------------

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan context manager.

    Startup:
      - Create the shared httpx client and the lookup clients.
      - Open the map surface centred on the default location.

    Shutdown:
      - Close the map surface and the httpx client.
    """
    config: Settings = app.state.settings
    logging.basicConfig(level=config.log_level.upper())

    async with create_http_client(config) as http:
        what3words = What3WordsClient(http, config.what3words_api_key)
        data_layers = DataLayersClient(http, config.data_layers_api_url, config.data_layers_api_key)

        app.state.what3words = what3words
        app.state.data_layers = data_layers
        app.state.resolver = QueryResolver(
            three_words=what3words,
            postcodes=PostcodesClient(http),
            places=GooglePlacesClient(http, config.google_maps_api_key),
            region=config.search_region,
        )
        app.state.nearest_tracker = NearestLocationsTracker(top_n=config.nearest_top_n)

        async with open_map_surface(config, data_layers) as map_surface:
            app.state.map_surface = map_surface
            logger.info("%s %s started", config.app_name, config.app_version)
            yield

    logger.info("%s stopped", config.app_name)


# ---------------------------------------------------------------------------
# Application factory
# ---------------------------------------------------------------------------

def create_app(config: Settings = settings) -> FastAPI:
    app = FastAPI(
        title=config.app_name,
        version=config.app_version,
        debug=config.debug,
        lifespan=lifespan,
    )
    app.state.settings = config

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/health", tags=["Health"])
    async def health():
        """Lightweight health check for load balancers and readiness probes."""
        return {"status": "ok", "version": config.app_version}

    prefix = config.api_v1_prefix
    app.include_router(search.router, prefix=prefix)
    app.include_router(nearest.router, prefix=prefix)
    app.include_router(locations.router, prefix=prefix)

    return app


app = create_app()
