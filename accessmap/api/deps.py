"""
Shared FastAPI dependencies for the accessible map backend.

The search resolver, map surface, and external clients are built once in
the application lifespan and stored on ``app.state``; these dependencies
hand them to route handlers.

Usage in a route::

    @router.get("/search")
    async def search(resolver: Resolver):
        ...
"""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends, Request

from accessmap.core.config import Settings
from accessmap.integrations.datalayers import DataLayersClient
from accessmap.integrations.what3words import What3WordsClient
from accessmap.services.mapSurface import HeadlessMapSurface
from accessmap.services.proximityRanker import NearestLocationsTracker
from accessmap.services.queryResolver import QueryResolver


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_resolver(request: Request) -> QueryResolver:
    return request.app.state.resolver


def get_map_surface(request: Request) -> HeadlessMapSurface:
    return request.app.state.map_surface


def get_nearest_tracker(request: Request) -> NearestLocationsTracker:
    return request.app.state.nearest_tracker


def get_what3words(request: Request) -> What3WordsClient:
    return request.app.state.what3words


def get_data_layers(request: Request) -> DataLayersClient:
    return request.app.state.data_layers


AppSettings = Annotated[Settings, Depends(get_settings)]
Resolver = Annotated[QueryResolver, Depends(get_resolver)]
MapState = Annotated[HeadlessMapSurface, Depends(get_map_surface)]
NearestTracker = Annotated[NearestLocationsTracker, Depends(get_nearest_tracker)]
What3Words = Annotated[What3WordsClient, Depends(get_what3words)]
DataLayers = Annotated[DataLayersClient, Depends(get_data_layers)]
