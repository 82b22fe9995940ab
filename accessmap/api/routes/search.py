"""
Location search REST API endpoints
===================================

Endpoints:
  - GET  /api/v1/search?q=...        Classify a query and list candidates
  - POST /api/v1/search/select       Resolve a picked candidate and
                                     recenter the map on it

Debouncing is a client concern for this HTTP surface: every request is
one resolution.  A selection that cannot be resolved is reported as
``selected: false`` and leaves the map where it was.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Query

from accessmap.api.deps import MapState, Resolver
from accessmap.api.schemas.search import (
    SearchResponse,
    SearchResultOut,
    SelectionRequest,
    SelectionResponse,
)
from accessmap.services.queryClassifier import classify

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/search", tags=["Search"])


@router.get("", summary="Search addresses, postcodes, and what3words")
async def search_endpoint(
    resolver: Resolver,
    q: str = Query(default="", max_length=200, description="Raw search text"),
) -> SearchResponse:
    """List candidates for a query.

    Queries with two or more dots go to what3words, UK postcodes to
    postcodes.io, and everything else to Places autocomplete (restricted
    to the configured region).  A failing source yields an empty list.
    """
    if not q.strip():
        return SearchResponse(query=q, kind=None, results=[])

    results = [SearchResultOut.from_result(result) async for result in resolver.resolve(q)]
    return SearchResponse(query=q, kind=classify(q).value, results=results)


@router.post("/select", summary="Select a search candidate")
async def select_endpoint(
    body: SelectionRequest,
    resolver: Resolver,
    map_surface: MapState,
) -> SelectionResponse:
    """Resolve the picked candidate to coordinates and recenter the map."""
    coordinate = await resolver.resolve_selection(body.to_result())
    if coordinate is None:
        logger.info("Selection '%s' was not applied", body.display_label)
        return SelectionResponse(selected=False)

    await map_surface.recenter(coordinate)
    return SelectionResponse(selected=True, lat=coordinate.lat, lng=coordinate.lng)
