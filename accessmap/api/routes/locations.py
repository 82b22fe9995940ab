"""
Location lookup & accessibility report endpoints
=================================================

Endpoints:
  - GET   /api/v1/locations/what3words?lat=&lng=    three-word address of a point
  - PATCH /api/v1/locations/{location_id}/reports   forward an accessibility report
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, HTTPException, Query, status

from accessmap.api.deps import DataLayers, What3Words
from accessmap.api.schemas.nearest import (
    AccessibilityReport,
    ReportAccepted,
    ThreeWordAddressResponse,
)
from accessmap.integrations.datalayers import ReportSubmissionError
from accessmap.integrations.httpClient import ResolutionFailure
from accessmap.models import Coordinate

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/locations", tags=["Locations"])


@router.get("/what3words", summary="Three-word address of a point")
async def what3words_endpoint(
    client: What3Words,
    lat: float = Query(ge=-90, le=90),
    lng: float = Query(ge=-180, le=180),
) -> ThreeWordAddressResponse:
    """Look up the what3words address for a coordinate.

    ``words`` is null when the lookup fails; the position itself is
    still echoed back.
    """
    try:
        words = await client.words_for(Coordinate(lat=lat, lng=lng))
    except ResolutionFailure as exc:
        logger.warning("what3words lookup failed for (%.5f,%.5f): %s", lat, lng, exc)
        words = None
    return ThreeWordAddressResponse(lat=lat, lng=lng, words=words)


@router.patch(
    "/{location_id}/reports",
    status_code=status.HTTP_202_ACCEPTED,
    summary="Submit an accessibility report",
)
async def submit_report_endpoint(
    location_id: str,
    body: AccessibilityReport,
    client: DataLayers,
) -> ReportAccepted:
    try:
        await client.submit_report(location_id, body.model_dump())
    except ReportSubmissionError as exc:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=f"Report submission failed: {exc}",
        )
    return ReportAccepted(location_id=location_id)
