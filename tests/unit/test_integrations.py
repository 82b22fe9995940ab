"""
Unit tests for the external lookup clients.

Each client runs against an ``httpx.MockTransport`` so the request shape
(path, query parameters, headers) and the response handling can be
checked without network access.
"""

import json
from urllib.parse import parse_qs, urlparse

import httpx
import pytest

from accessmap.core.config import Settings
from accessmap.integrations.datalayers import DataLayersClient, ReportSubmissionError
from accessmap.integrations.httpClient import ResolutionFailure, create_http_client
from accessmap.integrations.places import GooglePlacesClient
from accessmap.integrations.postcodes import PostcodesClient
from accessmap.integrations.what3words import What3WordsClient
from accessmap.models import Coordinate


def _client(handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


def _query(request: httpx.Request) -> dict[str, str]:
    return {k: v[0] for k, v in parse_qs(urlparse(str(request.url)).query).items()}


# ---------------------------------------------------------------------------
# Shared HTTP plumbing
# ---------------------------------------------------------------------------


class TestHttpClient:

    @pytest.mark.asyncio
    async def test_client_uses_configured_timeout(self):
        async with create_http_client(Settings(request_timeout_seconds=5.0)) as client:
            assert client.timeout.read == 5.0
            assert client.headers["Accept"] == "application/json"


# ---------------------------------------------------------------------------
# what3words
# ---------------------------------------------------------------------------


class TestWhat3WordsClient:

    @pytest.mark.asyncio
    async def test_suggest_builds_labels(self):
        seen = {}

        def handler(request):
            seen["path"] = request.url.path
            seen["query"] = _query(request)
            return httpx.Response(
                200,
                json={
                    "suggestions": [
                        {"words": "filled.count.soap", "nearestPlace": "Bayswater, London"},
                        {"country": "GB"},
                        {"words": "filled.count.soaps"},
                    ]
                },
            )

        async with _client(handler) as http:
            results = await What3WordsClient(http, "w3w-key").suggest("filled.count.so")

        assert seen["path"] == "/v3/autosuggest"
        assert seen["query"] == {"input": "filled.count.so", "key": "w3w-key"}
        assert results == [
            {"words": "filled.count.soap", "display_label": "filled.count.soap (What3Words)"},
            {"words": "filled.count.soaps", "display_label": "filled.count.soaps (What3Words)"},
        ]

    @pytest.mark.asyncio
    async def test_resolve_returns_coordinate(self):
        def handler(request):
            assert request.url.path == "/v3/convert-to-coordinates"
            assert _query(request)["words"] == "filled.count.soap"
            return httpx.Response(
                200, json={"coordinates": {"lat": 51.520847, "lng": -0.195521}, "words": "filled.count.soap"}
            )

        async with _client(handler) as http:
            coordinate = await What3WordsClient(http, "k").resolve("filled.count.soap")

        assert coordinate == Coordinate(lat=51.520847, lng=-0.195521)

    @pytest.mark.asyncio
    async def test_resolve_bad_words_is_not_found(self):
        def handler(request):
            return httpx.Response(400, json={"error": {"code": "BadWords", "message": "Invalid words"}})

        async with _client(handler) as http:
            assert await What3WordsClient(http, "k").resolve("not.real.words") is None

    @pytest.mark.asyncio
    async def test_words_for_coordinate(self):
        def handler(request):
            assert request.url.path == "/v3/convert-to-3wa"
            assert _query(request)["coordinates"] == "51.5007,-0.1246"
            return httpx.Response(200, json={"words": "index.home.raft"})

        async with _client(handler) as http:
            words = await What3WordsClient(http, "k").words_for(Coordinate(51.5007, -0.1246))

        assert words == "index.home.raft"

    @pytest.mark.asyncio
    async def test_missing_api_key_fails_without_request(self):
        def handler(request):
            raise AssertionError("no request expected")

        async with _client(handler) as http:
            with pytest.raises(ResolutionFailure):
                await What3WordsClient(http, "").suggest("filled.count.soap")

    @pytest.mark.asyncio
    async def test_server_error_raises(self):
        async with _client(lambda request: httpx.Response(503, text="unavailable")) as http:
            with pytest.raises(ResolutionFailure) as exc_info:
                await What3WordsClient(http, "k").suggest("a.b.c")
        assert exc_info.value.status == "503"

    @pytest.mark.asyncio
    async def test_invalid_json_raises(self):
        async with _client(lambda request: httpx.Response(200, text="<html>")) as http:
            with pytest.raises(ResolutionFailure):
                await What3WordsClient(http, "k").suggest("a.b.c")

    @pytest.mark.asyncio
    async def test_suggestions_of_wrong_type_raise(self):
        body = {"suggestions": {"words": "filled.count.soap"}}
        async with _client(lambda request: httpx.Response(200, json=body)) as http:
            with pytest.raises(ResolutionFailure):
                await What3WordsClient(http, "k").suggest("filled.count.soap")

    @pytest.mark.asyncio
    async def test_transport_error_raises(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        async with _client(handler) as http:
            with pytest.raises(ResolutionFailure):
                await What3WordsClient(http, "k").suggest("a.b.c")

    @pytest.mark.asyncio
    async def test_timeout_raises(self):
        def handler(request):
            raise httpx.ReadTimeout("timed out", request=request)

        async with _client(handler) as http:
            with pytest.raises(ResolutionFailure):
                await What3WordsClient(http, "k").resolve("a.b.c")


# ---------------------------------------------------------------------------
# postcodes.io
# ---------------------------------------------------------------------------


class TestPostcodesClient:

    @pytest.mark.asyncio
    async def test_lookup_returns_centroid(self):
        def handler(request):
            assert request.url.raw_path == b"/postcodes/SW1A%201AA"
            return httpx.Response(
                200,
                json={"status": 200, "result": {"postcode": "SW1A 1AA", "latitude": 51.501009, "longitude": -0.141588}},
            )

        async with _client(handler) as http:
            coordinate = await PostcodesClient(http).lookup(" SW1A 1AA ")

        assert coordinate == Coordinate(lat=51.501009, lng=-0.141588)

    @pytest.mark.asyncio
    async def test_unknown_postcode_is_not_found(self):
        async with _client(lambda request: httpx.Response(404, json={"status": 404, "error": "Invalid postcode"})) as http:
            assert await PostcodesClient(http).lookup("ZZ9 9ZZ") is None

    @pytest.mark.asyncio
    async def test_postcode_without_coordinates_is_not_found(self):
        body = {"status": 200, "result": {"postcode": "GIR 0AA", "latitude": None, "longitude": None}}
        async with _client(lambda request: httpx.Response(200, json=body)) as http:
            assert await PostcodesClient(http).lookup("GIR 0AA") is None

    @pytest.mark.asyncio
    async def test_malformed_coordinates_raise(self):
        body = {"status": 200, "result": {"latitude": "north", "longitude": 0}}
        async with _client(lambda request: httpx.Response(200, json=body)) as http:
            with pytest.raises(ResolutionFailure):
                await PostcodesClient(http).lookup("SW1A 1AA")


# ---------------------------------------------------------------------------
# Google Places
# ---------------------------------------------------------------------------


class TestGooglePlacesClient:

    @pytest.mark.asyncio
    async def test_suggest_restricts_region(self):
        seen = {}

        def handler(request):
            seen["path"] = request.url.path
            seen["query"] = _query(request)
            return httpx.Response(
                200,
                json={
                    "status": "OK",
                    "predictions": [
                        {"description": "10 Downing Street, London, UK", "place_id": "abc"},
                        {"description": "No id"},
                    ],
                },
            )

        async with _client(handler) as http:
            results = await GooglePlacesClient(http, "g-key").suggest("10 Downing Street", "GB")

        assert seen["path"] == "/maps/api/place/autocomplete/json"
        assert seen["query"] == {"input": "10 Downing Street", "components": "country:gb", "key": "g-key"}
        assert results == [{"place_ref": "abc", "display_label": "10 Downing Street, London, UK"}]

    @pytest.mark.asyncio
    async def test_zero_results_is_empty(self):
        body = {"status": "ZERO_RESULTS", "predictions": []}
        async with _client(lambda request: httpx.Response(200, json=body)) as http:
            assert await GooglePlacesClient(http, "k").suggest("qwertyuiop", "gb") == []

    @pytest.mark.asyncio
    async def test_request_denied_raises(self):
        body = {"status": "REQUEST_DENIED", "error_message": "The provided API key is invalid."}
        async with _client(lambda request: httpx.Response(200, json=body)) as http:
            with pytest.raises(ResolutionFailure) as exc_info:
                await GooglePlacesClient(http, "k").suggest("London", "gb")
        assert exc_info.value.status == "REQUEST_DENIED"

    @pytest.mark.asyncio
    async def test_resolve_coordinate(self):
        def handler(request):
            assert _query(request) == {"place_id": "abc", "fields": "geometry", "key": "k"}
            return httpx.Response(
                200,
                json={"status": "OK", "result": {"geometry": {"location": {"lat": 51.503396, "lng": -0.12764}}}},
            )

        async with _client(handler) as http:
            coordinate = await GooglePlacesClient(http, "k").resolve_coordinate("abc")

        assert coordinate == Coordinate(lat=51.503396, lng=-0.12764)

    @pytest.mark.asyncio
    async def test_resolve_unknown_place(self):
        async with _client(lambda request: httpx.Response(200, json={"status": "NOT_FOUND"})) as http:
            assert await GooglePlacesClient(http, "k").resolve_coordinate("gone") is None

    @pytest.mark.asyncio
    async def test_resolve_without_geometry(self):
        body = {"status": "OK", "result": {}}
        async with _client(lambda request: httpx.Response(200, json=body)) as http:
            assert await GooglePlacesClient(http, "k").resolve_coordinate("abc") is None

    @pytest.mark.asyncio
    async def test_predictions_of_wrong_type_raise(self):
        body = {"status": "OK", "predictions": 5}
        async with _client(lambda request: httpx.Response(200, json=body)) as http:
            with pytest.raises(ResolutionFailure):
                await GooglePlacesClient(http, "k").suggest("10 Downing Street", "gb")

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "body",
        [
            {"status": "OK", "result": "oops"},
            {"status": "OK", "result": {"geometry": ["not", "an", "object"]}},
        ],
    )
    async def test_details_of_wrong_shape_raise(self, body):
        async with _client(lambda request: httpx.Response(200, json=body)) as http:
            with pytest.raises(ResolutionFailure):
                await GooglePlacesClient(http, "k").resolve_coordinate("abc")


# ---------------------------------------------------------------------------
# Data Layers API
# ---------------------------------------------------------------------------


class TestDataLayersClient:

    @pytest.mark.asyncio
    async def test_nearby_groups_markers_by_category(self):
        seen = {}

        def handler(request):
            seen["path"] = request.url.path
            seen["query"] = _query(request)
            seen["api_key"] = request.headers.get("X-API-KEY")
            return httpx.Response(
                200,
                json=[
                    {"id": 1, "category": "zebraCrossings", "latitude": 51.501, "longitude": -0.125},
                    {"id": "w1", "type": "wheelchairServices", "lat": 51.502, "lng": -0.126, "name": "Shopmobility"},
                    {"id": 2, "category": "zebraCrossings", "latitude": 51.503, "longitude": -0.127},
                    {"id": 3, "category": "stepFreeStations", "latitude": 51.504, "longitude": -0.128},
                    {"id": 4, "category": "zebraCrossings"},
                ],
            )

        async with _client(handler) as http:
            client = DataLayersClient(http, "https://layers.example/v1/", "dl-key")
            markers = await client.nearby(Coordinate(51.5007, -0.1246), radius_meters=500)

        assert seen["path"] == "/v1/locations/nearby"
        assert seen["query"] == {"latitude": "51.5007", "longitude": "-0.1246", "radius": "500"}
        assert seen["api_key"] == "dl-key"

        assert list(markers) == ["zebraCrossings", "wheelchairServices", "stepFreeStations"]
        assert [m.marker_id for m in markers["zebraCrossings"]] == ["1", "2"]
        assert markers["zebraCrossings"][0].label == "Zebra Crossing"
        assert markers["wheelchairServices"][0].label == "Shopmobility"
        assert markers["stepFreeStations"][0].label == "stepFreeStations"
        assert all(m.visible for group in markers.values() for m in group)

    @pytest.mark.asyncio
    async def test_nearby_accepts_wrapped_payload(self):
        body = {"locations": [{"id": 9, "category": "zebraCrossings", "latitude": 51.5, "longitude": -0.1}]}
        async with _client(lambda request: httpx.Response(200, json=body)) as http:
            markers = await DataLayersClient(http, "https://layers.example/v1", "k").nearby(Coordinate(51.5, -0.1))
        assert markers["zebraCrossings"][0].payload == body["locations"][0]

    @pytest.mark.asyncio
    async def test_nearby_unexpected_shape_raises(self):
        async with _client(lambda request: httpx.Response(200, json={"message": "nope"})) as http:
            with pytest.raises(ResolutionFailure):
                await DataLayersClient(http, "https://layers.example/v1", "k").nearby(Coordinate(51.5, -0.1))

    @pytest.mark.asyncio
    async def test_submit_report_sends_patch(self):
        seen = {}

        def handler(request):
            seen["method"] = request.method
            seen["path"] = request.url.path
            seen["auth"] = request.headers.get("Authorization")
            seen["body"] = json.loads(request.content)
            return httpx.Response(204)

        async with _client(handler) as http:
            client = DataLayersClient(http, "https://layers.example/v1", "dl-key")
            await client.submit_report("loc-42", {"category": "zebraCrossings", "features": {"tactilePaving": True}})

        assert seen == {
            "method": "PATCH",
            "path": "/v1/locations/loc-42/reports",
            "auth": "Bearer dl-key",
            "body": {"category": "zebraCrossings", "features": {"tactilePaving": True}},
        }

    @pytest.mark.asyncio
    async def test_rejected_report_raises(self):
        async with _client(lambda request: httpx.Response(422, json={"detail": "bad"})) as http:
            client = DataLayersClient(http, "https://layers.example/v1", "k")
            with pytest.raises(ReportSubmissionError) as exc_info:
                await client.submit_report("loc-42", {})
        assert exc_info.value.status == "422"
