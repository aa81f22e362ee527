# backend/tests/unit/services/geocoding/test_geocoding_providers.py
from __future__ import annotations

from httpx import ConnectError, MockTransport, Response
import pytest

from app.services.geocoding import (
    GoogleMapsProvider,
    MockGeocodingProvider,
    NominatimProvider,
    create_geocoding_provider,
)

NOMINATIM_HIT = [
    {
        "place_id": 12345,
        "lat": "39.9050",
        "lon": "-86.1230",
        "display_name": "Indianapolis, Marion County, Indiana, 46240, United States",
        "importance": 0.55,
        "address": {
            "city": "Indianapolis",
            "state": "Indiana",
            "postcode": "46240",
            "country_code": "us",
        },
    }
]

GOOGLE_HIT = {
    "status": "OK",
    "results": [
        {
            "place_id": "ChIJabc",
            "formatted_address": "Fishers, IN 46037, USA",
            "geometry": {"location": {"lat": 39.9568, "lng": -86.0075}},
            "address_components": [
                {"long_name": "Fishers", "short_name": "Fishers", "types": ["locality"]},
                {
                    "long_name": "Indiana",
                    "short_name": "IN",
                    "types": ["administrative_area_level_1", "political"],
                },
                {"long_name": "46037", "short_name": "46037", "types": ["postal_code"]},
                {"long_name": "United States", "short_name": "US", "types": ["country"]},
            ],
        }
    ],
}


class TestNominatimProvider:
    @pytest.mark.asyncio
    async def test_geocode_sends_expected_request(self) -> None:
        captured = {}

        def handler(request):
            captured["url"] = str(request.url)
            captured["params"] = dict(request.url.params)
            captured["user_agent"] = request.headers.get("User-Agent")
            return Response(200, json=NOMINATIM_HIT)

        provider = NominatimProvider(
            base_url="https://nominatim.test/",
            user_agent="DogDirTests/1.0",
            transport=MockTransport(handler),
        )
        result = await provider.geocode("46240")

        assert captured["url"].startswith("https://nominatim.test/search?")
        assert captured["params"]["q"] == "46240"
        assert captured["params"]["format"] == "json"
        assert captured["params"]["limit"] == "1"
        assert captured["params"]["countrycodes"] == "us"
        assert captured["user_agent"] == "DogDirTests/1.0"

        assert result is not None
        assert result.latitude == pytest.approx(39.905)
        assert result.longitude == pytest.approx(-86.123)
        assert result.city == "Indianapolis"
        assert result.postal_code == "46240"
        assert result.country == "US"
        assert result.provider_id == "nominatim:12345"
        assert result.has_coordinates

    @pytest.mark.asyncio
    async def test_empty_response_is_no_match(self) -> None:
        provider = NominatimProvider(transport=MockTransport(lambda r: Response(200, json=[])))
        assert await provider.geocode("00000") is None

    @pytest.mark.asyncio
    async def test_http_error_status_is_no_match(self) -> None:
        provider = NominatimProvider(transport=MockTransport(lambda r: Response(503, text="busy")))
        assert await provider.geocode("46240") is None

    @pytest.mark.asyncio
    async def test_transport_errors_propagate(self) -> None:
        def handler(request):
            raise ConnectError("connection refused", request=request)

        provider = NominatimProvider(transport=MockTransport(handler))
        with pytest.raises(ConnectError):
            await provider.geocode("46240")


class TestGoogleMapsProvider:
    @pytest.mark.asyncio
    async def test_geocode_parses_components(self) -> None:
        captured = {}

        def handler(request):
            captured["params"] = dict(request.url.params)
            return Response(200, json=GOOGLE_HIT)

        provider = GoogleMapsProvider(api_key="test-key", transport=MockTransport(handler))
        result = await provider.geocode("46037")

        assert captured["params"]["address"] == "46037"
        assert captured["params"]["components"] == "country:US"
        assert captured["params"]["key"] == "test-key"
        assert result is not None
        assert (result.latitude, result.longitude) == (39.9568, -86.0075)
        assert result.city == "Fishers"
        assert result.state == "IN"
        assert result.postal_code == "46037"
        assert result.country == "US"
        assert result.provider_id == "google:ChIJabc"

    @pytest.mark.asyncio
    async def test_zero_results(self) -> None:
        provider = GoogleMapsProvider(
            api_key="test-key",
            transport=MockTransport(
                lambda r: Response(200, json={"status": "ZERO_RESULTS", "results": []})
            ),
        )
        assert await provider.geocode("00000") is None

    @pytest.mark.asyncio
    async def test_denied_request(self) -> None:
        provider = GoogleMapsProvider(
            api_key="bad-key",
            transport=MockTransport(
                lambda r: Response(200, json={"status": "REQUEST_DENIED", "results": []})
            ),
        )
        assert await provider.geocode("46037") is None


class TestMockProvider:
    @pytest.mark.asyncio
    async def test_known_postal_code(self) -> None:
        result = await MockGeocodingProvider().geocode("46240")
        assert result is not None
        assert result.state == "IN"
        assert result.has_coordinates

    @pytest.mark.asyncio
    async def test_unknown_postal_code(self) -> None:
        assert await MockGeocodingProvider().geocode("99999") is None


class TestFactory:
    @pytest.mark.parametrize(
        "name, expected",
        [
            ("google", GoogleMapsProvider),
            ("mock", MockGeocodingProvider),
            ("nominatim", NominatimProvider),
            ("MOCK", MockGeocodingProvider),
            ("anything-else", NominatimProvider),
        ],
    )
    def test_override(self, name: str, expected: type) -> None:
        assert isinstance(create_geocoding_provider(name), expected)
