# backend/tests/golden/test_golden_queries.py
"""
Golden query suite for directory search.

End-to-end scenarios through DirectorySearchService with a seeded database.
These MUST ALL PASS before a release.
"""
from __future__ import annotations

import math

import pytest

from app.schemas.directory_search import DirectorySearchRequest, UserLocation
from app.services.search.directory_search_service import DirectorySearchService
from app.services.search.query_parser import LocationMode, QueryParser
from app.utils.geo import haversine_miles
from tests.helpers.geocoding_stubs import StubGeocoder


@pytest.fixture
def search_service(session_factory, geocoder: StubGeocoder) -> DirectorySearchService:
    return DirectorySearchService(geocoder=geocoder, session_factory=session_factory)


async def _search(service: DirectorySearchService, query: str, lat=None, lng=None):
    location = UserLocation(lat=lat, lng=lng) if lat is not None else None
    return await service.search(DirectorySearchRequest(query=query, user_location=location))


class TestGoldenScenarios:
    @pytest.mark.asyncio
    async def test_01_groomers_near_me(self, search_service, indiana_directory) -> None:
        """'groomers near me' @ (39.9, -86.0) -> nearest groomers within 25 miles."""
        response = await _search(search_service, "groomers near me", lat=39.9, lng=-86.0)

        pattern = response.metadata.parsed_pattern
        assert pattern.location_type == LocationMode.NEAR_ME.value
        assert pattern.service_type == "groomer"

        distances = [r.distance for r in response.results]
        assert distances, "expected nearby groomers"
        assert all(a < b for a, b in zip(distances, distances[1:]))
        assert all(d <= 25.0 for d in distances)
        assert {r.service_type for r in response.results} == {"groomer"}

    @pytest.mark.asyncio
    async def test_02_dog_parks_in_indiana(self, search_service, indiana_directory) -> None:
        """'dog parks in Indiana' -> state search, alphabetical."""
        response = await _search(search_service, "dog parks in Indiana")

        pattern = response.metadata.parsed_pattern
        assert pattern.location_type == LocationMode.STATE.value
        assert pattern.location_value == "IN"
        assert pattern.service_type == "dog_park"

        names = [r.name for r in response.results]
        assert names == sorted(names, key=str.lower)
        assert "Montrose Dog Beach" not in names
        assert len(names) == 3

    @pytest.mark.asyncio
    async def test_03_unknown_postal_code_geocodes_once(
        self, search_service, geocoder, directory, indiana_directory
    ) -> None:
        """'46240' with no geocoded listing there -> one geocoder call, exact matches only on failure."""
        directory.service("Nora Dog Wash", "groomer", zip_code="46240")
        directory.service("Nora Bark Park", "dog_park", zip_code="46240")
        geocoder.geocode.return_value = None

        response = await _search(search_service, "46240")

        geocoder.geocode.assert_awaited_once_with("46240")
        assert [r.name for r in response.results] == ["Nora Bark Park", "Nora Dog Wash"]
        assert all(r.is_exact_match and r.zip_code == "46240" for r in response.results)
        assert response.metadata.enhanced_search is None
        assert response.metadata.search_type == "zip_exact"
        assert response.metadata.degraded

    @pytest.mark.asyncio
    async def test_04_supplements_products_only_capped(self, search_service, directory) -> None:
        """'supplements' -> products only, relevance ordered, capped at 100."""
        directory.definitions()
        directory.product_categories()
        for i in range(105):
            directory.product(f"Supplement Blend {i:03d}", categories=["Supplements"])
        directory.product(
            "Daily Supplements Chews",
            description="Multivitamin supplements",
            categories=["Supplements"],
        )

        response = await _search(search_service, "supplements")

        meta = response.metadata
        assert meta.breakdown.services == 0
        assert meta.breakdown.products == len(response.results)
        assert len(response.results) == 100
        assert meta.capped
        scores = [r.relevance_score for r in response.results]
        assert all(a >= b for a, b in zip(scores, scores[1:]))
        assert all(s >= 5 for s in scores)


class TestGoldenProperties:
    @pytest.mark.asyncio
    async def test_05_exact_matches_precede_radius_matches(
        self, search_service, directory, indiana_directory
    ) -> None:
        """Exact postal matches lead even when a radius match is closer to the origin."""
        directory.service("Zed's Grooming", "groomer", zip_code="46037", lat=39.99, lng=-86.05)

        response = await _search(search_service, "groomers 46037")

        flags = [r.is_exact_match for r in response.results]
        assert flags == sorted(flags, reverse=True)
        exact = [r.name for r in response.results if r.is_exact_match]
        assert exact == ["Fishers Pet Spa", "Zed's Grooming"]

    @pytest.mark.asyncio
    async def test_06_radius_group_stays_inside_radius(self, search_service, indiana_directory) -> None:
        response = await _search(search_service, "dog parks 46037")
        origin = (39.9568, -86.0075)
        for result in response.results:
            if result.is_exact_match:
                continue
            assert haversine_miles(*origin, result.latitude, result.longitude) <= 25.0
        assert "Montrose Dog Beach" not in {r.name for r in response.results}

    @pytest.mark.asyncio
    async def test_07_postal_code_beats_state_name(self, search_service, geocoder, indiana_directory) -> None:
        response = await _search(search_service, "groomers in ohio 46037")
        assert response.metadata.parsed_pattern.location_type == "zip_code"
        assert response.metadata.parsed_pattern.location_value == "46037"

    @pytest.mark.asyncio
    async def test_08_no_location_or_category(self, search_service, indiana_directory) -> None:
        intent = QueryParser().parse("something nice for my dog")
        assert intent.location_mode is LocationMode.NONE
        assert intent.service_category is None

        response = await _search(search_service, "something nice for my dog")
        assert response.metadata.result_count == 0
        assert response.results == []

    @pytest.mark.asyncio
    async def test_09_exact_match_products_join_the_exact_group(
        self, search_service, directory, indiana_directory
    ) -> None:
        """An online-only product filed under the searched postal code ranks with exact matches."""
        directory.product(
            "Carmel Pet Pantry",
            description="Local supplements shop",
            categories=["Supplements"],
            zip_code="46032",
        )

        response = await _search(search_service, "vets and supplements 46032")

        exact = [(r.type, r.name, r.distance) for r in response.results if r.is_exact_match]
        assert exact == [
            ("service", "Carmel Animal Hospital", 0.0),
            ("product", "Carmel Pet Pantry", 0.0),
        ]
        assert response.metadata.breakdown.products == 1
        assert not any(r.distance is not None and math.isinf(r.distance) for r in response.results)

    @pytest.mark.asyncio
    async def test_10_late_sorting_match_survives_the_fetch_cap(
        self, search_service, directory
    ) -> None:
        """Irrelevant products that sort first never crowd a match out of the capped fetch."""
        directory.definitions()
        directory.product_categories()
        for i in range(105):
            directory.product(f"Aardvark Toy {i:03d}", categories=["Toys"])
        directory.product("Zesty Supplements", categories=["Supplements"])

        response = await _search(search_service, "supplements")

        assert [r.name for r in response.results] == ["Zesty Supplements"]
        assert response.results[0].relevance_score == 125
        assert not response.metadata.capped
