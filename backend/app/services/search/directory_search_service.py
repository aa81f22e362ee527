# backend/app/services/search/directory_search_service.py
"""
Directory search service that orchestrates the full search pipeline.

Pipeline stages:
1. Category load - service types and product categories (one failure degrades,
   both failing is an outage)
2. Query parsing - category and location intent
3. Product signal - should products be searched at all
4. Location resolution - origin coordinates for postal / near-me searches
5. Fetch - services and products, concurrently
6. Distance annotation and product relevance scoring
7. Ranking, capping and response assembly
"""
from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
import logging
import math
import time
from typing import Dict, List, Optional, Sequence, Tuple

from sqlalchemy import text

from app.core.constants import MAX_SUGGESTIONS
from app.core.exceptions import (
    RepositoryException,
    SearchUnavailableException,
    ValidationException,
)
from app.database import SessionFactory, get_db_session
from app.repositories.category_repository import CategoryRepository
from app.repositories.listing_repository import ServiceListingRepository
from app.schemas.directory_search import (
    DirectorySearchRequest,
    DirectorySearchResponse,
    EnhancedSearchInfo,
    ParsedPattern,
    ProductCategoriesResponse,
    ProductCategoryItem,
    ProductResult,
    SearchBreakdown,
    SearchFilters,
    SearchHealthResponse,
    SearchMetadata,
    SearchResult,
    SearchSuggestion,
    ServiceResult,
    SuggestionsResponse,
)
from app.services.geocoding.base import GeocodingProvider
from app.services.search.candidates import Candidate, ProductCandidate, ServiceCandidate
from app.services.search.category_matcher import (
    CategoryMatcher,
    ProductCategoryDefinition,
    ProductSignal,
)
from app.services.search.circuit_breaker import GEOCODING_CIRCUIT, CircuitBreaker
from app.services.search.config import get_search_config
from app.services.search.distance import annotate_distances
from app.services.search.fetcher import DualCollectionFetcher, FetchResult, plan_fetch
from app.services.search.location_resolver import (
    CallerLocation,
    LocationResolver,
    ResolvedOrigin,
)
from app.services.search.metrics import record_search_metrics
from app.services.search.query_parser import (
    CategoryDefinition,
    LocationMode,
    ParsedIntent,
    QueryParser,
)
from app.services.search.ranking_service import rank_candidates
from app.services.search.relevance import score_products

logger = logging.getLogger(__name__)

NO_CRITERIA_MESSAGE = (
    "Try searching for a service type like 'groomers', 'vets' or 'dog parks', "
    "or a product category like 'supplements'."
)


@dataclass
class SearchTimings:
    """Stage timings and degradation notes for one search."""

    categories_ms: int = 0
    resolve_ms: int = 0
    fetch_ms: int = 0
    rank_ms: int = 0
    degradation_reasons: List[str] = field(default_factory=list)

    def stages(self) -> Dict[str, int]:
        return {
            "categories": self.categories_ms,
            "resolve": self.resolve_ms,
            "fetch": self.fetch_ms,
            "rank": self.rank_ms,
        }


def _elapsed_ms(start: float) -> int:
    return int((time.perf_counter() - start) * 1000)


def _search_type(origin: ResolvedOrigin) -> str:
    if origin.mode is LocationMode.POSTAL_RADIUS:
        return "enhanced_zip" if origin.has_coordinates else "zip_exact"
    if origin.mode is LocationMode.NEAR_ME:
        return "simple_radius"
    return "simple"


def _json_distance(distance: Optional[float]) -> Optional[float]:
    if distance is None or math.isinf(distance):
        return None
    return round(distance, 2)


def to_result(candidate: Candidate) -> SearchResult:
    """Convert a ranked candidate to its API representation."""
    if isinstance(candidate, ServiceCandidate):
        return ServiceResult(
            id=candidate.id,
            name=candidate.name,
            service_type=candidate.service_type,
            description=candidate.description,
            address=candidate.address,
            city=candidate.city,
            state=candidate.state,
            zip_code=candidate.zip_code,
            latitude=candidate.latitude,
            longitude=candidate.longitude,
            website_url=candidate.website_url,
            contact_phone=candidate.contact_phone,
            image_url=candidate.image_url,
            rating=candidate.rating,
            review_count=candidate.review_count,
            is_verified=candidate.is_verified,
            distance=_json_distance(candidate.distance_miles),
            is_exact_match=candidate.is_exact_location_match,
        )
    return ProductResult(
        id=candidate.id,
        name=candidate.name,
        description=candidate.description,
        categories=list(candidate.categories),
        website=candidate.website,
        contact_number=candidate.contact_number,
        email=candidate.email,
        location_address=candidate.location_address,
        city=candidate.city,
        state=candidate.state,
        zip_code=candidate.zip_code,
        latitude=candidate.latitude,
        longitude=candidate.longitude,
        image_url=candidate.image_url,
        is_verified_gentle_care=candidate.is_verified_gentle_care,
        distance=_json_distance(candidate.distance_miles),
        is_exact_match=candidate.is_exact_location_match,
        relevance_score=candidate.relevance_score,
    )


class DirectorySearchService:
    """
    Natural-language search over service and product listings.

    Usage:
        service = DirectorySearchService(geocoder=create_geocoding_provider())
        response = await service.search(DirectorySearchRequest(query="groomers in 46037"))
    """

    def __init__(
        self,
        geocoder: Optional[GeocodingProvider] = None,
        session_factory: SessionFactory = get_db_session,
        parser: Optional[QueryParser] = None,
        matcher: Optional[CategoryMatcher] = None,
        geocoding_circuit: CircuitBreaker = GEOCODING_CIRCUIT,
    ) -> None:
        self._session_factory = session_factory
        self.geocoder = geocoder
        self.parser = parser or QueryParser()
        self.matcher = matcher or CategoryMatcher()
        self.resolver = LocationResolver(
            geocoder, session_factory=session_factory, circuit=geocoding_circuit
        )
        self.fetcher = DualCollectionFetcher(session_factory=session_factory)
        self._circuit = geocoding_circuit

    # ------------------------------------------------------------------
    # Search
    # ------------------------------------------------------------------

    async def search(self, request: DirectorySearchRequest) -> DirectorySearchResponse:
        query = (request.query or "").strip()
        if not query:
            raise ValidationException("Search query is required", code="QUERY_REQUIRED")

        started = time.perf_counter()
        timings = SearchTimings()

        stage = time.perf_counter()
        service_categories, product_categories = await self._load_categories(timings)
        timings.categories_ms = _elapsed_ms(stage)

        intent = self.parser.parse(query, service_categories)
        signal = self.matcher.match(intent.normalized_query, product_categories)
        plan = plan_fetch(intent, signal)

        if plan.is_empty:
            if timings.degradation_reasons:
                # Without the category lists an empty plan may just be an outage
                raise SearchUnavailableException(
                    "Search is temporarily unavailable",
                    reason=", ".join(timings.degradation_reasons),
                )
            logger.info("No search criteria found in '%s'", query)
            record_search_metrics(
                total_latency_ms=_elapsed_ms(started),
                stage_latencies=timings.stages(),
                location_mode=intent.location_mode.value,
                search_type="no_criteria",
                service_count=0,
                product_count=0,
                degradation_reasons=timings.degradation_reasons,
            )
            return self._no_criteria_response(query, intent, signal, timings)

        stage = time.perf_counter()
        origin = await self.resolver.resolve(intent, self._caller_location(request))
        timings.resolve_ms = _elapsed_ms(stage)
        if origin.degraded_reason:
            timings.degradation_reasons.append(origin.degraded_reason)

        stage = time.perf_counter()
        fetched = await self.fetcher.fetch(plan, origin)
        timings.fetch_ms = _elapsed_ms(stage)

        stage = time.perf_counter()
        ranked, capped = self._rank(intent, origin, fetched)
        timings.rank_ms = _elapsed_ms(stage)

        service_count = sum(1 for c in ranked if c.kind == "service")
        product_count = len(ranked) - service_count
        search_type = _search_type(origin)

        record_search_metrics(
            total_latency_ms=_elapsed_ms(started),
            stage_latencies=timings.stages(),
            location_mode=intent.location_mode.value,
            search_type=search_type,
            service_count=service_count,
            product_count=product_count,
            degradation_reasons=timings.degradation_reasons,
        )
        logger.info(
            "Search '%s' -> %d services, %d products (type=%s, mode=%s, capped=%s)",
            query,
            service_count,
            product_count,
            search_type,
            intent.location_mode.value,
            capped,
        )

        enhanced: Optional[EnhancedSearchInfo] = None
        if origin.mode is LocationMode.POSTAL_RADIUS and origin.value and origin.has_coordinates:
            exact_count = sum(1 for c in ranked if c.is_exact_location_match)
            enhanced = EnhancedSearchInfo(
                target_zip_code=origin.value,
                search_radius=origin.radius_miles or get_search_config().default_radius_miles,
                exact_match_count=exact_count,
                radius_results_count=len(ranked) - exact_count,
                origin_source=origin.source,
            )

        return DirectorySearchResponse(
            success=True,
            results=[to_result(c) for c in ranked],
            metadata=SearchMetadata(
                original_query=query,
                parsed_pattern=self._parsed_pattern(intent, signal),
                result_count=len(ranked),
                search_type=search_type,
                filters=self._filters(intent),
                breakdown=SearchBreakdown(services=service_count, products=product_count),
                capped=capped,
                enhanced_search=enhanced,
                degraded=bool(timings.degradation_reasons),
                degradation_reasons=list(timings.degradation_reasons),
            ),
        )

    def _rank(
        self, intent: ParsedIntent, origin: ResolvedOrigin, fetched: FetchResult
    ) -> Tuple[List[Candidate], bool]:
        services: Sequence[ServiceCandidate] = [
            c for c in fetched.services.candidates if isinstance(c, ServiceCandidate)
        ]
        products: Sequence[ProductCandidate] = [
            c for c in fetched.products.candidates if isinstance(c, ProductCandidate)
        ]

        coords = origin.coordinates
        if coords is not None:
            services = annotate_distances(services, *coords)
            products = annotate_distances(products, *coords)

        if products:
            products = score_products(products, intent.normalized_query)

        ranked = rank_candidates(
            services, products, intent.location_mode, has_origin=coords is not None
        )
        result_cap = get_search_config().result_cap
        capped = fetched.capped or len(ranked) > result_cap
        return ranked[:result_cap], capped

    async def _load_categories(
        self, timings: SearchTimings
    ) -> Tuple[List[CategoryDefinition], List[ProductCategoryDefinition]]:
        service_result, product_result = await asyncio.gather(
            asyncio.to_thread(self._load_service_categories),
            asyncio.to_thread(self._load_product_categories),
            return_exceptions=True,
        )

        if isinstance(service_result, Exception) and isinstance(product_result, Exception):
            logger.error(
                "Category load failed for both collections: %s / %s", service_result, product_result
            )
            raise SearchUnavailableException(
                "Search is temporarily unavailable", reason=str(service_result)
            ) from service_result

        service_categories: List[CategoryDefinition] = []
        if isinstance(service_result, BaseException):
            if not isinstance(service_result, Exception):
                raise service_result
            logger.warning("Service category load failed, using keyword fallback: %s", service_result)
            timings.degradation_reasons.append("service_categories_unavailable")
        else:
            service_categories = service_result

        product_categories: List[ProductCategoryDefinition] = []
        if isinstance(product_result, BaseException):
            if not isinstance(product_result, Exception):
                raise product_result
            logger.warning("Product category load failed: %s", product_result)
            timings.degradation_reasons.append("product_categories_unavailable")
        else:
            product_categories = product_result

        return service_categories, product_categories

    def _load_service_categories(self) -> List[CategoryDefinition]:
        with self._session_factory() as db:
            rows = CategoryRepository(db).list_service_definitions()
            return [
                CategoryDefinition(
                    id=row.service_type,
                    display_name=row.service_name or "",
                    keywords=tuple(str(k) for k in (row.keywords or []) if k),
                )
                for row in rows
            ]

    def _load_product_categories(self) -> List[ProductCategoryDefinition]:
        with self._session_factory() as db:
            rows = CategoryRepository(db).list_product_categories()
            return [
                ProductCategoryDefinition(id=row.id, name=row.name, description=row.description)
                for row in rows
            ]

    @staticmethod
    def _caller_location(request: DirectorySearchRequest) -> Optional[CallerLocation]:
        loc = request.user_location
        if loc is None:
            return None
        return CallerLocation(
            lat=loc.lat, lng=loc.lng, zip_code=loc.zip, city=loc.city, state=loc.state
        )

    @staticmethod
    def _parsed_pattern(intent: ParsedIntent, signal: ProductSignal) -> ParsedPattern:
        return ParsedPattern(
            service_type=intent.service_category,
            location_type=intent.location_mode.value if intent.has_location else None,
            location_value=intent.location_value,
            radius=intent.radius_miles,
            is_product_search=signal.is_product_search,
            matched_product_categories=list(signal.matched_categories),
        )

    @staticmethod
    def _filters(intent: ParsedIntent) -> SearchFilters:
        return SearchFilters(
            service_type=intent.service_category,
            location_type=intent.location_mode.value if intent.has_location else None,
            location_value=intent.location_value,
            radius=intent.radius_miles,
        )

    def _no_criteria_response(
        self,
        query: str,
        intent: ParsedIntent,
        signal: ProductSignal,
        timings: SearchTimings,
    ) -> DirectorySearchResponse:
        return DirectorySearchResponse(
            success=True,
            results=[],
            metadata=SearchMetadata(
                original_query=query,
                parsed_pattern=self._parsed_pattern(intent, signal),
                result_count=0,
                search_type="no_criteria",
                filters=self._filters(intent),
                breakdown=SearchBreakdown(),
                message=NO_CRITERIA_MESSAGE,
                degraded=bool(timings.degradation_reasons),
                degradation_reasons=list(timings.degradation_reasons),
            ),
        )

    # ------------------------------------------------------------------
    # Supporting operations
    # ------------------------------------------------------------------

    async def suggestions(self, text_value: str) -> SuggestionsResponse:
        """Up to ten distinct listing names and service types containing the text."""
        needle = (text_value or "").strip().lower()
        if len(needle) < 2:
            return SuggestionsResponse()

        def _load() -> List[Tuple[str, str]]:
            with self._session_factory() as db:
                return ServiceListingRepository(db).suggest(needle, limit=MAX_SUGGESTIONS * 2)

        try:
            rows = await asyncio.to_thread(_load)
        except Exception as exc:
            logger.warning("Suggestion lookup failed for '%s': %s", needle, exc)
            return SuggestionsResponse()

        seen: set[str] = set()
        suggestions: List[SearchSuggestion] = []
        for name, service_type in rows:
            for value, kind in ((name, "name"), (service_type, "service_type")):
                key = value.lower()
                if needle in key and key not in seen:
                    seen.add(key)
                    suggestions.append(SearchSuggestion(text=value, kind=kind))
        return SuggestionsResponse(suggestions=suggestions[:MAX_SUGGESTIONS])

    async def product_categories(self) -> ProductCategoriesResponse:
        def _load() -> List[ProductCategoryItem]:
            with self._session_factory() as db:
                return [
                    ProductCategoryItem(
                        id=row.id, name=row.name, description=row.description, color=row.color
                    )
                    for row in CategoryRepository(db).list_product_categories()
                ]

        try:
            categories = await asyncio.to_thread(_load)
        except RepositoryException as exc:
            raise SearchUnavailableException(
                "Product categories are temporarily unavailable", reason=str(exc)
            ) from exc
        return ProductCategoriesResponse(categories=categories)

    async def health(self) -> SearchHealthResponse:
        def _ping() -> bool:
            with self._session_factory() as db:
                db.execute(text("SELECT 1"))
            return True

        try:
            database_ok = await asyncio.to_thread(_ping)
        except Exception as exc:
            logger.warning("Search health check: database unreachable: %s", exc)
            database_ok = False

        circuit_state = self._circuit.snapshot()["state"]
        if not database_ok:
            status = "unhealthy"
        elif circuit_state != "closed" or self.geocoder is None:
            status = "degraded"
        else:
            status = "healthy"

        return SearchHealthResponse(
            status=status,
            database=database_ok,
            geocoding_provider=getattr(self.geocoder, "name", "none"),
            geocoding_circuit=circuit_state,
        )
