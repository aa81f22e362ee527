# backend/app/services/search/fetcher.py
"""
Dual-collection fetcher.

Decides which collections a parsed query needs (`plan_fetch`) and reads
services and products with the location filter the query implies. The two
collections are independent and are fetched concurrently in worker threads,
each with its own short-lived session.
"""
from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
import logging
from typing import Any, Callable, Dict, List, Optional, Tuple

from sqlalchemy.orm import Session

from app.core.exceptions import RepositoryException, SearchUnavailableException
from app.database import SessionFactory, get_db_session
from app.repositories.listing_repository import (
    ListingRepository,
    ProductListingRepository,
    ServiceListingRepository,
)
from app.services.search.candidates import Candidate, ProductCandidate, ServiceCandidate
from app.services.search.category_matcher import ProductSignal
from app.services.search.config import get_search_config
from app.services.search.location_resolver import ResolvedOrigin
from app.services.search.query_parser import LocationMode, ParsedIntent
from app.services.search.relevance import relevance_terms

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FetchPlan:
    """Which collections to read, and how each is filtered."""

    fetch_services: bool
    fetch_products: bool
    service_type: Optional[str] = None
    product_query: Optional[str] = None

    @property
    def is_empty(self) -> bool:
        return not (self.fetch_services or self.fetch_products)


def plan_fetch(intent: ParsedIntent, product_signal: ProductSignal) -> FetchPlan:
    """
    Decision table:

    - service category resolved: services filtered by category, products per signal
    - no category, product signal: products only
    - no category, no product signal, location given: services of every type
    - no category, no product signal, no location: nothing (no-criteria result)
    """
    product_query = intent.normalized_query if product_signal.is_product_search else None
    if intent.service_category:
        return FetchPlan(
            fetch_services=True,
            fetch_products=product_signal.is_product_search,
            service_type=intent.service_category,
            product_query=product_query,
        )
    if product_signal.is_product_search:
        return FetchPlan(fetch_services=False, fetch_products=True, product_query=product_query)
    # A bare location ("46240") lists every service type there
    return FetchPlan(fetch_services=intent.has_location, fetch_products=False)


@dataclass
class CollectionResult:
    candidates: List[Candidate] = field(default_factory=list)
    exact_count: int = 0
    radius_count: int = 0
    capped: bool = False


@dataclass
class FetchResult:
    services: CollectionResult = field(default_factory=CollectionResult)
    products: CollectionResult = field(default_factory=CollectionResult)

    @property
    def capped(self) -> bool:
        return self.services.capped or self.products.capped

    @property
    def exact_count(self) -> int:
        return self.services.exact_count + self.products.exact_count

    @property
    def radius_count(self) -> int:
        return self.services.radius_count + self.products.radius_count


RepositoryBuilder = Callable[[Session], ListingRepository[Any]]
CandidateBuilder = Callable[..., Candidate]


class DualCollectionFetcher:
    """Location-filtered reads of services and products."""

    def __init__(
        self,
        session_factory: SessionFactory = get_db_session,
        per_collection_cap: Optional[int] = None,
    ) -> None:
        self._session_factory = session_factory
        self._cap = per_collection_cap

    @property
    def per_collection_cap(self) -> int:
        if self._cap is not None:
            return self._cap
        return get_search_config().per_collection_cap

    async def fetch(self, plan: FetchPlan, origin: ResolvedOrigin) -> FetchResult:
        result = FetchResult()
        if plan.is_empty:
            return result

        jobs: List[Tuple[str, Any]] = []
        if plan.fetch_services:
            filters: Dict[str, Any] = {"service_type": plan.service_type}
            jobs.append(
                (
                    "services",
                    asyncio.to_thread(
                        self._fetch_collection,
                        ServiceListingRepository,
                        ServiceCandidate.from_model,
                        origin,
                        filters,
                    ),
                )
            )
        if plan.fetch_products:
            product_filters: Dict[str, Any] = {}
            # Rows that cannot reach the relevance threshold must not use up the cap
            if plan.product_query and get_search_config().min_relevance_score > 0:
                product_filters["terms"] = relevance_terms(plan.product_query)
            jobs.append(
                (
                    "products",
                    asyncio.to_thread(
                        self._fetch_collection,
                        ProductListingRepository,
                        ProductCandidate.from_model,
                        origin,
                        product_filters,
                    ),
                )
            )

        try:
            outcomes = await asyncio.gather(*(job for _, job in jobs))
        except RepositoryException as exc:
            logger.error("Listing fetch failed (mode=%s): %s", origin.mode.value, exc)
            raise SearchUnavailableException(
                "Search is temporarily unavailable", reason=str(exc)
            ) from exc

        for (collection, _), outcome in zip(jobs, outcomes):
            setattr(result, collection, outcome)
        return result

    # ------------------------------------------------------------------
    # Worker-thread side
    # ------------------------------------------------------------------

    def _fetch_collection(
        self,
        repo_builder: RepositoryBuilder,
        to_candidate: CandidateBuilder,
        origin: ResolvedOrigin,
        filters: Dict[str, Any],
    ) -> CollectionResult:
        cap = self.per_collection_cap
        # One extra row tells us whether the cap truncated anything
        limit = cap + 1

        with self._session_factory() as db:
            repo = repo_builder(db)
            mode = origin.mode

            if mode is LocationMode.STATE:
                rows = repo.find_by_location(state=origin.value, limit=limit, **filters)
                return self._collect([to_candidate(r) for r in rows], cap)

            if mode is LocationMode.POSTAL_RADIUS:
                exact_rows = repo.find_by_location(zip_code=origin.value, limit=limit, **filters)
                exact = [to_candidate(r, exact_match=True) for r in exact_rows]
                if not origin.has_coordinates or origin.radius_miles is None:
                    return self._collect(exact, cap, exact_count=len(exact))
                nearby_rows = repo.find_within_radius(
                    origin.latitude,
                    origin.longitude,
                    origin.radius_miles,
                    exclude_zip=origin.value,
                    exclude_ids=[c.id for c in exact],
                    limit=limit,
                    **filters,
                )
                nearby = [to_candidate(r) for r, _ in nearby_rows]
                return self._collect(
                    exact + nearby, cap, exact_count=len(exact), radius_count=len(nearby)
                )

            if mode is LocationMode.NEAR_ME:
                if not origin.has_coordinates or origin.radius_miles is None:
                    return CollectionResult()
                nearby_rows = repo.find_within_radius(
                    origin.latitude,
                    origin.longitude,
                    origin.radius_miles,
                    limit=limit,
                    **filters,
                )
                nearby = [to_candidate(r) for r, _ in nearby_rows]
                return self._collect(nearby, cap, radius_count=len(nearby))

            rows = repo.find_by_location(limit=limit, **filters)
            return self._collect([to_candidate(r) for r in rows], cap)

    @staticmethod
    def _collect(
        candidates: List[Candidate],
        cap: int,
        *,
        exact_count: int = 0,
        radius_count: int = 0,
    ) -> CollectionResult:
        capped = len(candidates) > cap
        kept = candidates[:cap]
        if capped:
            # Exact matches come first, so truncation only ever trims the radius group
            exact_count = min(exact_count, cap)
            radius_count = len(kept) - exact_count
        return CollectionResult(
            candidates=kept,
            exact_count=exact_count,
            radius_count=radius_count,
            capped=capped,
        )
