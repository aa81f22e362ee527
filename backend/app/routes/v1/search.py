# backend/app/routes/v1/search.py
"""
Search routes - API v1

Versioned search endpoints under /api/v1/search.

Endpoints:
    POST /             → Natural-language directory search (services + products)
    GET  /suggestions  → Typeahead suggestions from listing names and service types
    GET  /health       → Health check for search components
"""

import logging

from fastapi import APIRouter, Body, Depends, HTTPException, Query

from ...api.dependencies.services import get_directory_search_service
from ...core.exceptions import DomainException, raise_503_if_pool_exhaustion
from ...schemas.directory_search import (
    DirectorySearchRequest,
    DirectorySearchResponse,
    ErrorResponse,
    SearchHealthResponse,
    SuggestionsResponse,
)
from ...services.search.directory_search_service import DirectorySearchService
from ...services.search.metrics import record_search_failure

logger = logging.getLogger(__name__)

# V1 router - no prefix here, will be added when mounting in main.py
router = APIRouter(tags=["search-v1"])

_ERROR_RESPONSES = {
    400: {"model": ErrorResponse, "description": "Missing query or location"},
    500: {"model": ErrorResponse, "description": "Search backend failure"},
    503: {"model": ErrorResponse, "description": "Database overloaded"},
}


@router.post("", response_model=DirectorySearchResponse, responses=_ERROR_RESPONSES)
async def directory_search(
    payload: DirectorySearchRequest = Body(...),
    service: DirectorySearchService = Depends(get_directory_search_service),
) -> DirectorySearchResponse:
    """
    Natural-language search over service and product listings.

    Supports queries like:
    - "groomers near me" (requires userLocation)
    - "dog parks in Indiana"
    - "vets 46240"
    - "supplements"

    Returns:
        Ranked results with the parsed intent and per-collection counts
    """
    try:
        return await service.search(payload)
    except DomainException as exc:
        record_search_failure(exc.code)
        raise exc.to_http_exception()
    except HTTPException:
        raise
    except Exception as exc:
        raise_503_if_pool_exhaustion(exc)
        record_search_failure("internal_error")
        logger.error("Directory search error for '%s': %s", payload.query, exc, exc_info=True)
        raise HTTPException(
            status_code=500,
            detail={"message": "Search failed", "code": "SEARCH_FAILED", "details": str(exc)},
        )


@router.get("/suggestions", response_model=SuggestionsResponse)
async def search_suggestions(
    q: str = Query("", max_length=100, description="Partial query text"),
    service: DirectorySearchService = Depends(get_directory_search_service),
) -> SuggestionsResponse:
    """Up to ten distinct listing names and service types containing `q`."""
    return await service.suggestions(q)


@router.get("/health", response_model=SearchHealthResponse)
async def search_health(
    service: DirectorySearchService = Depends(get_directory_search_service),
) -> SearchHealthResponse:
    """
    Health check for search components.

    Returns status of:
    - Database reachability
    - Geocoding provider and circuit breaker state
    """
    return await service.health()
