# backend/app/schemas/directory_search.py
"""
Pydantic schemas for the directory search API.

Request:  {"query": "...", "userLocation": {"lat": .., "lng": .., "zip": ..}}
Response: {"success": true, "results": [...], "metadata": {...}}

Results are a tagged union on `type` ("service" | "product"). Unknown
distances are serialized as null.
"""
from __future__ import annotations

from typing import Annotated, List, Literal, Optional, Union

from pydantic import Field, field_validator

from .base import StandardizedModel

# =============================================================================
# Request
# =============================================================================


class UserLocation(StandardizedModel):
    """Caller coordinates (browser geolocation or a saved address)."""

    lat: float = Field(..., ge=-90, le=90)
    lng: float = Field(..., ge=-180, le=180)
    zip: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None


class DirectorySearchRequest(StandardizedModel):
    query: Optional[str] = Field(None, description="Free-text search query")
    user_location: Optional[UserLocation] = Field(
        None, description="Caller coordinates, required for 'near me' searches"
    )

    @field_validator("query")
    @classmethod
    def _strip_query(cls, value: Optional[str]) -> Optional[str]:
        return value.strip() if isinstance(value, str) else value


# =============================================================================
# Results
# =============================================================================


class ServiceResult(StandardizedModel):
    type: Literal["service"] = "service"
    id: str
    name: str
    service_type: str
    description: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip_code: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    website_url: Optional[str] = None
    contact_phone: Optional[str] = None
    image_url: Optional[str] = None
    rating: Optional[float] = None
    review_count: Optional[int] = None
    is_verified: bool = False
    distance: Optional[float] = Field(None, description="Miles from the search origin")
    is_exact_match: bool = False


class ProductResult(StandardizedModel):
    type: Literal["product"] = "product"
    id: str
    name: str
    description: Optional[str] = None
    categories: List[str] = Field(default_factory=list)
    website: Optional[str] = None
    contact_number: Optional[str] = None
    email: Optional[str] = None
    location_address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip_code: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    image_url: Optional[str] = None
    is_verified_gentle_care: bool = False
    distance: Optional[float] = Field(None, description="Miles from the search origin")
    is_exact_match: bool = False
    relevance_score: Optional[int] = None


SearchResult = Annotated[Union[ServiceResult, ProductResult], Field(discriminator="type")]


# =============================================================================
# Metadata
# =============================================================================


class SearchFilters(StandardizedModel):
    service_type: Optional[str] = None
    location_type: Optional[str] = None
    location_value: Optional[str] = None
    radius: Optional[float] = None


class ParsedPattern(StandardizedModel):
    service_type: Optional[str] = None
    location_type: Optional[str] = None
    location_value: Optional[str] = None
    radius: Optional[float] = None
    is_product_search: bool = False
    matched_product_categories: List[str] = Field(default_factory=list)


class SearchBreakdown(StandardizedModel):
    services: int = 0
    products: int = 0


class EnhancedSearchInfo(StandardizedModel):
    target_zip_code: str
    search_radius: float
    exact_match_count: int
    radius_results_count: int
    origin_source: Optional[str] = None


class SearchMetadata(StandardizedModel):
    original_query: str
    parsed_pattern: ParsedPattern
    result_count: int
    search_type: str
    filters: SearchFilters
    breakdown: SearchBreakdown
    capped: bool = False
    enhanced_search: Optional[EnhancedSearchInfo] = None
    message: Optional[str] = None
    degraded: bool = False
    degradation_reasons: List[str] = Field(default_factory=list)


class DirectorySearchResponse(StandardizedModel):
    success: bool = True
    results: List[SearchResult] = Field(default_factory=list)
    metadata: SearchMetadata


# =============================================================================
# Supporting endpoints
# =============================================================================


class SearchSuggestion(StandardizedModel):
    text: str
    kind: Literal["name", "service_type"]


class SuggestionsResponse(StandardizedModel):
    suggestions: List[SearchSuggestion] = Field(default_factory=list)


class ProductCategoryItem(StandardizedModel):
    id: str
    name: str
    description: Optional[str] = None
    color: Optional[str] = None


class ProductCategoriesResponse(StandardizedModel):
    categories: List[ProductCategoryItem] = Field(default_factory=list)


class SearchHealthResponse(StandardizedModel):
    status: Literal["healthy", "degraded", "unhealthy"]
    database: bool
    geocoding_provider: str
    geocoding_circuit: str


class ErrorResponse(StandardizedModel):
    error: str
    details: Optional[str] = None
    code: Optional[str] = None
