# backend/app/services/search/__init__.py
"""
Directory search services.

This package parses free-text queries, resolves locations, fetches service
and product listings, and ranks the merged result set.
"""

from app.services.search.candidates import Candidate, ProductCandidate, ServiceCandidate
from app.services.search.category_matcher import (
    CategoryMatcher,
    ProductCategoryDefinition,
    ProductSignal,
)
from app.services.search.circuit_breaker import (
    GEOCODING_CIRCUIT,
    CircuitBreaker,
    CircuitOpenError,
)
from app.services.search.directory_search_service import DirectorySearchService
from app.services.search.query_parser import (
    CategoryDefinition,
    CategoryKeywordPolicy,
    LocationMode,
    ParsedIntent,
    QueryParser,
    default_category_policy,
)

__all__ = [
    "Candidate",
    "CategoryDefinition",
    "CategoryKeywordPolicy",
    "CategoryMatcher",
    "CircuitBreaker",
    "CircuitOpenError",
    "DirectorySearchService",
    "GEOCODING_CIRCUIT",
    "LocationMode",
    "ParsedIntent",
    "ProductCandidate",
    "ProductCategoryDefinition",
    "ProductSignal",
    "QueryParser",
    "ServiceCandidate",
    "default_category_policy",
]
