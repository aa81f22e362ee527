# backend/app/schemas/__init__.py
"""Pydantic schemas for the directory search API."""

from .directory_search import (
    DirectorySearchRequest,
    DirectorySearchResponse,
    ErrorResponse,
    ProductCategoriesResponse,
    ProductResult,
    SearchHealthResponse,
    SearchMetadata,
    ServiceResult,
    SuggestionsResponse,
    UserLocation,
)
from .main_responses import HealthResponse

__all__ = [
    "DirectorySearchRequest",
    "DirectorySearchResponse",
    "ErrorResponse",
    "HealthResponse",
    "ProductCategoriesResponse",
    "ProductResult",
    "SearchHealthResponse",
    "SearchMetadata",
    "ServiceResult",
    "SuggestionsResponse",
    "UserLocation",
]
