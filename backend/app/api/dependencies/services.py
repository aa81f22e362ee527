# backend/app/api/dependencies/services.py
"""
Service layer dependencies for dependency injection.

Routes depend on these factories so tests can swap in services bound to
their own database and geocoder via `app.dependency_overrides`.
"""

from functools import lru_cache
import logging

from fastapi import Depends

from ...services.geocoding.base import GeocodingProvider
from ...services.geocoding.factory import create_geocoding_provider
from ...services.search.directory_search_service import DirectorySearchService

logger = logging.getLogger(__name__)


@lru_cache(maxsize=1)
def get_geocoding_provider() -> GeocodingProvider:
    """Process-wide geocoding provider chosen by settings."""
    provider = create_geocoding_provider()
    logger.info("Geocoding provider: %s", provider.name)
    return provider


def get_directory_search_service(
    geocoder: GeocodingProvider = Depends(get_geocoding_provider),
) -> DirectorySearchService:
    """Get directory search service instance for dependency injection."""
    return DirectorySearchService(geocoder=geocoder)
