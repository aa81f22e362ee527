"""FastAPI dependencies shared by the route modules."""

from .services import get_directory_search_service, get_geocoding_provider

__all__ = ["get_directory_search_service", "get_geocoding_provider"]
