"""Geocoding providers (address or postal code -> coordinates)."""

from .base import GeocodedAddress, GeocodingProvider
from .factory import create_geocoding_provider
from .google_provider import GoogleMapsProvider
from .mock_provider import MockGeocodingProvider
from .nominatim_provider import NominatimProvider

__all__ = [
    "GeocodedAddress",
    "GeocodingProvider",
    "GoogleMapsProvider",
    "MockGeocodingProvider",
    "NominatimProvider",
    "create_geocoding_provider",
]
