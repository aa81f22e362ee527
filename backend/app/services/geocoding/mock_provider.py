"""Mock geocoding provider for unit tests and local development (no network calls)."""

from typing import Dict, Optional, Tuple

from .base import GeocodedAddress, GeocodingProvider

# A few Indianapolis-area postal codes so local searches behave realistically
_KNOWN_POSTAL_CODES: Dict[str, Tuple[float, float, str]] = {
    "46037": (39.9568, -86.0075, "Fishers"),
    "46038": (39.9670, -86.0170, "Fishers"),
    "46032": (39.9784, -86.1180, "Carmel"),
    "46240": (39.9050, -86.1230, "Indianapolis"),
    "46204": (39.7700, -86.1580, "Indianapolis"),
}


class MockGeocodingProvider(GeocodingProvider):
    name = "mock"

    async def geocode(self, address: str) -> Optional[GeocodedAddress]:
        key = (address or "").strip()[:5]
        known = _KNOWN_POSTAL_CODES.get(key)
        if known is None:
            return None
        lat, lng, city = known
        return GeocodedAddress(
            latitude=lat,
            longitude=lng,
            formatted_address=f"{city}, IN {key}, USA",
            city=city,
            state="IN",
            postal_code=key,
            country="US",
            provider_id=f"mock:{key}",
            provider_data={"source": "mock"},
        )
