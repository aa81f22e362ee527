"""Google Maps geocoding provider."""

import logging
from typing import Any, Optional

import httpx

from ...core.config import settings
from .base import GeocodedAddress, GeocodingProvider

logger = logging.getLogger(__name__)


class GoogleMapsProvider(GeocodingProvider):
    name = "google"

    def __init__(
        self,
        api_key: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.api_key = api_key if api_key is not None else settings.google_maps_api_key
        self.base_url = "https://maps.googleapis.com/maps/api"
        self.timeout = timeout or settings.geocoding_timeout_seconds
        self._transport = transport

    async def geocode(self, address: str) -> Optional[GeocodedAddress]:
        async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
            resp = await client.get(
                f"{self.base_url}/geocode/json",
                params={"address": address, "components": "country:US", "key": self.api_key},
            )
            if resp.status_code != 200:
                return None
            data = resp.json()
            if not data.get("results"):
                if data.get("status") not in {None, "OK", "ZERO_RESULTS"}:
                    logger.warning(
                        "Google geocoding returned status %s for '%s'", data.get("status"), address
                    )
                return None
            return self._parse_result(data["results"][0])

    def _parse_result(self, result: dict[str, Any]) -> GeocodedAddress:
        comps: dict[str, str] = {}
        short_comps: dict[str, str] = {}
        for c in result.get("address_components") or []:
            long_name = c.get("long_name")
            short_name = c.get("short_name")
            for t in c.get("types", []):
                if isinstance(long_name, str) and long_name:
                    comps[t] = long_name
                if isinstance(short_name, str) and short_name:
                    short_comps[t] = short_name
        loc = result.get("geometry", {}).get("location", {})
        place_id = result.get("place_id", "")
        return GeocodedAddress(
            latitude=loc.get("lat", 0.0),
            longitude=loc.get("lng", 0.0),
            formatted_address=result.get("formatted_address", ""),
            city=comps.get("locality") or comps.get("postal_town") or comps.get("sublocality"),
            state=short_comps.get("administrative_area_level_1")
            or comps.get("administrative_area_level_1"),
            postal_code=comps.get("postal_code"),
            country=short_comps.get("country") or comps.get("country"),
            provider_id=f"google:{place_id}" if place_id else "",
            provider_data=result,
            confidence_score=1.0,
        )
