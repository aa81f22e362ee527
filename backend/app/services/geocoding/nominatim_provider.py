"""OpenStreetMap Nominatim geocoding provider."""

import logging
from typing import Any, Optional

import httpx

from ...core.config import settings
from .base import GeocodedAddress, GeocodingProvider

logger = logging.getLogger(__name__)


class NominatimProvider(GeocodingProvider):
    name = "nominatim"

    def __init__(
        self,
        base_url: Optional[str] = None,
        user_agent: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.base_url = (base_url or settings.nominatim_base_url).rstrip("/")
        self.user_agent = user_agent or settings.nominatim_user_agent
        self.timeout = timeout or settings.geocoding_timeout_seconds
        self._transport = transport

    async def geocode(self, address: str) -> Optional[GeocodedAddress]:
        async with httpx.AsyncClient(
            timeout=self.timeout,
            headers={"User-Agent": self.user_agent},
            transport=self._transport,
        ) as client:
            resp = await client.get(
                f"{self.base_url}/search",
                params={
                    "q": address,
                    "format": "json",
                    "limit": 1,
                    "addressdetails": 1,
                    "countrycodes": "us",
                },
            )
            if resp.status_code != 200:
                logger.warning(
                    "Nominatim returned HTTP %s for '%s'", resp.status_code, address
                )
                return None
            data = resp.json()
            if not data:
                return None
            return self._parse_result(data[0])

    def _parse_result(self, result: dict[str, Any]) -> GeocodedAddress:
        details = result.get("address") or {}
        return GeocodedAddress(
            latitude=float(result.get("lat", 0.0)),
            longitude=float(result.get("lon", 0.0)),
            formatted_address=result.get("display_name", ""),
            city=details.get("city") or details.get("town") or details.get("village"),
            state=details.get("state"),
            postal_code=details.get("postcode"),
            country=(details.get("country_code") or "").upper() or None,
            provider_id=f"nominatim:{result.get('place_id', '')}",
            provider_data=result,
            confidence_score=float(result.get("importance") or 1.0),
        )
