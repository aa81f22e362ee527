"""Provider-agnostic geocoding interfaces."""

from abc import ABC, abstractmethod
from typing import Any, Optional

from pydantic import BaseModel, Field


class GeocodedAddress(BaseModel):
    latitude: float
    longitude: float
    formatted_address: str = ""
    city: Optional[str] = None
    state: Optional[str] = None
    postal_code: Optional[str] = None
    country: Optional[str] = None
    provider_id: str = ""
    provider_data: dict[str, Any] = Field(default_factory=dict)
    confidence_score: float = 1.0

    @property
    def has_coordinates(self) -> bool:
        # Providers report (0.0, 0.0) when a match carries no geometry
        return not (self.latitude == 0.0 and self.longitude == 0.0)


class GeocodingProvider(ABC):
    """
    Resolves free-form addresses or postal codes to coordinates.

    `geocode` returns None when nothing matched or the upstream answered with an
    error status. Transport failures (timeouts, connection errors) propagate so
    callers can count them against a circuit breaker.
    """

    name: str = "base"

    @abstractmethod
    async def geocode(self, address: str) -> Optional[GeocodedAddress]:
        pass
