"""
Location resolver for directory search.

Turns the location part of a `ParsedIntent` into a concrete search origin:

- STATE / NONE: no coordinates, nothing to resolve
- POSTAL_RADIUS: reuse the coordinates of any stored service (then product)
  at that exact postal code, else ask the geocoding provider once; when both
  fail the search degrades to exact postal-code matching
- NEAR_ME: the caller's coordinates, which are mandatory

Geocoding problems never fail a request; they are logged and counted.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
import logging
from typing import Optional, Tuple

from app.core.exceptions import LocationRequiredException
from app.database import SessionFactory, get_db_session
from app.repositories.listing_repository import (
    ProductListingRepository,
    ServiceListingRepository,
)
from app.services.geocoding.base import GeocodingProvider
from app.services.search import metrics as search_metrics
from app.services.search.circuit_breaker import (
    GEOCODING_CIRCUIT,
    CircuitBreaker,
    CircuitOpenError,
)
from app.services.search.query_parser import LocationMode, ParsedIntent
from app.utils.geo import has_coordinates

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CallerLocation:
    """Coordinates supplied by the client (browser geolocation or saved address)."""

    lat: float
    lng: float
    zip_code: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None


@dataclass(frozen=True)
class ResolvedOrigin:
    """Result of location resolution."""

    mode: LocationMode
    value: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    radius_miles: Optional[float] = None
    # "listing", "geocoder", "caller" or None when no coordinates were found
    source: Optional[str] = None
    degraded_reason: Optional[str] = None

    @property
    def has_coordinates(self) -> bool:
        return self.latitude is not None and self.longitude is not None

    @property
    def coordinates(self) -> Optional[Tuple[float, float]]:
        if self.latitude is None or self.longitude is None:
            return None
        return self.latitude, self.longitude


class LocationResolver:
    """
    Resolves a parsed intent to a search origin.

    Usage:
        resolver = LocationResolver(geocoder)
        origin = await resolver.resolve(intent, caller_location)
    """

    def __init__(
        self,
        geocoder: Optional[GeocodingProvider],
        session_factory: SessionFactory = get_db_session,
        circuit: CircuitBreaker = GEOCODING_CIRCUIT,
    ) -> None:
        self.geocoder = geocoder
        self._session_factory = session_factory
        self._circuit = circuit

    async def resolve(
        self, intent: ParsedIntent, caller: Optional[CallerLocation] = None
    ) -> ResolvedOrigin:
        mode = intent.location_mode

        if mode is LocationMode.NEAR_ME:
            if caller is None or not has_coordinates(caller.lat, caller.lng):
                raise LocationRequiredException()
            return ResolvedOrigin(
                mode=mode,
                latitude=caller.lat,
                longitude=caller.lng,
                radius_miles=intent.radius_miles,
                source="caller",
            )

        if mode is LocationMode.POSTAL_RADIUS and intent.location_value:
            return await self._resolve_postal_code(intent)

        return ResolvedOrigin(mode=mode, value=intent.location_value)

    async def _resolve_postal_code(self, intent: ParsedIntent) -> ResolvedOrigin:
        zip_code = intent.location_value or ""

        try:
            coords = await asyncio.to_thread(self._stored_coordinates_for_zip, zip_code)
        except Exception as exc:
            logger.warning("Stored coordinate lookup failed for %s: %s", zip_code, exc)
            coords = None

        if coords is not None:
            return ResolvedOrigin(
                mode=intent.location_mode,
                value=zip_code,
                latitude=coords[0],
                longitude=coords[1],
                radius_miles=intent.radius_miles,
                source="listing",
            )

        coords, reason = await self._geocode_zip(zip_code)
        if coords is not None:
            return ResolvedOrigin(
                mode=intent.location_mode,
                value=zip_code,
                latitude=coords[0],
                longitude=coords[1],
                radius_miles=intent.radius_miles,
                source="geocoder",
            )

        logger.info("No coordinates for postal code %s; using exact matches only", zip_code)
        return ResolvedOrigin(
            mode=intent.location_mode,
            value=zip_code,
            radius_miles=intent.radius_miles,
            degraded_reason=reason,
        )

    def _stored_coordinates_for_zip(self, zip_code: str) -> Optional[Tuple[float, float]]:
        with self._session_factory() as db:
            coords = ServiceListingRepository(db).find_coordinates_for_zip(zip_code)
            if coords is None:
                coords = ProductListingRepository(db).find_coordinates_for_zip(zip_code)
            return coords

    async def _geocode_zip(
        self, zip_code: str
    ) -> Tuple[Optional[Tuple[float, float]], Optional[str]]:
        """Single geocoder call. Returns (coords, degradation reason)."""
        if self.geocoder is None:
            return None, "geocoding_unavailable"

        provider = getattr(self.geocoder, "name", "unknown")
        try:
            result = await self._circuit.call(self.geocoder.geocode, zip_code)
        except CircuitOpenError:
            logger.warning("Geocoding circuit open; skipping lookup for %s", zip_code)
            search_metrics.record_geocoding_call(provider, "circuit_open")
            return None, "geocoding_circuit_open"
        except Exception as exc:
            logger.warning("Geocoding failed for %s: %s", zip_code, exc)
            search_metrics.record_geocoding_call(provider, "error")
            return None, "geocoding_error"
        finally:
            search_metrics.update_circuit_breaker_state(
                self._circuit.name, self._circuit.state.value
            )

        if result is None or not has_coordinates(result.latitude, result.longitude):
            search_metrics.record_geocoding_call(provider, "miss")
            return None, "geocoding_no_match"

        search_metrics.record_geocoding_call(provider, "hit")
        return (result.latitude, result.longitude), None
