# backend/app/services/search/candidates.py
"""
Immutable search candidates.

Rows from the two listing tables are converted to plain frozen records inside
the worker thread that fetched them, so no ORM state leaks into the async
pipeline. Each record carries a `kind` discriminant; downstream stages branch
on it rather than on which fields happen to be present. Pipeline stages derive
new records with `dataclasses.replace`.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, Optional, Tuple, Union

from app.models.product import Product
from app.models.service_listing import ServiceListing


@dataclass(frozen=True)
class ServiceCandidate:
    id: str
    name: str
    service_type: str
    description: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip_code: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    website_url: Optional[str] = None
    contact_phone: Optional[str] = None
    image_url: Optional[str] = None
    rating: Optional[float] = None
    review_count: Optional[int] = None
    is_verified: bool = False

    # Filled in by the pipeline
    distance_miles: Optional[float] = None
    is_exact_location_match: bool = False

    kind: Literal["service"] = "service"

    @classmethod
    def from_model(cls, row: ServiceListing, *, exact_match: bool = False) -> "ServiceCandidate":
        return cls(
            id=str(row.id),
            name=row.name or "",
            service_type=row.service_type,
            description=row.description,
            address=row.address,
            city=row.city,
            state=row.state,
            zip_code=row.zip_code,
            latitude=row.latitude,
            longitude=row.longitude,
            website_url=row.website_url,
            contact_phone=row.contact_phone,
            image_url=row.image_url,
            rating=row.rating,
            review_count=row.review_count,
            is_verified=bool(row.is_verified),
            distance_miles=0.0 if exact_match else None,
            is_exact_location_match=exact_match,
        )


@dataclass(frozen=True)
class ProductCandidate:
    id: str
    name: str
    description: Optional[str] = None
    categories: Tuple[str, ...] = ()
    website: Optional[str] = None
    contact_number: Optional[str] = None
    email: Optional[str] = None
    location_address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip_code: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    image_url: Optional[str] = None
    is_verified_gentle_care: bool = False

    distance_miles: Optional[float] = None
    is_exact_location_match: bool = False
    relevance_score: Optional[int] = None

    kind: Literal["product"] = "product"

    @classmethod
    def from_model(cls, row: Product, *, exact_match: bool = False) -> "ProductCandidate":
        return cls(
            id=str(row.id),
            name=row.name or "",
            description=row.description,
            categories=tuple(c.name for c in row.categories),
            website=row.website,
            contact_number=row.contact_number,
            email=row.email,
            location_address=row.location_address,
            city=row.city,
            state=row.state,
            zip_code=row.zip_code,
            latitude=row.latitude,
            longitude=row.longitude,
            image_url=row.image_url,
            is_verified_gentle_care=bool(row.is_verified_gentle_care),
            distance_miles=0.0 if exact_match else None,
            is_exact_location_match=exact_match,
        )


Candidate = Union[ServiceCandidate, ProductCandidate]


def sort_name(candidate: Candidate) -> str:
    """Case-insensitive name key used by every alphabetical ordering."""
    return candidate.name.lower()
