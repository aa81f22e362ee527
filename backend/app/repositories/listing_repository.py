# backend/app/repositories/listing_repository.py
"""
Repositories for the two searchable listing collections.

Both collections share the same location columns (state, zip_code, latitude,
longitude), so the read contract the search pipeline needs lives in one
generic base:

- exact-field fetch (`find_by_location`)
- radius fetch (`find_within_radius`)
- capped fetch-all (`find_by_location` with no location criteria)
- coordinate reuse for a postal code (`find_coordinates_for_zip`)
"""

from __future__ import annotations

import logging
from typing import Any, Generic, List, Optional, Sequence, Tuple, Type, TypeVar

from sqlalchemy import func, or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Query, Session

from app.core.exceptions import RepositoryException
from app.models.product import Product, ProductCategory
from app.models.service_listing import ServiceListing
from app.utils.geo import bounding_box, haversine_miles

logger = logging.getLogger(__name__)

ListingT = TypeVar("ListingT", ServiceListing, Product)


class ListingRepository(Generic[ListingT]):
    """Location-aware reads shared by service and product listings."""

    model: Type[ListingT]

    def __init__(self, db: Session) -> None:
        self.db = db

    # --- Hooks for subclasses ---

    def _base_query(self) -> Query:
        return self.db.query(self.model)

    def _apply_filters(self, query: Query, **filters: Any) -> Query:
        return query

    # --- Read contract ---

    def find_by_location(
        self,
        *,
        state: Optional[str] = None,
        zip_code: Optional[str] = None,
        limit: int = 100,
        **filters: Any,
    ) -> List[ListingT]:
        """
        Fetch listings by exact field match, ordered by name.

        With no state/zip_code this is the capped fetch-all.
        """
        try:
            query = self._apply_filters(self._base_query(), **filters)
            if state:
                query = query.filter(func.upper(self.model.state) == state.upper())
            if zip_code:
                query = query.filter(self.model.zip_code == zip_code)
            rows: List[ListingT] = (
                query.order_by(func.lower(self.model.name), self.model.id).limit(limit).all()
            )
            return rows
        except SQLAlchemyError as exc:
            logger.error(
                "%s exact fetch failed (state=%s, zip=%s): %s",
                self.model.__name__,
                state,
                zip_code,
                str(exc),
            )
            raise RepositoryException(f"Failed to fetch {self.model.__tablename__}: {exc}") from exc

    def find_within_radius(
        self,
        latitude: float,
        longitude: float,
        radius_miles: float,
        *,
        exclude_zip: Optional[str] = None,
        exclude_ids: Sequence[str] = (),
        limit: int = 100,
        **filters: Any,
    ) -> List[Tuple[ListingT, float]]:
        """
        Fetch geocoded listings within `radius_miles`, nearest first.

        A bounding box narrows the SQL scan; the haversine distance decides
        membership. Returns (listing, distance_miles) pairs.
        """
        box = bounding_box(latitude, longitude, radius_miles)
        try:
            query = self._apply_filters(self._base_query(), **filters).filter(
                self.model.latitude.isnot(None),
                self.model.longitude.isnot(None),
                self.model.latitude.between(box.min_lat, box.max_lat),
                self.model.longitude.between(box.min_lng, box.max_lng),
            )
            if exclude_zip:
                query = query.filter(
                    (self.model.zip_code.is_(None)) | (self.model.zip_code != exclude_zip)
                )
            if exclude_ids:
                query = query.filter(self.model.id.notin_(list(exclude_ids)))
            rows: List[ListingT] = query.all()
        except SQLAlchemyError as exc:
            logger.error(
                "%s radius fetch failed (%.4f, %.4f, %smi): %s",
                self.model.__name__,
                latitude,
                longitude,
                radius_miles,
                str(exc),
            )
            raise RepositoryException(
                f"Radius search on {self.model.__tablename__} failed: {exc}"
            ) from exc

        within: List[Tuple[ListingT, float]] = []
        for row in rows:
            distance = haversine_miles(latitude, longitude, row.latitude, row.longitude)
            if distance <= radius_miles:
                within.append((row, distance))
        within.sort(key=lambda pair: (pair[1], (pair[0].name or "").lower()))
        return within[:limit]

    def find_coordinates_for_zip(self, zip_code: str) -> Optional[Tuple[float, float]]:
        """Return (lat, lng) of any geocoded listing at exactly this postal code."""
        try:
            row = (
                self.db.query(self.model.latitude, self.model.longitude)
                .filter(
                    self.model.zip_code == zip_code,
                    self.model.latitude.isnot(None),
                    self.model.longitude.isnot(None),
                    # (0, 0) is the placeholder left by failed geocoding
                    ~((self.model.latitude == 0) & (self.model.longitude == 0)),
                )
                .first()
            )
        except SQLAlchemyError as exc:
            raise RepositoryException(
                f"Coordinate lookup on {self.model.__tablename__} failed: {exc}"
            ) from exc
        if row is None:
            return None
        return float(row[0]), float(row[1])


class ServiceListingRepository(ListingRepository[ServiceListing]):
    """Reads against the `services` table."""

    model = ServiceListing

    def _apply_filters(self, query: Query, **filters: Any) -> Query:
        service_type = filters.get("service_type")
        if service_type:
            query = query.filter(ServiceListing.service_type == service_type)
        return query

    def suggest(self, text_value: str, limit: int = 10) -> List[Tuple[str, str]]:
        """Return (name, service_type) pairs whose name or type contains the text."""
        pattern = f"%{text_value.lower()}%"
        try:
            rows = (
                self.db.query(ServiceListing.name, ServiceListing.service_type)
                .filter(
                    (func.lower(ServiceListing.name).like(pattern))
                    | (func.lower(ServiceListing.service_type).like(pattern))
                )
                .order_by(func.lower(ServiceListing.name))
                .limit(limit)
                .all()
            )
        except SQLAlchemyError as exc:
            raise RepositoryException(f"Suggestion lookup failed: {exc}") from exc
        return [(str(name), str(service_type)) for name, service_type in rows]


class ProductListingRepository(ListingRepository[Product]):
    """Reads against the `products` table (categories are eager-loaded)."""

    model = Product

    def _apply_filters(self, query: Query, **filters: Any) -> Query:
        terms: Sequence[str] = filters.get("terms") or ()
        if not terms:
            return query
        clauses = []
        for term in terms:
            pattern = f"%{term.lower()}%"
            clauses.append(func.lower(Product.name).like(pattern))
            clauses.append(func.lower(Product.description).like(pattern))
            clauses.append(Product.categories.any(func.lower(ProductCategory.name).like(pattern)))
        return query.filter(or_(*clauses))
