# backend/app/repositories/category_repository.py
"""Repository for the service-type and product-category taxonomies."""

from __future__ import annotations

import logging
from typing import List

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.exceptions import RepositoryException
from app.models.product import ProductCategory
from app.models.service_listing import ServiceDefinition

logger = logging.getLogger(__name__)


class CategoryRepository:
    """Read-only access to both category collections."""

    def __init__(self, db: Session) -> None:
        self.db = db

    def list_service_definitions(self) -> List[ServiceDefinition]:
        """Service types in matching order (display_order, then id)."""
        try:
            return (
                self.db.query(ServiceDefinition)
                .order_by(ServiceDefinition.display_order, ServiceDefinition.id)
                .all()
            )
        except SQLAlchemyError as exc:
            raise RepositoryException(f"Failed to load service definitions: {exc}") from exc

    def list_product_categories(self) -> List[ProductCategory]:
        """Product categories ordered by name."""
        try:
            return self.db.query(ProductCategory).order_by(ProductCategory.name).all()
        except SQLAlchemyError as exc:
            raise RepositoryException(f"Failed to load product categories: {exc}") from exc
