# backend/app/repositories/__init__.py
"""
Repository layer for the directory search API.

Repositories own every SQL query; services never touch the ORM session
directly. Each repository raises RepositoryException on database errors.
"""

from .category_repository import CategoryRepository
from .listing_repository import (
    ListingRepository,
    ProductListingRepository,
    ServiceListingRepository,
)

__all__ = [
    "CategoryRepository",
    "ListingRepository",
    "ProductListingRepository",
    "ServiceListingRepository",
]
