"""
Database models for the directory search API.

The models are organized by collection:
- Service listings and the dynamic service-type definitions
- Product listings and product categories
"""

from .product import Product, ProductCategory, product_category_mappings
from .service_listing import ServiceDefinition, ServiceListing

__all__ = [
    "Product",
    "ProductCategory",
    "ServiceDefinition",
    "ServiceListing",
    "product_category_mappings",
]
