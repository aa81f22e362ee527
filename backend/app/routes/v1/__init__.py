# backend/app/routes/v1/__init__.py
"""
API v1 Routes

Versioned API endpoints under /api/v1.
"""

from . import health, product_categories, prometheus, search

__all__ = ["health", "product_categories", "prometheus", "search"]
