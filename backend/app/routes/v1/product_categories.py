# backend/app/routes/v1/product_categories.py
"""Product category listing - API v1 (/api/v1/product-categories)."""

import logging

from fastapi import APIRouter, Depends

from ...api.dependencies.services import get_directory_search_service
from ...core.exceptions import DomainException
from ...schemas.directory_search import ProductCategoriesResponse
from ...services.search.directory_search_service import DirectorySearchService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["product-categories-v1"])


@router.get("", response_model=ProductCategoriesResponse)
async def list_product_categories(
    service: DirectorySearchService = Depends(get_directory_search_service),
) -> ProductCategoriesResponse:
    """All product categories, ordered by name."""
    try:
        return await service.product_categories()
    except DomainException as exc:
        logger.error("Failed to list product categories: %s", exc.message)
        raise exc.to_http_exception()
