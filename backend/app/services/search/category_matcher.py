# backend/app/services/search/category_matcher.py
"""
Product-search signal.

A query asks for products when it mentions a product category (by name or
description) or literally says "product"/"products". Only the signal is
computed here; product rows are never hard-filtered by category.
"""
from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Optional, Sequence, Tuple

from app.services.search.config import get_search_config
from app.services.search.patterns import PRODUCT_WORD

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProductCategoryDefinition:
    id: str
    name: str
    description: Optional[str] = None


@dataclass(frozen=True)
class ProductSignal:
    is_product_search: bool
    matched_categories: Tuple[str, ...] = ()
    mentions_product_word: bool = False


class CategoryMatcher:
    """Decides whether a normalized query should also search products."""

    def __init__(self, min_reverse_match_length: Optional[int] = None) -> None:
        self._min_reverse = min_reverse_match_length

    @property
    def min_reverse_match_length(self) -> int:
        if self._min_reverse is not None:
            return self._min_reverse
        return get_search_config().min_reverse_match_length

    def match(
        self, normalized_query: str, categories: Sequence[ProductCategoryDefinition]
    ) -> ProductSignal:
        query = normalized_query.strip()
        matched = tuple(
            category.name for category in categories if self._category_matches(query, category)
        )
        product_word = bool(PRODUCT_WORD.search(query))
        return ProductSignal(
            is_product_search=bool(matched) or product_word,
            matched_categories=matched,
            mentions_product_word=product_word,
        )

    def _category_matches(self, query: str, category: ProductCategoryDefinition) -> bool:
        if not query:
            return False
        allow_reverse = len(query) >= self.min_reverse_match_length
        for text in (category.name, category.description):
            value = (text or "").strip().lower()
            if not value:
                continue
            if value in query:
                return True
            if allow_reverse and query in value:
                return True
        return False
