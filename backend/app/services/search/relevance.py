# backend/app/services/search/relevance.py
"""
Relevance scoring for product candidates.

Scoring (all comparisons on lowercased text):
- +100 when the product name contains the whole normalized query
- +10 per query word (longer than 2 chars) found anywhere in name,
  description or category names
- +15 per query word found in a category name

Products below the threshold are dropped; the rest are stably sorted by
score, highest first. `relevance_terms` lets storage discard zero-score rows
before any cap is applied.
"""
from __future__ import annotations

from dataclasses import replace
from typing import List, Optional, Sequence, Tuple

from app.services.search.candidates import ProductCandidate
from app.services.search.config import get_search_config

WHOLE_QUERY_IN_NAME = 100
WORD_IN_TEXT = 10
WORD_IN_CATEGORY = 15
MIN_WORD_LENGTH = 3


def relevance_terms(normalized_query: str) -> Tuple[str, ...]:
    """
    Substrings of which a product must contain at least one to score above zero.

    The whole query counts (name match), plus every word long enough to score.
    """
    query = normalized_query.strip().lower()
    if not query:
        return ()
    terms = [query]
    for word in query.split():
        if len(word) >= MIN_WORD_LENGTH and word not in terms:
            terms.append(word)
    return tuple(terms)


def score_product(product: ProductCandidate, normalized_query: str) -> int:
    query = normalized_query.strip().lower()
    if not query:
        return 0

    name = product.name.lower()
    category_text = " ".join(product.categories).lower()
    haystack = " ".join(filter(None, [name, (product.description or "").lower(), category_text]))

    score = 0
    if query in name:
        score += WHOLE_QUERY_IN_NAME
    for word in query.split():
        if len(word) < MIN_WORD_LENGTH:
            continue
        if word in haystack:
            score += WORD_IN_TEXT
        if word in category_text:
            score += WORD_IN_CATEGORY
    return score


def score_products(
    products: Sequence[ProductCandidate],
    normalized_query: str,
    min_score: Optional[int] = None,
) -> List[ProductCandidate]:
    threshold = get_search_config().min_relevance_score if min_score is None else min_score
    scored = [replace(p, relevance_score=score_product(p, normalized_query)) for p in products]
    kept = [p for p in scored if (p.relevance_score or 0) >= threshold]
    # sorted() is stable, so equal scores keep fetch order
    return sorted(kept, key=lambda p: -(p.relevance_score or 0))
