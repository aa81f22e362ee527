# backend/app/services/search/ranking_service.py
"""
Merging and ordering of the two candidate groups.

Ordering rules by location mode:

1. Postal code with an origin: exact postal matches first (alphabetical),
   then everything else by ascending distance
2. Near me: ascending distance
3. State, none, or postal code without an origin: alphabetical by name

Unknown (infinite) distances always sort after known ones, alphabetically
among themselves. Location ordering always dominates product relevance; with
no location criterion, alphabetical services are followed by products in
relevance order.
"""
from __future__ import annotations

import math
from typing import List, Sequence, Tuple

from app.services.search.candidates import (
    Candidate,
    ProductCandidate,
    ServiceCandidate,
    sort_name,
)
from app.services.search.query_parser import LocationMode


def _distance_key(candidate: Candidate) -> Tuple[int, float, str]:
    distance = candidate.distance_miles
    if distance is None or math.isinf(distance):
        return (1, 0.0, sort_name(candidate))
    return (0, distance, sort_name(candidate))


def rank_candidates(
    services: Sequence[ServiceCandidate],
    products: Sequence[ProductCandidate],
    mode: LocationMode,
    *,
    has_origin: bool,
) -> List[Candidate]:
    merged: List[Candidate] = [*services, *products]

    if mode is LocationMode.POSTAL_RADIUS and has_origin:
        exact = sorted((c for c in merged if c.is_exact_location_match), key=sort_name)
        rest = sorted((c for c in merged if not c.is_exact_location_match), key=_distance_key)
        return exact + rest

    if mode is LocationMode.NEAR_ME and has_origin:
        return sorted(merged, key=_distance_key)

    if mode is LocationMode.NONE:
        # Products arrive already ordered by relevance
        return [*sorted(services, key=sort_name), *products]

    return sorted(merged, key=sort_name)
