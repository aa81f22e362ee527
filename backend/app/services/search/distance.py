# backend/app/services/search/distance.py
"""Distance annotation for fetched candidates."""
from __future__ import annotations

from dataclasses import replace
import math
from typing import List, Sequence, TypeVar

from app.services.search.candidates import ProductCandidate, ServiceCandidate
from app.utils.geo import has_coordinates, haversine_miles

CandidateT = TypeVar("CandidateT", ServiceCandidate, ProductCandidate)


def annotate_distances(
    candidates: Sequence[CandidateT], origin_lat: float, origin_lng: float
) -> List[CandidateT]:
    """
    Return copies of `candidates` with `distance_miles` set.

    Exact postal-code matches keep distance 0. Candidates without usable
    coordinates get `math.inf` so they sort after every known distance.
    """
    annotated: List[CandidateT] = []
    for candidate in candidates:
        if candidate.is_exact_location_match:
            distance = 0.0
        elif has_coordinates(candidate.latitude, candidate.longitude):
            distance = haversine_miles(
                origin_lat, origin_lng, candidate.latitude, candidate.longitude
            )
        else:
            distance = math.inf
        annotated.append(replace(candidate, distance_miles=distance))
    return annotated
