# backend/app/services/search/config.py
"""
Runtime-configurable tunables for directory search.

Loaded from `SEARCH_*` environment variables on first access. Values can be
overridden at runtime (tests, operator tweaks); overrides are not persisted and
reset on restart.
"""
from __future__ import annotations

from dataclasses import asdict, dataclass
import os
from threading import Lock
from typing import Any, Dict, Optional


@dataclass
class SearchConfig:
    """Configuration for directory search."""

    # Radius applied to postal-code and "near me" searches
    default_radius_miles: float = 25.0

    # Max records fetched per collection, and max results returned
    per_collection_cap: int = 100
    result_cap: int = 100

    # Products scoring below this are dropped
    min_relevance_score: int = 5

    # Reverse containment (category text contains query) needs this many characters
    min_reverse_match_length: int = 3

    @classmethod
    def from_env(cls) -> "SearchConfig":
        """Load configuration from environment variables."""
        return cls(
            default_radius_miles=float(os.getenv("SEARCH_DEFAULT_RADIUS_MILES", "25")),
            per_collection_cap=int(os.getenv("SEARCH_PER_COLLECTION_CAP", "100")),
            result_cap=int(os.getenv("SEARCH_RESULT_CAP", "100")),
            min_relevance_score=int(os.getenv("SEARCH_MIN_RELEVANCE_SCORE", "5")),
            min_reverse_match_length=int(os.getenv("SEARCH_MIN_REVERSE_MATCH_LENGTH", "3")),
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


# Thread-safe singleton pattern for config
_config: Optional[SearchConfig] = None
_config_lock = Lock()


def get_search_config() -> SearchConfig:
    """
    Get the search configuration singleton.

    Loads from environment on first access.
    """
    global _config
    if _config is None:
        with _config_lock:
            if _config is None:
                _config = SearchConfig.from_env()
    return _config


def update_search_config(
    default_radius_miles: Optional[float] = None,
    per_collection_cap: Optional[int] = None,
    result_cap: Optional[int] = None,
    min_relevance_score: Optional[int] = None,
    min_reverse_match_length: Optional[int] = None,
) -> SearchConfig:
    """
    Update search configuration at runtime.

    Args:
        default_radius_miles: Radius for postal-code and near-me searches
        per_collection_cap: Max records fetched from each collection
        result_cap: Max merged results returned
        min_relevance_score: Product relevance threshold
        min_reverse_match_length: Minimum query length for reverse category matching

    Returns:
        Updated SearchConfig
    """
    global _config
    with _config_lock:
        if _config is None:
            _config = SearchConfig.from_env()

        if default_radius_miles is not None:
            if default_radius_miles <= 0:
                raise ValueError("default_radius_miles must be positive")
            _config.default_radius_miles = default_radius_miles
        if per_collection_cap is not None:
            _config.per_collection_cap = max(1, per_collection_cap)
        if result_cap is not None:
            _config.result_cap = max(1, result_cap)
        if min_relevance_score is not None:
            _config.min_relevance_score = min_relevance_score
        if min_reverse_match_length is not None:
            _config.min_reverse_match_length = max(1, min_reverse_match_length)

        return _config


def reset_search_config() -> SearchConfig:
    """Reset configuration to environment defaults."""
    global _config
    with _config_lock:
        _config = SearchConfig.from_env()
        return _config
