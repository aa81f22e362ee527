# backend/app/services/search/query_parser.py
"""
Rule-based parser for directory search queries.

Turns free text such as "groomers near me" or "dog parks in Indiana" into a
`ParsedIntent`: which service category the user wants and how the result set
should be located (state, postal code + radius, near the caller, or nowhere in
particular). Parsing is a pure function of the text, the category list and the
keyword policy; no I/O happens here.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
import logging
from typing import Iterable, List, Optional, Sequence, Tuple

from app.services.search.config import get_search_config
from app.services.search.patterns import (
    POSTAL_CODE,
    PROXIMITY_PHRASES,
    PROXIMITY_WORDS,
    STATE_CODES,
    STATE_NAME_PATTERNS,
    TOKEN_STRIP_CHARS,
    WHITESPACE,
)

logger = logging.getLogger(__name__)


class LocationMode(str, Enum):
    NONE = "none"
    STATE = "state"
    POSTAL_RADIUS = "zip_code"
    NEAR_ME = "near_me"


@dataclass(frozen=True)
class CategoryDefinition:
    """A service type as stored in `service_definitions`."""

    id: str  # service type, e.g. "dog_park"
    display_name: str  # e.g. "Dog Park"
    keywords: Tuple[str, ...] = ()


@dataclass(frozen=True)
class SynonymRule:
    """If a service type id contains `fragment`, any of `variants` in the query selects it."""

    fragment: str
    variants: Tuple[str, ...]


@dataclass(frozen=True)
class CategoryKeywordPolicy:
    """
    Keyword knowledge the parser needs beyond the stored category rows.

    `synonym_rules` extend each stored definition; `fallback_table` is only
    consulted when no definitions could be loaded at all. Fallback entries are
    checked in order and the first hit wins.
    """

    synonym_rules: Tuple[SynonymRule, ...] = ()
    fallback_table: Tuple[Tuple[str, Tuple[str, ...]], ...] = ()


def default_category_policy() -> CategoryKeywordPolicy:
    return CategoryKeywordPolicy(
        synonym_rules=(
            SynonymRule("park", ("park", "dogpark")),
            SynonymRule("groomer", ("groomer", "grooming")),
            SynonymRule("vet", ("vet", "veterinarian")),
            SynonymRule("trainer", ("trainer", "training")),
            SynonymRule("boarding", ("boarding", "daycare")),
        ),
        fallback_table=(
            ("dog_park", ("dog park", "dogpark")),
            ("groomer", ("groomer", "grooming")),
            ("veterinarian", ("vet", "veterinarian")),
            ("dog_trainer", ("trainer", "training")),
            ("boarding_daycare", ("boarding", "daycare")),
        ),
    )


@dataclass(frozen=True)
class ParsedIntent:
    """Structured interpretation of one search query."""

    original_query: str
    normalized_query: str
    service_category: Optional[str] = None
    location_mode: LocationMode = LocationMode.NONE
    location_value: Optional[str] = None  # 2-letter state code or 5-digit postal code
    radius_miles: Optional[float] = None
    matched_terms: Tuple[str, ...] = field(default=(), compare=False)

    @property
    def has_location(self) -> bool:
        return self.location_mode is not LocationMode.NONE


def normalize_query(raw: str) -> str:
    """Lowercase, trim and collapse internal whitespace."""
    return WHITESPACE.sub(" ", (raw or "").strip().lower())


def _tokens(normalized: str) -> List[str]:
    return [t.strip(TOKEN_STRIP_CHARS) for t in normalized.split(" ") if t]


def find_state(normalized: str) -> Optional[str]:
    """Return the 2-letter code of the first state mentioned, full names before codes."""
    for pattern, code in STATE_NAME_PATTERNS:
        if pattern.search(normalized):
            return code
    for token in _tokens(normalized):
        if token in STATE_CODES:
            return token.upper()
    return None


class QueryParser:
    """
    Deterministic parser for directory queries.

    Usage:
        parser = QueryParser()
        intent = parser.parse("groomers near me", categories)
    """

    def __init__(
        self,
        policy: Optional[CategoryKeywordPolicy] = None,
        default_radius_miles: Optional[float] = None,
    ) -> None:
        self.policy = policy or default_category_policy()
        self._default_radius = default_radius_miles

    @property
    def default_radius_miles(self) -> float:
        if self._default_radius is not None:
            return self._default_radius
        return get_search_config().default_radius_miles

    def parse(
        self, query: str, categories: Sequence[CategoryDefinition] = ()
    ) -> ParsedIntent:
        normalized = normalize_query(query)

        # Single characters and bare non-postal numbers carry no intent
        if len(normalized) < 2 or (normalized.isdigit() and not POSTAL_CODE.fullmatch(normalized)):
            return ParsedIntent(original_query=query, normalized_query=normalized)

        category, matched = self._detect_category(normalized, categories)
        mode, value, radius = self._detect_location(normalized)

        intent = ParsedIntent(
            original_query=query,
            normalized_query=normalized,
            service_category=category,
            location_mode=mode,
            location_value=value,
            radius_miles=radius,
            matched_terms=matched,
        )
        logger.debug(
            "Parsed '%s' -> category=%s mode=%s value=%s",
            normalized,
            category,
            mode.value,
            value,
        )
        return intent

    # ------------------------------------------------------------------
    # Category detection
    # ------------------------------------------------------------------

    def _detect_category(
        self, normalized: str, categories: Sequence[CategoryDefinition]
    ) -> Tuple[Optional[str], Tuple[str, ...]]:
        if not categories:
            return self._detect_fallback_category(normalized)

        for definition in categories:
            hit = self._match_definition(normalized, definition)
            if hit is not None:
                return definition.id, (hit,)
        return None, ()

    def _match_definition(self, normalized: str, definition: CategoryDefinition) -> Optional[str]:
        candidates: List[str] = [
            definition.display_name.lower(),
            definition.id.replace("_", " ").lower(),
        ]
        candidates.extend(k.lower() for k in definition.keywords)
        for term in candidates:
            if term and term in normalized:
                return term

        type_id = definition.id.lower()
        for rule in self.policy.synonym_rules:
            if rule.fragment in type_id:
                variant = _first_contained(normalized, rule.variants)
                if variant is not None:
                    return variant
        return None

    def _detect_fallback_category(self, normalized: str) -> Tuple[Optional[str], Tuple[str, ...]]:
        for category_id, variants in self.policy.fallback_table:
            variant = _first_contained(normalized, variants)
            if variant is not None:
                return category_id, (variant,)
        return None, ()

    # ------------------------------------------------------------------
    # Location detection
    # ------------------------------------------------------------------

    def _detect_location(
        self, normalized: str
    ) -> Tuple[LocationMode, Optional[str], Optional[float]]:
        postal = POSTAL_CODE.search(normalized)
        if postal:
            return LocationMode.POSTAL_RADIUS, postal.group(1), self.default_radius_miles

        if self._is_near_me(normalized):
            return LocationMode.NEAR_ME, None, self.default_radius_miles

        state = find_state(normalized)
        if state:
            return LocationMode.STATE, state, None

        return LocationMode.NONE, None, None

    def _is_near_me(self, normalized: str) -> bool:
        if _first_contained(normalized, PROXIMITY_PHRASES) is not None:
            return True
        # "groomers close by downtown" is local, "parks near Chicago, IL" is not
        if _first_contained(normalized, PROXIMITY_WORDS) is not None:
            return find_state(normalized) is None
        return False


def _first_contained(text: str, needles: Iterable[str]) -> Optional[str]:
    for needle in needles:
        if needle and needle in text:
            return needle
    return None
