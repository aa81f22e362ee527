# backend/app/services/search/patterns.py
"""
Regex patterns and lookup tables for directory query parsing.

Apply in this order: postal code -> proximity -> state.
"""
import re
from typing import Dict, FrozenSet, List, Pattern, Tuple

# =============================================================================
# POSTAL CODE (Apply First)
# =============================================================================

POSTAL_CODE: Pattern[str] = re.compile(r"\b(\d{5})\b")

# =============================================================================
# PROXIMITY (Apply Second)
# =============================================================================

# Matched as plain substrings of the normalized query
PROXIMITY_PHRASES: Tuple[str, ...] = (
    "near me",
    "close to me",
    "near my location",
    "close to my location",
    "near my area",
    "in my area",
    "nearby",
    "close by",
    "around me",
    "around here",
    "in the area",
    "local",
    "locally",
    "that are close",
    "that are near",
    "that are nearby",
    "close to here",
    "near here",
    "within driving distance",
    "not far",
    "not too far",
    "walking distance",
    "driving distance",
    "convenient",
    "accessible",
)

# Bare words that imply "near me" only when no state is mentioned
PROXIMITY_WORDS: Tuple[str, ...] = ("close", "near", "local", "around")

# =============================================================================
# STATES (Apply Third)
# =============================================================================

STATE_NAME_TO_CODE: Dict[str, str] = {
    "alabama": "AL",
    "alaska": "AK",
    "arizona": "AZ",
    "arkansas": "AR",
    "california": "CA",
    "colorado": "CO",
    "connecticut": "CT",
    "delaware": "DE",
    "florida": "FL",
    "georgia": "GA",
    "hawaii": "HI",
    "idaho": "ID",
    "illinois": "IL",
    "indiana": "IN",
    "iowa": "IA",
    "kansas": "KS",
    "kentucky": "KY",
    "louisiana": "LA",
    "maine": "ME",
    "maryland": "MD",
    "massachusetts": "MA",
    "michigan": "MI",
    "minnesota": "MN",
    "mississippi": "MS",
    "missouri": "MO",
    "montana": "MT",
    "nebraska": "NE",
    "nevada": "NV",
    "new hampshire": "NH",
    "new jersey": "NJ",
    "new mexico": "NM",
    "new york": "NY",
    "north carolina": "NC",
    "north dakota": "ND",
    "ohio": "OH",
    "oklahoma": "OK",
    "oregon": "OR",
    "pennsylvania": "PA",
    "rhode island": "RI",
    "south carolina": "SC",
    "south dakota": "SD",
    "tennessee": "TN",
    "texas": "TX",
    "utah": "UT",
    "vermont": "VT",
    "virginia": "VA",
    "washington": "WA",
    "west virginia": "WV",
    "wisconsin": "WI",
    "wyoming": "WY",
    "district of columbia": "DC",
    "washington dc": "DC",
    "washington d.c.": "DC",
    "puerto rico": "PR",
    "guam": "GU",
    "american samoa": "AS",
    "u.s. virgin islands": "VI",
    "us virgin islands": "VI",
    "virgin islands": "VI",
    "northern mariana islands": "MP",
}

STATE_CODES: FrozenSet[str] = frozenset(code.lower() for code in STATE_NAME_TO_CODE.values())


def _state_name_pattern(name: str) -> Pattern[str]:
    # Names may end in "." ("washington d.c.") so the trailing boundary is a lookahead
    return re.compile(r"(?<![a-z])" + re.escape(name) + r"(?![a-z])")


# Longest names first so "west virginia" wins over "virginia" and
# "arkansas" over "kansas"
STATE_NAME_PATTERNS: List[Tuple[Pattern[str], str]] = [
    (_state_name_pattern(name), STATE_NAME_TO_CODE[name])
    for name in sorted(STATE_NAME_TO_CODE, key=lambda n: (-len(n), n))
]

# Tokens are split on whitespace with surrounding punctuation stripped
TOKEN_STRIP_CHARS = ".,;:!?()\"'"

# =============================================================================
# PRODUCTS
# =============================================================================

PRODUCT_WORD: Pattern[str] = re.compile(r"\bproducts?\b")

WHITESPACE: Pattern[str] = re.compile(r"\s+")
