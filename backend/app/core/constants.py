"""Application-wide constants for the directory search API."""

from __future__ import annotations

BRAND_NAME = "DogServicesDirectory"

API_TITLE = f"{BRAND_NAME} API"
API_DESCRIPTION = "Search local dog services and products in plain language."
API_VERSION = "1.0.0"

# Query limits
DEFAULT_QUERY_LIMIT = 100
MAX_SUGGESTIONS = 10

# Earth's mean radius used by the haversine distance
EARTH_RADIUS_MILES = 3959.0
