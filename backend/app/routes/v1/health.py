# backend/app/routes/v1/health.py
"""
Health check endpoint for monitoring and load balancer probes.
"""

from __future__ import annotations

from datetime import datetime, timezone
import os

from fastapi import APIRouter, Response

from app.core.config import settings
from app.core.constants import API_VERSION, BRAND_NAME
from app.schemas.main_responses import HealthResponse

router = APIRouter(tags=["health"])


def _resolve_git_sha() -> str:
    for candidate in (os.getenv("GIT_SHA"), os.getenv("COMMIT_SHA")):
        if candidate and candidate.strip():
            return candidate.strip()
    return "unknown"


@router.get("", response_model=HealthResponse)
def health_check(response: Response) -> HealthResponse:
    """
    Liveness probe. Does not touch the database; use /api/v1/search/health
    for dependency status.
    """
    response.headers["X-Commit-Sha"] = _resolve_git_sha()
    return HealthResponse(
        status="healthy",
        service=f"{BRAND_NAME.lower()}-api",
        version=API_VERSION,
        environment=settings.environment,
        timestamp=datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
    )
