# backend/app/main.py
from __future__ import annotations

from contextlib import asynccontextmanager
import logging
from typing import AsyncGenerator

from fastapi import APIRouter, FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .core.config import settings
from .core.constants import API_DESCRIPTION, API_TITLE, API_VERSION, BRAND_NAME
from .errors import register_error_handlers
from .middleware.prometheus_middleware import PrometheusMiddleware
from .routes.v1 import (
    health as health_v1,
    product_categories as product_categories_v1,
    prometheus as prometheus_v1,
    search as search_v1,
)

# Configure logging
logging.basicConfig(
    level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def app_lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan: log startup configuration."""
    logger.info(
        "%s starting (environment=%s, geocoding=%s)",
        BRAND_NAME,
        settings.environment,
        settings.geocoding_provider,
    )
    yield
    logger.info("%s shutting down", BRAND_NAME)


app = FastAPI(
    title=API_TITLE,
    description=API_DESCRIPTION,
    version=API_VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=app_lifespan,
)
# Register unified error envelope handlers
register_error_handlers(app)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_credentials=False,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["*"],
)
logger.info("CORS allow_origins=%s", settings.allowed_origins)

app.add_middleware(PrometheusMiddleware)

# Create API v1 router
api_v1 = APIRouter(prefix="/api/v1")
api_v1.include_router(search_v1.router, prefix="/search")
api_v1.include_router(product_categories_v1.router, prefix="/product-categories")
api_v1.include_router(health_v1.router, prefix="/health")

app.include_router(api_v1)

# Unversioned scrape endpoint
app.include_router(prometheus_v1.router)

# Keep the original FastAPI app for tools/tests that need access to routes
fastapi_app = app

__all__ = ["app", "fastapi_app"]
