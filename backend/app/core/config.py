# backend/app/core/config.py
import logging
import os
import sys
from pathlib import Path
from typing import Literal

from dotenv import load_dotenv
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .constants import BRAND_NAME

logger = logging.getLogger(__name__)


def is_running_tests() -> bool:
    """
    Detect if code is running under pytest.

    PYTEST_CURRENT_TEST is set automatically by pytest during test runs, and is
    not expected to be present in production environments. It is only set while a
    test runs, so module-level imports during collection check sys.modules too.
    """
    return os.getenv("PYTEST_CURRENT_TEST") is not None or "pytest" in sys.modules


# Load .env file only if not in CI
if not os.getenv("CI"):
    env_path = Path(__file__).parent.parent.parent / ".env"  # Goes up to backend/.env
    logger.info("[CONFIG] Looking for .env at: %s", env_path)
    load_dotenv(env_path)


class Settings(BaseSettings):
    environment: str = Field(default="development", description="Deployment environment name")

    # Database
    database_url: str = Field(
        default="sqlite:///./directory.db",
        description="SQLAlchemy database URL for the listings store",
    )
    database_echo: bool = Field(default=False, description="Echo SQL statements (debugging)")

    # Geocoding providers
    geocoding_provider: Literal["nominatim", "google", "mock"] = Field(
        default="nominatim", description="Geocoding provider: nominatim|google|mock"
    )
    geocoding_timeout_seconds: float = Field(
        default=10.0, description="HTTP timeout for a single geocoding request"
    )
    nominatim_base_url: str = Field(
        default="https://nominatim.openstreetmap.org",
        description="Base URL of the Nominatim search API",
    )
    nominatim_user_agent: str = Field(
        default=f"{BRAND_NAME}/1.0",
        description="User-Agent sent to Nominatim (required by its usage policy)",
    )
    google_maps_api_key: str = Field(
        default="", description="Google Maps API key for geocoding"
    )

    # CORS
    allowed_origins: list[str] = Field(
        default_factory=lambda: ["http://localhost:3000"],
        description="Origins allowed to call the API from a browser",
    )

    model_config = SettingsConfigDict(
        env_file=".env" if not os.getenv("CI") else None,
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("geocoding_provider", mode="before")
    @classmethod
    def _normalize_provider(cls, value: object) -> object:
        if isinstance(value, str):
            return value.strip().lower() or "nominatim"
        return value

    @field_validator("geocoding_timeout_seconds")
    @classmethod
    def _positive_timeout(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("GEOCODING_TIMEOUT_SECONDS must be positive")
        return value

    def get_database_url(self) -> str:
        """Get the database URL, preferring the test database under pytest."""
        if is_running_tests():
            return os.getenv("TEST_DATABASE_URL", "sqlite://")
        return self.database_url


settings = Settings()
