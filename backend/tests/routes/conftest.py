# backend/tests/routes/conftest.py
from __future__ import annotations

from typing import Iterator

from fastapi.testclient import TestClient
import pytest

from app.api.dependencies.services import get_directory_search_service
from app.main import fastapi_app
from app.services.search.directory_search_service import DirectorySearchService


@pytest.fixture
def search_service(session_factory, geocoder) -> DirectorySearchService:
    return DirectorySearchService(geocoder=geocoder, session_factory=session_factory)


@pytest.fixture
def client(search_service: DirectorySearchService) -> Iterator[TestClient]:
    fastapi_app.dependency_overrides[get_directory_search_service] = lambda: search_service
    try:
        with TestClient(fastapi_app) as test_client:
            yield test_client
    finally:
        fastapi_app.dependency_overrides.pop(get_directory_search_service, None)
