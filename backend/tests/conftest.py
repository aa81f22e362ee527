# backend/tests/conftest.py
"""
Shared fixtures for the directory search test suite.

Every test gets its own SQLite file database (worker threads used by the
search pipeline open their own connections, which an in-memory database
would not share reliably) plus a `directory` seeder for listings.
"""

from __future__ import annotations

from contextlib import contextmanager
import os
from typing import Any, Dict, Iterable, Iterator, List, Optional

os.environ.setdefault("GEOCODING_PROVIDER", "mock")

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

from app.database import Base, SessionFactory

# Import models so Base.metadata is populated for create_all.
import app.models  # noqa: F401
from app.models import Product, ProductCategory, ServiceDefinition, ServiceListing
from app.services.search.circuit_breaker import GEOCODING_CIRCUIT
from app.services.search.config import reset_search_config
from tests.helpers.geocoding_stubs import StubGeocoder

DEFAULT_DEFINITIONS = [
    ("dog_park", "Dog Park", ["off leash"]),
    ("groomer", "Groomer", ["grooming"]),
    ("veterinarian", "Veterinarian", ["animal hospital"]),
    ("dog_trainer", "Dog Trainer", ["obedience"]),
    ("boarding_daycare", "Boarding & Daycare", ["kennel"]),
]

DEFAULT_PRODUCT_CATEGORIES = [
    ("Food", "Dog food and treats"),
    ("Supplements", "Vitamins and joint support"),
    ("Toys", "Chew toys and fetch gear"),
]


@pytest.fixture(autouse=True)
def _reset_process_state() -> Iterator[None]:
    """Circuit breaker and search tunables are process-wide; isolate each test."""
    GEOCODING_CIRCUIT.reset()
    reset_search_config()
    yield
    GEOCODING_CIRCUIT.reset()
    reset_search_config()


@pytest.fixture
def engine(tmp_path):
    eng = create_engine(
        f"sqlite:///{tmp_path / 'directory.db'}",
        future=True,
        connect_args={"check_same_thread": False},
    )
    Base.metadata.create_all(eng)
    yield eng
    Base.metadata.drop_all(eng)
    eng.dispose()


@pytest.fixture
def session_factory(engine) -> SessionFactory:
    SessionLocal = sessionmaker(bind=engine, expire_on_commit=False, future=True)

    @contextmanager
    def _factory() -> Iterator[Session]:
        db = SessionLocal()
        try:
            yield db
            db.commit()
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()

    return _factory


@pytest.fixture
def db(session_factory) -> Iterator[Session]:
    with session_factory() as session:
        yield session


class DirectorySeeder:
    """Inserts listings and taxonomy rows, one committed session per call."""

    def __init__(self, session_factory: SessionFactory) -> None:
        self._session_factory = session_factory

    def definitions(self, rows: Iterable[tuple] = DEFAULT_DEFINITIONS) -> None:
        with self._session_factory() as db:
            for order, (service_type, name, keywords) in enumerate(rows):
                db.add(
                    ServiceDefinition(
                        service_type=service_type,
                        service_name=name,
                        keywords=list(keywords),
                        display_order=order,
                    )
                )

    def product_categories(
        self, rows: Iterable[tuple] = DEFAULT_PRODUCT_CATEGORIES
    ) -> Dict[str, str]:
        ids: Dict[str, str] = {}
        with self._session_factory() as db:
            for name, description in rows:
                category = ProductCategory(name=name, description=description)
                db.add(category)
                db.flush()
                ids[name] = category.id
        return ids

    def service(
        self,
        name: str,
        service_type: str,
        *,
        state: Optional[str] = "IN",
        zip_code: Optional[str] = None,
        lat: Optional[float] = None,
        lng: Optional[float] = None,
        **extra: Any,
    ) -> str:
        with self._session_factory() as db:
            row = ServiceListing(
                name=name,
                service_type=service_type,
                state=state,
                zip_code=zip_code,
                latitude=lat,
                longitude=lng,
                **extra,
            )
            db.add(row)
            db.flush()
            return str(row.id)

    def product(
        self,
        name: str,
        *,
        description: Optional[str] = None,
        categories: Iterable[str] = (),
        state: Optional[str] = None,
        zip_code: Optional[str] = None,
        lat: Optional[float] = None,
        lng: Optional[float] = None,
        **extra: Any,
    ) -> str:
        with self._session_factory() as db:
            category_rows: List[ProductCategory] = (
                db.query(ProductCategory).filter(ProductCategory.name.in_(list(categories))).all()
                if categories
                else []
            )
            row = Product(
                name=name,
                description=description,
                state=state,
                zip_code=zip_code,
                latitude=lat,
                longitude=lng,
                **extra,
            )
            row.categories = category_rows
            db.add(row)
            db.flush()
            return str(row.id)


@pytest.fixture
def directory(session_factory) -> DirectorySeeder:
    return DirectorySeeder(session_factory)


@pytest.fixture
def indiana_directory(directory: DirectorySeeder) -> DirectorySeeder:
    """
    A small Indianapolis-area directory.

    Distances from (39.9, -86.0): Fishers Pet Spa ~4 mi, Carmel Grooming Co
    ~8 mi, Chicago Dog Wash ~165 mi; Zionsville Groom Room has no coordinates.
    """
    directory.definitions()
    directory.product_categories()

    directory.service("Fishers Pet Spa", "groomer", zip_code="46037", lat=39.9568, lng=-86.0075)
    directory.service("Carmel Grooming Co", "groomer", zip_code="46032", lat=39.9784, lng=-86.1180)
    directory.service("Zionsville Groom Room", "groomer", zip_code="46077")
    directory.service(
        "Chicago Dog Wash", "groomer", state="IL", zip_code="60601", lat=41.8860, lng=-87.6226
    )
    directory.service("Fishers Dog Park", "dog_park", zip_code="46038", lat=39.9670, lng=-86.0170)
    directory.service(
        "Broad Ripple Dog Park", "dog_park", zip_code="46220", lat=39.8680, lng=-86.1400
    )
    directory.service("central bark", "dog_park", zip_code="46204", lat=39.7700, lng=-86.1580)
    directory.service(
        "Montrose Dog Beach", "dog_park", state="IL", zip_code="60640", lat=41.9690, lng=-87.6340
    )
    directory.service(
        "Carmel Animal Hospital", "veterinarian", zip_code="46032", lat=39.9790, lng=-86.1200
    )

    directory.product(
        "Joint Support Supplements",
        description="Glucosamine chews for senior dogs",
        categories=["Supplements"],
    )
    directory.product(
        "Omega Fish Oil",
        description="Daily supplements for a shiny coat",
        categories=["Supplements"],
    )
    directory.product("Squeaky Ball", description="Durable rubber ball", categories=["Toys"])
    directory.product("Pup Kibble", description="Grain free recipe", categories=["Food"])
    return directory


@pytest.fixture
def geocoder() -> StubGeocoder:
    return StubGeocoder()
