# backend/app/models/service_listing.py
"""
Service listing models.

This module defines two models:
1. ServiceDefinition - The dynamic list of service types (groomer, vet, ...)
2. ServiceListing - An approved local business offering one service type
"""

from sqlalchemy import JSON, Boolean, Column, DateTime, Float, Integer, String, Text, func

from ..core.ulid_helper import generate_ulid
from ..database import Base


class ServiceDefinition(Base):
    """
    A service type users can search for.

    Attributes:
        id: Primary key
        service_type: Stable identifier stored on listings (e.g., "dog_park")
        service_name: Display name (e.g., "Dog Park")
        keywords: Extra search terms that should also match this type
        badge_color: Color used for the type badge in the UI
        display_order: Matching and display order (lower numbers first)
    """

    __tablename__ = "service_definitions"

    id = Column(Integer, primary_key=True, autoincrement=True)
    service_type = Column(String(64), nullable=False, unique=True, index=True)
    service_name = Column(String(128), nullable=False)
    keywords = Column(JSON, nullable=True)
    badge_color = Column(String(32), nullable=False, default="gray")
    display_order = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    def __repr__(self) -> str:  # pragma: no cover
        return f"<ServiceDefinition {self.service_type}>"


class ServiceListing(Base):
    __tablename__ = "services"

    id = Column(String(26), primary_key=True, index=True, default=generate_ulid)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    service_type = Column(String(64), nullable=False, index=True)

    address = Column(String(255), nullable=True)
    city = Column(String(100), nullable=True)
    state = Column(String(2), nullable=True, index=True)
    zip_code = Column(String(10), nullable=True, index=True)
    # Null until geocoded; listings without coordinates sort last in distance searches
    latitude = Column(Float, nullable=True)
    longitude = Column(Float, nullable=True)

    website_url = Column(String(500), nullable=True)
    contact_phone = Column(String(50), nullable=True)
    image_url = Column(String(500), nullable=True)
    rating = Column(Float, nullable=True)
    review_count = Column(Integer, nullable=True)
    is_verified = Column(Boolean, nullable=False, default=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    def __repr__(self) -> str:  # pragma: no cover
        return f"<ServiceListing {self.service_type}:{self.name} {self.zip_code}>"
