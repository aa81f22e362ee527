# backend/app/models/product.py
"""Product listing models and their many-to-many category mapping."""

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Float,
    ForeignKey,
    String,
    Table,
    Text,
    func,
)
from sqlalchemy.orm import relationship

from ..core.ulid_helper import generate_ulid
from ..database import Base

product_category_mappings = Table(
    "product_category_mappings",
    Base.metadata,
    Column(
        "product_id",
        String(26),
        ForeignKey("products.id", ondelete="CASCADE"),
        primary_key=True,
    ),
    Column(
        "category_id",
        String(26),
        ForeignKey("product_categories.id", ondelete="CASCADE"),
        primary_key=True,
    ),
)


class ProductCategory(Base):
    __tablename__ = "product_categories"

    id = Column(String(26), primary_key=True, default=generate_ulid)
    name = Column(String(100), nullable=False, unique=True)
    description = Column(Text, nullable=True)
    color = Column(String(32), nullable=False, default="gray")
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    def __repr__(self) -> str:  # pragma: no cover
        return f"<ProductCategory {self.name}>"


class Product(Base):
    """
    A product listing (food, supplements, gear, ...).

    Products may have a physical location, but many are online-only and carry
    no coordinates or postal code.
    """

    __tablename__ = "products"

    id = Column(String(26), primary_key=True, index=True, default=generate_ulid)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    website = Column(String(500), nullable=True)
    contact_number = Column(String(50), nullable=True)
    email = Column(String(255), nullable=True)

    location_address = Column(String(255), nullable=True)
    city = Column(String(100), nullable=True)
    state = Column(String(2), nullable=True, index=True)
    zip_code = Column(String(10), nullable=True, index=True)
    latitude = Column(Float, nullable=True)
    longitude = Column(Float, nullable=True)

    is_verified_gentle_care = Column(Boolean, nullable=False, default=False)
    image_url = Column(String(500), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    categories = relationship(
        ProductCategory,
        secondary=product_category_mappings,
        lazy="selectin",
        order_by=ProductCategory.name,
    )

    def __repr__(self) -> str:  # pragma: no cover
        return f"<Product {self.name}>"
