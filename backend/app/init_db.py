"""Create the directory tables and seed the default service types and product categories."""

import logging

from app.database import Base, engine, get_db_session
from app.models import ProductCategory, ServiceDefinition

logger = logging.getLogger(__name__)

DEFAULT_SERVICE_DEFINITIONS = [
    ("dog_park", "Dog Park", ["off leash", "off-leash"], "green"),
    ("groomer", "Groomer", ["bath", "nail trim"], "purple"),
    ("veterinarian", "Veterinarian", ["animal hospital", "clinic"], "red"),
    ("dog_trainer", "Dog Trainer", ["obedience"], "blue"),
    ("boarding_daycare", "Boarding & Daycare", ["kennel", "pet sitting"], "orange"),
]

DEFAULT_PRODUCT_CATEGORIES = [
    ("Food", "Dog food and treats", "amber"),
    ("Supplements", "Vitamins, joint support and other supplements", "teal"),
    ("Toys", "Chew toys, puzzles and fetch gear", "pink"),
    ("Grooming Supplies", "Shampoos, brushes and clippers", "purple"),
]


def init_db() -> None:
    Base.metadata.create_all(bind=engine)
    with get_db_session() as db:
        existing_types = {row.service_type for row in db.query(ServiceDefinition).all()}
        for order, (service_type, name, keywords, color) in enumerate(DEFAULT_SERVICE_DEFINITIONS):
            if service_type not in existing_types:
                db.add(
                    ServiceDefinition(
                        service_type=service_type,
                        service_name=name,
                        keywords=keywords,
                        badge_color=color,
                        display_order=order,
                    )
                )
        existing_categories = {row.name for row in db.query(ProductCategory).all()}
        for name, description, color in DEFAULT_PRODUCT_CATEGORIES:
            if name not in existing_categories:
                db.add(ProductCategory(name=name, description=description, color=color))
    logger.info("Tables created and defaults seeded")


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    init_db()
