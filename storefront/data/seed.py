# storefront/data/seed.py
import random
from decimal import Decimal

from faker import Faker

from storefront.data.database import SessionLocal
from storefront.data.models.product import ProductModel
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


def seed(count: int = 100, faker: Faker | None = None) -> int:
    """Fill an empty catalogue with fake products. Returns how many were added."""
    fake = faker or Faker()
    db = SessionLocal()
    try:
        # not forcing: only seed if empty
        if db.query(ProductModel).first():
            return 0
        for _ in range(count):
            db.add(ProductModel(
                name=fake.catch_phrase(),
                description=fake.sentence(),
                price=Decimal(str(round(random.uniform(10, 1000), 2))),
                available_stock=random.randint(0, 999),
            ))
        db.commit()
        logger.info(f"Seeded {count} products")
        return count
    finally:
        db.close()
