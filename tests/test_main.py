from fastapi.testclient import TestClient

import storefront.main as main
from storefront.data.database import Base, engine
from storefront.utils.logging import get_logger


class TestLifespan:
    def test_creates_tables_and_seeds(self, monkeypatch):
        Base.metadata.drop_all(bind=engine)
        monkeypatch.setattr(main, "SEED_PRODUCT_COUNT", 3)
        try:
            with TestClient(main.create_app()) as client:
                assert client.get("/health").json() == {"status": "ok"}
                assert len(client.get("/api/products").json()) == 3
        finally:
            Base.metadata.drop_all(bind=engine)

    def test_seed_skips_a_filled_catalogue(self, db, make_product, monkeypatch):
        make_product(stock=1)
        monkeypatch.setattr(main, "SEED_PRODUCT_COUNT", 5)

        with TestClient(main.create_app()) as client:
            assert len(client.get("/api/products").json()) == 1


def test_get_logger_accepts_plain_messages():
    logger = get_logger("storefront.tests")
    logger.info("Order 1 persisted as PENDING")
    logger.warning("stock restored", product_id=101, quantity=2)
