import os

# must be set before anything from storefront is imported
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["STOCK_MUTATION_MODE"] = "atomic"
os.environ["SAGA_COMPENSATE_STOCK"] = "false"

from decimal import Decimal

import pytest
from fastapi.testclient import TestClient

from storefront.api import create_api
from storefront.api import deps
from storefront.data.database import Base, SessionLocal, engine, get_db
import storefront.data.models  # noqa: F401
from storefront.data.models.product import ProductModel
from storefront.domain.errors import DownstreamError, NotFoundError, ProductUnknownError
from storefront.domain.schemas import OrderOut
from storefront.services.cart_service import CartService
from storefront.services.order_saga import SagaConfig
from storefront.services.order_service import OrderService
from storefront.services.product_service import ProductService


class LocalProductClient:
    """ProductClient stand-in that calls ProductService in process."""

    def __init__(self, db, mode="atomic"):
        self.service = ProductService(db, mode=mode)
        self.fail_on = set()
        self.before_mutate = None
        self.mutations = []

    def fetch_product(self, product_id):
        product = self.service.get_product(product_id)
        return {"id": product.id, "name": product.name, "price": str(product.price)}

    def get_stock(self, product_id):
        try:
            return self.service.get_stock(product_id)
        except NotFoundError:
            raise ProductUnknownError(product_id) from None

    def mutate_stock(self, product_id, quantity, operation, idempotency_key=None):
        self.mutations.append((product_id, quantity, operation, idempotency_key))
        if self.before_mutate:
            self.before_mutate(product_id)
        if product_id in self.fail_on:
            raise DownstreamError("product-service unavailable: connection refused")
        product = self.service.mutate_stock(product_id, quantity, operation, idempotency_key)
        return {"id": product.id, "available_stock": product.available_stock}


class LocalCartClient:
    def __init__(self, db, product_client):
        self.service = CartService(db, product_client=product_client)
        self.fail_clear = False
        self.cleared = []

    def add_item(self, user_id, item):
        return self.service.add_item(user_id, item)

    def clear_cart(self, user_id):
        if self.fail_clear:
            raise DownstreamError("cart-service unavailable: read timed out")
        self.service.clear_cart(user_id)
        self.cleared.append(user_id)


class LocalOrderClient:
    def __init__(self, db, product_client, cart_client, config=None):
        self.service = OrderService(
            db,
            product_client=product_client,
            cart_client=cart_client,
            config=config or SagaConfig(),
        )

    def create_order(self, payload):
        order = self.service.create_order(payload)
        return OrderOut.model_validate(order).model_dump(mode="json")


class FakeLockService:
    def __init__(self):
        self.locks = {}

    def acquire_checkout_lock(self, user_id, token, ttl):
        if user_id in self.locks:
            return False
        self.locks[user_id] = token
        return True

    def release_checkout_lock(self, user_id, token):
        if self.locks.get(user_id) == token:
            del self.locks[user_id]
            return True
        return False


@pytest.fixture()
def db():
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture()
def product_client(db):
    return LocalProductClient(db)


@pytest.fixture()
def cart_client(db, product_client):
    return LocalCartClient(db, product_client)


@pytest.fixture()
def order_client(db, product_client, cart_client):
    return LocalOrderClient(db, product_client, cart_client)


@pytest.fixture()
def lock_service():
    return FakeLockService()


@pytest.fixture()
def order_service(db, product_client, cart_client):
    return OrderService(db, product_client=product_client, cart_client=cart_client, config=SagaConfig())


@pytest.fixture()
def cart_service(db, product_client, order_client, lock_service):
    return CartService(db, product_client=product_client, order_client=order_client, lock_service=lock_service)


@pytest.fixture()
def make_product(db):
    def _make(product_id=None, name="Keyboard", price="50.00", stock=10):
        product = ProductModel(
            id=product_id,
            name=name,
            description=f"{name} description",
            price=Decimal(price),
            available_stock=stock,
        )
        db.add(product)
        db.commit()
        db.refresh(product)
        return product

    return _make


@pytest.fixture()
def client(db, product_client, cart_client, order_client, lock_service):
    app = create_api()

    def _get_db():
        yield db

    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[deps.get_product_client] = lambda: product_client
    app.dependency_overrides[deps.get_cart_client] = lambda: cart_client
    app.dependency_overrides[deps.get_order_client] = lambda: order_client
    app.dependency_overrides[deps.get_lock_service] = lambda: lock_service
    app.dependency_overrides[deps.get_saga_config] = lambda: SagaConfig()
    app.dependency_overrides[deps.get_stock_mutation_mode] = lambda: "atomic"
    return TestClient(app)


@pytest.fixture()
def stock_of(db):
    def _stock(product_id):
        product = db.get(ProductModel, product_id)
        db.refresh(product)
        return product.available_stock

    return _stock
