from decimal import Decimal

import pytest

from storefront.data.database import SessionLocal
from storefront.domain.errors import InsufficientStockError, NotFoundError, ValidationError
from storefront.domain.schemas import ProductIn
from storefront.services.product_service import ProductService
from storefront.services.stock_gate import StockGate


@pytest.fixture(params=["atomic", "race"])
def service(request, db):
    return ProductService(db, mode=request.param)


class TestCatalogue:
    def test_create_and_get(self, db):
        svc = ProductService(db)
        created = svc.create_product(
            ProductIn(name="Monitor", description="27 inch", price=Decimal("899.00"), available_stock=4)
        )

        fetched = svc.get_product(created.id)
        assert fetched.name == "Monitor"
        assert fetched.price == Decimal("899.00")
        assert svc.get_stock(created.id) == 4

    @pytest.mark.parametrize(
        "price, stock, message",
        [
            ("0", 1, "Price must be greater than zero"),
            ("-1.00", 1, "Price must be greater than zero"),
            ("1.00", -1, "Available stock cannot be negative"),
        ],
    )
    def test_create_validation(self, db, price, stock, message):
        with pytest.raises(ValidationError, match=message):
            ProductService(db).create_product(
                ProductIn(name="Broken", price=Decimal(price), available_stock=stock)
            )

    def test_update_replaces_fields(self, db, make_product):
        product = make_product(name="Mouse", price="49.50", stock=3)
        updated = ProductService(db).update_product(
            product.id,
            ProductIn(name="Mouse Pro", description=None, price=Decimal("59.00"), available_stock=7),
        )
        assert updated.name == "Mouse Pro"
        assert updated.available_stock == 7

    def test_delete(self, db, make_product):
        product = make_product()
        svc = ProductService(db)
        svc.delete_product(product.id)
        with pytest.raises(NotFoundError):
            svc.get_product(product.id)

    def test_delete_unknown(self, db):
        with pytest.raises(NotFoundError, match="Product not found with id: 42"):
            ProductService(db).delete_product(42)

    def test_unknown_mode_rejected(self, db):
        with pytest.raises(ValueError):
            ProductService(db, mode="optimistic")


class TestMutateStock:
    def test_decrease(self, service, make_product):
        product = make_product(stock=10)
        assert service.mutate_stock(product.id, 2, "DECREASE").available_stock == 8

    def test_decrease_to_zero(self, service, make_product):
        product = make_product(stock=3)
        assert service.mutate_stock(product.id, 3, "DECREASE").available_stock == 0

    def test_decrease_below_zero_fails_without_write(self, service, make_product, stock_of):
        product = make_product(stock=3)
        with pytest.raises(InsufficientStockError):
            service.mutate_stock(product.id, 4, "DECREASE")
        assert stock_of(product.id) == 3

    def test_increase(self, service, make_product):
        product = make_product(stock=3)
        assert service.mutate_stock(product.id, 5, "INCREASE").available_stock == 8

    def test_zero_quantity_is_allowed(self, service, make_product):
        product = make_product(stock=3)
        assert service.mutate_stock(product.id, 0, "DECREASE").available_stock == 3

    @pytest.mark.parametrize("quantity", [-1, None])
    def test_invalid_quantity(self, service, make_product, quantity):
        product = make_product(stock=3)
        with pytest.raises(ValidationError, match="Invalid stock quantity provided"):
            service.mutate_stock(product.id, quantity, "DECREASE")

    def test_invalid_operation_is_named(self, service, make_product, stock_of):
        product = make_product(stock=3)
        with pytest.raises(ValidationError, match="Invalid operation: RESERVE"):
            service.mutate_stock(product.id, 1, "RESERVE")
        assert stock_of(product.id) == 3

    def test_unknown_product(self, service):
        with pytest.raises(NotFoundError):
            service.mutate_stock(999, 1, "DECREASE")

    def test_same_idempotency_key_applied_once(self, service, make_product, stock_of):
        product = make_product(stock=10)
        service.mutate_stock(product.id, 2, "DECREASE", idempotency_key="order-1-item-1-decrease")
        again = service.mutate_stock(product.id, 2, "DECREASE", idempotency_key="order-1-item-1-decrease")

        assert again.available_stock == 8
        assert stock_of(product.id) == 8

    def test_different_keys_applied_separately(self, service, make_product):
        product = make_product(stock=10)
        service.mutate_stock(product.id, 2, "DECREASE", idempotency_key="a")
        assert service.mutate_stock(product.id, 2, "DECREASE", idempotency_key="b").available_stock == 6

    def test_rejected_mutation_does_not_burn_its_key(self, service, make_product):
        product = make_product(stock=1)
        with pytest.raises(InsufficientStockError):
            service.mutate_stock(product.id, 2, "DECREASE", idempotency_key="k")

        service.mutate_stock(product.id, 5, "INCREASE")
        assert service.mutate_stock(product.id, 2, "DECREASE", idempotency_key="k").available_stock == 4


class TestAdjustStock:
    def test_signed_delta(self, service, make_product):
        product = make_product(stock=5)
        assert service.adjust_stock(product.id, -2).available_stock == 3
        assert service.adjust_stock(product.id, 4).available_stock == 7

    def test_never_negative(self, service, make_product, stock_of):
        product = make_product(stock=5)
        with pytest.raises(InsufficientStockError):
            service.adjust_stock(product.id, -6)
        assert stock_of(product.id) == 5


class TestAtomicMode:
    def test_decrement_rejected_against_current_row(self, db, make_product, stock_of):
        product = make_product(stock=5)
        svc = ProductService(db, mode="atomic")
        svc.get_product(product.id)

        # another writer takes the stock after the product was loaded
        db.execute(
            product.__table__.update()
            .where(product.__table__.c.id == product.id)
            .values(available_stock=1)
        )
        db.commit()

        with pytest.raises(InsufficientStockError) as exc:
            svc.mutate_stock(product.id, 3, "DECREASE")
        assert exc.value.available == 1
        assert stock_of(product.id) == 1


class TestConcurrentDecrements:
    """
    Two checkouts of 3 against stock 5, each in its own session.
    Both read 5 and pass the gate before either one writes.
    """

    @pytest.fixture()
    def sessions(self, db):
        opened = [SessionLocal(), SessionLocal()]
        yield opened
        for session in opened:
            session.close()

    def _both_pass_the_gate(self, sessions, mode, product_id):
        services = [ProductService(session, mode=mode) for session in sessions]
        for svc in services:
            assert StockGate(svc).check_availability(product_id, 3) == 5
        return services

    def test_race_mode_loses_an_update(self, sessions, make_product, stock_of):
        product = make_product(stock=5)
        first, second = self._both_pass_the_gate(sessions, "race", product.id)

        first.mutate_stock(product.id, 3, "DECREASE")
        second.mutate_stock(product.id, 3, "DECREASE")

        # 6 units sold out of 5, the second write overwrote the first
        assert stock_of(product.id) == 2

    def test_atomic_mode_rejects_the_second_decrement(self, sessions, make_product, stock_of):
        product = make_product(stock=5)
        first, second = self._both_pass_the_gate(sessions, "atomic", product.id)

        first.mutate_stock(product.id, 3, "DECREASE")
        with pytest.raises(InsufficientStockError) as exc:
            second.mutate_stock(product.id, 3, "DECREASE")

        assert exc.value.available == 2
        assert stock_of(product.id) == 2


class TestAddProductToCart:
    def test_uses_catalogue_name_and_price(self, db, make_product, cart_client):
        product = make_product(product_id=101, name="Keyboard", price="199.99", stock=10)
        svc = ProductService(db, cart_client=cart_client)

        cart = svc.add_product_to_cart("user1", product.id, 2)

        assert cart["items"][0]["product_name"] == "Keyboard"
        assert cart["items"][0]["price"] == Decimal("199.99")
        assert cart["items"][0]["quantity"] == 2

    def test_insufficient_stock(self, db, make_product, cart_client):
        product = make_product(stock=1)
        with pytest.raises(InsufficientStockError):
            ProductService(db, cart_client=cart_client).add_product_to_cart("user1", product.id, 2)
