# storefront/services/product_service.py
from decimal import Decimal

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from storefront.data.models.product import ProductModel
from storefront.data.models.stock_mutation import StockMutationModel
from storefront.domain.errors import NotFoundError, ValidationError, InsufficientStockError
from storefront.domain.schemas import ProductIn, CartItemIn
from storefront.repos.product_repo import ProductRepo
from storefront.services.cart_client import CartClient
from storefront.utils.settings import STOCK_MUTATION_MODE
from storefront.utils.logging import get_logger

logger = get_logger(__name__)

INCREASE = "INCREASE"
DECREASE = "DECREASE"
STOCK_OPERATIONS = (INCREASE, DECREASE)
MUTATION_MODES = ("atomic", "race")


class ProductService:
    """
    Product catalogue and the stock store.

    Stock can only move through _apply_delta which keeps available_stock >= 0.
    mode="atomic" runs one conditional UPDATE, mode="race" reads the row,
    checks and writes it back (two concurrent writers can both pass the check).
    """

    def __init__(
        self,
        db: Session,
        cart_client: CartClient | None = None,
        mode: str = STOCK_MUTATION_MODE,
    ):
        if mode not in MUTATION_MODES:
            raise ValueError(f"Unknown stock mutation mode: {mode}")
        self.repo = ProductRepo(db)
        self.cart_client = cart_client
        self.mode = mode

    # query
    def list_products(self) -> list[ProductModel]:
        return self.repo.list_products()

    def get_product(self, product_id: int) -> ProductModel:
        product = self.repo.get_product(product_id)
        if not product:
            raise NotFoundError(f"Product not found with id: {product_id}")
        return product

    def get_stock(self, product_id: int) -> int:
        return self.get_product(product_id).available_stock

    # commands
    def create_product(self, payload: ProductIn) -> ProductModel:
        self._validate(payload)
        product = ProductModel(
            name=payload.name,
            description=payload.description,
            price=payload.price,
            available_stock=payload.available_stock,
        )
        created = self.repo.save_product(product)
        logger.info(f"Created product {created.id} ({created.name})")
        return created

    def update_product(self, product_id: int, payload: ProductIn) -> ProductModel:
        product = self.get_product(product_id)
        self._validate(payload)

        product.name = payload.name
        product.description = payload.description
        product.price = payload.price
        product.available_stock = payload.available_stock
        return self.repo.save_product(product)

    def delete_product(self, product_id: int) -> None:
        if not self.repo.exists(product_id):
            raise NotFoundError(f"Product not found with id: {product_id}")
        self.repo.delete_product(product_id)
        logger.info(f"Deleted product {product_id}")

    def adjust_stock(self, product_id: int, delta: int) -> ProductModel:
        """Signed stock change, fails when the result would be negative."""
        product = self.get_product(product_id)
        return self._apply_delta(product, delta)

    def mutate_stock(
        self,
        product_id: int,
        quantity: int | None,
        operation: str,
        idempotency_key: str | None = None,
    ) -> ProductModel:
        """
        INCREASE or DECREASE available stock by a non-negative quantity.
        A mutation sent again with the same idempotency key is not re-applied.
        """
        product = self.get_product(product_id)

        if quantity is None or quantity < 0:
            raise ValidationError("Invalid stock quantity provided")

        if operation not in STOCK_OPERATIONS:
            raise ValidationError(f"Invalid operation: {operation}")

        if idempotency_key:
            applied = self.repo.get_mutation(idempotency_key, product_id)
            if applied:
                logger.info(
                    f"Stock mutation {idempotency_key} for product {product_id} "
                    f"already applied, skipping"
                )
                return self.repo.refresh(product)

        delta = -quantity if operation == DECREASE else quantity

        try:
            return self._apply_delta(product, delta, operation, idempotency_key)
        except IntegrityError:
            # the same key was recorded by a concurrent request, that one wins
            self.repo.rollback()
            logger.warning(f"Stock mutation {idempotency_key} raced with a duplicate, not re-applied")
            return self.repo.refresh(product)

    def add_product_to_cart(self, user_id: str, product_id: int, quantity: int):
        if self.cart_client is None:
            raise RuntimeError("ProductService needs a cart client to add items to carts")

        product = self.get_product(product_id)
        if product.available_stock < quantity:
            raise InsufficientStockError(product_id, product.available_stock, quantity)

        item = CartItemIn(
            product_id=product.id,
            quantity=quantity,
            price=product.price,
            product_name=product.name,
        )
        logger.info(f"Adding product {product_id} x{quantity} to cart of user {user_id}")
        return self.cart_client.add_item(user_id, item)

    def _apply_delta(
        self,
        product: ProductModel,
        delta: int,
        operation: str | None = None,
        idempotency_key: str | None = None,
    ) -> ProductModel:
        current = product.available_stock

        if self.mode == "atomic":
            rowcount = self.repo.add_stock_conditionally(product.id, delta)
            if rowcount == 0:
                self.repo.rollback()
                available = self.repo.refresh(product).available_stock
                raise InsufficientStockError(product.id, available, -delta)
            # same transaction, sees the uncommitted update
            product = self.repo.refresh(product)
        else:
            if current + delta < 0:
                raise InsufficientStockError(product.id, current, -delta)
            product.available_stock = current + delta

        # stock change and idempotency record commit together
        if idempotency_key:
            self.repo.record_mutation(
                StockMutationModel(
                    idempotency_key=idempotency_key,
                    product_id=product.id,
                    operation=operation,
                    quantity=abs(delta),
                    resulting_stock=product.available_stock,
                )
            )

        self.repo.commit()
        product = self.repo.refresh(product)

        logger.info(
            f"Stock of product {product.id}: {current} -> {product.available_stock} "
            f"(delta {delta}, mode {self.mode})"
        )
        return product

    @staticmethod
    def _validate(payload: ProductIn):
        if payload.price is None or payload.price <= Decimal("0"):
            raise ValidationError("Price must be greater than zero")
        if payload.available_stock is None or payload.available_stock < 0:
            raise ValidationError("Available stock cannot be negative")
