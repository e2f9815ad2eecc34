# storefront/services/cart_service.py
import uuid
from decimal import Decimal
from typing import Dict, Any

from pydantic import ValidationError as SchemaError
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from storefront.data.models.cart import CartModel
from storefront.data.models.cart_item import CartItemModel
from storefront.domain.errors import NotFoundError, ValidationError, ConflictError
from storefront.domain.schemas import CartItemIn, OrderCreate, OrderItemIn
from storefront.repos.cart_repo import CartRepo
from storefront.services.lock_service import LockService
from storefront.services.order_client import OrderClient
from storefront.services.product_client import ProductClient
from storefront.services.stock_gate import StockGate
from storefront.utils.settings import CHECKOUT_LOCK_TTL_SECONDS
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


def cart_total(items) -> Decimal:
    return sum((Decimal(i.price) * i.quantity for i in items), Decimal("0.00"))


class CartService:
    """
    Cart per user, created lazily on the first add.
    Commands (add, update, remove, clear, checkout) change state,
    get_cart only reads.
    """

    def __init__(
        self,
        db: Session,
        product_client: ProductClient,
        order_client: OrderClient | None = None,
        lock_service: LockService | None = None,
    ):
        self.repo = CartRepo(db)
        self.gate = StockGate(product_client)
        self.order_client = order_client
        self.lock_service = lock_service

    # query
    def get_cart(self, user_id: str) -> Dict[str, Any]:
        return self._to_dict(self._require_cart(user_id))

    # commands
    def add_item(self, user_id: str, payload: CartItemIn) -> Dict[str, Any]:
        try:
            cart = self._add_item(user_id, payload)
        except IntegrityError:
            # a concurrent add created the cart or the line first, merge into it
            self.repo.rollback()
            logger.warning(f"Concurrent add to cart of user {user_id}, retrying as a merge")
            try:
                cart = self._add_item(user_id, payload)
            except IntegrityError as e:
                self.repo.rollback()
                raise ConflictError(f"Cart of user {user_id} is being modified concurrently") from e
        return self._to_dict(cart)

    def _add_item(self, user_id: str, payload: CartItemIn) -> CartModel:
        cart = self.repo.get_cart_by_user(user_id)
        existing_item = self.repo.get_cart_item(cart.id, payload.product_id) if cart else None

        # the gate sees the quantity the cart line will end up with
        requested = payload.quantity + (existing_item.quantity if existing_item else 0)
        self.gate.check_availability(payload.product_id, requested)

        if not cart:
            logger.info(f"Creating cart for user {user_id}")
            cart = self.repo.create_cart(CartModel(user_id=user_id))

        if existing_item:
            logger.info(
                f"Product {payload.product_id} already in cart of user {user_id}, "
                f"quantity {existing_item.quantity} -> {requested}"
            )
            existing_item.quantity = requested
            existing_item.price = payload.price
            if payload.product_name:
                existing_item.product_name = payload.product_name
        else:
            logger.info(f"Adding product {payload.product_id} to cart of user {user_id}")
            self.repo.add_cart_item(
                CartItemModel(
                    cart_id=cart.id,
                    product_id=payload.product_id,
                    product_name=payload.product_name,
                    quantity=payload.quantity,
                    price=payload.price,
                )
            )

        self.repo.commit(cart)
        return cart

    def update_item(self, user_id: str, product_id: int, quantity: int) -> Dict[str, Any]:
        if quantity is None or quantity <= 0:
            raise ValidationError("Quantity must be greater than 0")

        self.gate.check_availability(product_id, quantity)

        cart = self._require_cart(user_id)
        item = self.repo.get_cart_item(cart.id, product_id)
        if not item:
            raise NotFoundError(f"Product {product_id} is not in the cart of user {user_id}")

        item.quantity = quantity
        self.repo.commit(cart)
        logger.info(f"Cart of user {user_id}: product {product_id} quantity set to {quantity}")
        return self._to_dict(cart)

    def remove_item(self, user_id: str, product_id: int) -> Dict[str, Any]:
        cart = self._require_cart(user_id)

        item = self.repo.get_cart_item(cart.id, product_id)
        if item:
            self.repo.delete_cart_item(item)
            logger.info(f"Removed product {product_id} from cart of user {user_id}")

        self.repo.commit(cart)
        return self._to_dict(cart)

    def clear_cart(self, user_id: str) -> None:
        cart = self._require_cart(user_id)
        self.repo.clear_items(cart)
        self.repo.commit()
        logger.info(f"Cart of user {user_id} cleared")

    def checkout(self, user_id: str) -> Dict[str, Any]:
        """
        Send the cart to the order service as an order request.
        The order service clears the cart once the order went through.
        """
        if self.order_client is None:
            raise RuntimeError("CartService needs an order client to check out")

        cart = self._require_cart(user_id)
        if not cart.items:
            raise ValidationError("Cannot checkout an empty cart")

        token = str(uuid.uuid4())
        if self.lock_service and not self.lock_service.acquire_checkout_lock(
            user_id, token, CHECKOUT_LOCK_TTL_SECONDS
        ):
            raise ConflictError(f"Checkout already in progress for user {user_id}")

        try:
            try:
                payload = self._order_request(user_id, cart)
            except SchemaError as e:
                raise ValidationError(f"Cart cannot be turned into an order: {e}") from e

            logger.info(f"Checking out cart {cart.id} of user {user_id} ({len(cart.items)} items)")
            return self.order_client.create_order(payload)
        finally:
            if self.lock_service:
                self.lock_service.release_checkout_lock(user_id, token)

    @staticmethod
    def _order_request(user_id: str, cart: CartModel) -> OrderCreate:
        return OrderCreate(
            user_id=user_id,
            total_amount=cart_total(cart.items),
            items=[
                OrderItemIn(
                    product_id=i.product_id,
                    product_name=i.product_name,
                    quantity=i.quantity,
                    price=i.price,
                )
                for i in cart.items
            ],
        )

    def _require_cart(self, user_id: str) -> CartModel:
        cart = self.repo.get_cart_by_user(user_id)
        if not cart:
            raise NotFoundError(f"Cart not found for user: {user_id}")
        return cart

    @staticmethod
    def _to_dict(cart: CartModel) -> Dict[str, Any]:
        return {
            "id": cart.id,
            "user_id": cart.user_id,
            "items": [
                {
                    "product_id": i.product_id,
                    "product_name": i.product_name,
                    "quantity": i.quantity,
                    "price": i.price,
                }
                for i in cart.items
            ],
            "total_amount": cart_total(cart.items),
        }
