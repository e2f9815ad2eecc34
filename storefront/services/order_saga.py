# storefront/services/order_saga.py
from dataclasses import dataclass

from storefront.data.models.order import OrderModel
from storefront.domain.errors import OrderPlacementError
from storefront.domain.order_status import OrderStatus
from storefront.domain.schemas import OrderCreate
from storefront.repos.order_repo import OrderRepo
from storefront.services.cart_client import CartClient
from storefront.services.order_assembler import assemble
from storefront.services.product_client import ProductClient
from storefront.services.product_service import INCREASE, DECREASE
from storefront.services.stock_gate import StockGate
from storefront.utils.settings import SAGA_COMPENSATE_STOCK
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class SagaConfig:
    # False keeps decrements already applied when a later step fails
    compensate_stock: bool = False

    @classmethod
    def from_settings(cls) -> "SagaConfig":
        return cls(compensate_stock=SAGA_COMPENSATE_STOCK)


def mutation_key(order_id: int, item_id: int, operation: str = DECREASE) -> str:
    return f"order-{order_id}-item-{item_id}-{operation.lower()}"


class OrderPlacementSaga:
    """
    Turns an order request into a persisted order across services:

    1. assemble and validate the request
    2. stock gate for every product (read only)
    3. persist the order as PENDING, from here on a record always exists
    4. DECREASE stock line by line
    5. clear the user's cart

    Anything failing in 1-2 leaves no trace. A failure in 4-5 marks the
    order FAILED and raises OrderPlacementError. Decrements applied before
    the failure stay applied unless compensate_stock is on.
    """

    def __init__(
        self,
        repo: OrderRepo,
        product_client: ProductClient,
        cart_client: CartClient,
        config: SagaConfig | None = None,
    ):
        self.repo = repo
        self.product_client = product_client
        self.cart_client = cart_client
        self.gate = StockGate(product_client)
        self.config = config or SagaConfig()

    def place_order(self, payload: OrderCreate) -> OrderModel:
        order = assemble(payload)
        self.gate.check_lines(payload.items)

        order.status = OrderStatus.PENDING.value
        order = self.repo.create_order(order)
        logger.info(f"Order {order.id} for user {order.user_id} persisted as PENDING")

        applied = []
        try:
            for item in order.items:
                self.product_client.mutate_stock(
                    item.product_id,
                    item.quantity,
                    DECREASE,
                    idempotency_key=mutation_key(order.id, item.id),
                )
                applied.append(item)
                logger.info(f"Order {order.id}: stock of product {item.product_id} decreased by {item.quantity}")

            self.cart_client.clear_cart(order.user_id)
            logger.info(f"Order {order.id}: cart of user {order.user_id} cleared")

        except Exception as e:
            logger.error(f"Order {order.id} processing failed: {e}")
            if self.config.compensate_stock and applied:
                self._compensate(order, applied)
            self.repo.update_order_status(order.id, OrderStatus.FAILED.value)
            raise OrderPlacementError(
                order.id,
                OrderStatus.FAILED.value,
                f"Failed to process order: {e}",
            ) from e

        return order

    def _compensate(self, order: OrderModel, applied: list) -> None:
        # reverse order, each INCREASE with its own key so a retry is safe
        for item in reversed(applied):
            try:
                self.product_client.mutate_stock(
                    item.product_id,
                    item.quantity,
                    INCREASE,
                    idempotency_key=mutation_key(order.id, item.id, INCREASE),
                )
                logger.warning(f"Order {order.id}: stock of product {item.product_id} restored by {item.quantity}")
            except Exception as e:
                logger.error(
                    f"Order {order.id}: could not restore stock of product "
                    f"{item.product_id} ({item.quantity}): {e}"
                )
