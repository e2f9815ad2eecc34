# storefront/services/order_service.py
from sqlalchemy.orm import Session

from storefront.data.models.order import OrderModel
from storefront.domain.errors import NotFoundError
from storefront.domain.order_status import OrderStatus, can_promote, check_public_transition, parse_status
from storefront.domain.schemas import OrderCreate
from storefront.repos.order_repo import OrderRepo
from storefront.services.cart_client import CartClient
from storefront.services.order_assembler import validate_order, build_items
from storefront.services.order_saga import OrderPlacementSaga, SagaConfig
from storefront.services.product_client import ProductClient
from storefront.services.stock_gate import StockGate
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


class OrderService:
    """
    Order domain: queries, the placement saga and status changes.
    """

    def __init__(
        self,
        db: Session,
        product_client: ProductClient | None = None,
        cart_client: CartClient | None = None,
        config: SagaConfig | None = None,
    ):
        self.repo = OrderRepo(db)
        self.product_client = product_client
        self.cart_client = cart_client
        self.config = config or SagaConfig.from_settings()

    # query
    def get_orders(self, status=None) -> list[OrderModel]:
        if status is None:
            orders = self.repo.list_orders()
            logger.info(f"Found {len(orders)} total orders")
        else:
            status = parse_status(status)
            orders = self.repo.list_orders(status.value)
            logger.info(f"Found {len(orders)} orders with status: {status.value}")
        return orders

    def get_order(self, order_id: int) -> OrderModel:
        order = self.repo.get_order(order_id)
        if not order:
            raise NotFoundError(f"Order not found with id: {order_id}")
        return order

    def get_orders_by_user(self, user_id: str) -> list[OrderModel]:
        return self.repo.list_orders_by_user(user_id)

    # commands
    def create_order(self, payload: OrderCreate) -> OrderModel:
        saga = OrderPlacementSaga(
            repo=self.repo,
            product_client=self.product_client,
            cart_client=self.cart_client,
            config=self.config,
        )
        return saga.place_order(payload)

    def update_order(self, order_id: int, payload: OrderCreate) -> OrderModel:
        """
        Full replacement of user, total and items. Stock is checked against
        the new quantities as they are, stock already taken by this order is
        not credited back first.
        """
        order = self.get_order(order_id)

        validate_order(payload)
        StockGate(self.product_client).check_lines(payload.items)

        order.user_id = payload.user_id
        order.total_amount = payload.total_amount
        order.items = build_items(payload)

        updated = self.repo.save_order(order)
        logger.info(f"Order {order_id} replaced")
        return updated

    def delete_order(self, order_id: int) -> None:
        order = self.get_order(order_id)
        self.repo.delete_order(order)
        logger.info(f"Order {order_id} deleted")

    def update_order_status(self, order_id: int, status) -> OrderModel:
        order = self.get_order(order_id)
        target = check_public_transition(order.status, status)

        logger.info(f"Order {order_id}: {order.status} -> {target.value}")
        return self.repo.update_order_status(order_id, target.value)

    def promote_pending_orders(self) -> int:
        """PENDING -> PROCESSING for every order pending right now."""
        pending = self.repo.list_orders(OrderStatus.PENDING.value)
        promoted = self.repo.bulk_update_status(
            [o.id for o in pending if can_promote(o.status)],
            OrderStatus.PROCESSING.value,
            from_status=OrderStatus.PENDING.value,
        )
        logger.info(f"Promoted {promoted} of {len(pending)} pending orders to PROCESSING")
        return promoted
