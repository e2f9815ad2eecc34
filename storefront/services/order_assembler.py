# storefront/services/order_assembler.py
from decimal import Decimal

from storefront.data.models.order import OrderModel
from storefront.data.models.order_item import OrderItemModel
from storefront.domain.errors import ValidationError
from storefront.domain.schemas import OrderCreate

TOTAL_TOLERANCE = Decimal("0.01")


def expected_total(items) -> Decimal:
    return sum((Decimal(i.price) * i.quantity for i in items), Decimal("0.00"))


def validate_order(payload: OrderCreate) -> None:
    if not payload.items:
        raise ValidationError("Order must contain at least one item")

    if payload.total_amount is None:
        raise ValidationError("Total amount is required")

    if abs(payload.total_amount - expected_total(payload.items)) > TOTAL_TOLERANCE:
        raise ValidationError("Total amount does not match the sum of items")


def build_items(payload: OrderCreate) -> list[OrderItemModel]:
    return [
        OrderItemModel(
            product_id=i.product_id,
            product_name=i.product_name,
            quantity=i.quantity,
            price=i.price,
        )
        for i in payload.items
    ]


def assemble(payload: OrderCreate) -> OrderModel:
    """
    Turn an order request into an unsaved OrderModel.
    Structural checks only, no stock lookups and no persistence.
    """
    validate_order(payload)
    return OrderModel(
        user_id=payload.user_id,
        total_amount=payload.total_amount,
        items=build_items(payload),
    )
