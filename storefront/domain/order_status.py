# storefront/domain/order_status.py
from enum import Enum

from storefront.domain.errors import IllegalTransitionError, ValidationError


class OrderStatus(str, Enum):
    PENDING = "PENDING"
    PROCESSING = "PROCESSING"
    SHIPPED = "SHIPPED"
    DELIVERED = "DELIVERED"
    CANCELLED = "CANCELLED"
    FAILED = "FAILED"


TERMINAL_STATUSES = frozenset({OrderStatus.CANCELLED, OrderStatus.FAILED})

# transitions reachable through the public status update
# FAILED is missing on purpose, only the placement saga writes it
PUBLIC_TRANSITIONS = {
    OrderStatus.PENDING: frozenset({OrderStatus.PROCESSING, OrderStatus.CANCELLED}),
    OrderStatus.PROCESSING: frozenset({OrderStatus.SHIPPED}),
    OrderStatus.SHIPPED: frozenset({OrderStatus.DELIVERED}),
    OrderStatus.DELIVERED: frozenset(),
    OrderStatus.CANCELLED: frozenset(),
    OrderStatus.FAILED: frozenset(),
}


def parse_status(value) -> OrderStatus:
    if isinstance(value, OrderStatus):
        return value
    try:
        return OrderStatus(value)
    except ValueError:
        raise ValidationError(f"Invalid order status: {value}") from None


def check_public_transition(current, target) -> OrderStatus:
    """
    Validate a status change requested from outside the saga.
    Returns the parsed target status, raises IllegalTransitionError otherwise.
    """
    current = parse_status(current)
    target = parse_status(target)

    if target == OrderStatus.FAILED:
        raise IllegalTransitionError(
            current.value, target.value,
            "Order status FAILED can only be set by order processing",
        )

    if target == OrderStatus.CANCELLED and current != OrderStatus.PENDING:
        raise IllegalTransitionError(
            current.value, target.value,
            "Order status cannot be changed to CANCELLED unless it is in PENDING state",
        )

    if target not in PUBLIC_TRANSITIONS[current]:
        raise IllegalTransitionError(current.value, target.value)

    return target


def can_promote(current) -> bool:
    return OrderStatus.PROCESSING in PUBLIC_TRANSITIONS[parse_status(current)]
