# storefront/domain/errors.py


class StorefrontError(Exception):
    """Base class for every error the services raise on purpose."""


class NotFoundError(StorefrontError):
    """Cart, order, product or user does not exist (404)."""


class ValidationError(StorefrontError):
    """Bad request shape or a rule the request breaks (400)."""


class InsufficientStockError(ValidationError):
    def __init__(self, product_id: int, available: int, requested: int):
        self.product_id = product_id
        self.available = available
        self.requested = requested
        if available == 0:
            message = f"Product {product_id} is out of stock"
        else:
            message = (
                f"Insufficient stock for product {product_id}. "
                f"Available: {available}, Requested: {requested}"
            )
        super().__init__(message)


class ProductUnknownError(ValidationError):
    def __init__(self, product_id: int):
        self.product_id = product_id
        super().__init__(f"Failed to check stock for product: {product_id}")


class IllegalTransitionError(ValidationError):
    def __init__(self, current: str, target: str, reason: str | None = None):
        self.current = current
        self.target = target
        super().__init__(reason or f"Order status cannot change from {current} to {target}")


class DownstreamError(StorefrontError):
    """A collaborating service could not be reached or gave an unusable answer."""


class OrderPlacementError(StorefrontError):
    """
    The order was persisted but a later step failed.
    The order is left in FAILED status and its id travels with the error.
    """

    def __init__(self, order_id: int, status: str, message: str):
        self.order_id = order_id
        self.status = status
        super().__init__(message)


class ConflictError(StorefrontError):
    """The resource is busy with a concurrent operation (409)."""
