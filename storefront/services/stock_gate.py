# storefront/services/stock_gate.py
from typing import Iterable, Protocol

from storefront.domain.errors import InsufficientStockError, ProductUnknownError
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


class StockReader(Protocol):
    def get_stock(self, product_id: int) -> int: ...


class StockGate:
    """Read-only availability check against the product service."""

    def __init__(self, stock_reader: StockReader):
        self.stock_reader = stock_reader

    def check_availability(self, product_id: int, requested_quantity: int) -> int:
        available = self.stock_reader.get_stock(product_id)
        if available is None:
            raise ProductUnknownError(product_id)

        if available < requested_quantity:
            logger.info(
                f"Stock check failed for product {product_id}: "
                f"available {available}, requested {requested_quantity}"
            )
            raise InsufficientStockError(product_id, available, requested_quantity)

        return available

    def check_lines(self, lines: Iterable) -> None:
        """
        One check per distinct product, with the quantities of repeated
        lines for the same product summed up.
        """
        requested: dict[int, int] = {}
        for line in lines:
            requested[line.product_id] = requested.get(line.product_id, 0) + line.quantity

        for product_id, quantity in requested.items():
            self.check_availability(product_id, quantity)
