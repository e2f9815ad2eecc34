# storefront/services/product_client.py
from storefront.domain.errors import DownstreamError, NotFoundError, ProductUnknownError
from storefront.services.service_client import ServiceClient
from storefront.utils.settings import PRODUCT_SERVICE_URL


class ProductClient(ServiceClient):
    service_name = "product-service"

    def __init__(self, base_url: str | None = None, timeout: float | None = None):
        super().__init__(base_url or PRODUCT_SERVICE_URL, timeout)

    def fetch_product(self, product_id: int) -> dict:
        resp = self._call("GET", f"/api/products/{product_id}")
        return self._json(resp)

    def get_stock(self, product_id: int) -> int:
        try:
            resp = self._call("GET", f"/api/products/{product_id}/stock")
        except NotFoundError:
            raise ProductUnknownError(product_id) from None

        stock = self._json(resp)
        if stock is None:
            raise ProductUnknownError(product_id)
        if not isinstance(stock, int):
            raise DownstreamError(f"Unexpected stock value for product {product_id}: {stock!r}")
        return stock

    def mutate_stock(
        self,
        product_id: int,
        quantity: int,
        operation: str,
        idempotency_key: str | None = None,
    ) -> dict:
        # without a key a retried DECREASE could be applied twice
        resp = self._call(
            "POST",
            f"/api/products/{product_id}/stock/update",
            idempotent=idempotency_key is not None,
            json={
                "quantity": quantity,
                "operation": operation,
                "idempotency_key": idempotency_key,
            },
        )
        return self._json(resp)
