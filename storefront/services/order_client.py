# storefront/services/order_client.py
import requests

from storefront.domain.errors import OrderPlacementError
from storefront.domain.schemas import OrderCreate
from storefront.services.service_client import ServiceClient, response_detail
from storefront.utils.settings import ORDER_SERVICE_URL


class OrderClient(ServiceClient):
    service_name = "order-service"

    def __init__(self, base_url: str | None = None, timeout: float | None = None):
        super().__init__(base_url or ORDER_SERVICE_URL, timeout)

    def create_order(self, payload: OrderCreate) -> dict:
        # placing an order is not idempotent, never retried
        resp = self._call(
            "POST",
            "/api/orders",
            idempotent=False,
            json=payload.model_dump(mode="json"),
        )
        return self._json(resp)

    def _raise_for_status(self, resp: requests.Response):
        detail = response_detail(resp)
        if resp.status_code == 502 and isinstance(detail, dict) and "order_id" in detail:
            raise OrderPlacementError(detail["order_id"], detail.get("status"), detail.get("message", ""))
        super()._raise_for_status(resp)
