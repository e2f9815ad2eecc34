# storefront/services/cart_client.py
from storefront.domain.schemas import CartItemIn
from storefront.services.service_client import ServiceClient
from storefront.utils.settings import CART_SERVICE_URL


class CartClient(ServiceClient):
    service_name = "cart-service"

    def __init__(self, base_url: str | None = None, timeout: float | None = None):
        super().__init__(base_url or CART_SERVICE_URL, timeout)

    def add_item(self, user_id: str, item: CartItemIn) -> dict:
        resp = self._call(
            "POST",
            f"/api/carts/{user_id}/items",
            idempotent=False,
            json=item.model_dump(mode="json"),
        )
        return self._json(resp)

    def clear_cart(self, user_id: str) -> None:
        self._call("DELETE", f"/api/carts/{user_id}")
