from functools import lru_cache

from storefront.services.cart_client import CartClient
from storefront.services.lock_service import LockService
from storefront.services.order_client import OrderClient
from storefront.services.order_saga import SagaConfig
from storefront.services.product_client import ProductClient
from storefront.utils.settings import STOCK_MUTATION_MODE


def get_product_client() -> ProductClient:
    return ProductClient()


def get_cart_client() -> CartClient:
    return CartClient()


def get_order_client() -> OrderClient:
    return OrderClient()


@lru_cache(maxsize=None)
def get_lock_service() -> LockService:
    # one redis connection pool per process
    return LockService()


def get_saga_config() -> SagaConfig:
    return SagaConfig.from_settings()


def get_stock_mutation_mode() -> str:
    return STOCK_MUTATION_MODE
