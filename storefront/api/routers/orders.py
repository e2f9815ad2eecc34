# storefront/api/routers/orders.py
from typing import Optional

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.orm import Session

from storefront.api.deps import get_cart_client, get_product_client, get_saga_config
from storefront.api.errors import to_http
from storefront.data.database import get_db
from storefront.domain.errors import StorefrontError
from storefront.domain.schemas import OrderCreate, OrderOut, PromotionResult
from storefront.services.cart_client import CartClient
from storefront.services.order_saga import SagaConfig
from storefront.services.order_service import OrderService
from storefront.services.product_client import ProductClient

router = APIRouter(prefix="/api/orders", tags=["orders"])


def get_service(
    db: Session = Depends(get_db),
    product_client: ProductClient = Depends(get_product_client),
    cart_client: CartClient = Depends(get_cart_client),
    config: SagaConfig = Depends(get_saga_config),
) -> OrderService:
    return OrderService(db, product_client=product_client, cart_client=cart_client, config=config)


@router.get("", response_model=list[OrderOut])
def get_orders(
    status: Optional[str] = Query(None),
    svc: OrderService = Depends(get_service),
):
    try:
        return svc.get_orders(status)
    except StorefrontError as e:
        raise to_http(e)


@router.post("", response_model=OrderOut, status_code=201)
def create_order(payload: OrderCreate, svc: OrderService = Depends(get_service)):
    """
    Runs the placement saga. 400 means nothing was stored,
    502 means the order was stored and is FAILED.
    """
    try:
        return svc.create_order(payload)
    except StorefrontError as e:
        raise to_http(e)


@router.post("/promote-pending", response_model=PromotionResult)
def promote_pending(svc: OrderService = Depends(get_service)):
    return {"promoted": svc.promote_pending_orders()}


@router.get("/user/{user_id}", response_model=list[OrderOut])
def get_orders_by_user(user_id: str, svc: OrderService = Depends(get_service)):
    return svc.get_orders_by_user(user_id)


@router.get("/{order_id}", response_model=OrderOut)
def get_order(order_id: int, svc: OrderService = Depends(get_service)):
    try:
        return svc.get_order(order_id)
    except StorefrontError as e:
        raise to_http(e)


@router.put("/{order_id}", response_model=OrderOut)
def update_order(order_id: int, payload: OrderCreate, svc: OrderService = Depends(get_service)):
    try:
        return svc.update_order(order_id, payload)
    except StorefrontError as e:
        raise to_http(e)


@router.delete("/{order_id}", status_code=204)
def delete_order(order_id: int, svc: OrderService = Depends(get_service)):
    try:
        svc.delete_order(order_id)
        return Response(status_code=204)
    except StorefrontError as e:
        raise to_http(e)


@router.patch("/{order_id}/status", response_model=OrderOut)
def update_order_status(
    order_id: int,
    status: str = Query(...),
    svc: OrderService = Depends(get_service),
):
    try:
        return svc.update_order_status(order_id, status)
    except StorefrontError as e:
        raise to_http(e)
