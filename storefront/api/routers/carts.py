# storefront/api/routers/carts.py
from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.orm import Session

from storefront.api.deps import get_lock_service, get_order_client, get_product_client
from storefront.api.errors import to_http
from storefront.data.database import get_db
from storefront.domain.errors import StorefrontError
from storefront.domain.schemas import CartItemIn, CartOut, OrderOut
from storefront.services.cart_service import CartService
from storefront.services.lock_service import LockService
from storefront.services.order_client import OrderClient
from storefront.services.product_client import ProductClient

router = APIRouter(prefix="/api/carts", tags=["carts"])


def get_service(
    db: Session = Depends(get_db),
    product_client: ProductClient = Depends(get_product_client),
    order_client: OrderClient = Depends(get_order_client),
    lock_service: LockService = Depends(get_lock_service),
) -> CartService:
    return CartService(
        db=db,
        product_client=product_client,
        order_client=order_client,
        lock_service=lock_service,
    )


@router.get("/{user_id}", response_model=CartOut)
def get_cart(user_id: str, svc: CartService = Depends(get_service)):
    try:
        return svc.get_cart(user_id)
    except StorefrontError as e:
        raise to_http(e)


@router.post("/{user_id}/items", response_model=CartOut)
def add_item(user_id: str, payload: CartItemIn, svc: CartService = Depends(get_service)):
    try:
        return svc.add_item(user_id, payload)
    except StorefrontError as e:
        raise to_http(e)


@router.put("/{user_id}/items/{product_id}", response_model=CartOut)
def update_item(
    user_id: str,
    product_id: int,
    quantity: int = Query(...),
    svc: CartService = Depends(get_service),
):
    try:
        return svc.update_item(user_id, product_id, quantity)
    except StorefrontError as e:
        raise to_http(e)


@router.delete("/{user_id}/items/{product_id}", response_model=CartOut)
def remove_item(user_id: str, product_id: int, svc: CartService = Depends(get_service)):
    try:
        return svc.remove_item(user_id, product_id)
    except StorefrontError as e:
        raise to_http(e)


@router.delete("/{user_id}", status_code=204)
def clear_cart(user_id: str, svc: CartService = Depends(get_service)):
    try:
        svc.clear_cart(user_id)
        return Response(status_code=204)
    except StorefrontError as e:
        raise to_http(e)


@router.post("/{user_id}/checkout", response_model=OrderOut, status_code=201)
def checkout(user_id: str, svc: CartService = Depends(get_service)):
    """
    Turns the cart into an order through the order service.
    502 with the order id when the order was stored but flagged FAILED.
    """
    try:
        return svc.checkout(user_id)
    except StorefrontError as e:
        raise to_http(e)
