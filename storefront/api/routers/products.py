# storefront/api/routers/products.py
from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.orm import Session

from storefront.api.deps import get_cart_client, get_stock_mutation_mode
from storefront.api.errors import to_http
from storefront.data.database import get_db
from storefront.domain.errors import StorefrontError
from storefront.domain.schemas import ProductIn, ProductOut, StockUpdateIn
from storefront.services.cart_client import CartClient
from storefront.services.product_service import ProductService

router = APIRouter(prefix="/api/products", tags=["products"])


def get_service(
    db: Session = Depends(get_db),
    cart_client: CartClient = Depends(get_cart_client),
    mode: str = Depends(get_stock_mutation_mode),
) -> ProductService:
    return ProductService(db=db, cart_client=cart_client, mode=mode)


@router.get("", response_model=list[ProductOut])
def list_products(svc: ProductService = Depends(get_service)):
    return svc.list_products()


@router.get("/{product_id}", response_model=ProductOut)
def get_product(product_id: int, svc: ProductService = Depends(get_service)):
    try:
        return svc.get_product(product_id)
    except StorefrontError as e:
        raise to_http(e)


@router.post("", response_model=ProductOut, status_code=201)
def create_product(payload: ProductIn, svc: ProductService = Depends(get_service)):
    try:
        return svc.create_product(payload)
    except StorefrontError as e:
        raise to_http(e)


@router.put("/{product_id}", response_model=ProductOut)
def update_product(product_id: int, payload: ProductIn, svc: ProductService = Depends(get_service)):
    try:
        return svc.update_product(product_id, payload)
    except StorefrontError as e:
        raise to_http(e)


@router.delete("/{product_id}", status_code=204)
def delete_product(product_id: int, svc: ProductService = Depends(get_service)):
    try:
        svc.delete_product(product_id)
        return Response(status_code=204)
    except StorefrontError as e:
        raise to_http(e)


@router.get("/{product_id}/stock", response_model=int)
def get_stock(product_id: int, svc: ProductService = Depends(get_service)):
    try:
        return svc.get_stock(product_id)
    except StorefrontError as e:
        raise to_http(e)


@router.patch("/{product_id}/stock", response_model=ProductOut)
def adjust_stock(
    product_id: int,
    quantity: int = Query(..., description="Signed stock change"),
    svc: ProductService = Depends(get_service),
):
    try:
        return svc.adjust_stock(product_id, quantity)
    except StorefrontError as e:
        raise to_http(e)


@router.post("/{product_id}/stock/update", response_model=ProductOut)
def update_product_stock(
    product_id: int,
    payload: StockUpdateIn,
    svc: ProductService = Depends(get_service),
):
    try:
        return svc.mutate_stock(
            product_id,
            payload.quantity,
            payload.operation,
            idempotency_key=payload.idempotency_key,
        )
    except StorefrontError as e:
        raise to_http(e)


@router.post("/{product_id}/cart", status_code=204)
def add_product_to_cart(
    product_id: int,
    user_id: str = Query(...),
    quantity: int = Query(..., gt=0),
    svc: ProductService = Depends(get_service),
):
    try:
        svc.add_product_to_cart(user_id, product_id, quantity)
        return Response(status_code=204)
    except StorefrontError as e:
        raise to_http(e)
