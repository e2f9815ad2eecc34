# storefront/domain/schemas.py
from pydantic import BaseModel, Field, ConfigDict, EmailStr
from typing import List, Optional
from decimal import Decimal
from datetime import datetime

from storefront.domain.order_status import OrderStatus


# ---------- Users ----------

class UserCreate(BaseModel):
    """Payload for creating a user."""

    id: str = Field(..., min_length=1, description="External user id")
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr


class UserUpdate(BaseModel):
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr


class UserRead(BaseModel):
    id: str
    first_name: str
    last_name: str
    email: str

    model_config = ConfigDict(from_attributes=True)


# ---------- Products ----------

class ProductIn(BaseModel):
    """Payload for creating or replacing a product."""

    name: str = Field(..., min_length=1)
    description: Optional[str] = None
    price: Decimal
    available_stock: int


class ProductOut(BaseModel):
    id: int
    name: str
    description: Optional[str] = None
    price: Decimal
    available_stock: int

    model_config = ConfigDict(from_attributes=True)


class StockUpdateIn(BaseModel):
    """
    Stock mutation request.
    quantity and operation are checked by the service so a bad value is
    answered with a 400 naming the problem instead of a schema error.
    """

    quantity: Optional[int] = None
    operation: str
    idempotency_key: Optional[str] = None


# ---------- Carts ----------

class CartItemIn(BaseModel):
    """Line added to a cart."""

    product_id: int = Field(..., gt=0)
    quantity: int = Field(..., gt=0)
    price: Decimal = Field(..., ge=0)
    product_name: Optional[str] = None


class CartItemOut(BaseModel):
    product_id: int
    product_name: Optional[str] = None
    quantity: int
    price: Decimal

    model_config = ConfigDict(from_attributes=True)


class CartOut(BaseModel):
    id: int
    user_id: str
    items: List[CartItemOut]
    total_amount: Decimal


# ---------- Orders ----------

class OrderItemIn(BaseModel):
    product_id: int = Field(..., gt=0)
    quantity: int = Field(..., ge=1)
    price: Decimal = Field(..., gt=0)
    product_name: Optional[str] = None


class OrderCreate(BaseModel):
    """Order request, sent by cart checkout or directly by a client."""

    user_id: str = Field(..., min_length=1)
    total_amount: Decimal
    items: List[OrderItemIn] = Field(default_factory=list)


class OrderItemOut(BaseModel):
    id: int
    product_id: int
    product_name: Optional[str] = None
    quantity: int
    price: Decimal

    model_config = ConfigDict(from_attributes=True)


class OrderOut(BaseModel):
    id: int
    user_id: str
    status: OrderStatus
    created_at: datetime
    total_amount: Decimal
    items: List[OrderItemOut]

    model_config = ConfigDict(from_attributes=True)


class PromotionResult(BaseModel):
    promoted: int
